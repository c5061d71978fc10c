from __future__ import annotations

import datetime

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
)

from tzbar.core.formatting import city_name
from tzbar.core.menu_content import picker_preview, search_timezones
from tzbar.core.timezone_manager import TimezoneManager


class TimezonePickerDialog(QDialog):
    """Searchable list of known zones; double-click or Add puts one in the list."""

    def __init__(self, manager: TimezoneManager, parent=None):
        super().__init__(parent)
        self.manager = manager
        self.setWindowTitle("Add Timezone")
        self.resize(420, 500)

        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        header.addWidget(QLabel("<b>Add Timezone</b>"))
        header.addStretch()
        self.done_btn = QPushButton("Done")
        self.done_btn.setDefault(True)
        header.addWidget(self.done_btn)
        layout.addLayout(header)

        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search timezones...")
        self.search_edit.setClearButtonEnabled(True)
        layout.addWidget(self.search_edit)

        self.table = QTableWidget()
        self.table.setColumnCount(3)
        self.table.setHorizontalHeaderLabels(["City", "Identifier", "Time"])
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        header_view = self.table.horizontalHeader()
        header_view.setSectionResizeMode(0, QHeaderView.Stretch)
        header_view.setSectionResizeMode(1, QHeaderView.Stretch)
        header_view.setSectionResizeMode(2, QHeaderView.ResizeToContents)
        layout.addWidget(self.table)

        self.add_btn = QPushButton("Add")
        layout.addWidget(self.add_btn)

        self.done_btn.clicked.connect(self.accept)
        self.add_btn.clicked.connect(self._add_selected)
        self.table.cellDoubleClicked.connect(lambda _r, _c: self._add_selected())
        self.search_edit.textChanged.connect(self._refresh)

        self._refresh()

    def _refresh(self) -> None:
        now = datetime.datetime.now(datetime.timezone.utc)
        configured = set(self.manager.timezone_identifiers())
        matches = search_timezones(self.search_edit.text(), self.manager.provider)

        self.table.setRowCount(len(matches))
        for row, identifier in enumerate(matches):
            city = city_name(identifier)
            if identifier in configured:
                city = f"✓ {city}"
            city_item = QTableWidgetItem(city)
            city_item.setData(Qt.UserRole, identifier)
            self.table.setItem(row, 0, city_item)
            self.table.setItem(row, 1, QTableWidgetItem(identifier))
            self.table.setItem(row, 2, QTableWidgetItem(picker_preview(identifier, now, self.manager.provider)))

    def _add_selected(self) -> None:
        row = self.table.currentRow()
        if row < 0:
            return
        item = self.table.item(row, 0)
        if item is None:
            return
        self.manager.add_timezone(item.data(Qt.UserRole))
        self._refresh()
