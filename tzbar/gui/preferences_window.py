from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QSizePolicy,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from tzbar.core.enums import MenuBarLabelStyle, TimeFormat, TimezoneLabelStyle
from tzbar.core.formatting import city_name
from tzbar.core.logger import log
from tzbar.core.models import AppSettings, IconOnly, LocalTime, SpecificTimezone
from tzbar.core.timezone_manager import TimezoneManager
from tzbar.gui.log_viewer import LogViewerTab
from tzbar.gui.timezone_picker import TimezonePickerDialog


class GeneralPage(QWidget):
    """Menu bar options: what to show, seconds, and the label next to the time."""

    def __init__(self, manager: TimezoneManager, parent=None):
        super().__init__(parent)
        self.manager = manager
        self._loading = False

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("<h2>Menu Bar</h2>"))

        form = QFormLayout()
        self.display_combo = QComboBox()
        form.addRow("Show in menu bar:", self.display_combo)
        self.seconds_check = QCheckBox("Show seconds")
        form.addRow("", self.seconds_check)
        self.label_combo = QComboBox()
        for style in MenuBarLabelStyle:
            self.label_combo.addItem(style.display_name, style)
        form.addRow("Label next to time:", self.label_combo)
        layout.addLayout(form)
        layout.addStretch()

        self.display_combo.currentIndexChanged.connect(self._display_changed)
        self.seconds_check.toggled.connect(self._seconds_changed)
        self.label_combo.currentIndexChanged.connect(self._label_changed)

    def load(self, settings: AppSettings) -> None:
        self._loading = True
        try:
            self.display_combo.clear()
            self.display_combo.addItem(LocalTime().display_name, LocalTime())
            self.display_combo.addItem(IconOnly().display_name, IconOnly())
            for config in settings.timezones:
                self.display_combo.addItem(config.display_name, SpecificTimezone(config.identifier))
            current = settings.menu_bar_display
            if isinstance(current, SpecificTimezone) and settings.find(current.identifier) is None:
                # keep a dangling selection visible rather than silently changing it
                self.display_combo.addItem(current.display_name, current)
            for idx in range(self.display_combo.count()):
                if self.display_combo.itemData(idx) == current:
                    self.display_combo.setCurrentIndex(idx)
                    break

            self.seconds_check.setChecked(settings.show_seconds)
            self.label_combo.setCurrentIndex(self.label_combo.findData(settings.menu_bar_label))
            self.label_combo.setEnabled(not isinstance(current, IconOnly))
        finally:
            self._loading = False

    def _display_changed(self, index: int) -> None:
        if self._loading or index < 0:
            return
        mode = self.display_combo.itemData(index)
        self.label_combo.setEnabled(not isinstance(mode, IconOnly))
        self.manager.set_menu_bar_display(mode)

    def _seconds_changed(self, checked: bool) -> None:
        if not self._loading:
            self.manager.set_show_seconds(checked)

    def _label_changed(self, index: int) -> None:
        if not self._loading and index >= 0:
            self.manager.set_menu_bar_label(self.label_combo.itemData(index))


class TimezonesPage(QWidget):
    """Ordered list of clocks plus the per-clock editor."""

    def __init__(self, manager: TimezoneManager, parent=None):
        super().__init__(parent)
        self.manager = manager
        self._loading = False

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("<h2>Timezones</h2>"))

        body = QHBoxLayout()
        layout.addLayout(body)

        left = QVBoxLayout()
        self.list = QListWidget()
        left.addWidget(self.list)
        buttons = QHBoxLayout()
        self.add_btn = QPushButton("Add...")
        self.remove_btn = QPushButton("Remove")
        self.up_btn = QPushButton("Move Up")
        self.down_btn = QPushButton("Move Down")
        for btn in (self.add_btn, self.remove_btn, self.up_btn, self.down_btn):
            buttons.addWidget(btn)
        left.addLayout(buttons)
        self.count_label = QLabel()
        left.addWidget(self.count_label)
        self.local_check = QCheckBox("Include local time")
        left.addWidget(self.local_check)
        body.addLayout(left, 3)

        self.editor = QGroupBox("Selected timezone")
        form = QFormLayout(self.editor)
        self.identifier_label = QLabel()
        self.nickname_edit = QLineEdit()
        self.format_combo = QComboBox()
        for fmt in TimeFormat:
            self.format_combo.addItem(fmt.display_name, fmt)
        self.tz_label_combo = QComboBox()
        for style in TimezoneLabelStyle:
            self.tz_label_combo.addItem(style.display_name, style)
        form.addRow("Identifier:", self.identifier_label)
        form.addRow("Nickname:", self.nickname_edit)
        form.addRow("Time format:", self.format_combo)
        form.addRow("Label:", self.tz_label_combo)
        body.addWidget(self.editor, 2)

        self.add_btn.clicked.connect(self._add)
        self.remove_btn.clicked.connect(self._remove)
        self.up_btn.clicked.connect(lambda: self._move(-1))
        self.down_btn.clicked.connect(lambda: self._move(1))
        self.local_check.toggled.connect(self._local_changed)
        self.list.currentRowChanged.connect(self._selection_changed)
        self.nickname_edit.editingFinished.connect(self._nickname_changed)
        self.format_combo.currentIndexChanged.connect(self._format_changed)
        self.tz_label_combo.currentIndexChanged.connect(self._tz_label_changed)

    # ---------- load ---------- #

    def load(self, settings: AppSettings, select: Optional[str] = None) -> None:
        self._loading = True
        try:
            if select is None:
                select = self._selected_identifier()
            self.list.clear()
            for config in settings.timezones:
                item = QListWidgetItem(f"{config.display_name}    ({config.identifier})")
                item.setData(Qt.UserRole, config.identifier)
                self.list.addItem(item)
            self.count_label.setText(f"{len(settings.timezones)} timezone(s)")
            self.local_check.setChecked(settings.include_local_time)

            row = 0
            for idx, config in enumerate(settings.timezones):
                if config.identifier == select:
                    row = idx
                    break
            if self.list.count():
                self.list.setCurrentRow(row)
        finally:
            self._loading = False
        self._load_editor(settings)

    def _load_editor(self, settings: AppSettings) -> None:
        identifier = self._selected_identifier()
        config = settings.find(identifier) if identifier else None
        self.editor.setEnabled(config is not None)
        self.remove_btn.setEnabled(config is not None)
        self._loading = True
        try:
            if config is None:
                self.identifier_label.setText("")
                self.nickname_edit.setText("")
                self.nickname_edit.setPlaceholderText("")
                return
            self.identifier_label.setText(config.identifier)
            self.nickname_edit.setText(config.nickname or "")
            self.nickname_edit.setPlaceholderText(city_name(config.identifier))
            self.format_combo.setCurrentIndex(self.format_combo.findData(config.time_format))
            self.tz_label_combo.setCurrentIndex(self.tz_label_combo.findData(config.label))
        finally:
            self._loading = False

    def _selected_identifier(self) -> Optional[str]:
        item = self.list.currentItem()
        return item.data(Qt.UserRole) if item is not None else None

    # ---------- handlers ---------- #

    def _add(self) -> None:
        dlg = TimezonePickerDialog(self.manager, self)
        dlg.exec()

    def _remove(self) -> None:
        identifier = self._selected_identifier()
        index = self.manager.index_of(identifier) if identifier else None
        if index is not None:
            self.manager.remove_timezone(index)

    def _move(self, delta: int) -> None:
        identifier = self._selected_identifier()
        index = self.manager.index_of(identifier) if identifier else None
        if index is None or index + delta < 0:
            return
        self.manager.move_timezone(index, index + delta)

    def _local_changed(self, checked: bool) -> None:
        if not self._loading:
            self.manager.set_include_local_time(checked)

    def _selection_changed(self, _row: int) -> None:
        if not self._loading:
            self._load_editor(self.manager.settings)

    def _nickname_changed(self) -> None:
        identifier = self._selected_identifier()
        if self._loading or not identifier:
            return
        self.manager.update_timezone(identifier, nickname=self.nickname_edit.text())

    def _format_changed(self, index: int) -> None:
        identifier = self._selected_identifier()
        if self._loading or not identifier or index < 0:
            return
        self.manager.update_timezone(identifier, time_format=self.format_combo.itemData(index))

    def _tz_label_changed(self, index: int) -> None:
        identifier = self._selected_identifier()
        if self._loading or not identifier or index < 0:
            return
        self.manager.update_timezone(identifier, label=self.tz_label_combo.itemData(index))


class PreferencesWindow(QMainWindow):
    """
    Preferences for TimezoneBar.

    Screens:
      - General (menu bar)
      - Timezones
      - Logs
    """

    def __init__(self, manager: TimezoneManager):
        super().__init__()
        self.manager = manager
        self.setWindowTitle("Timezone Bar Preferences")
        self.setAttribute(Qt.WA_DeleteOnClose, True)
        self.resize(640, 460)

        central = QWidget()
        layout = QHBoxLayout(central)
        self.setCentralWidget(central)

        self.general_page = GeneralPage(manager, self)
        self.timezones_page = TimezonesPage(manager, self)
        self.log_tab = LogViewerTab(self)

        self._screens = [
            ("General", self.general_page),
            ("Timezones", self.timezones_page),
            ("Logs", self.log_tab),
        ]

        # Build sidebar
        nav_widget = QWidget()
        nav_layout = QVBoxLayout(nav_widget)
        nav_layout.setContentsMargins(0, 0, 0, 0)
        nav_layout.setSpacing(4)
        self.nav_buttons = []
        self.button_group = QButtonGroup(self)
        self.button_group.setExclusive(True)
        for idx, (label, _w) in enumerate(self._screens):
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.setSizePolicy(QSizePolicy.Preferred, QSizePolicy.Fixed)
            btn.clicked.connect(lambda _=False, i=idx: self._set_screen(i))
            self.button_group.addButton(btn, idx)
            self.nav_buttons.append(btn)
            nav_layout.addWidget(btn)
        nav_layout.addStretch()

        self.stack = QStackedWidget()
        for _label, widget in self._screens:
            self.stack.addWidget(widget)

        layout.addWidget(nav_widget)
        layout.addWidget(self.stack, stretch=1)

        if self.nav_buttons:
            self.nav_buttons[0].setChecked(True)
            self.stack.setCurrentIndex(0)

        self.manager.add_listener(self._on_settings_changed)
        self._reload()
        log.info("PreferencesWindow: opened.")

    def _reload(self) -> None:
        settings = self.manager.settings
        self.general_page.load(settings)
        self.timezones_page.load(settings)

    def _on_settings_changed(self, _settings: AppSettings) -> None:
        QTimer.singleShot(0, self._reload)

    def _set_screen(self, index: int) -> None:
        if 0 <= index < self.stack.count():
            self.stack.setCurrentIndex(index)

    def closeEvent(self, event) -> None:
        self.manager.remove_listener(self._on_settings_changed)
        super().closeEvent(event)
