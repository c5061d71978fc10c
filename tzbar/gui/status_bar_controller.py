from __future__ import annotations

import datetime
from typing import List, Optional, Tuple

from PySide6.QtCore import QObject, QTimer, Qt
from PySide6.QtGui import QAction, QColor, QFont, QFontMetrics, QIcon, QPainter, QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QGridLayout,
    QLabel,
    QMenu,
    QStyle,
    QSystemTrayIcon,
    QWidget,
    QWidgetAction,
)

from tzbar.core.logger import log
from tzbar.core.menu_content import MenuRow
from tzbar.core.models import AppSettings
from tzbar.core.timezone_manager import TimezoneManager

PLACEHOLDER_TEXT = "No timezones configured"
COLUMN_GAP = 14


class StatusBarController(QObject):
    """
    Tray icon + dropdown for the configured clocks.

    A 1s QTimer re-renders the title and the rows; settings changes made
    anywhere (preferences window, CLI reset) trigger an immediate refresh.
    """

    TICK_MS = 1000

    def __init__(self, manager: TimezoneManager, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.manager = manager
        self._preferences = None
        self._row_labels: List[Tuple[QLabel, QLabel, QLabel]] = []

        self.tray = QSystemTrayIcon(self._clock_icon(), self)
        self.menu = QMenu()
        self.tray.setContextMenu(self.menu)
        self.tray.activated.connect(self._on_activated)

        self.manager.add_listener(self._on_settings_changed)

        self.update_menu()
        self.tray.show()

        self.timer = QTimer(self)
        self.timer.timeout.connect(self.update_menu)
        self.timer.start(self.TICK_MS)
        log.info("StatusBarController: tray started.")

    # ---------- rendering ---------- #

    def update_menu(self) -> None:
        now = datetime.datetime.now(datetime.timezone.utc)

        title = self.manager.menu_bar_text(now)
        if title:
            self.tray.setIcon(self._title_icon(title))
            self.tray.setToolTip(title)
        else:
            self.tray.setIcon(self._clock_icon())
            self.tray.setToolTip("Timezones")

        rows = self.manager.rows(now)
        if rows and len(rows) == len(self._row_labels):
            # Same shape: retext in place so an open dropdown doesn't flicker.
            for labels, row in zip(self._row_labels, rows):
                for label, text in zip(labels, (row.city, row.time, row.suffix)):
                    label.setText(text)
            return
        self._rebuild_menu(rows)

    def _rebuild_menu(self, rows: List[MenuRow]) -> None:
        self.menu.clear()
        self._row_labels = []
        if rows:
            self.menu.addAction(self._rows_action(rows))
        else:
            placeholder = QAction(PLACEHOLDER_TEXT, self.menu)
            placeholder.setEnabled(False)
            self.menu.addAction(placeholder)

        self.menu.addSeparator()
        edit_action = QAction("Edit Timezones...", self.menu)
        edit_action.setShortcut("Ctrl+,")
        edit_action.triggered.connect(self.open_preferences)
        self.menu.addAction(edit_action)

        self.menu.addSeparator()
        quit_action = QAction("Quit", self.menu)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(QApplication.quit)
        self.menu.addAction(quit_action)

    def _rows_action(self, rows: List[MenuRow]) -> QWidgetAction:
        # A grid lays the three columns out with the widget font's metrics.
        container = QWidget()
        grid = QGridLayout(container)
        grid.setContentsMargins(12, 4, 12, 4)
        grid.setHorizontalSpacing(COLUMN_GAP)
        grid.setVerticalSpacing(2)
        for r, row in enumerate(rows):
            labels = []
            for c, text in enumerate((row.city, row.time, row.suffix)):
                label = QLabel(text)
                if c == 2:
                    label.setStyleSheet("color: palette(mid);")
                grid.addWidget(label, r, c, Qt.AlignLeft | Qt.AlignVCenter)
                labels.append(label)
            self._row_labels.append(tuple(labels))
        action = QWidgetAction(self.menu)
        action.setDefaultWidget(container)
        return action

    def _clock_icon(self) -> QIcon:
        icon = QIcon.fromTheme("clock")
        if icon.isNull():
            style = QApplication.style()
            icon = style.standardIcon(QStyle.SP_BrowserReload)
        return icon

    def _title_icon(self, title: str) -> QIcon:
        font = QFont()
        font.setPointSize(11)
        metrics = QFontMetrics(font)
        width = max(metrics.horizontalAdvance(title) + 8, 22)
        height = max(metrics.height() + 4, 22)
        pixmap = QPixmap(width, height)
        pixmap.fill(Qt.transparent)
        painter = QPainter(pixmap)
        painter.setFont(font)
        painter.setPen(QColor("white"))
        painter.drawText(pixmap.rect(), Qt.AlignCenter, title)
        painter.end()
        return QIcon(pixmap)

    # ---------- actions ---------- #

    def _on_settings_changed(self, _settings: AppSettings) -> None:
        # Listeners may fire off the GUI thread; hop back before touching widgets.
        QTimer.singleShot(0, self.update_menu)

    def _on_activated(self, reason) -> None:
        if reason == QSystemTrayIcon.Trigger:
            self.menu.popup(self.tray.geometry().bottomLeft())

    def open_preferences(self) -> None:
        from tzbar.gui.preferences_window import PreferencesWindow

        if self._preferences is None:
            self._preferences = PreferencesWindow(self.manager)
            self._preferences.destroyed.connect(self._on_preferences_closed)
        self._preferences.show()
        self._preferences.raise_()
        self._preferences.activateWindow()

    def _on_preferences_closed(self, *_args) -> None:
        self._preferences = None
