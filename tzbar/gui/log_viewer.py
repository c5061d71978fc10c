import html

from PySide6.QtCore import QTimer
from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import (
    QComboBox, QHBoxLayout, QLabel, QPushButton, QTextEdit, QVBoxLayout, QWidget
)

from tzbar.core.logger import _get_log_file, get_log_level, set_log_level

LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogViewerTab(QWidget):
    """Tail of tzbar.log with a display filter and the live log level."""

    REFRESH_INTERVAL_MS = 2000
    MAX_LINES = 500

    def __init__(self, parent=None):
        super().__init__(parent)
        self.log_file = _get_log_file()

        self._build_ui()
        self._refresh()

        self.timer = QTimer(self)
        self.timer.timeout.connect(self._refresh)
        self.timer.start(self.REFRESH_INTERVAL_MS)

    def _build_ui(self):
        layout = QVBoxLayout(self)
        toolbar = QHBoxLayout()

        self.refresh_btn = QPushButton("Refresh")
        toolbar.addWidget(self.refresh_btn)

        toolbar.addSpacing(20)
        toolbar.addWidget(QLabel("Show:"))
        self.filter_combo = QComboBox()
        self.filter_combo.addItems(["ALL"] + LEVELS)
        toolbar.addWidget(self.filter_combo)

        toolbar.addSpacing(20)
        toolbar.addWidget(QLabel("Log level:"))
        self.level_combo = QComboBox()
        self.level_combo.addItems(LEVELS)
        current = get_log_level()
        if current in LEVELS:
            self.level_combo.setCurrentText(current)
        toolbar.addWidget(self.level_combo)
        toolbar.addStretch()
        layout.addLayout(toolbar)

        self.text = QTextEdit()
        self.text.setReadOnly(True)
        self.text.setStyleSheet(
            "background-color: #111; color: #EEE; font-family: monospace;"
        )
        layout.addWidget(self.text)

        self.status_label = QLabel(f"Log file: {self.log_file}")
        layout.addWidget(self.status_label)

        self.refresh_btn.clicked.connect(self._refresh)
        self.filter_combo.currentTextChanged.connect(self._refresh)
        self.level_combo.currentTextChanged.connect(set_log_level)

    def _read_log_tail(self):
        try:
            with open(self.log_file, "r", encoding="utf-8") as f:
                return f.readlines()[-self.MAX_LINES:]
        except FileNotFoundError:
            return ["No log file yet.\n"]
        except Exception as e:
            return [f"Error reading log: {e}\n"]

    def _filter_lines(self, lines):
        level = self.filter_combo.currentText()
        if level == "ALL":
            return lines
        return [l for l in lines if f"[{level}]" in l]

    def _color_for_line(self, line: str) -> str:
        if "[ERROR]" in line or "[CRITICAL]" in line:
            return "#ff6666"
        if "[WARNING]" in line:
            return "#ffcc66"
        if "[DEBUG]" in line:
            return "#66b2ff"
        return "#cccccc"

    def _refresh(self):
        lines = self._filter_lines(self._read_log_tail())
        self.text.clear()
        for line in lines:
            color = self._color_for_line(line)
            self.text.append(f'<span style="color:{color}">{html.escape(line.rstrip())}</span>')
        self.text.moveCursor(QTextCursor.End)
