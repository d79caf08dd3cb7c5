import logging
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QTextEdit, QLabel, QPushButton, QSizePolicy
)
from PySide6.QtCore import Slot

log = logging.getLogger(__name__)

class LogConsoleWidget(QWidget):
    """
    A dedicated widget to display import log messages.
    """
    def __init__(self, parent=None):
        super().__init__(parent)
        self._init_ui()

    def _init_ui(self):
        """Initializes the UI elements for the log console."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 5, 0, 0)

        header_layout = QHBoxLayout()
        header_layout.addWidget(QLabel("Import Log:"))
        header_layout.addStretch()
        clear_button = QPushButton("Clear")
        clear_button.clicked.connect(self.clear)
        header_layout.addWidget(clear_button)

        self.log_console_output = QTextEdit()
        self.log_console_output.setReadOnly(True)
        self.log_console_output.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        layout.addLayout(header_layout)
        layout.addWidget(self.log_console_output)

    @Slot(str)
    def _append_log_message(self, message):
        self.log_console_output.append(message)
        self.log_console_output.verticalScrollBar().setValue(self.log_console_output.verticalScrollBar().maximum())

    @Slot()
    def clear(self):
        self.log_console_output.clear()
