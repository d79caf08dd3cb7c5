import logging
from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import QMainWindow, QFileDialog, QMessageBox
from PySide6.QtCore import Slot, Signal, QObject
from PySide6.QtGui import QAction

from .log_console_widget import LogConsoleWidget
from .options_dialog import OptionsDialog

from configuration import Configuration, ImportSettings
from texture_importer import TextureImporter, TextureImportError

log = logging.getLogger(__name__)


# --- Custom Log Handler ---
class QtLogHandler(logging.Handler, QObject):
    """
    Custom logging handler that emits a Qt signal for each log record.
    Inherits from QObject to support signals.
    """
    log_record_received = Signal(str)

    def __init__(self, parent=None):
        logging.Handler.__init__(self)
        QObject.__init__(self, parent)

    def emit(self, record):
        try:
            msg = self.format(record)
            self.log_record_received.emit(msg)
        except Exception:
            self.handleError(record)


class MainWindow(QMainWindow):
    """Hosts the Tools > TTaker menu and shows the import log."""

    def __init__(self, config: Configuration, settings: Optional[ImportSettings] = None):
        super().__init__()
        self.setWindowTitle("TTaker - Texture Importer")
        self.resize(800, 500)

        self.config = config
        self.settings: ImportSettings = settings if settings is not None else config.import_settings
        self.last_source_folder: Optional[str] = None

        self.log_console = LogConsoleWidget(self)
        self.setCentralWidget(self.log_console)

        self.setup_menu_bar()
        self.setup_logging_handler()
        self.statusBar().showMessage("Ready")

    def setup_menu_bar(self):
        """Creates the Tools > TTaker menu."""
        self.menu_bar = self.menuBar()
        tools_menu = self.menu_bar.addMenu("&Tools")
        ttaker_menu = tools_menu.addMenu("TTaker")

        self.import_action = QAction("Import", self)
        self.import_action.triggered.connect(self._take_textures)
        ttaker_menu.addAction(self.import_action)

        self.options_action = QAction("Options", self)
        self.options_action.triggered.connect(self._open_options)
        ttaker_menu.addAction(self.options_action)

        view_menu = self.menu_bar.addMenu("&View")
        self.toggle_verbose_action = QAction("Verbose Logging (DEBUG)", self, checkable=True)
        self.toggle_verbose_action.setChecked(False)
        self.toggle_verbose_action.toggled.connect(self._toggle_verbose_logging)
        view_menu.addAction(self.toggle_verbose_action)

    def setup_logging_handler(self):
        """Routes log records from all modules into the log console."""
        self.log_handler = QtLogHandler(self)
        self.log_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        self.log_handler.setLevel(logging.INFO)
        logging.getLogger().addHandler(self.log_handler)
        self.log_handler.log_record_received.connect(self.log_console._append_log_message)

    @Slot()
    def _take_textures(self):
        """Prompts for a texture folder and imports it with the current settings."""
        directory = QFileDialog.getExistingDirectory(
            self,
            "Select Texture Folder",
            self.last_source_folder or "",
            QFileDialog.Option.ShowDirsOnly | QFileDialog.Option.DontResolveSymlinks
        )
        if not directory:
            log.debug("Texture folder selection cancelled.")
            return
        self.last_source_folder = directory
        self.run_import(Path(directory))

    def run_import(self, source_folder: Path):
        try:
            importer = TextureImporter(self.settings)
            report = importer.import_folder(source_folder)
        except TextureImportError as e:
            log.error(f"Import failed: {e}")
            QMessageBox.critical(self, "Import Failed", str(e))
            return None
        self.statusBar().showMessage(report.summary(), 10000)
        return report

    @Slot()
    def _open_options(self):
        dialog = OptionsDialog(self.settings, config=self.config, parent=self)
        if dialog.exec():
            self.settings = dialog.settings()

    @Slot(bool)
    def _toggle_verbose_logging(self, checked):
        """Sets the logging level for the root logger and the GUI handler."""
        new_level = logging.DEBUG if checked else logging.INFO
        logging.getLogger().setLevel(new_level)
        self.log_handler.setLevel(new_level)
        log.info(f"Root and GUI logging level set to: {logging.getLevelName(new_level)}")

    def closeEvent(self, event):
        logging.getLogger().removeHandler(self.log_handler)
        super().closeEvent(event)
