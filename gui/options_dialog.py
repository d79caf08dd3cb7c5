import logging
from typing import Optional

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QLineEdit, QCheckBox, QComboBox, QGroupBox, QFormLayout,
    QDialogButtonBox, QMessageBox
)
from PySide6.QtCore import Slot

from configuration import (
    MATERIAL_CONFLICT_POLICIES, MATERIAL_NAMING_MODES, UNMATCHED_FILE_POLICIES,
    Configuration, ConfigurationError, ImportSettings
)

log = logging.getLogger(__name__)


class OptionsDialog(QDialog):
    """
    Edits the settings used by the next import: separator token, overwrite flag
    and the naming/unmatched/conflict policies.
    """

    def __init__(self, settings: ImportSettings, config: Optional[Configuration] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("TTaker Options")
        self.setModal(True)
        self.setMinimumWidth(380)

        self._settings = settings
        self._config = config
        self._init_ui()
        self._load_values(settings)

    def _init_ui(self):
        main_layout = QVBoxLayout(self)

        name_group = QGroupBox("Name Settings")
        name_layout = QFormLayout()
        self.separator_edit = QLineEdit()
        self.separator_edit.setMaxLength(8)
        name_layout.addRow("Prefix Token:", self.separator_edit)
        self.naming_combo = QComboBox()
        self.naming_combo.addItems(list(MATERIAL_NAMING_MODES))
        name_layout.addRow("Material Name From:", self.naming_combo)
        name_group.setLayout(name_layout)
        main_layout.addWidget(name_group)

        import_group = QGroupBox("Import Settings")
        import_layout = QFormLayout()
        self.overwrite_checkbox = QCheckBox("Overwrite existing textures")
        import_layout.addRow(self.overwrite_checkbox)
        self.unmatched_combo = QComboBox()
        self.unmatched_combo.addItems(list(UNMATCHED_FILE_POLICIES))
        import_layout.addRow("Unmatched Files:", self.unmatched_combo)
        self.conflict_combo = QComboBox()
        self.conflict_combo.addItems(list(MATERIAL_CONFLICT_POLICIES))
        import_layout.addRow("Existing Materials:", self.conflict_combo)
        import_group.setLayout(import_layout)
        main_layout.addWidget(import_group)

        self.button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        self.button_box.accepted.connect(self._on_accept)
        self.button_box.rejected.connect(self.reject)
        if self._config is not None and self._config.base_dir_user_config is not None:
            save_button = self.button_box.addButton("Save as Default", QDialogButtonBox.ButtonRole.ActionRole)
            save_button.clicked.connect(self._on_save_defaults)
        main_layout.addWidget(self.button_box)

    def _load_values(self, settings: ImportSettings):
        self.separator_edit.setText(settings.separator_token)
        self.overwrite_checkbox.setChecked(settings.overwrite)
        self.naming_combo.setCurrentText(settings.material_naming)
        self.unmatched_combo.setCurrentText(settings.unmatched_file_policy)
        self.conflict_combo.setCurrentText(settings.material_conflict_policy)

    def _collect_settings(self) -> ImportSettings:
        settings = self._settings.replace(
            separator_token=self.separator_edit.text(),
            overwrite=self.overwrite_checkbox.isChecked(),
            material_naming=self.naming_combo.currentText(),
            unmatched_file_policy=self.unmatched_combo.currentText(),
            material_conflict_policy=self.conflict_combo.currentText(),
        )
        settings.validate()
        return settings

    def settings(self) -> ImportSettings:
        """The settings as accepted by the user (the original ones if the dialog was cancelled)."""
        return self._settings

    @Slot()
    def _on_accept(self):
        try:
            self._settings = self._collect_settings()
        except ConfigurationError as e:
            QMessageBox.warning(self, "Invalid Options", str(e))
            return
        log.info(f"Import options updated: separator='{self._settings.separator_token}', overwrite={self._settings.overwrite}")
        self.accept()

    @Slot()
    def _on_save_defaults(self):
        try:
            settings = self._collect_settings()
            self._config.save_user_settings(settings)
        except ConfigurationError as e:
            QMessageBox.warning(self, "Could Not Save", str(e))
            return
        self._settings = settings
        self.accept()
