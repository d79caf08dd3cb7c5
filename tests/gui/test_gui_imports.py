import importlib
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from configuration import Configuration

GUI_MODULES = [
    "gui.main_window",
    "gui.options_dialog",
    "gui.log_console_widget",
]


def _import_gui_module(module_name):
    pytest.importorskip("PySide6")
    try:
        return importlib.import_module(module_name)
    except ImportError as exc:
        if "PySide6" in str(exc) or "libGL" in str(exc) or "libEGL" in str(exc):
            pytest.skip(f"Qt libraries not available: {exc}")
        raise


@pytest.mark.parametrize("module_name", GUI_MODULES)
def test_gui_modules_import(module_name):
    assert _import_gui_module(module_name) is not None


def test_options_dialog_round_trips_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("QT_QPA_PLATFORM", "offscreen")
    options_dialog = _import_gui_module("gui.options_dialog")
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    config = Configuration(base_dir_user_config=tmp_path)
    settings = config.import_settings.replace(separator_token="-", overwrite=True, material_conflict_policy="abort")

    dialog = options_dialog.OptionsDialog(settings, config=config)
    assert dialog.separator_edit.text() == "-"
    dialog.separator_edit.setText("__")
    dialog._on_accept()

    result = dialog.settings()
    assert result.separator_token == "__"
    assert result.overwrite is True
    assert result.material_conflict_policy == "abort"
    assert app is not None
