import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from configuration import (
    MATERIAL_CONFLICT_POLICIES,
    MATERIAL_NAMING_MODES,
    UNMATCHED_FILE_POLICIES,
    Configuration,
    ConfigurationError,
    ImportSettings,
)
from texture_importer import TextureImporter, TextureImportError
from utils import app_setup_utils

log = logging.getLogger(__name__)


# --- Setup Logging ---
def setup_logging(verbose: bool):
    """Configures logging for the application."""
    log_level = logging.DEBUG if verbose else logging.INFO
    log_format = '%(asctime)s [%(levelname)-8s] %(name)s: %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    # Remove existing handlers to avoid duplication if re-run in same session
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt=date_format,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    log.info(f"Logging level set to: {logging.getLevelName(log_level)}")


# --- Argument Parser Setup ---
def setup_arg_parser():
    """Sets up and returns the command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="Import texture files from a folder and build materials from their filename suffixes.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "source_folder",
        metavar="SOURCE_FOLDER",
        type=str,
        nargs='?',
        default=None,
        help="Folder containing the texture files. Omit to start the GUI."
    )
    parser.add_argument(
        "-s", "--separator",
        type=str,
        default=None,
        help="Token in front of the texture suffix (settings default: '_')."
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Overwrite textures that already exist in the export folder."
    )
    parser.add_argument(
        "--on-unmatched",
        choices=UNMATCHED_FILE_POLICIES,
        default=None,
        help="What a file without separator or accepted extension does to the batch."
    )
    parser.add_argument(
        "--on-conflict",
        choices=MATERIAL_CONFLICT_POLICIES,
        default=None,
        help="What to do when a material of the same name already exists."
    )
    parser.add_argument(
        "--naming",
        choices=MATERIAL_NAMING_MODES,
        default=None,
        help="Name materials after the filename prefix or after the source folder."
    )
    parser.add_argument(
        "-r", "--project-root",
        type=str,
        default=None,
        help="Project directory holding the asset root."
    )
    parser.add_argument(
        "-o", "--export-dir",
        type=str,
        default=None,
        help="Name of the export folder inside the asset root."
    )
    parser.add_argument(
        "--shader",
        type=str,
        default=None,
        help="Shader used for newly created materials."
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default=None,
        help="Directory holding user_settings.json (defaults to the OS app data folder)."
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable detailed DEBUG level logging for troubleshooting."
    )
    parser.add_argument(
        "--gui",
        action="store_true",
        help="Force launch in GUI mode, ignoring the source folder."
    )
    return parser


def load_configuration(config_dir: Optional[str]) -> Configuration:
    user_config_dir = Path(config_dir) if config_dir else app_setup_utils.get_user_config_dir()
    return Configuration(base_dir_user_config=user_config_dir)


def settings_from_args(base_settings: ImportSettings, args: argparse.Namespace) -> ImportSettings:
    """Applies command-line overrides on top of the loaded settings."""
    return base_settings.replace(
        separator_token=args.separator,
        overwrite=args.overwrite,
        unmatched_file_policy=args.on_unmatched,
        material_conflict_policy=args.on_conflict,
        material_naming=args.naming,
        project_root=Path(args.project_root) if args.project_root else None,
        export_dir_name=args.export_dir,
        shader_name=args.shader,
    )


def run_cli(args: argparse.Namespace) -> int:
    """Runs a single import from the command line. Returns the process exit code."""
    try:
        config = load_configuration(args.config_dir)
        settings = settings_from_args(config.import_settings, args)
        importer = TextureImporter(settings)
        report = importer.import_folder(args.source_folder)
    except (ConfigurationError, TextureImportError) as e:
        log.error(f"Import failed: {e}")
        return 1
    except Exception as e:
        log.exception(f"An unexpected error occurred during import: {e}")
        return 1

    print(report.summary())
    return 0


def run_gui(args: argparse.Namespace) -> int:
    """Starts the Qt application with the import menu and options dialog."""
    # Imported lazily so the CLI works where Qt libraries are unavailable
    from PySide6.QtWidgets import QApplication
    from gui.main_window import MainWindow

    try:
        config = load_configuration(args.config_dir)
    except ConfigurationError as e:
        log.error(f"Fatal: Failed to load configuration: {e}")
        return 1

    qt_app = QApplication.instance()
    if qt_app is None:
        qt_app = QApplication(sys.argv)

    main_window = MainWindow(config, settings=settings_from_args(config.import_settings, args))
    main_window.show()
    log.info("Application started. Showing main window.")
    return qt_app.exec()


def main(argv: Optional[List[str]] = None) -> int:
    parser = setup_arg_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.gui and args.source_folder:
        log.info("Source folder given, running in CLI mode.")
        return run_cli(args)

    log.info("No source folder given, starting GUI mode.")
    try:
        return run_gui(args)
    except Exception as gui_exc:
        log.exception(f"An error occurred during GUI startup or execution: {gui_exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
