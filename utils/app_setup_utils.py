import os
import platform
from pathlib import Path

APP_NAME = "TTaker"
CONFIG_DIR_ENV_VAR = "TTAKER_CONFIG_DIR"


def get_app_data_dir():
    """
    Gets the OS-specific application data directory for TTaker.
    """
    if platform.system() == "Windows":
        # On Windows, use APPDATA environment variable
        app_data_dir = os.path.join(os.environ.get("APPDATA", "~"), APP_NAME)
    elif platform.system() == "Darwin":
        # On macOS, use ~/Library/Application Support
        app_data_dir = os.path.join("~", "Library", "Application Support", APP_NAME)
    else:
        # On Linux and other Unix-like systems, use ~/.config
        app_data_dir = os.path.join("~", ".config", APP_NAME)

    # Expand the user home directory symbol if present
    return os.path.expanduser(app_data_dir)


def get_user_config_dir() -> Path:
    """
    Directory holding user_settings.json. TTAKER_CONFIG_DIR overrides the OS default.
    """
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    return Path(override).expanduser() if override else Path(get_app_data_dir())
