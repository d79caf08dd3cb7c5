import collections.abc
import copy
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

from processing.utils.filename_parsing import DEFAULT_IMAGE_EXTENSIONS, DEFAULT_SEPARATOR_TOKEN
from processing.utils.suffix_mapping import DEFAULT_SUFFIX_SLOT_MAPPING, STANDARD_SHADER_NAME, parse_slot
from utils.path_utils import join_asset_path

log = logging.getLogger(__name__)

# Primarily for locating bundled resources relative to the script.
_SCRIPT_DIR = Path(__file__).resolve().parent

MATERIAL_NAMING_MODES = ("prefix", "folder")
UNMATCHED_FILE_POLICIES = ("skip", "abort")
MATERIAL_CONFLICT_POLICIES = ("reuse", "abort")


class ConfigurationError(Exception):
    """Custom exception for configuration loading errors."""
    pass


def _deep_merge_dicts(base_dict: dict, override_dict: dict) -> dict:
    """
    Recursively merges override_dict into base_dict.
    If a key exists in both and both values are dicts, it recursively merges them.
    Otherwise, the value from override_dict takes precedence.
    Modifies base_dict in place and returns it.
    """
    for key, value in override_dict.items():
        if isinstance(value, collections.abc.Mapping):
            node = base_dict.get(key)
            if isinstance(node, collections.abc.Mapping):
                _deep_merge_dicts(node, value)
            else:
                base_dict[key] = value
        else:
            base_dict[key] = value
    return base_dict


@dataclasses.dataclass
class ImportSettings:
    """
    Everything a single import run needs. Passed explicitly into the importer;
    nothing here is read from module globals.
    """
    separator_token: str = DEFAULT_SEPARATOR_TOKEN
    overwrite: bool = False
    shader_name: str = STANDARD_SHADER_NAME
    project_root: Path = Path(".")
    asset_root_dir: str = "Assets"
    export_dir_name: str = "Materials"
    material_file_extension: str = ".mat"
    image_extensions: Tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS
    suffix_slot_mapping: Dict[str, str] = dataclasses.field(default_factory=lambda: dict(DEFAULT_SUFFIX_SLOT_MAPPING))
    material_naming: str = "prefix" # 'prefix' groups by file name, 'folder' names one material after the folder
    unmatched_file_policy: str = "skip" # 'skip' or 'abort' for files without separator/accepted extension
    material_conflict_policy: str = "reuse" # 'reuse' merges into an existing material, 'abort' leaves it alone

    @property
    def export_path(self) -> str:
        """Asset path of the destination directory, e.g. 'Assets/Materials'."""
        return join_asset_path(self.asset_root_dir, self.export_dir_name)

    def validate(self):
        """Raises ConfigurationError if any setting is unusable."""
        if not isinstance(self.separator_token, str) or not self.separator_token:
            raise ConfigurationError("Separator token must be a non-empty string.")
        if '.' in self.separator_token or '/' in self.separator_token or '\\' in self.separator_token:
            raise ConfigurationError(f"Separator token '{self.separator_token}' may not contain '.', '/' or '\\'.")
        if not isinstance(self.overwrite, bool):
            raise ConfigurationError(f"'overwrite' must be a boolean, got {type(self.overwrite).__name__}.")
        if not self.shader_name or not isinstance(self.shader_name, str):
            raise ConfigurationError("Shader name must be a non-empty string.")
        if not self.asset_root_dir or not self.export_dir_name:
            raise ConfigurationError("Asset root and export directory names must not be empty.")
        if not self.material_file_extension.startswith('.'):
            raise ConfigurationError(f"Material file extension '{self.material_file_extension}' must start with '.'.")
        if isinstance(self.image_extensions, str) or not all(isinstance(e, str) and e for e in self.image_extensions):
            raise ConfigurationError("Image extensions must be a list of non-empty strings.")
        if not self.image_extensions:
            raise ConfigurationError("At least one image extension is required.")
        if not isinstance(self.suffix_slot_mapping, collections.abc.Mapping) or not self.suffix_slot_mapping:
            raise ConfigurationError("Suffix slot mapping must be a non-empty dictionary.")
        for suffix, slot_name in self.suffix_slot_mapping.items():
            try:
                parse_slot(slot_name)
            except ValueError as e:
                raise ConfigurationError(f"Suffix '{suffix}': {e}")
        if self.material_naming not in MATERIAL_NAMING_MODES:
            raise ConfigurationError(f"Unknown material naming mode '{self.material_naming}'. Must be one of {list(MATERIAL_NAMING_MODES)}.")
        if self.unmatched_file_policy not in UNMATCHED_FILE_POLICIES:
            raise ConfigurationError(f"Unknown unmatched file policy '{self.unmatched_file_policy}'. Must be one of {list(UNMATCHED_FILE_POLICIES)}.")
        if self.material_conflict_policy not in MATERIAL_CONFLICT_POLICIES:
            raise ConfigurationError(f"Unknown material conflict policy '{self.material_conflict_policy}'. Must be one of {list(MATERIAL_CONFLICT_POLICIES)}.")

    def replace(self, **changes) -> 'ImportSettings':
        """Copy with the given fields changed. None values are ignored so CLI defaults do not override."""
        effective = {k: v for k, v in changes.items() if v is not None}
        return dataclasses.replace(self, **effective)


# Settings file key -> ImportSettings field
_SETTINGS_KEY_MAP = {
    "SEPARATOR_TOKEN": "separator_token",
    "OVERWRITE": "overwrite",
    "SHADER_NAME": "shader_name",
    "PROJECT_ROOT": "project_root",
    "ASSET_ROOT_DIR": "asset_root_dir",
    "EXPORT_DIR_NAME": "export_dir_name",
    "MATERIAL_FILE_EXTENSION": "material_file_extension",
    "IMAGE_EXTENSIONS": "image_extensions",
    "SUFFIX_SLOT_MAPPING": "suffix_slot_mapping",
    "MATERIAL_NAMING": "material_naming",
    "UNMATCHED_FILE_POLICY": "unmatched_file_policy",
    "MATERIAL_CONFLICT_POLICY": "material_conflict_policy",
}

# Dict-valued keys a user override replaces as a whole, so entries can be removed
_REPLACED_WHOLE_KEYS = ("SUFFIX_SLOT_MAPPING",)


def _merge_user_settings(core_settings: dict, overrides: dict) -> dict:
    """Deep-merges overrides onto a copy of core_settings, except for _REPLACED_WHOLE_KEYS."""
    merged = copy.deepcopy(core_settings)
    whole = {k: overrides[k] for k in _REPLACED_WHOLE_KEYS if k in overrides}
    _deep_merge_dicts(merged, {k: v for k, v in overrides.items() if k not in whole})
    merged.update(copy.deepcopy(whole))
    return merged


class Configuration:
    """
    Loads bundled default settings and merges optional user overrides on top.
    """
    BASE_DIR_APP_BUNDLED_CONFIG_SUBDIR_NAME = "config"
    APP_SETTINGS_FILENAME = "app_settings.json"
    USER_SETTINGS_FILENAME = "user_settings.json"

    def __init__(self, base_dir_user_config: Optional[Path] = None, app_settings_path: Optional[Path] = None):
        """
        Args:
            base_dir_user_config: Directory holding user_settings.json. If None,
                                  only the bundled defaults are used.
            app_settings_path: Override for the bundled app_settings.json location.
        Raises:
            ConfigurationError: If the bundled settings cannot be loaded or the merged settings are invalid.
        """
        log.debug(f"Initializing Configuration with user_config_dir: '{base_dir_user_config}'")
        self.base_dir_user_config: Optional[Path] = Path(base_dir_user_config) if base_dir_user_config else None
        self.base_dir_app_bundled: Path = self._determine_base_dir_app_bundled()

        # 1. Load core application settings (always from bundled)
        if app_settings_path is None:
            app_settings_path = self.base_dir_app_bundled / self.BASE_DIR_APP_BUNDLED_CONFIG_SUBDIR_NAME / self.APP_SETTINGS_FILENAME
        self._core_settings: dict = self._load_json_file(
            Path(app_settings_path),
            is_critical=True,
            description="Core application settings"
        )

        # 2. Load user settings (from user config dir, if provided)
        user_settings_overrides: dict = {}
        if self.base_dir_user_config:
            user_settings_overrides = self._load_json_file(
                self.user_settings_path,
                is_critical=False,
                description="User settings"
            ) or {}
        else:
            log.info(f"{self.USER_SETTINGS_FILENAME} not loaded: User config directory not set.")

        # 3. Merge user settings onto core settings
        self._settings: dict = copy.deepcopy(self._core_settings)
        if user_settings_overrides:
            log.info("Applying user setting overrides to core settings.")
            self._settings = _merge_user_settings(self._core_settings, user_settings_overrides)

        # 4. Validate
        self._import_settings = self._build_import_settings(self._settings)
        self._import_settings.validate()
        log.info("Configuration loaded successfully.")

    def _determine_base_dir_app_bundled(self) -> Path:
        """Determines the base directory for bundled application resources."""
        if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
            log.debug(f"Running as bundled app, _MEIPASS: {sys._MEIPASS}")
            return Path(sys._MEIPASS)
        return _SCRIPT_DIR

    def _load_json_file(self, file_path: Optional[Path], is_critical: bool = False, description: str = "configuration") -> dict:
        """Loads a JSON file, handling errors. Returns empty dict if not found and not critical."""
        log.debug(f"Attempting to load {description} from: {file_path}")
        if not file_path or not file_path.is_file():
            if is_critical:
                raise ConfigurationError(f"Critical {description} file not found: {file_path}")
            log.info(f"{description} file not found: {file_path}. Returning empty dict.")
            return {}
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                settings = json.load(f)
        except json.JSONDecodeError as e:
            msg = f"Failed to parse {description} file {file_path}: Invalid JSON - {e}"
            if is_critical:
                raise ConfigurationError(msg)
            log.warning(msg + ". Returning empty dict.")
            return {}
        except OSError as e:
            msg = f"Failed to read {description} file {file_path}: {e}"
            if is_critical:
                raise ConfigurationError(msg)
            log.warning(msg + ". Returning empty dict.")
            return {}
        if not isinstance(settings, dict):
            msg = f"{description} file {file_path} must contain a JSON object, got {type(settings).__name__}"
            if is_critical:
                raise ConfigurationError(msg)
            log.warning(msg + ". Ignoring it.")
            return {}
        log.debug(f"{description} loaded successfully from {file_path}.")
        return settings

    def _build_import_settings(self, settings: dict) -> ImportSettings:
        fields = {}
        for key, field_name in _SETTINGS_KEY_MAP.items():
            if key in settings:
                fields[field_name] = settings[key]
        unknown_keys = set(settings) - set(_SETTINGS_KEY_MAP)
        if unknown_keys:
            log.warning(f"Ignoring unknown settings keys: {sorted(unknown_keys)}")

        if "project_root" in fields:
            fields["project_root"] = Path(fields["project_root"])
        if "image_extensions" in fields and isinstance(fields["image_extensions"], list):
            fields["image_extensions"] = tuple(fields["image_extensions"])
        if "suffix_slot_mapping" in fields and isinstance(fields["suffix_slot_mapping"], dict):
            fields["suffix_slot_mapping"] = dict(fields["suffix_slot_mapping"])
        try:
            return ImportSettings(**fields)
        except TypeError as e:
            raise ConfigurationError(f"Invalid settings: {e}")

    @property
    def user_settings_path(self) -> Optional[Path]:
        if not self.base_dir_user_config:
            return None
        return self.base_dir_user_config / self.USER_SETTINGS_FILENAME

    @property
    def import_settings(self) -> ImportSettings:
        """A fresh copy, so callers can adjust it per run without touching the loaded configuration."""
        return dataclasses.replace(
            self._import_settings,
            suffix_slot_mapping=dict(self._import_settings.suffix_slot_mapping),
        )

    @property
    def separator_token(self) -> str:
        return self._import_settings.separator_token

    @property
    def overwrite(self) -> bool:
        return self._import_settings.overwrite

    @property
    def shader_name(self) -> str:
        return self._import_settings.shader_name

    @property
    def export_path(self) -> str:
        return self._import_settings.export_path

    def save_user_settings(self, import_settings: ImportSettings):
        """
        Writes the values of import_settings that differ from the bundled defaults
        to user_settings.json and reloads them into this configuration.
        """
        if not self.base_dir_user_config:
            raise ConfigurationError("Cannot save user settings: User config directory not set.")
        import_settings.validate()

        defaults = self._build_import_settings(self._core_settings)
        overrides = {}
        for key, field_name in _SETTINGS_KEY_MAP.items():
            value = getattr(import_settings, field_name)
            if value != getattr(defaults, field_name):
                if isinstance(value, Path):
                    value = str(value)
                elif isinstance(value, tuple):
                    value = list(value)
                overrides[key] = value

        target = self.user_settings_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                json.dump(overrides, f, indent=4)
        except OSError as e:
            raise ConfigurationError(f"Failed to write user settings to {target}: {e}")
        log.info(f"Saved {len(overrides)} user setting override(s) to {target}")

        self._settings = _merge_user_settings(self._core_settings, overrides)
        self._import_settings = self._build_import_settings(self._settings)
