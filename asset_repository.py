import dataclasses
import json
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Set, Union

from processing.utils import image_processing_utils as ipu
from processing.utils.suffix_mapping import SHADER_PROPERTY_TABLES, MaterialSlot
from utils.hash_utils import files_have_same_content
from utils.path_utils import asset_path_to_filesystem, join_asset_path

log = logging.getLogger(__name__)


class AssetRepositoryError(Exception):
    """Raised when the asset repository cannot find, load or persist an asset."""
    pass


@dataclasses.dataclass
class TextureHandle:
    """An imported texture the repository can hand to a material."""
    asset_path: str
    width: Optional[int] = None
    height: Optional[int] = None
    channels: Optional[int] = None
    bit_depth: Optional[int] = None


@dataclasses.dataclass
class MaterialAsset:
    name: str
    directory: str
    shader_name: str
    textures: Dict[str, str] = dataclasses.field(default_factory=dict) # Shader property -> texture asset path
    asset_path: Optional[str] = None # Set once the material exists in the repository

    def set_texture(self, property_name: str, texture: TextureHandle):
        self.textures[property_name] = texture.asset_path

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "shader": self.shader_name,
            "textures": dict(sorted(self.textures.items())),
        }

    @classmethod
    def from_dict(cls, data: dict, directory: str, asset_path: Optional[str] = None) -> 'MaterialAsset':
        return cls(
            name=data["name"],
            directory=directory,
            shader_name=data["shader"],
            textures=dict(data.get("textures", {})),
            asset_path=asset_path,
        )


class AssetRepository(ABC):
    """
    The host-side asset operations the importer depends on. Asset paths are
    forward-slash strings relative to the project root (e.g. 'Assets/Materials/wood.mat').
    """

    @abstractmethod
    def ensure_folder(self, parent: str, name: str) -> str:
        """Creates parent/name if it does not exist and returns its asset path."""

    @abstractmethod
    def find_material(self, name: str, directory: str) -> Optional[str]:
        """Asset path of the material called name inside directory, or None."""

    @abstractmethod
    def load_material(self, asset_path: str) -> MaterialAsset:
        """Loads an existing material. Raises AssetRepositoryError if it cannot be read."""

    @abstractmethod
    def create_material(self, material: MaterialAsset) -> str:
        """Persists a new material and returns its asset path."""

    @abstractmethod
    def save_material(self, material: MaterialAsset) -> str:
        """Persists changes to a material that already exists."""

    @abstractmethod
    def find_shader(self, shader_name: str) -> Dict[MaterialSlot, str]:
        """Slot -> shader property name table. Raises AssetRepositoryError for unknown shaders."""

    @abstractmethod
    def import_file(self, source_path: Union[str, Path], directory: str, overwrite: bool = False) -> str:
        """Copies a file into directory and returns the asset path of the copy. Raises OSError on failure."""

    @abstractmethod
    def refresh_imports(self) -> int:
        """Makes files copied since the last refresh resolvable. Returns how many were picked up."""

    @abstractmethod
    def resolve_texture(self, asset_path: str) -> Optional[TextureHandle]:
        """TextureHandle for an imported file, or None if it is not an importable texture."""


class FileSystemAssetRepository(AssetRepository):
    """
    Repository backed by a plain project directory. Materials are stored as JSON
    documents named '<material><material_extension>'.
    """

    def __init__(self, project_root: Union[str, Path], material_extension: str = ".mat",
                 shaders: Optional[Dict[str, Dict[MaterialSlot, str]]] = None):
        self.project_root = Path(project_root)
        self.material_extension = material_extension
        self.shaders: Dict[str, Dict[MaterialSlot, str]] = dict(SHADER_PROPERTY_TABLES)
        if shaders:
            self.shaders.update(shaders)
        self._pending_imports: Set[str] = set()
        self._imported: Set[str] = set()

    def _to_fs(self, asset_path: str) -> Path:
        return asset_path_to_filesystem(self.project_root, asset_path)

    def _material_asset_path(self, name: str, directory: str) -> str:
        return join_asset_path(directory, f"{name}{self.material_extension}")

    def ensure_folder(self, parent: str, name: str) -> str:
        asset_path = join_asset_path(parent, name)
        folder = self._to_fs(asset_path)
        if folder.exists() and not folder.is_dir():
            raise AssetRepositoryError(f"Expected directory but found file: {folder}")
        if not folder.exists():
            log.info(f"Export folder not found, creating: {folder}")
            try:
                folder.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise AssetRepositoryError(f"Failed to create folder {folder}: {e}")
        return asset_path

    def find_material(self, name: str, directory: str) -> Optional[str]:
        asset_path = self._material_asset_path(name, directory)
        if self._to_fs(asset_path).is_file():
            log.debug(f"Found existing material '{name}' at {asset_path}")
            return asset_path
        return None

    def load_material(self, asset_path: str) -> MaterialAsset:
        material_file = self._to_fs(asset_path)
        try:
            with open(material_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            directory = asset_path.rsplit('/', 1)[0] if '/' in asset_path else ""
            return MaterialAsset.from_dict(data, directory=directory, asset_path=asset_path)
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise AssetRepositoryError(f"Failed to load material {asset_path}: {e}")

    def _write_material(self, material: MaterialAsset, asset_path: str):
        material_file = self._to_fs(asset_path)
        try:
            with open(material_file, 'w', encoding='utf-8') as f:
                json.dump(material.to_dict(), f, indent=4)
        except OSError as e:
            raise AssetRepositoryError(f"Failed to write material {asset_path}: {e}")

    def create_material(self, material: MaterialAsset) -> str:
        asset_path = self._material_asset_path(material.name, material.directory)
        if self._to_fs(asset_path).exists():
            raise AssetRepositoryError(f"Material already exists: {asset_path}")
        self._write_material(material, asset_path)
        material.asset_path = asset_path
        log.info(f"Created material '{material.name}' at {asset_path}")
        return asset_path

    def save_material(self, material: MaterialAsset) -> str:
        if not material.asset_path:
            raise AssetRepositoryError(f"Material '{material.name}' has not been created yet.")
        self._write_material(material, material.asset_path)
        log.info(f"Saved material '{material.name}' at {material.asset_path}")
        return material.asset_path

    def find_shader(self, shader_name: str) -> Dict[MaterialSlot, str]:
        properties = self.shaders.get(shader_name)
        if properties is None:
            raise AssetRepositoryError(f"Shader '{shader_name}' not found. Known shaders: {sorted(self.shaders)}")
        return properties

    def import_file(self, source_path: Union[str, Path], directory: str, overwrite: bool = False) -> str:
        source_path = Path(source_path)
        asset_path = join_asset_path(directory, source_path.name)
        destination = self._to_fs(asset_path)

        if destination.exists() and destination.resolve() == source_path.resolve():
            log.debug(f"'{source_path}' is already in place at '{asset_path}', nothing to copy.")
            self._pending_imports.add(asset_path)
            return asset_path

        if destination.exists() and not overwrite:
            if files_have_same_content(source_path, destination):
                log.debug(f"'{asset_path}' already holds identical content, reusing it.")
                self._pending_imports.add(asset_path)
                return asset_path
            raise FileExistsError(f"Destination already exists and overwrite is disabled: {destination}")

        shutil.copyfile(source_path, destination)
        log.debug(f"Copied '{source_path}' -> '{destination}'")
        self._pending_imports.add(asset_path)
        return asset_path

    def refresh_imports(self) -> int:
        refreshed = 0
        for asset_path in sorted(self._pending_imports):
            if self._to_fs(asset_path).is_file():
                self._imported.add(asset_path)
                refreshed += 1
            else:
                log.warning(f"Imported file disappeared before refresh: {asset_path}")
        self._pending_imports.clear()
        log.debug(f"Refreshed {refreshed} imported file(s).")
        return refreshed

    def resolve_texture(self, asset_path: str) -> Optional[TextureHandle]:
        if asset_path not in self._imported:
            log.debug(f"'{asset_path}' has not been imported (refresh pending or never copied).")
            return None
        texture_file = self._to_fs(asset_path)
        if not texture_file.is_file():
            return None
        info = ipu.get_image_info(texture_file)
        if info is None:
            # PSD/TGA and friends: the file is a valid texture for the host but OpenCV cannot read its header
            log.debug(f"Could not read image header for '{asset_path}', resolving without dimensions.")
            return TextureHandle(asset_path=asset_path)
        if not (ipu.is_power_of_two(info["width"]) and ipu.is_power_of_two(info["height"])):
            log.info(f"Texture '{asset_path}' is {info['width']}x{info['height']}, not a power of two.")
        return TextureHandle(asset_path=asset_path, **info)
