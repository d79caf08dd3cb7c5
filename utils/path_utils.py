import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

ASSET_PATH_SEPARATOR = '/'


def last_slash_index(path_string: str) -> int:
    """Index of the last '/' or '\\' in path_string, -1 if neither is present."""
    return max(path_string.rfind('/'), path_string.rfind('\\'))


def join_asset_path(*parts: str) -> str:
    """
    Joins asset path segments with forward slashes, the way project asset paths
    are written regardless of platform (e.g. 'Assets' + 'Materials' -> 'Assets/Materials').
    Empty segments are dropped and stray separators at the joints are collapsed.
    """
    cleaned = []
    for part in parts:
        if part is None:
            continue
        segment = str(part).replace('\\', ASSET_PATH_SEPARATOR).strip(ASSET_PATH_SEPARATOR)
        if segment:
            cleaned.append(segment)
    return ASSET_PATH_SEPARATOR.join(cleaned)


def folder_name_from_path(folder_path: Union[str, Path]) -> str:
    """
    Returns the last component of a folder path. Trailing separators are ignored,
    so 'C:\\Textures\\Wood\\' and '/tmp/Wood' both give 'Wood'.
    """
    path_string = str(folder_path).rstrip('/\\')
    name = path_string[last_slash_index(path_string) + 1:]
    if not name:
        logger.warning(f"Could not derive a folder name from '{folder_path}'.")
    return name


def asset_path_to_filesystem(project_root: Path, asset_path: str) -> Path:
    """Resolves a forward-slash asset path against the project root directory."""
    return Path(project_root).joinpath(*[p for p in asset_path.split(ASSET_PATH_SEPARATOR) if p])
