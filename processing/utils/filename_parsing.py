import logging
from pathlib import Path
from typing import Iterable, Union

from rule_structure import SourceFile
from utils.path_utils import last_slash_index

log = logging.getLogger(__name__)

DEFAULT_IMAGE_EXTENSIONS = ("PSD", "TIFF", "TIF", "JPG", "JPEG", "TGA", "PNG", "GIF", "BMP")
DEFAULT_SEPARATOR_TOKEN = "_"


class FilenameParseError(ValueError):
    """Raised when a file name does not follow the <name><sep><suffix>.<ext> convention."""

    def __init__(self, file_path: str, reason: str, message: str = None):
        self.file_path = file_path
        self.reason = reason # no_extension, unsupported_extension, no_separator, empty_material_name, empty_suffix
        super().__init__(message or f"Cannot parse '{file_path}': {reason}")


def _normalize_extensions(allowed_extensions: Iterable[str]) -> set:
    return {ext.lstrip('.').upper() for ext in allowed_extensions}


def is_supported_image(file_path: Union[str, Path], allowed_extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS) -> bool:
    """True if the file's extension (after the last '.') is an accepted image type. Ignores case."""
    name = str(file_path)
    name = name[last_slash_index(name) + 1:]
    last_dot = name.rfind('.')
    if last_dot <= 0:
        return False
    return name[last_dot + 1:].upper() in _normalize_extensions(allowed_extensions)


def parse_texture_filename(
    file_path: Union[str, Path],
    separator: str = DEFAULT_SEPARATOR_TOKEN,
    allowed_extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS
) -> SourceFile:
    """
    Splits a texture file name into material name, suffix and extension.

    The extension starts after the last '.', the suffix after the last
    occurrence of the separator token before it. Only the file name is
    inspected, so separators in directory names are ignored.

    Args:
        file_path: Path to the texture (str or Path, '/' or '\\' separated).
        separator: Token in front of the suffix (e.g. '_' for 'wood_ao.png').
        allowed_extensions: Accepted extensions, without dots, any case.

    Returns:
        The parsed SourceFile.

    Raises:
        FilenameParseError: If the name has no extension, an unsupported
                            extension, no separator, or an empty name/suffix part.
    """
    if not separator:
        raise ValueError("separator must be a non-empty string")

    path_str = str(file_path)
    file_name = path_str[last_slash_index(path_str) + 1:]

    last_dot = file_name.rfind('.')
    if last_dot <= 0:
        raise FilenameParseError(path_str, "no_extension")

    extension = file_name[last_dot + 1:]
    if not extension or extension.upper() not in _normalize_extensions(allowed_extensions):
        raise FilenameParseError(path_str, "unsupported_extension",
                                 f"Unsupported extension '{extension}' for '{path_str}'")

    stem = file_name[:last_dot]
    separator_index = stem.rfind(separator)
    if separator_index < 0:
        raise FilenameParseError(path_str, "no_separator",
                                 f"Separator '{separator}' not found in '{file_name}'")

    material_name = stem[:separator_index]
    suffix = stem[separator_index + len(separator):]
    if not material_name:
        raise FilenameParseError(path_str, "empty_material_name")
    if not suffix:
        raise FilenameParseError(path_str, "empty_suffix")

    log.debug(f"Parsed '{file_name}' -> material='{material_name}', suffix='{suffix}', ext='{extension}'")
    return SourceFile(
        file_path=path_str,
        material_name=material_name,
        suffix=suffix,
        extension=extension,
    )
