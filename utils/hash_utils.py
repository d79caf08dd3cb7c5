import hashlib
import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 65536  # 64k


def calculate_sha256(file_path: Union[str, Path]) -> Optional[str]:
    """
    Calculates the SHA-256 hash of a file.

    Args:
        file_path: The path to the file.

    Returns:
        The SHA-256 hash as a hexadecimal string, or None if the file cannot be read.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        logger.error(f"File not found or is not a regular file: {file_path}")
        return None

    sha256_hash = hashlib.sha256()
    try:
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(_READ_CHUNK_SIZE), b""):
                sha256_hash.update(chunk)
        return sha256_hash.hexdigest()
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        return None


def files_have_same_content(first: Union[str, Path], second: Union[str, Path]) -> bool:
    """True if both files exist and hash identically. Size is compared first to avoid hashing."""
    first, second = Path(first), Path(second)
    try:
        if first.stat().st_size != second.stat().st_size:
            return False
    except OSError as e:
        logger.debug(f"Cannot compare '{first}' and '{second}': {e}")
        return False
    first_hash = calculate_sha256(first)
    return first_hash is not None and first_hash == calculate_sha256(second)
