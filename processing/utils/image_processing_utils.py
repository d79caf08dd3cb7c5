import logging
from pathlib import Path
from typing import Dict, Optional, Union

import cv2
import numpy as np

log = logging.getLogger(__name__)

_DTYPE_TO_BIT_DEPTH = {
    np.dtype('uint8'): 8,
    np.dtype('uint16'): 16,
    np.dtype('float32'): 32, # Typically for EXR etc.
    np.dtype('int8'): 8,
    np.dtype('int16'): 16,
}


def is_power_of_two(n: int) -> bool:
    """Checks if a number is a power of two."""
    return (n > 0) and (n & (n - 1) == 0)


def load_image(image_path: Union[str, Path], read_flag: int = cv2.IMREAD_UNCHANGED) -> Optional[np.ndarray]:
    """Loads an image from the specified path. Returns None if OpenCV cannot decode it."""
    try:
        img = cv2.imread(str(image_path), read_flag)
        if img is None:
            return None
        return img
    except Exception as e:
        log.debug(f"OpenCV failed to read '{image_path}': {e}")
        return None


def get_bit_depth(image_data: np.ndarray) -> Optional[int]:
    """Bits per channel for a loaded image, None for unknown dtypes."""
    if image_data is None:
        return None
    bit_depth = _DTYPE_TO_BIT_DEPTH.get(image_data.dtype)
    if bit_depth is None:
        log.warning(f"Unknown dtype {image_data.dtype}, cannot determine bit depth.")
    return bit_depth


def get_image_channels(image_data: np.ndarray) -> Optional[int]:
    """Determines the number of channels in an image."""
    if image_data is None:
        return None
    if len(image_data.shape) == 2: # Grayscale
        return 1
    elif len(image_data.shape) == 3: # Color
        return image_data.shape[2]
    return None # Unknown shape


def get_image_info(image_path: Union[str, Path]) -> Optional[Dict]:
    """
    Reads an image and returns its width, height, channel count and bit depth.
    Returns None for formats OpenCV cannot decode (PSD, TGA) or unreadable files.
    """
    image_data = load_image(image_path)
    if image_data is None:
        return None
    height, width = image_data.shape[:2]
    return {
        "width": int(width),
        "height": int(height),
        "channels": get_image_channels(image_data),
        "bit_depth": get_bit_depth(image_data),
    }
