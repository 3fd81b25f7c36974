"""
Image file input and output.

Decoding produces the premultiplied RGBA buffers the core works with; saving
writes generated maps and previews with Pillow.
"""
import logging
import os
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..exceptions import ImageDecodeError
from .core.image_utils import premultiply, unpremultiply

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".tga", ".tif", ".tiff", ".webp", ".gif")


def is_image_file(path: str) -> bool:
    """Check whether a path has an image extension Pillow can decode."""
    return os.path.splitext(path)[1].lower() in SUPPORTED_EXTENSIONS


def load_image_file(path: str) -> np.ndarray:
    """
    Decode an image file into premultiplied RGBA.

    Args:
        path: Image file path

    Returns:
        (H, W, 4) uint8 premultiplied RGBA

    Raises:
        ImageDecodeError: If the file is missing or cannot be decoded
    """
    try:
        with Image.open(path) as img:
            rgba = np.array(img.convert("RGBA"), dtype=np.uint8)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.warning(f"Could not decode image '{path}': {e}")
        raise ImageDecodeError(f"Could not decode image '{path}': {e}") from e

    if rgba.ndim != 3 or rgba.shape[0] == 0 or rgba.shape[1] == 0:
        raise ImageDecodeError(f"Image '{path}' has no pixels")

    logger.info(f"Loaded image {path} ({rgba.shape[1]}x{rgba.shape[0]})")
    return premultiply(rgba)


def save_image(
    image: np.ndarray,
    filepath: str,
    premultiplied: bool = False,
    format: Optional[str] = None,
) -> str:
    """
    Save an array as an image file.

    Args:
        image: (H, W), (H, W, 3) or (H, W, 4) uint8 array
        filepath: Output path; parent directories are created
        premultiplied: Convert RGBA from premultiplied to straight alpha first
        format: Pillow format name; inferred from the extension when None

    Returns:
        Path of the saved file
    """
    os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)

    array = np.asarray(image)
    if array.dtype != np.uint8:
        array = np.clip(np.rint(array), 0, 255).astype(np.uint8)

    if array.ndim == 2:
        pil_img = Image.fromarray(array)
    elif array.ndim == 3 and array.shape[2] == 3:
        pil_img = Image.fromarray(array)
    elif array.ndim == 3 and array.shape[2] == 4:
        if premultiplied:
            array = unpremultiply(array)
        pil_img = Image.fromarray(array)
    else:
        raise ValueError(f"Unsupported array shape: {array.shape}")

    ext = os.path.splitext(filepath)[1].lower()
    if pil_img.mode == "RGBA" and ext in (".jpg", ".jpeg"):
        pil_img = pil_img.convert("RGB")

    pil_img.save(filepath, format=format)
    logger.info(f"Saved image to {filepath}")
    return filepath
