"""
Utility functions for image processing operations.

This module provides the pixel-level building blocks shared by every map
generator: buffer validation, luminance and alpha extraction, blurs,
brightness/contrast, gradients, silhouette distances and the neighbour mosaic
used for tileable sampling.

All helpers are pure functions of their inputs.
"""
import logging
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np
from scipy import ndimage

from ...exceptions import ImageDecodeError

logger = logging.getLogger(__name__)

# Rec. 601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)

FLAT_NORMAL = (128, 128, 255)

def validate_rgba(pixels, name: str = "image") -> np.ndarray:
    """
    Validate a decoded image buffer and return a read-only RGBA copy.

    Args:
        pixels: Array-like of shape (H, W, 4) (RGB and grayscale buffers
            are promoted to opaque RGBA)
        name: Label used in error messages

    Returns:
        (H, W, 4) uint8 array flagged as non-writeable

    Raises:
        ImageDecodeError: If the buffer cannot be interpreted as an image
    """
    if pixels is None:
        raise ImageDecodeError(f"No pixel data for {name}")
    try:
        array = np.asarray(pixels)
    except (TypeError, ValueError) as e:
        raise ImageDecodeError(f"Invalid pixel buffer for {name}: {e}") from e

    if array.ndim == 2:
        array = np.dstack([array, array, array, np.full_like(array, 255)])
    elif array.ndim == 3 and array.shape[2] == 3:
        alpha = np.full(array.shape[:2] + (1,), 255, dtype=array.dtype)
        array = np.concatenate([array, alpha], axis=2)

    if array.ndim != 3 or array.shape[2] != 4:
        raise ImageDecodeError(f"Unsupported buffer shape for {name}: {array.shape}")
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise ImageDecodeError(f"Empty image buffer for {name}")
    if not np.issubdtype(array.dtype, np.number):
        raise ImageDecodeError(f"Non-numeric pixel buffer for {name}: {array.dtype}")

    if array.dtype != np.uint8:
        array = np.clip(array, 0, 255).astype(np.uint8)
    result = np.array(array, dtype=np.uint8, copy=True)
    result.setflags(write=False)
    return result

def premultiply(pixels: np.ndarray) -> np.ndarray:
    """Convert straight-alpha RGBA to premultiplied RGBA."""
    rgba = pixels.astype(np.float32)
    rgba[..., :3] *= rgba[..., 3:4] / 255.0
    return np.clip(np.rint(rgba), 0, 255).astype(np.uint8)

def unpremultiply(pixels: np.ndarray) -> np.ndarray:
    """Convert premultiplied RGBA to straight alpha."""
    rgba = pixels.astype(np.float32)
    alpha = rgba[..., 3:4]
    safe = np.where(alpha > 0, alpha, 1.0)
    rgba[..., :3] = np.where(alpha > 0, rgba[..., :3] * 255.0 / safe, 0.0)
    return np.clip(np.rint(rgba), 0, 255).astype(np.uint8)

def luminance(pixels: np.ndarray) -> np.ndarray:
    """
    Luminance of an RGBA buffer.

    Premultiplied colour is used as-is, so fully transparent pixels read as 0.

    Returns:
        (H, W) float32 in [0, 255]
    """
    return (pixels[..., :3].astype(np.float32) @ LUMA_WEIGHTS).astype(np.float32)

def alpha_channel(pixels: np.ndarray) -> np.ndarray:
    """Alpha as a float32 (H, W) array in [0, 255]."""
    return pixels[..., 3].astype(np.float32)

def silhouette_mask(pixels: np.ndarray) -> np.ndarray:
    """Boolean mask of the pixels that belong to the sprite."""
    return pixels[..., 3] > 0

def gaussian_blur(field: np.ndarray, radius: int, border: str = "replicate") -> np.ndarray:
    """
    Blur a 2D field with a Gaussian kernel of size 2*radius+1.

    Args:
        field: 2D array
        radius: Kernel radius in pixels; 0 returns the input unchanged
        border: 'replicate' (edge clamp) or 'constant' (zeros outside)

    Returns:
        Blurred float32 field
    """
    field = field.astype(np.float32, copy=False)
    radius = int(radius)
    if radius <= 0:
        return field
    ksize = 2 * radius + 1
    border_type = cv2.BORDER_CONSTANT if border == "constant" else cv2.BORDER_REPLICATE
    return cv2.GaussianBlur(field, (ksize, ksize), 0, borderType=border_type)

def brightness_contrast(values: np.ndarray, brightness: float = 0.0, contrast: float = 1.0) -> np.ndarray:
    """
    Apply brightness and contrast to values in [0, 255].

    Contrast pivots around mid-grey: v' = contrast * (v - 128) + 128 + brightness.
    """
    adjusted = float(contrast) * (values.astype(np.float32) - 128.0) + 128.0 + float(brightness)
    return np.clip(adjusted, 0.0, 255.0).astype(np.float32)

def apply_threshold(values: np.ndarray, thresh: float) -> np.ndarray:
    """Zero every value below thresh."""
    return np.where(values >= float(thresh), values, 0.0).astype(np.float32)

def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round and clip values in [0, 255] to uint8."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)

def central_gradient(field: np.ndarray, border: str = "edge") -> Tuple[np.ndarray, np.ndarray]:
    """
    Central-difference gradients of a 2D field.

    Args:
        field: 2D float array
        border: 'edge' clamps at the borders, 'zero' treats outside as 0

    Returns:
        (gx, gy) with gx along columns and gy along rows (downwards)
    """
    mode = "constant" if border == "zero" else "edge"
    padded = np.pad(field.astype(np.float32, copy=False), 1, mode=mode)
    gx = (padded[1:-1, 2:] - padded[1:-1, :-2]) * 0.5
    gy = (padded[2:, 1:-1] - padded[:-2, 1:-1]) * 0.5
    return gx.astype(np.float32), gy.astype(np.float32)

def distance_to_edge(mask: np.ndarray, outside_is_background: bool = True) -> np.ndarray:
    """
    Euclidean distance of every sprite pixel to the nearest background pixel.

    Args:
        mask: Boolean silhouette mask
        outside_is_background: Treat the area beyond the array border as
            background, so border pixels are at distance 1

    Returns:
        float32 distances; background pixels are 0
    """
    if outside_is_background:
        padded = np.pad(mask, 1, mode="constant", constant_values=False)
        return ndimage.distance_transform_edt(padded)[1:-1, 1:-1].astype(np.float32)
    if mask.all():
        # No background anywhere: every pixel is arbitrarily deep
        return np.full(mask.shape, np.float32(max(mask.shape)), dtype=np.float32)
    return ndimage.distance_transform_edt(mask).astype(np.float32)

def morphology(field: np.ndarray, radius: int) -> np.ndarray:
    """
    Grey erosion (radius < 0) or dilation (radius > 0) with a disk footprint.
    """
    radius = int(radius)
    if radius == 0:
        return field
    size = abs(radius)
    yy, xx = np.mgrid[-size:size + 1, -size:size + 1]
    footprint = (xx * xx + yy * yy) <= size * size
    if radius > 0:
        return ndimage.grey_dilation(field, footprint=footprint, mode="nearest")
    return ndimage.grey_erosion(field, footprint=footprint, mode="nearest")

def build_mosaic(center: np.ndarray, neighbours: Optional[Sequence[Sequence[Optional[np.ndarray]]]] = None) -> np.ndarray:
    """
    Lay out a field and its eight neighbours as a 3x3 mosaic.

    Cells whose neighbour is missing or has a different shape are filled by
    edge-replicating the centre, which degrades to edge-clamp sampling.

    Args:
        center: Field of the frame itself
        neighbours: 3x3 grid of fields (centre cell ignored)

    Returns:
        Array of shape (3H, 3W, ...)
    """
    h, w = center.shape[:2]
    pad = ((h, h), (w, w)) + ((0, 0),) * (center.ndim - 2)
    mosaic = np.pad(center, pad, mode="edge")
    if neighbours is None:
        return mosaic

    for row in range(3):
        for col in range(3):
            if row == 1 and col == 1:
                continue
            tile = neighbours[row][col]
            if tile is None:
                continue
            if tile.shape != center.shape:
                logger.debug(f"Neighbour ({row}, {col}) has shape {tile.shape}, clamping instead")
                continue
            mosaic[row * h:(row + 1) * h, col * w:(col + 1) * w] = tile
    return mosaic

def crop_center(mosaic: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
    """Extract the centre cell of a 3x3 mosaic."""
    h, w = shape[:2]
    return mosaic[h:2 * h, w:2 * w]
