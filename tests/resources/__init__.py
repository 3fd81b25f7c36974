"""Test resources package for SpriteLight testing."""

import os
import numpy as np
from PIL import Image

# Directory containing resource files
RESOURCE_DIR = os.path.dirname(os.path.abspath(__file__))

def get_resource_path(filename):
    """Get full path to a resource file."""
    return os.path.join(RESOURCE_DIR, filename)

def create_sample_sprite(size=(16, 16), color=(128, 128, 128), alpha=255):
    """Create a uniform premultiplied RGBA sprite.

    Args:
        size: Tuple of (height, width)
        color: Straight RGB colour
        alpha: Alpha of every pixel

    Returns:
        (H, W, 4) uint8 array
    """
    height, width = size
    sprite = np.zeros((height, width, 4), dtype=np.uint8)
    sprite[..., :3] = np.rint(np.asarray(color, dtype=np.float32) * alpha / 255.0).astype(np.uint8)
    sprite[..., 3] = alpha
    return sprite

def create_square_sprite(size=(16, 16), margin=4, color=(200, 200, 200)):
    """Create an opaque square centred on a transparent background."""
    height, width = size
    sprite = np.zeros((height, width, 4), dtype=np.uint8)
    sprite[margin:height - margin, margin:width - margin, :3] = color
    sprite[margin:height - margin, margin:width - margin, 3] = 255
    return sprite

def create_pattern_sprite(size=(16, 16), pattern="ramp_x"):
    """Create an opaque sprite whose luminance follows a pattern.

    Args:
        size: Tuple of (height, width)
        pattern: "ramp_x", "ramp_y", "checker" or "random"
    """
    height, width = size
    if pattern == "ramp_x":
        values = np.tile(np.linspace(0, 255, width), (height, 1))
    elif pattern == "ramp_y":
        values = np.tile(np.linspace(0, 255, height)[:, None], (1, width))
    elif pattern == "checker":
        yy, xx = np.mgrid[0:height, 0:width]
        values = ((xx // 4 + yy // 4) % 2) * 255
    elif pattern == "random":
        values = np.random.RandomState(42).randint(0, 256, size=(height, width))
    else:
        values = np.full((height, width), 128)
    values = np.rint(values).astype(np.uint8)
    return np.dstack([values, values, values, np.full((height, width), 255, dtype=np.uint8)])

def write_sprite(path, sprite):
    """Write a straight-alpha RGBA sprite to an image file and return the path."""
    Image.fromarray(np.asarray(sprite, dtype=np.uint8)).save(path)
    return path
