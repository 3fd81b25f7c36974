"""Parallax (height) map generator."""
import logging
from typing import Optional

import numpy as np

from ...core.parameters import MapKind, ParallaxType, ParameterSet
from ..core.base_types import MapData
from ..core.image_utils import (
    alpha_channel,
    brightness_contrast,
    gaussian_blur,
    morphology,
    to_uint8,
    validate_rgba,
)
from .base_generator import MapGenerator, NeighbourGrid

logger = logging.getLogger(__name__)


class ParallaxMapGenerator(MapGenerator):
    """
    Generator for single-channel parallax height maps.

    Three extraction modes are supported:
      - BINARY: threshold band with optional soft ramp and focus curve, taken
        from alpha on cut-out sprites and from luminance on opaque ones
      - HEIGHT_MAP: brightness/contrast adjusted luminance, blurred
      - QUANTIZATION: luminance posterized to a number of levels, masked
        by the binary band, then eroded or dilated
    """

    kind = MapKind.PARALLAX

    def generate(
        self,
        diffuse: np.ndarray,
        params: Optional[ParameterSet] = None,
        *,
        heightmap: Optional[np.ndarray] = None,
        specular: Optional[np.ndarray] = None,
        neighbours: NeighbourGrid = None,
        neighbour_heights: NeighbourGrid = None,
    ) -> MapData:
        """
        Generate a parallax map.

        Args:
            diffuse: (H, W, 4) premultiplied RGBA
            params: Parallax group parameters
            heightmap: Optional height override used instead of the diffuse

        Returns:
            (H, W) uint8 height map
        """
        params = self._get_params(params)
        diffuse = validate_rgba(diffuse, "diffuse")
        values = self._prepare_source(diffuse, heightmap)
        band_source = values if heightmap is not None else self._band_source(diffuse, values)
        logger.debug(f"Generating parallax map ({params.parallax_type.name}) for shape {values.shape}")

        if params.parallax_type == ParallaxType.BINARY:
            result = self._binary_mask(band_source, params) * 255.0
            result = np.maximum(result, float(params.parallax_min))
            result = morphology(result, params.parallax_erode_dilate)
        elif params.parallax_type == ParallaxType.HEIGHT_MAP:
            result = brightness_contrast(values, params.parallax_brightness, params.parallax_contrast)
            result = gaussian_blur(result, params.parallax_soft)
        else:
            result = brightness_contrast(values, params.parallax_brightness, params.parallax_contrast)
            result = self._quantize(result, params.parallax_quantization)
            result = result * self._binary_mask(band_source, params)
            result = np.maximum(result, float(params.parallax_min))
            result = morphology(result, params.parallax_erode_dilate)

        if params.parallax_invert:
            result = 255.0 - result
        return to_uint8(result)

    @staticmethod
    def _band_source(diffuse: np.ndarray, values: np.ndarray) -> np.ndarray:
        """
        Values the threshold band is taken from.

        Sprites with transparent pixels are cut out by their alpha, so an
        opaque body passes the threshold whatever its colour. Fully opaque
        sprites use their luminance.
        """
        alpha = alpha_channel(diffuse)
        if np.all(alpha == 255.0):
            return values
        return alpha

    @staticmethod
    def _binary_mask(values: np.ndarray, params: ParameterSet) -> np.ndarray:
        """
        Threshold band of the values in [0, 1].

        A soft width of 0 gives a hard step at the threshold; otherwise a
        linear ramp of that width centred on the threshold, shaped by the
        focus exponent (50 is linear).
        """
        thresh = float(params.parallax_thresh)
        soft = float(params.parallax_soft)
        if soft <= 0:
            return (values >= thresh).astype(np.float32)
        low = thresh - soft / 2.0
        ramp = np.clip((values - low) / soft, 0.0, 1.0)
        exponent = 2.0 ** ((50.0 - params.parallax_focus) / 25.0)
        return np.power(ramp, exponent).astype(np.float32)

    @staticmethod
    def _quantize(values: np.ndarray, levels: int) -> np.ndarray:
        """Posterize values in [0, 255] to the given number of levels."""
        if levels <= 1:
            return np.full_like(values, 255.0, dtype=np.float32)
        steps = np.floor(values / 256.0 * levels)
        return (steps * 255.0 / (levels - 1)).astype(np.float32)
