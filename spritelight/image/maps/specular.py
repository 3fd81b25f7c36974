"""Specular map generator."""
import logging
from typing import Optional

import numpy as np

from ...core.parameters import MapKind, ParameterSet
from ..core.base_types import MapData
from ..core.image_utils import (
    apply_threshold,
    brightness_contrast,
    gaussian_blur,
    silhouette_mask,
    to_uint8,
    validate_rgba,
)
from .base_generator import MapGenerator, NeighbourGrid

logger = logging.getLogger(__name__)


class SpecularMapGenerator(MapGenerator):
    """Generator for single-channel specular intensity maps."""

    kind = MapKind.SPECULAR

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
        Generate a specular map from the luminance of the diffuse or specular override.

        Transparent pixels of the diffuse are always 0.

        Returns:
            (H, W) uint8 specular map
        """
        params = self._get_params(params)
        diffuse = validate_rgba(diffuse, "diffuse")
        values = self._prepare_source(diffuse, specular)
        logger.debug(f"Generating specular map for shape {values.shape}")

        values = brightness_contrast(values, params.specular_bright, params.specular_contrast)
        values = apply_threshold(values, params.specular_thresh)
        values = gaussian_blur(values, params.specular_blur)
        if params.specular_invert:
            values = 255.0 - values

        result = to_uint8(values)
        result[~silhouette_mask(diffuse)] = 0
        return result
