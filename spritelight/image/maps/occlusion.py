"""Ambient occlusion map generator."""
import logging
from typing import Optional

import numpy as np

from ...core.parameters import MapKind, ParameterSet
from ..core.base_types import MapData
from ..core.image_utils import (
    apply_threshold,
    brightness_contrast,
    distance_to_edge,
    gaussian_blur,
    silhouette_mask,
    to_uint8,
    validate_rgba,
)
from .base_generator import MapGenerator, NeighbourGrid

logger = logging.getLogger(__name__)


class OcclusionMapGenerator(MapGenerator):
    """
    Generator for ambient occlusion maps.

    The base value is either the luminance of the diffuse or, in distance
    mode, the distance of each pixel to the sprite's silhouette clamped to
    occlusion_distance and scaled so that distance reads as 255.
    """

    kind = MapKind.OCCLUSION

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
        Generate an occlusion map.

        Returns:
            (H, W) uint8 occlusion map
        """
        params = self._get_params(params)
        diffuse = validate_rgba(diffuse, "diffuse")
        logger.debug(f"Generating occlusion map for shape {diffuse.shape[:2]}")

        if params.occlusion_distance_mode:
            distance = float(params.occlusion_distance)
            d = distance_to_edge(silhouette_mask(diffuse))
            values = np.minimum(d, distance) / distance * 255.0
        else:
            values = self._prepare_source(diffuse)

        values = brightness_contrast(values, params.occlusion_bright, params.occlusion_contrast)
        values = apply_threshold(values, params.occlusion_thresh)
        values = gaussian_blur(values, params.occlusion_blur)
        if params.occlusion_invert:
            values = 255.0 - values
        return to_uint8(values)
