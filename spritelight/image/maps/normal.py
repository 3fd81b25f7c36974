"""Normal map generator with silhouette bevel and tileable sampling."""
import logging
from typing import Optional, Tuple

import numpy as np

from ...core.parameters import MapKind, ParameterSet
from ..core.base_types import MapData
from ..core.image_utils import (
    FLAT_NORMAL,
    build_mosaic,
    central_gradient,
    crop_center,
    distance_to_edge,
    gaussian_blur,
    luminance,
    silhouette_mask,
    to_uint8,
    validate_rgba,
)
from .base_generator import MapGenerator, NeighbourGrid

# Set up logging
logger = logging.getLogger(__name__)

# Gradient gain per unit of depth slider
DEPTH_SCALE = 0.05

# Part of the quarter circle swept by a soft bevel; below 1 so the profile
# still slopes at the inner end of the band
SOFT_BEVEL_REACH = 0.8


class NormalMapGenerator(MapGenerator):
    """Generator for tangent-space normal maps (R=x, G=y up, B=z)."""

    kind = MapKind.NORMAL

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
        Generate a normal map from the luminance of the diffuse or height image.

        Args:
            diffuse: (H, W, 4) premultiplied RGBA
            params: Normal group parameters (depth, blur, bevel, inversion, tileable)
            heightmap: Optional height override
            specular: Unused
            neighbours: 3x3 grid of neighbour diffuse images, used when tileable
            neighbour_heights: Height overrides matching the neighbour grid

        Returns:
            (H, W, 3) uint8 normal map
        """
        params = self._get_params(params)
        diffuse = validate_rgba(diffuse, "diffuse")
        shape = diffuse.shape[:2]
        logger.debug(f"Generating normal map for {shape[1]}x{shape[0]} image")

        height = self._prepare_source(diffuse, heightmap) / 255.0
        mask = silhouette_mask(diffuse)

        if params.tileable:
            height, mask = self._tile_sources(height, mask, neighbours, neighbour_heights)

        gx, gy = self._texture_gradient(height, params)

        if params.normal_bevel_distance > 0 and params.normal_bevel_depth > 0:
            bx, by = self._bevel_gradient(mask, params)
            gx = gx + bx
            gy = gy + by

        if params.tileable:
            gx = crop_center(gx, shape)
            gy = crop_center(gy, shape)
            mask = crop_center(mask, shape)

        if params.normal_invert_x:
            gx = -gx
        if params.normal_invert_y:
            gy = -gy

        return self._encode(gx, gy, mask)

    def _tile_sources(
        self,
        height: np.ndarray,
        mask: np.ndarray,
        neighbours: NeighbourGrid,
        neighbour_heights: NeighbourGrid = None,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Lay out height and silhouette as a 3x3 mosaic of the neighbour grid.

        Each neighbour contributes the height of its own override when it has
        one, so a frame tiled with itself wraps without seams.
        """
        if neighbours is None:
            # Default grid repeats the frame itself
            height_tiles = [[height] * 3 for _ in range(3)]
            mask_tiles = [[mask] * 3 for _ in range(3)]
            return build_mosaic(height, height_tiles), build_mosaic(mask, mask_tiles)

        height_tiles = []
        mask_tiles = []
        for row in range(3):
            height_row = []
            mask_row = []
            for col in range(3):
                cell = neighbours[row][col]
                if cell is None:
                    height_row.append(None)
                    mask_row.append(None)
                    continue
                cell = validate_rgba(cell, "neighbour")
                override = None if neighbour_heights is None else neighbour_heights[row][col]
                source = cell if override is None else validate_rgba(override, "neighbour height")
                height_row.append(luminance(source) / 255.0)
                mask_row.append(silhouette_mask(cell))
            height_tiles.append(height_row)
            mask_tiles.append(mask_row)
        return build_mosaic(height, height_tiles), build_mosaic(mask, mask_tiles)

    def _texture_gradient(self, height: np.ndarray, params: ParameterSet) -> Tuple[np.ndarray, np.ndarray]:
        blurred = gaussian_blur(height, params.normal_blur_radius, border="replicate")
        gx, gy = central_gradient(blurred, border="edge")
        scale = params.normal_depth * DEPTH_SCALE
        return gx * scale, gy * scale

    def _bevel_gradient(self, mask: np.ndarray, params: ParameterSet) -> Tuple[np.ndarray, np.ndarray]:
        """
        Gradient of the bevel profile rising from the silhouette edge.

        The profile reaches its plateau at bevel_distance pixels inside the
        silhouette, so only pixels within that distance get a bevel slope.
        """
        distance = float(params.normal_bevel_distance)
        d = distance_to_edge(mask, outside_is_background=not params.tileable)
        t = np.minimum(d, distance) / distance
        if params.normal_bevel_soft:
            reach = SOFT_BEVEL_REACH
            profile = np.sqrt(1.0 - (1.0 - reach * t) ** 2) / np.sqrt(1.0 - (1.0 - reach) ** 2)
        else:
            profile = t
        profile = profile.astype(np.float32)

        border = "replicate" if params.tileable else "constant"
        profile = gaussian_blur(profile, params.normal_bevel_blur_radius, border=border)

        gx, gy = central_gradient(profile, border="edge" if params.tileable else "zero")
        scale = params.normal_bevel_depth * DEPTH_SCALE
        return gx * scale, gy * scale

    @staticmethod
    def _encode(gx: np.ndarray, gy: np.ndarray, mask: np.ndarray) -> MapData:
        """Normalize (-gx, -gy, 1) and pack it into RGB."""
        nx = -gx
        ny = -gy
        nz = np.ones_like(nx)
        length = np.sqrt(nx * nx + ny * ny + nz * nz)
        nx, ny, nz = nx / length, ny / length, nz / length

        rgb = np.stack([
            128.0 + 127.0 * nx,
            128.0 - 127.0 * ny,
            128.0 + 127.0 * nz,
        ], axis=-1)
        normal_map = to_uint8(rgb)
        normal_map[~mask] = FLAT_NORMAL
        return normal_map
