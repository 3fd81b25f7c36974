"""
Base generator module that defines the interface for all map generators.

This module provides the abstract base class that all map generators must implement.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Optional, Sequence

import numpy as np

from ...core.parameters import MapKind, ParameterSet
from ...exceptions import DimensionMismatchError
from ..core.image_utils import luminance, validate_rgba

logger = logging.getLogger(__name__)

# 3x3 grid of optional neighbour images
NeighbourGrid = Optional[Sequence[Sequence[Optional[np.ndarray]]]]


class MapGenerator(ABC):
    """
    Abstract base class for all map generators.

    Each concrete map generator implements generate() to produce its map from
    a sprite's premultiplied diffuse image and the sprite's ParameterSet.
    Generators are pure: the same inputs always give the same output.
    """

    kind: MapKind

    def __init__(self, **kwargs):
        """
        Initialize the map generator with default parameter overrides.

        Args:
            **kwargs: ParameterSet fields applied on top of every call's params
        """
        self.default_params = kwargs

    @abstractmethod
    def generate(
        self,
        diffuse: np.ndarray,
        params: Optional[ParameterSet] = None,
        *,
        heightmap: Optional[np.ndarray] = None,
        specular: Optional[np.ndarray] = None,
        neighbours: NeighbourGrid = None,
        neighbour_heights: NeighbourGrid = None,
    ) -> np.ndarray:
        """
        Generate a specific type of map from a diffuse image.

        Args:
            diffuse: (H, W, 4) premultiplied RGBA
            params: Parameter set of the sprite (defaults when None)
            heightmap: Optional height override of the same size
            specular: Optional specular override of the same size
            neighbours: 3x3 grid of neighbour images for tileable sampling
            neighbour_heights: Height overrides of the neighbour grid; None cells
                fall back to the neighbour's diffuse

        Returns:
            Generated map as uint8 numpy array
        """
        pass

    def _get_params(self, params: Optional[ParameterSet] = None) -> ParameterSet:
        """
        Get the effective parameters by merging defaults into the given set.

        Args:
            params: Parameters provided for this generation

        Returns:
            Validated parameter set (never the caller's instance)
        """
        base = params if params is not None else ParameterSet()
        merged = replace(base, **self.default_params)
        return self._validate_params(merged)

    def _validate_params(self, params: ParameterSet) -> ParameterSet:
        """
        Validate and adjust parameters as needed.

        Override this method in subclasses to perform specific validation.
        """
        return params

    def _prepare_source(self, diffuse: np.ndarray, override: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Luminance of the override image when given, else of the diffuse.

        Raises:
            DimensionMismatchError: If the override differs in size

        Returns:
            (H, W) float32 in [0, 255]
        """
        if override is None:
            return luminance(diffuse)
        override = validate_rgba(override, "override")
        if override.shape != diffuse.shape:
            raise DimensionMismatchError(diffuse.shape[:2], override.shape[:2])
        return luminance(override)
