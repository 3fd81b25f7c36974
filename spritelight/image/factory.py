"""
Registry and factory for map generators.

This module implements the registry that maps each MapKind to the generator
class producing it, and a convenience function that generates a map in one step.
"""

import logging
from typing import Dict, List, Optional, Type, Union

import numpy as np

from ..core.parameters import MapKind, ParameterSet
from ..exceptions import MapGenerationError
from .maps import (
    MapGenerator,
    NormalMapGenerator,
    OcclusionMapGenerator,
    ParallaxMapGenerator,
    SpecularMapGenerator,
)

logger = logging.getLogger(__name__)


class MapGeneratorRegistry:
    """
    Registry for map generators.

    Generators are looked up by MapKind or by the kind's string value.
    """

    # Class-level storage for registered generators
    _generators: Dict[MapKind, Type[MapGenerator]] = {}

    @classmethod
    def register(cls, kind: Union[MapKind, str], generator_cls: Type[MapGenerator]) -> None:
        """
        Register a map generator.

        Args:
            kind: Map kind the generator produces
            generator_cls: Generator class to register
        """
        cls._generators[MapKind(kind)] = generator_cls
        logger.debug(f"Registered map generator: {MapKind(kind).value}")

    @classmethod
    def get(cls, kind: Union[MapKind, str]) -> Optional[Type[MapGenerator]]:
        """
        Get a generator class by map kind.

        Returns:
            The generator class, or None if the kind is unknown
        """
        try:
            return cls._generators.get(MapKind(kind))
        except ValueError:
            return None

    @classmethod
    def list(cls) -> List[str]:
        """List all registered map kinds."""
        return [kind.value for kind in cls._generators]

    @classmethod
    def create(cls, kind: Union[MapKind, str], **kwargs) -> MapGenerator:
        """
        Instantiate the generator for a map kind.

        Raises:
            MapGenerationError: If no generator is registered for the kind
        """
        generator_cls = cls.get(kind)
        if generator_cls is None:
            raise MapGenerationError(
                f"No generator registered for '{kind}'. Available: {', '.join(cls.list())}"
            )
        return generator_cls(**kwargs)


def register_generator(kind: Union[MapKind, str]):
    """
    Decorator to register a map generator class.

    Args:
        kind: Map kind produced by the decorated class
    """
    def decorator(generator_cls):
        MapGeneratorRegistry.register(kind, generator_cls)
        return generator_cls

    return decorator


for _generator_cls in (NormalMapGenerator, ParallaxMapGenerator, SpecularMapGenerator, OcclusionMapGenerator):
    MapGeneratorRegistry.register(_generator_cls.kind, _generator_cls)


def generate_map(
    kind: Union[MapKind, str],
    diffuse: np.ndarray,
    params: Optional[ParameterSet] = None,
    **kwargs
) -> np.ndarray:
    """
    Generate one map from a diffuse image.

    Args:
        kind: Map kind to generate
        diffuse: (H, W, 4) premultiplied RGBA
        params: Parameter set (defaults when None)
        **kwargs: heightmap, specular, neighbours and neighbour_heights sources

    Returns:
        Generated map
    """
    generator = MapGeneratorRegistry.create(kind)
    return generator.generate(diffuse, params, **kwargs)
