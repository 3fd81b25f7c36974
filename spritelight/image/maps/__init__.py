"""
Map generators for sprite lighting.

This module provides the generators that derive lighting maps from a sprite's
diffuse image: normal, parallax, specular and ambient occlusion maps.
"""
from .base_generator import MapGenerator
from .normal import NormalMapGenerator
from .parallax import ParallaxMapGenerator
from .specular import SpecularMapGenerator
from .occlusion import OcclusionMapGenerator

__all__ = [
    'MapGenerator',
    'NormalMapGenerator',
    'ParallaxMapGenerator',
    'SpecularMapGenerator',
    'OcclusionMapGenerator',
]
