"""
SpriteLight Package.

Generates normal, parallax, specular and ambient occlusion maps from 2D
sprites and renders them under dynamic lights.
"""

__version__ = "1.0.0"

from spritelight.exceptions import (
    SpriteLightException,
    FrameError,
    ImageDecodeError,
    DimensionMismatchError,
    MapGenerationError,
    ProjectRecordError,
    ConfigError,
)
from spritelight.core import ParameterSet, ParallaxType, MapKind, MapState, Frame, Animation
from spritelight.processor import SpriteProcessor
from spritelight.lighting import LightSource, PreviewCompositor, RenderSettings, RenderSnapshot, SpriteInstance, ViewMode
from spritelight.workspace import Workspace
from spritelight.watch import SourceChangeWatcher
from spritelight.plugins import BrushTool, ActiveProcessorRef

__all__ = [
    'SpriteLightException',
    'FrameError',
    'ImageDecodeError',
    'DimensionMismatchError',
    'MapGenerationError',
    'ProjectRecordError',
    'ConfigError',
    'ParameterSet',
    'ParallaxType',
    'MapKind',
    'MapState',
    'Frame',
    'Animation',
    'SpriteProcessor',
    'LightSource',
    'PreviewCompositor',
    'RenderSettings',
    'RenderSnapshot',
    'SpriteInstance',
    'ViewMode',
    'Workspace',
    'SourceChangeWatcher',
    'BrushTool',
    'ActiveProcessorRef',
]
