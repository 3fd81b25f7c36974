"""
Lights and the preview compositor.
"""

from .light import LightSource
from .compositor import (
    PreviewCompositor,
    RenderSettings,
    RenderSnapshot,
    SpriteInstance,
    ViewMode,
)

__all__ = [
    'LightSource',
    'PreviewCompositor',
    'RenderSettings',
    'RenderSnapshot',
    'SpriteInstance',
    'ViewMode',
]
