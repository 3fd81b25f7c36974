"""
Core data model: parameter sets, frames and animation state.
"""

from .parameters import (
    ParameterSet,
    ParallaxType,
    MapKind,
    MapState,
    PARAMETER_MAP_KINDS,
    CONTRAST_SCALE,
    LIGHT_SCALE,
)
from .frame import Frame
from .animation import Animation

__all__ = [
    'ParameterSet',
    'ParallaxType',
    'MapKind',
    'MapState',
    'PARAMETER_MAP_KINDS',
    'CONTRAST_SCALE',
    'LIGHT_SCALE',
    'Frame',
    'Animation',
]
