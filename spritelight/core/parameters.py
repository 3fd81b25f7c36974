"""
Parameter set for sprite map generation.

This module provides the ParameterSet dataclass shared by every frame of a
sprite, the enumerations describing map kinds and parallax modes, the single
table that decides which generated maps a parameter invalidates, and the
record form used by project persistence.
"""

import logging
from dataclasses import dataclass, fields, asdict, replace
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, Tuple

from ..exceptions import ProjectRecordError

# Set up logging
logger = logging.getLogger(__name__)

# Integer sliders are stored as multipliers (1000 -> 1.0)
CONTRAST_SCALE = 0.001
# Light intensity and height sliders (100 -> 1.0)
LIGHT_SCALE = 0.01


class MapKind(str, Enum):
    """Generated map kinds owned by a frame."""
    NORMAL = "normal"
    PARALLAX = "parallax"
    SPECULAR = "specular"
    OCCLUSION = "occlusion"


class MapState(Enum):
    """Cache state of one generated map."""
    CLEAN = "clean"
    DIRTY = "dirty"


class ParallaxType(IntEnum):
    """Height extraction modes of the parallax map."""
    BINARY = 0
    HEIGHT_MAP = 1
    QUANTIZATION = 2


ALL_MAP_KINDS: FrozenSet[MapKind] = frozenset(MapKind)


@dataclass
class ParameterSet:
    """
    Flat record of every map-generation option of a sprite.

    Field names carry their group as prefix (normal_, parallax_, specular_,
    occlusion_) except for a few flags that belong to a group without it
    (tileable, is_parallax, tile_x, tile_y).
    """
    # Normal map
    normal_depth: int = 100
    normal_blur_radius: int = 0
    normal_bevel_depth: int = 100
    normal_bevel_distance: int = 0
    normal_bevel_blur_radius: int = 0
    normal_bevel_soft: bool = True
    normal_invert_x: bool = False
    normal_invert_y: bool = False
    tileable: bool = False

    # Parallax map
    parallax_type: ParallaxType = ParallaxType.BINARY
    parallax_soft: int = 0
    parallax_thresh: int = 128
    parallax_focus: int = 50
    parallax_min: int = 0
    parallax_quantization: int = 8
    parallax_erode_dilate: int = 0
    parallax_brightness: int = 0
    parallax_contrast: float = 1.0
    parallax_invert: bool = False
    is_parallax: bool = False
    tile_x: bool = False
    tile_y: bool = False

    # Specular map
    specular_blur: int = 0
    specular_bright: int = 0
    specular_contrast: float = 1.0
    specular_thresh: int = 127
    specular_invert: bool = False

    # Occlusion map
    occlusion_blur: int = 0
    occlusion_bright: int = 0
    occlusion_contrast: float = 1.0
    occlusion_thresh: int = 0
    occlusion_invert: bool = False
    occlusion_distance_mode: bool = False
    occlusion_distance: int = 10

    def __post_init__(self):
        """Coerce and clamp every field after initialization."""
        for f in fields(self):
            object.__setattr__(self, f.name, coerce_parameter(f.name, getattr(self, f.name)))

    def copy(self) -> "ParameterSet":
        """Return an independent snapshot of this parameter set."""
        return replace(self)

    def as_dict(self) -> Dict[str, Any]:
        """Flat dictionary of field name to value."""
        return asdict(self)

    def diff(self, other: "ParameterSet") -> Tuple[str, ...]:
        """Names of the fields whose values differ from other."""
        return tuple(
            f.name for f in fields(self)
            if getattr(self, f.name) != getattr(other, f.name)
        )

    def to_record(self) -> Dict[str, Dict[str, Any]]:
        """
        Nested record grouped by target map, as stored in project files.

        Returns:
            {"normal": {...}, "parallax": {...}, "specular": {...}, "occlusion": {...}}
        """
        record: Dict[str, Dict[str, Any]] = {group: {} for group in GROUP_FIELDS}
        for group, names in GROUP_FIELDS.items():
            for name in names:
                value = getattr(self, name)
                if isinstance(value, ParallaxType):
                    value = int(value)
                record[group][record_key(group, name)] = value
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ParameterSet":
        """
        Rebuild a parameter set from its nested record.

        Unknown keys are ignored and missing keys keep their defaults.

        Raises:
            ProjectRecordError: If the record is not a mapping of groups
        """
        if not isinstance(record, dict):
            raise ProjectRecordError(f"Parameter record must be a mapping, got {type(record).__name__}")

        values: Dict[str, Any] = {}
        for group, names in GROUP_FIELDS.items():
            group_record = record.get(group, {})
            if not isinstance(group_record, dict):
                raise ProjectRecordError(f"Parameter group '{group}' must be a mapping")
            for name in names:
                key = record_key(group, name)
                if key in group_record:
                    values[name] = group_record[key]
        try:
            return cls(**values)
        except (TypeError, ValueError) as e:
            raise ProjectRecordError(f"Invalid parameter record: {e}") from e


GROUP_FIELDS: Dict[str, Tuple[str, ...]] = {
    "normal": (
        "normal_depth", "normal_blur_radius", "normal_bevel_depth",
        "normal_bevel_distance", "normal_bevel_blur_radius", "normal_bevel_soft",
        "normal_invert_x", "normal_invert_y", "tileable",
    ),
    "parallax": (
        "parallax_type", "parallax_soft", "parallax_thresh", "parallax_focus",
        "parallax_min", "parallax_quantization", "parallax_erode_dilate",
        "parallax_brightness", "parallax_contrast", "parallax_invert",
        "is_parallax", "tile_x", "tile_y",
    ),
    "specular": (
        "specular_blur", "specular_bright", "specular_contrast",
        "specular_thresh", "specular_invert",
    ),
    "occlusion": (
        "occlusion_blur", "occlusion_bright", "occlusion_contrast",
        "occlusion_thresh", "occlusion_invert", "occlusion_distance_mode",
        "occlusion_distance",
    ),
}

# Fields that only affect the preview
_PREVIEW_ONLY = frozenset({"is_parallax", "tile_x", "tile_y"})

# Which cached maps each parameter invalidates
PARAMETER_MAP_KINDS: Dict[str, FrozenSet[MapKind]] = {
    name: (frozenset() if name in _PREVIEW_ONLY else frozenset({MapKind(group)}))
    for group, names in GROUP_FIELDS.items()
    for name in names
}

# Inclusive domains of the integer sliders
PARAMETER_RANGES: Dict[str, Tuple[float, float]] = {
    "normal_depth": (0, 1000),
    "normal_blur_radius": (0, 100),
    "normal_bevel_depth": (0, 1000),
    "normal_bevel_distance": (0, 255),
    "normal_bevel_blur_radius": (0, 100),
    "parallax_soft": (0, 255),
    "parallax_thresh": (0, 255),
    "parallax_focus": (0, 100),
    "parallax_min": (0, 255),
    "parallax_quantization": (1, 255),
    "parallax_erode_dilate": (-50, 50),
    "parallax_brightness": (-255, 255),
    "parallax_contrast": (0.0, 10.0),
    "specular_blur": (0, 100),
    "specular_bright": (-255, 255),
    "specular_contrast": (0.0, 10.0),
    "specular_thresh": (0, 255),
    "occlusion_blur": (0, 100),
    "occlusion_bright": (-255, 255),
    "occlusion_contrast": (0.0, 10.0),
    "occlusion_thresh": (0, 255),
    "occlusion_distance": (1, 255),
}

_DEFAULTS = {f.name: f.default for f in fields(ParameterSet)}

CONTRAST_PARAMETERS = frozenset(name for name in _DEFAULTS if name.endswith("_contrast"))


def record_key(group: str, name: str) -> str:
    """Record key of a field inside its group ('normal_depth' -> 'depth')."""
    prefix = f"{group}_"
    return name[len(prefix):] if name.startswith(prefix) else name


def coerce_parameter(name: str, value: Any) -> Any:
    """
    Convert a value to the type of the named parameter and clamp it to range.

    Raises:
        ValueError: If the parameter name is unknown or the value is invalid
    """
    if name not in _DEFAULTS:
        raise ValueError(f"Unknown parameter: {name}")

    default = _DEFAULTS[name]
    if isinstance(default, ParallaxType):
        return ParallaxType(int(value))
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        value = int(round(float(value)))
    else:
        value = float(value)

    if name in PARAMETER_RANGES:
        low, high = PARAMETER_RANGES[name]
        clamped = min(max(value, type(value)(low)), type(value)(high))
        if clamped != value:
            logger.debug(f"Clamped {name} from {value} to {clamped}")
        value = clamped
    return value


def slider_to_value(name: str, slider: int) -> Any:
    """Convert an integer slider position to the stored parameter value."""
    if name in CONTRAST_PARAMETERS:
        return coerce_parameter(name, int(slider) * CONTRAST_SCALE)
    return coerce_parameter(name, slider)


def value_to_slider(name: str, value: Any) -> int:
    """Inverse of slider_to_value for restoring UI state."""
    if name in CONTRAST_PARAMETERS:
        return int(round(float(value) / CONTRAST_SCALE))
    return int(value)


def affected_kinds(names) -> FrozenSet[MapKind]:
    """Union of the map kinds invalidated by the given parameter names."""
    kinds = frozenset()
    for name in names:
        kinds = kinds | PARAMETER_MAP_KINDS[name]
    return kinds
