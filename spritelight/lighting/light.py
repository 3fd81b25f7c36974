"""
Point light sources of the preview scene.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Tuple

from ..core.parameters import LIGHT_SCALE
from ..exceptions import ProjectRecordError

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

DEFAULT_LIGHT_COLOR: Color = (0, 255, 179)


def _clamp_color(color) -> Color:
    r, g, b = (int(round(float(c))) for c in color)
    return (min(max(r, 0), 255), min(max(g, 0), 255), min(max(b, 0), 255))


@dataclass
class LightSource:
    """
    A point light over the sprite plane.

    Attributes:
        position: (x, y, z); x and y in scene pixels (y down), z is the height
            above the texture plane as a fraction of the scene's larger side
        diffuse_color: RGB 0-255
        specular_color: RGB 0-255
        diffuse_intensity: Diffuse multiplier
        specular_intensity: Specular multiplier
        specular_scatter: Phong exponent; larger is a tighter highlight
    """
    position: Tuple[float, float, float] = (0.0, 0.0, 0.5)
    diffuse_color: Color = DEFAULT_LIGHT_COLOR
    specular_color: Color = DEFAULT_LIGHT_COLOR
    diffuse_intensity: float = 0.8
    specular_intensity: float = 0.3
    specular_scatter: float = 32.0

    def __post_init__(self):
        x, y, z = self.position
        self.position = (float(x), float(y), float(z))
        self.diffuse_color = _clamp_color(self.diffuse_color)
        self.specular_color = _clamp_color(self.specular_color)
        self.diffuse_intensity = max(0.0, float(self.diffuse_intensity))
        self.specular_intensity = max(0.0, float(self.specular_intensity))
        self.specular_scatter = max(1.0, float(self.specular_scatter))

    @property
    def height(self) -> float:
        return self.position[2]

    @height.setter
    def height(self, value: float) -> None:
        self.position = (self.position[0], self.position[1], float(value))

    def move_to(self, x: float, y: float) -> None:
        """Move the light in the scene plane keeping its height."""
        self.position = (float(x), float(y), self.position[2])

    def set_height_slider(self, slider: int) -> None:
        self.height = int(slider) * LIGHT_SCALE

    def set_diffuse_slider(self, slider: int) -> None:
        self.diffuse_intensity = max(0.0, int(slider) * LIGHT_SCALE)

    def set_specular_slider(self, slider: int) -> None:
        self.specular_intensity = max(0.0, int(slider) * LIGHT_SCALE)

    def copy(self) -> "LightSource":
        return replace(self)

    def to_record(self) -> Dict[str, Any]:
        """Record form stored in project files."""
        x, y, z = self.position
        dr, dg, db = self.diffuse_color
        sr, sg, sb = self.specular_color
        return {
            "position": {"x": x, "y": y, "z": z},
            "diffuse color": {"r": dr, "g": dg, "b": db},
            "specular color": {"r": sr, "g": sg, "b": sb},
            "diffuse intensity": self.diffuse_intensity,
            "specular intensity": self.specular_intensity,
            "specular scatter": self.specular_scatter,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "LightSource":
        """
        Rebuild a light from its record; missing keys keep their defaults.

        Raises:
            ProjectRecordError: If the record is malformed
        """
        if not isinstance(record, dict):
            raise ProjectRecordError(f"Light record must be a mapping, got {type(record).__name__}")
        defaults = cls()
        try:
            pos = record.get("position", {})
            position = (
                pos.get("x", defaults.position[0]),
                pos.get("y", defaults.position[1]),
                pos.get("z", defaults.position[2]),
            )
            diffuse = record.get("diffuse color", {})
            specular = record.get("specular color", {})
            return cls(
                position=position,
                diffuse_color=tuple(diffuse.get(c, d) for c, d in zip("rgb", defaults.diffuse_color)),
                specular_color=tuple(specular.get(c, d) for c, d in zip("rgb", defaults.specular_color)),
                diffuse_intensity=record.get("diffuse intensity", defaults.diffuse_intensity),
                specular_intensity=record.get("specular intensity", defaults.specular_intensity),
                specular_scatter=record.get("specular scatter", defaults.specular_scatter),
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise ProjectRecordError(f"Invalid light record: {e}") from e
