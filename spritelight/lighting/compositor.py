"""
Preview compositor.

Combines the current frame of each sprite in a scene with its generated maps
and the active light list into one shaded image. The same render path serves
the on-screen preview and file export, so an export is pixel-identical to the
preview at zoom 1.

Shading model (per pixel, colours in [0, 1]):

    lit = tex * (ambient * occlusion + sum(diffuse_i)) + sum(specular_i)
    diffuse_i  = colour_i * intensity_i * max(0, n . L_i)
    specular_i = colour_i * intensity_i * spec * max(0, R_i . V) ** scatter_i

with V = (0, 0, 1) and R_i the reflection of L_i about n.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..core.parameters import MapKind
from ..image.io import save_image
from ..utils.files import EXPORT_SUFFIXES, collision_free_path
from .light import Color, LightSource

if TYPE_CHECKING:
    from ..processor import SpriteProcessor

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND: Color = (51, 51, 76)
DEFAULT_AMBIENT: Color = (255, 255, 255)


class ViewMode(IntEnum):
    """What the preview shows; values are persisted as 'viewmode'."""
    TEXTURE = 0
    NORMAL_MAP = 1
    SPECULAR_MAP = 2
    PARALLAX_MAP = 3
    OCCLUSION_MAP = 4
    PREVIEW = 5


_VIEW_MAP_KINDS = {
    ViewMode.NORMAL_MAP: MapKind.NORMAL,
    ViewMode.SPECULAR_MAP: MapKind.SPECULAR,
    ViewMode.PARALLAX_MAP: MapKind.PARALLAX,
    ViewMode.OCCLUSION_MAP: MapKind.OCCLUSION,
}


@dataclass
class RenderSettings:
    """Scene-wide shading options."""
    ambient_color: Color = DEFAULT_AMBIENT
    ambient_intensity: float = 0.5
    background_color: Color = DEFAULT_BACKGROUND
    blend: int = 100
    pixelated: bool = False
    toon: bool = False
    toon_bands: int = 4
    parallax_height: int = 10
    use_sample_lights: bool = True

    def __post_init__(self):
        self.blend = min(max(int(self.blend), 0), 100)
        self.toon_bands = max(1, int(self.toon_bands))
        self.ambient_intensity = max(0.0, float(self.ambient_intensity))


@dataclass
class SpriteInstance:
    """A processor placed in the scene with its top-left corner at (x, y)."""
    processor: "SpriteProcessor"
    x: int = 0
    y: int = 0


@dataclass
class RenderSnapshot:
    """Everything one render call needs: sprites, active lights and settings."""
    instances: List[SpriteInstance] = field(default_factory=list)
    lights: List[LightSource] = field(default_factory=list)
    settings: RenderSettings = field(default_factory=RenderSettings)

    def scene_size(self) -> Tuple[int, int]:
        """(width, height) bounding all instances, at least 1x1."""
        width, height = 1, 1
        for instance in self.instances:
            shape = instance.processor.shape
            if shape is None:
                continue
            height = max(height, int(instance.y) + shape[0])
            width = max(width, int(instance.x) + shape[1])
        return width, height


class PreviewCompositor:
    """Renders RenderSnapshots to RGBA images."""

    def render(
        self,
        snapshot: RenderSnapshot,
        view_mode: ViewMode = ViewMode.PREVIEW,
        zoom: float = 1.0,
        size: Optional[Tuple[int, int]] = None,
    ) -> np.ndarray:
        """
        Compose the scene.

        Args:
            snapshot: Sprites, lights and settings to render
            view_mode: Which image of each sprite to show
            zoom: Scale applied after composition at native resolution
            size: (width, height) of the scene; bounds all sprites when None

        Returns:
            (H, W, 4) uint8 opaque RGBA image
        """
        view_mode = ViewMode(view_mode)
        settings = snapshot.settings
        width, height = size if size is not None else snapshot.scene_size()
        width, height = max(1, int(width)), max(1, int(height))

        canvas = np.empty((height, width, 3), dtype=np.float32)
        canvas[...] = np.asarray(settings.background_color, dtype=np.float32) / 255.0

        for instance in snapshot.instances:
            if instance.processor.frame_count == 0:
                continue
            layer, alpha = self._render_instance(instance, snapshot, view_mode, (width, height))
            # layer is premultiplied
            canvas = layer + canvas * (1.0 - alpha[..., None])

        rgb = np.clip(np.rint(canvas * 255.0), 0, 255).astype(np.uint8)
        image = np.dstack([rgb, np.full((height, width), 255, dtype=np.uint8)])

        if zoom != 1.0:
            interpolation = cv2.INTER_NEAREST if settings.pixelated else cv2.INTER_LINEAR
            out_size = (max(1, int(round(width * zoom))), max(1, int(round(height * zoom))))
            image = cv2.resize(image, out_size, interpolation=interpolation)
        return image

    def render_to_buffer(
        self,
        snapshot: RenderSnapshot,
        view_mode: ViewMode = ViewMode.PREVIEW,
        zoom: float = 1.0,
        output_dir: Optional[str] = None,
    ) -> np.ndarray:
        """
        Render the scene offscreen and optionally save one preview per sprite.

        Each sprite is rendered alone at its native size and written to
        output_dir as "<stem>_v.png" without overwriting existing files.

        Returns:
            The scene render
        """
        image = self.render(snapshot, view_mode, zoom)
        if output_dir is None:
            return image

        for instance in snapshot.instances:
            processor = instance.processor
            if processor.frame_count == 0:
                continue
            single = RenderSnapshot([SpriteInstance(processor, 0, 0)], snapshot.lights, snapshot.settings)
            preview = self.render(single, view_mode, zoom)
            stem = os.path.splitext(os.path.basename(processor.current_frame.file_name))[0]
            path = collision_free_path(output_dir, stem, EXPORT_SUFFIXES["preview"], ".png")
            save_image(preview, path)
            logger.info(f"Exported preview of '{processor.name}' to {path}")
        return image

    # ------------------------------------------------------------------

    def _render_instance(
        self,
        instance: SpriteInstance,
        snapshot: RenderSnapshot,
        view_mode: ViewMode,
        scene: Tuple[int, int],
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Premultiplied RGB and alpha of one sprite over the whole scene."""
        processor = instance.processor
        settings = snapshot.settings
        params = processor.get_settings()
        width, height = scene
        frame_h, frame_w = processor.shape
        interpolation = cv2.INTER_NEAREST if settings.pixelated else cv2.INTER_LINEAR

        sy, sx = np.mgrid[0:height, 0:width].astype(np.float32)
        map_x = sx - float(instance.x)
        map_y = sy - float(instance.y)

        if view_mode == ViewMode.PREVIEW and params.is_parallax:
            depth = self._sample(processor.get_parallax(), map_x, map_y, params, (frame_w, frame_h), interpolation)
            depth = depth.astype(np.float32) / 255.0
            strength = depth * float(settings.parallax_height) / 1000.0
            map_x = map_x + (sx - width / 2.0) * strength
            map_y = map_y + (sy - height / 2.0) * strength

        def sample(image):
            return self._sample(image, map_x, map_y, params, (frame_w, frame_h), interpolation)

        texture = sample(processor.get_texture()).astype(np.float32) / 255.0
        alpha = texture[..., 3]
        tex_rgb = texture[..., :3]

        if view_mode == ViewMode.TEXTURE:
            return tex_rgb, alpha

        if view_mode in _VIEW_MAP_KINDS:
            data = sample(processor.get_map(_VIEW_MAP_KINDS[view_mode])).astype(np.float32) / 255.0
            if data.ndim == 2:
                data = np.repeat(data[..., None], 3, axis=2)
            return data * alpha[..., None], alpha

        normal = sample(processor.get_normal()).astype(np.float32)
        specular = sample(processor.get_specular()).astype(np.float32) / 255.0
        occlusion = sample(processor.get_occlusion()).astype(np.float32) / 255.0
        lit = self._shade(tex_rgb, alpha, normal, specular, occlusion, sx, sy, snapshot.lights, settings, scene)

        blend = settings.blend / 100.0
        return tex_rgb + (lit - tex_rgb) * blend, alpha

    @staticmethod
    def _sample(image, map_x, map_y, params, frame_size, interpolation) -> np.ndarray:
        """Sample a frame-sized image at scene coordinates, wrapping tiled axes."""
        frame_w, frame_h = frame_size
        if params.tile_x:
            map_x = np.mod(map_x, frame_w)
        if params.tile_y:
            map_y = np.mod(map_y, frame_h)
        src = np.array(image, copy=True)
        sampled = cv2.remap(
            src,
            map_x.astype(np.float32),
            map_y.astype(np.float32),
            interpolation,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=0,
        )
        return sampled

    @staticmethod
    def _shade(
        tex_rgb: np.ndarray,
        alpha: np.ndarray,
        normal: np.ndarray,
        specular: np.ndarray,
        occlusion: np.ndarray,
        sx: np.ndarray,
        sy: np.ndarray,
        lights: Sequence[LightSource],
        settings: RenderSettings,
        scene: Tuple[int, int],
    ) -> np.ndarray:
        """Lit premultiplied colour of every pixel."""
        nx = (normal[..., 0] - 128.0) / 127.0
        ny = -(normal[..., 1] - 128.0) / 127.0
        nz = (normal[..., 2] - 128.0) / 127.0
        length = np.sqrt(nx * nx + ny * ny + nz * nz)
        length[length == 0] = 1.0
        nx, ny, nz = nx / length, ny / length, nz / length

        scale = float(max(scene))
        ambient = np.asarray(settings.ambient_color, dtype=np.float32) / 255.0 * settings.ambient_intensity
        light = ambient[None, None, :] * occlusion[..., None]
        highlight = np.zeros_like(tex_rgb)

        for source in lights:
            lx, ly, lz = source.position
            dx = (lx - sx) / scale
            dy = (ly - sy) / scale
            dz = np.full_like(dx, lz)
            dist = np.sqrt(dx * dx + dy * dy + dz * dz)
            dist[dist == 0] = 1.0
            dx, dy, dz = dx / dist, dy / dist, dz / dist

            n_dot_l = nx * dx + ny * dy + nz * dz
            lambert = np.maximum(n_dot_l, 0.0)
            diffuse_color = np.asarray(source.diffuse_color, dtype=np.float32) / 255.0
            light = light + diffuse_color * source.diffuse_intensity * lambert[..., None]

            reflect_z = 2.0 * n_dot_l * nz - dz
            phong = np.where(n_dot_l > 0, np.maximum(reflect_z, 0.0), 0.0) ** source.specular_scatter
            specular_color = np.asarray(source.specular_color, dtype=np.float32) / 255.0
            highlight = highlight + specular_color * source.specular_intensity * (specular * phong)[..., None]

        if settings.toon:
            bands = float(settings.toon_bands)
            light = np.round(light * bands) / bands

        return tex_rgb * light + highlight * alpha[..., None]
