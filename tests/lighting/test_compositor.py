"""Tests for the preview compositor."""

import os

import numpy as np
import pytest
from PIL import Image

from spritelight.image.core.image_utils import FLAT_NORMAL
from spritelight.lighting.compositor import (
    DEFAULT_BACKGROUND,
    PreviewCompositor,
    RenderSettings,
    RenderSnapshot,
    SpriteInstance,
    ViewMode,
)
from spritelight.lighting.light import LightSource
from spritelight.processor import SpriteProcessor
from tests.resources import create_sample_sprite, create_square_sprite


def make_processor(pixels, name="sprite", path="sprite.png"):
    processor = SpriteProcessor(name)
    processor.load_image(path, pixels)
    return processor


@pytest.fixture
def compositor():
    return PreviewCompositor()


@pytest.fixture
def white_sprite():
    return make_processor(create_sample_sprite((8, 8), (255, 255, 255)))


class TestSnapshot:
    """Tests for RenderSnapshot."""

    def test_scene_size_bounds_instances(self, white_sprite):
        other = make_processor(create_sample_sprite((4, 12)), "wide", "wide.png")
        snapshot = RenderSnapshot([SpriteInstance(white_sprite, 0, 0), SpriteInstance(other, 8, 2)])
        assert snapshot.scene_size() == (20, 8)

    def test_empty_scene_is_one_pixel(self):
        assert RenderSnapshot().scene_size() == (1, 1)

    def test_settings_clamped(self):
        settings = RenderSettings(blend=150, toon_bands=0, ambient_intensity=-1)
        assert settings.blend == 100
        assert settings.toon_bands == 1
        assert settings.ambient_intensity == 0.0


class TestRender:
    """Tests for PreviewCompositor.render."""

    def test_texture_view_reproduces_sprite(self, compositor):
        pixels = create_sample_sprite((6, 6), (200, 40, 90))
        snapshot = RenderSnapshot([SpriteInstance(make_processor(pixels))])
        image = compositor.render(snapshot, ViewMode.TEXTURE)
        assert image.shape == (6, 6, 4)
        assert image.dtype == np.uint8
        assert np.all(image[..., :3] == (200, 40, 90))
        assert np.all(image[..., 3] == 255)

    def test_background_outside_sprites(self, compositor, white_sprite):
        snapshot = RenderSnapshot([SpriteInstance(white_sprite, 2, 2)])
        image = compositor.render(snapshot, ViewMode.TEXTURE, size=(12, 12))
        assert tuple(image[0, 0, :3]) == DEFAULT_BACKGROUND
        assert tuple(image[11, 11, :3]) == DEFAULT_BACKGROUND
        assert tuple(image[5, 5, :3]) == (255, 255, 255)

    def test_transparent_pixels_show_background(self, compositor):
        square = make_processor(create_square_sprite((8, 8), margin=2))
        image = compositor.render(RenderSnapshot([SpriteInstance(square)]), ViewMode.TEXTURE)
        assert tuple(image[0, 0, :3]) == DEFAULT_BACKGROUND
        assert tuple(image[4, 4, :3]) == (200, 200, 200)

    def test_normal_view(self, compositor, white_sprite):
        image = compositor.render(RenderSnapshot([SpriteInstance(white_sprite)]), ViewMode.NORMAL_MAP)
        assert np.all(image[..., :3] == FLAT_NORMAL)

    def test_single_channel_views_are_grey(self, compositor, white_sprite):
        image = compositor.render(RenderSnapshot([SpriteInstance(white_sprite)]), ViewMode.SPECULAR_MAP)
        assert np.all(image[..., 0] == image[..., 1])
        assert np.all(image[..., :3] == 255)

    def test_no_light_no_ambient_is_black(self, compositor, white_sprite):
        settings = RenderSettings(ambient_intensity=0.0)
        snapshot = RenderSnapshot([SpriteInstance(white_sprite)], [], settings)
        image = compositor.render(snapshot, ViewMode.PREVIEW)
        assert np.all(image[..., :3] == 0)

    def test_blend_zero_shows_texture(self, compositor, white_sprite):
        settings = RenderSettings(ambient_intensity=0.0, blend=0)
        snapshot = RenderSnapshot([SpriteInstance(white_sprite)], [], settings)
        image = compositor.render(snapshot, ViewMode.PREVIEW)
        assert np.all(image[..., :3] == 255)

    def test_light_brightens(self, compositor, white_sprite):
        settings = RenderSettings(ambient_intensity=0.2)
        dark = compositor.render(RenderSnapshot([SpriteInstance(white_sprite)], [], settings))
        light = LightSource(position=(4, 4, 0.5), diffuse_color=(255, 255, 255), diffuse_intensity=0.5)
        lit = compositor.render(RenderSnapshot([SpriteInstance(white_sprite)], [light], settings))
        assert int(lit[4, 4, 0]) > int(dark[4, 4, 0])

    def test_light_colour(self, compositor, white_sprite):
        settings = RenderSettings(ambient_intensity=0.0)
        light = LightSource(position=(4, 4, 1.0), diffuse_color=(255, 0, 0), specular_intensity=0.0)
        image = compositor.render(RenderSnapshot([SpriteInstance(white_sprite)], [light], settings))
        assert image[4, 4, 0] > 0
        assert image[4, 4, 1] == 0
        assert image[4, 4, 2] == 0

    def test_toon_posterizes_light(self, compositor, white_sprite):
        settings = RenderSettings(ambient_intensity=0.3, toon=True, toon_bands=4)
        image = compositor.render(RenderSnapshot([SpriteInstance(white_sprite)], [], settings))
        assert np.all(image[..., :3] == 64)

    def test_zoom(self, compositor, white_sprite):
        snapshot = RenderSnapshot([SpriteInstance(white_sprite)], settings=RenderSettings(pixelated=True))
        image = compositor.render(snapshot, ViewMode.TEXTURE, zoom=2.0)
        assert image.shape == (16, 16, 4)

    def test_tiled_axis_repeats(self, compositor):
        processor = make_processor(create_sample_sprite((4, 4), (10, 200, 10)))
        processor.set_parameter("tile_x", True)
        image = compositor.render(RenderSnapshot([SpriteInstance(processor)]), ViewMode.TEXTURE, size=(12, 8))
        assert tuple(image[1, 10, :3]) == (10, 200, 10)
        assert tuple(image[6, 1, :3]) == DEFAULT_BACKGROUND

    def test_parallax_without_height_changes_nothing(self, compositor):
        processor = make_processor(create_square_sprite((8, 8), margin=2))
        settings = RenderSettings(parallax_height=0)
        plain = compositor.render(RenderSnapshot([SpriteInstance(processor)], [], settings))
        processor.set_parameter("is_parallax", True)
        shifted = compositor.render(RenderSnapshot([SpriteInstance(processor)], [], settings))
        np.testing.assert_array_equal(plain, shifted)

    def test_render_is_deterministic(self, compositor):
        processor = make_processor(create_square_sprite((12, 12), margin=3))
        lights = [LightSource(position=(2, 2, 0.3)), LightSource(position=(10, 6, 0.6))]
        snapshot = RenderSnapshot([SpriteInstance(processor)], lights)
        np.testing.assert_array_equal(compositor.render(snapshot), compositor.render(snapshot))


class TestRenderToBuffer:
    """Tests for offscreen rendering and export."""

    def test_export_matches_preview(self, compositor, tmp_path):
        processor = make_processor(create_square_sprite((10, 10), margin=2), "rock", str(tmp_path / "rock.png"))
        lights = [LightSource(position=(3, 3, 0.4), diffuse_color=(255, 220, 180))]
        snapshot = RenderSnapshot([SpriteInstance(processor)], lights)

        preview = compositor.render(snapshot)
        out_dir = tmp_path / "previews"
        scene = compositor.render_to_buffer(snapshot, output_dir=str(out_dir))

        np.testing.assert_array_equal(scene, preview)
        with Image.open(out_dir / "rock_v.png") as img:
            np.testing.assert_array_equal(np.array(img), preview)

    def test_exports_do_not_overwrite(self, compositor, tmp_path):
        processor = make_processor(create_sample_sprite((4, 4)), "rock", str(tmp_path / "rock.png"))
        snapshot = RenderSnapshot([SpriteInstance(processor)])
        compositor.render_to_buffer(snapshot, output_dir=str(tmp_path))
        compositor.render_to_buffer(snapshot, output_dir=str(tmp_path))
        assert os.path.exists(tmp_path / "rock_v.png")
        assert os.path.exists(tmp_path / "rock(2)_v.png")

    def test_without_output_dir(self, compositor, white_sprite):
        image = compositor.render_to_buffer(RenderSnapshot([SpriteInstance(white_sprite)]))
        assert image.shape == (8, 8, 4)
