"""Tests for the command-line interface."""

import json
import os

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from spritelight.cli.main import app
from spritelight.config import list_presets, load_config, load_preset
from tests.resources import create_pattern_sprite, create_square_sprite, write_sprite

runner = CliRunner()


@pytest.fixture
def sprite_file(sprite_dir):
    return write_sprite(str(sprite_dir / "walk.png"), create_square_sprite((12, 12), margin=3))


class TestMapsCommand:
    """Tests for 'spritelight maps'."""

    def test_writes_maps_next_to_source(self, sprite_file, sprite_dir):
        result = runner.invoke(app, ["maps", sprite_file])
        assert result.exit_code == 0, result.output
        for suffix in ("_n", "_p", "_s", "_o"):
            assert (sprite_dir / f"walk{suffix}.png").exists()

    def test_selected_types_to_output_dir(self, sprite_file, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(app, ["maps", sprite_file, "--types", "normal", "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert sorted(os.listdir(out)) == ["walk_n.png"]

    def test_parameter_override(self, sprite_file, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(app, [
            "maps", sprite_file, "-t", "specular", "-o", str(out),
            "--set", "specular_invert=true", "--set", "specular_thresh=0",
        ])
        assert result.exit_code == 0, result.output
        with Image.open(out / "walk_s.png") as img:
            specular = np.array(img)
        assert specular[6, 6] == 55
        assert specular[0, 0] == 0

    def test_settings_file(self, sprite_file, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text(json.dumps({"specular": {"thresh": 255}}))
        out = tmp_path / "out"
        result = runner.invoke(app, ["maps", sprite_file, "-t", "specular", "-o", str(out), "--settings", str(settings)])
        assert result.exit_code == 0, result.output
        with Image.open(out / "walk_s.png") as img:
            assert np.all(np.array(img) == 0)

    def test_invalid_parameter(self, sprite_file):
        result = runner.invoke(app, ["maps", sprite_file, "--set", "normal_depth=deep"])
        assert result.exit_code == 2

    def test_invalid_assignment(self, sprite_file):
        result = runner.invoke(app, ["maps", sprite_file, "--set", "normal_depth"])
        assert result.exit_code == 2

    def test_unknown_type(self, sprite_file):
        result = runner.invoke(app, ["maps", sprite_file, "--types", "emission"])
        assert result.exit_code == 2

    def test_unknown_preset(self, sprite_file):
        result = runner.invoke(app, ["maps", sprite_file, "--preset", "glass"])
        assert result.exit_code == 2

    def test_animation_frames(self, sprite_dir, tmp_path):
        for i in range(3):
            write_sprite(str(sprite_dir / f"run_{i}.png"), create_square_sprite((8, 8), margin=2))
        out = tmp_path / "out"
        result = runner.invoke(app, [
            "maps", str(sprite_dir / "run_0.png"), "--animation", "-t", "normal", "-o", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert sorted(os.listdir(out)) == ["run_0_n.png", "run_1_n.png", "run_2_n.png"]

    def test_unreadable_file(self, sprite_dir):
        broken = sprite_dir / "broken.png"
        broken.write_bytes(b"not an image")
        result = runner.invoke(app, ["maps", str(broken)])
        assert result.exit_code == 0
        assert not (sprite_dir / "broken_n.png").exists()


class TestBatchCommand:
    """Tests for 'spritelight batch'."""

    def test_batch_directory(self, sprite_dir, tmp_path):
        write_sprite(str(sprite_dir / "a.png"), create_square_sprite((8, 8)))
        write_sprite(str(sprite_dir / "b.png"), create_pattern_sprite((8, 8), "checker"))
        write_sprite(str(sprite_dir / "a_n.png"), create_square_sprite((8, 8)))
        out = tmp_path / "out"

        result = runner.invoke(app, ["batch", str(sprite_dir), "--output", str(out), "--workers", "2"])
        assert result.exit_code == 0, result.output
        assert sorted(os.listdir(out)) == [
            "a_n.png", "a_o.png", "a_p.png", "a_s.png",
            "b_n.png", "b_o.png", "b_p.png", "b_s.png",
        ]

    def test_batch_recursive(self, sprite_dir, tmp_path):
        nested = sprite_dir / "nested"
        nested.mkdir()
        write_sprite(str(nested / "c.png"), create_square_sprite((8, 8)))
        out = tmp_path / "out"
        result = runner.invoke(app, ["batch", str(sprite_dir), "-o", str(out), "-r", "-t", "occlusion"])
        assert result.exit_code == 0, result.output
        assert os.listdir(out) == ["c_o.png"]

    def test_batch_empty_directory(self, sprite_dir):
        result = runner.invoke(app, ["batch", str(sprite_dir)])
        assert result.exit_code == 0


class TestPreviewCommand:
    """Tests for 'spritelight preview'."""

    def test_preview(self, sprite_file, tmp_path):
        output = tmp_path / "lit.png"
        result = runner.invoke(app, ["preview", sprite_file, "-o", str(output), "--light", "6,6,0.5,255,255,255"])
        assert result.exit_code == 0, result.output
        with Image.open(output) as img:
            assert img.size == (12, 12)
            assert img.mode == "RGBA"

    def test_preview_side_by_side_with_zoom(self, sprite_dir, tmp_path):
        a = write_sprite(str(sprite_dir / "a.png"), create_square_sprite((8, 8)))
        b = write_sprite(str(sprite_dir / "b.png"), create_square_sprite((8, 4), margin=1))
        output = tmp_path / "scene.png"
        result = runner.invoke(app, ["preview", a, b, "-o", str(output), "--zoom", "2", "--pixelated", "--toon"])
        assert result.exit_code == 0, result.output
        with Image.open(output) as img:
            assert img.size == (24, 16)

    def test_per_sprite_export_matches_scene(self, sprite_file, tmp_path):
        output = tmp_path / "scene.png"
        per_sprite = tmp_path / "previews"
        result = runner.invoke(app, ["preview", sprite_file, "-o", str(output), "--per-sprite", str(per_sprite)])
        assert result.exit_code == 0, result.output
        with Image.open(output) as scene, Image.open(per_sprite / "walk_v.png") as single:
            np.testing.assert_array_equal(np.array(scene), np.array(single))

    def test_view_modes(self, sprite_file, tmp_path):
        output = tmp_path / "normal.png"
        result = runner.invoke(app, ["preview", sprite_file, "-o", str(output), "--view", "normal"])
        assert result.exit_code == 0, result.output
        with Image.open(output) as img:
            assert tuple(np.array(img)[6, 6, :3]) == (128, 128, 255)

    def test_invalid_view(self, sprite_file, tmp_path):
        result = runner.invoke(app, ["preview", sprite_file, "-o", str(tmp_path / "x.png"), "--view", "xray"])
        assert result.exit_code == 2

    def test_invalid_light(self, sprite_file, tmp_path):
        result = runner.invoke(app, ["preview", sprite_file, "-o", str(tmp_path / "x.png"), "--light", "1"])
        assert result.exit_code == 2
        result = runner.invoke(app, ["preview", sprite_file, "-o", str(tmp_path / "x.png"), "--light", "a,b"])
        assert result.exit_code == 2


class TestSplitCommand:
    """Tests for 'spritelight split'."""

    def test_split(self, sprite_dir, tmp_path):
        sheet = write_sprite(str(sprite_dir / "sheet.png"), create_pattern_sprite((4, 8), "random"))
        out = tmp_path / "frames"
        result = runner.invoke(app, ["split", sheet, "--columns", "4", "--rows", "2", "--output", str(out)])
        assert result.exit_code == 0, result.output
        names = sorted(os.listdir(out))
        assert names == [f"sheet_{i}.png" for i in range(8)]
        with Image.open(out / "sheet_5.png") as img:
            np.testing.assert_array_equal(np.array(img), create_pattern_sprite((4, 8), "random")[2:4, 2:4])

    def test_split_with_maps(self, sprite_dir, tmp_path):
        sheet = write_sprite(str(sprite_dir / "sheet.png"), create_square_sprite((8, 16), margin=1))
        out = tmp_path / "frames"
        result = runner.invoke(app, ["split", sheet, "-c", "2", "--maps", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert (out / "sheet_0.png").exists()
        assert (out / "sheet_1_n.png").exists()
        assert (out / "sheet_1_o.png").exists()

    def test_invalid_grid(self, sprite_dir):
        sheet = write_sprite(str(sprite_dir / "sheet.png"), create_square_sprite((4, 4), margin=1))
        result = runner.invoke(app, ["split", sheet, "--columns", "9"])
        assert result.exit_code == 2


class TestConfigCommands:
    """Tests for 'spritelight config' and 'spritelight presets'."""

    def test_config_set_show_reset(self):
        result = runner.invoke(app, ["config", "set", "max_workers", "7"])
        assert result.exit_code == 0, result.output
        assert load_config()["max_workers"] == 7

        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "max_workers" in result.output

        result = runner.invoke(app, ["config", "reset"])
        assert result.exit_code == 0
        assert load_config()["max_workers"] == 4

    def test_config_set_typed_values(self):
        runner.invoke(app, ["config", "set", "debug_mode", "false"])
        runner.invoke(app, ["config", "set", "output_dir", "maps"])
        config = load_config()
        assert config["debug_mode"] is False
        assert config["output_dir"] == "maps"

    def test_config_set_presets_refused(self):
        result = runner.invoke(app, ["config", "set", "presets", "{}"])
        assert result.exit_code == 2

    def test_presets_lifecycle(self, sprite_file, tmp_path):
        result = runner.invoke(app, ["presets", "save", "stone", "--set", "specular_thresh=255"])
        assert result.exit_code == 0, result.output
        assert list_presets() == ["stone"]
        assert load_preset("stone").specular_thresh == 255

        result = runner.invoke(app, ["presets", "save", "rough", "--from", "stone", "--set", "normal_depth=300"])
        assert result.exit_code == 0, result.output
        rough = load_preset("rough")
        assert (rough.specular_thresh, rough.normal_depth) == (255, 300)

        result = runner.invoke(app, ["presets", "list"])
        assert "stone" in result.output and "rough" in result.output
        result = runner.invoke(app, ["presets", "show", "stone"])
        assert result.exit_code == 0

        out = tmp_path / "out"
        result = runner.invoke(app, ["maps", sprite_file, "-p", "stone", "-t", "specular", "-o", str(out)])
        assert result.exit_code == 0, result.output
        with Image.open(out / "walk_s.png") as img:
            assert np.all(np.array(img) == 0)

        result = runner.invoke(app, ["presets", "delete", "stone"])
        assert result.exit_code == 0
        result = runner.invoke(app, ["presets", "delete", "stone"])
        assert result.exit_code == 1
        result = runner.invoke(app, ["presets", "show", "stone"])
        assert result.exit_code == 1


def test_verbose_flag(sprite_file):
    result = runner.invoke(app, ["-V", "maps", sprite_file, "-t", "normal"])
    assert result.exit_code == 0, result.output
