"""Tests for configuration and preset storage."""

import json

import pytest

from spritelight.config import (
    DEFAULT_CONFIG,
    delete_preset,
    get_config_path,
    get_config_value,
    list_presets,
    load_config,
    load_preset,
    reset_config,
    save_config,
    save_preset,
    set_config_value,
)
from spritelight.core.parameters import ParameterSet
from spritelight.exceptions import ConfigError, ProjectRecordError


class TestConfig:
    """Tests for the configuration file."""

    def test_path_from_environment(self, isolated_config):
        assert get_config_path() == isolated_config

    def test_defaults_without_file(self, isolated_config):
        assert load_config() == DEFAULT_CONFIG
        assert not isolated_config.exists()

    def test_set_and_get(self, isolated_config):
        set_config_value("max_workers", 8)
        assert get_config_value("max_workers") == 8
        assert json.loads(isolated_config.read_text())["max_workers"] == 8
        assert get_config_value("missing", "fallback") == "fallback"

    def test_missing_keys_filled_from_defaults(self, isolated_config):
        isolated_config.write_text(json.dumps({"image_format": "tga"}))
        config = load_config()
        assert config["image_format"] == "tga"
        assert config["max_workers"] == DEFAULT_CONFIG["max_workers"]

    def test_malformed_file_falls_back(self, isolated_config):
        isolated_config.write_text("{not json")
        assert load_config() == DEFAULT_CONFIG
        isolated_config.write_text("[1, 2]")
        assert load_config() == DEFAULT_CONFIG

    def test_reset(self, isolated_config):
        set_config_value("image_format", "bmp")
        reset_config()
        assert load_config() == DEFAULT_CONFIG

    def test_defaults_not_shared(self):
        config = load_config()
        config["presets"]["x"] = {}
        assert DEFAULT_CONFIG["presets"] == {}

    def test_save_failure(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SPRITELIGHT_CONFIG", str(tmp_path))
        with pytest.raises(ConfigError):
            save_config({"max_workers": 1})


class TestPresets:
    """Tests for named parameter presets."""

    def test_save_and_load(self):
        params = ParameterSet(normal_bevel_distance=5, specular_invert=True)
        save_preset("stone", params)
        assert load_preset("stone") == params
        assert list_presets() == ["stone"]

    def test_list_sorted(self):
        save_preset("wood", ParameterSet())
        save_preset("metal", ParameterSet())
        assert list_presets() == ["metal", "wood"]

    def test_unknown_preset(self):
        with pytest.raises(ConfigError):
            load_preset("glass")

    def test_malformed_preset(self):
        set_config_value("presets", {"bad": {"normal": {"depth": "deep"}}})
        with pytest.raises(ProjectRecordError):
            load_preset("bad")

    def test_delete(self):
        save_preset("stone", ParameterSet())
        assert delete_preset("stone") is True
        assert delete_preset("stone") is False
        assert list_presets() == []
