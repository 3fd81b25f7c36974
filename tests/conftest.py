"""
Pytest fixtures shared across test modules.
"""
import os

import pytest

from tests.resources import create_sample_sprite, create_square_sprite


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the configuration file at a temporary location for every test."""
    config_path = tmp_path / "spritelight_config.json"
    monkeypatch.setenv("SPRITELIGHT_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def flat_sprite():
    """Uniform opaque grey sprite."""
    return create_sample_sprite((16, 16), (128, 128, 128))


@pytest.fixture
def square_sprite():
    """Opaque square on a transparent background."""
    return create_square_sprite((16, 16), margin=4)


@pytest.fixture
def sprite_dir(tmp_path):
    """Temporary directory for image files."""
    path = tmp_path / "sprites"
    os.makedirs(path)
    return path
