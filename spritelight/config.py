#!/usr/bin/env python3
"""
Configuration management for SpriteLight.

This module provides functions for loading, saving, and accessing configuration
settings, and the presets store holding named parameter sets.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, List

from .core.parameters import ParameterSet
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SPRITELIGHT_CONFIG"

# Default settings
DEFAULT_CONFIG = {
    "output_dir": "",
    "image_format": "png",
    "export_maps": ["normal", "parallax", "specular", "occlusion"],
    "max_workers": 4,
    "watch_debounce_ms": 200,
    "frame_interval_ms": 100,
    "debug_mode": False,
    "presets": {},
}

def get_config_path() -> Path:
    """Get the path to the configuration file."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / ".spritelight_config.json"

def _defaults() -> Dict[str, Any]:
    return json.loads(json.dumps(DEFAULT_CONFIG))

def load_config() -> Dict[str, Any]:
    """
    Load configuration from config file, falling back to defaults.

    Returns:
        Dictionary containing configuration settings.
    """
    config_path = get_config_path()
    if not config_path.exists():
        return _defaults()
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not load config file: {e}")
        return _defaults()
    if not isinstance(config, dict):
        logger.warning(f"Ignoring malformed config file {config_path}")
        return _defaults()
    # Update with any missing default values
    for key, value in _defaults().items():
        if key not in config:
            config[key] = value
    return config

def save_config(config: Dict[str, Any]) -> None:
    """
    Save configuration to config file.

    Args:
        config: Configuration dictionary to save.

    Raises:
        ConfigError: If the file cannot be written
    """
    config_path = get_config_path()
    try:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        raise ConfigError(f"Could not save config file {config_path}: {e}") from e

def get_config_value(key: str, default: Any = None) -> Any:
    """
    Get a value from the config, falling back to a default if not found.

    Args:
        key: Configuration key
        default: Default value to return if key is not found

    Returns:
        The configuration value
    """
    config = load_config()
    return config.get(key, default)

def set_config_value(key: str, value: Any) -> None:
    """
    Set a configuration value and save the config.

    Args:
        key: Configuration key
        value: Value to set
    """
    config = load_config()
    config[key] = value
    save_config(config)

def reset_config() -> None:
    """Reset configuration to default values."""
    save_config(_defaults())

def save_preset(name: str, params: ParameterSet) -> None:
    """Store a parameter set under a preset name, replacing any previous one."""
    config = load_config()
    config["presets"][name] = params.to_record()
    save_config(config)
    logger.info(f"Saved preset '{name}'")

def load_preset(name: str) -> ParameterSet:
    """
    Load a stored preset.

    Raises:
        ConfigError: If no preset has that name
        ProjectRecordError: If the stored record is malformed
    """
    presets = load_config().get("presets", {})
    if name not in presets:
        raise ConfigError(f"Unknown preset: {name}")
    return ParameterSet.from_record(presets[name])

def delete_preset(name: str) -> bool:
    """Remove a preset; returns False when it did not exist."""
    config = load_config()
    if name not in config["presets"]:
        return False
    del config["presets"][name]
    save_config(config)
    return True

def list_presets() -> List[str]:
    """Names of the stored presets, sorted."""
    return sorted(load_config().get("presets", {}))
