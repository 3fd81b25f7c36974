#!/usr/bin/env python3
"""
Configuration and presets apps for the SpriteLight CLI.
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.panel import Panel

from ...config import (
    delete_preset,
    list_presets,
    load_config,
    load_preset,
    reset_config,
    save_preset,
    set_config_value,
)
from ...exceptions import ConfigError, ProjectRecordError
from ..core.options import build_parameters
from ..core.ui import console, print_error, print_rich_table, print_success

def create_config_app():
    """Create the configuration app with all commands."""
    config_app = typer.Typer(help="Manage SpriteLight configuration")

    config_app.command(name="show")(config_show)
    config_app.command(name="set")(config_set)
    config_app.command(name="reset")(config_reset)

    return config_app

def config_show():
    """Display current configuration settings."""
    config = load_config()

    console.print(Panel.fit("[bold]SpriteLight Configuration[/bold]"))
    for key, value in sorted(config.items()):
        if key == "presets":
            value = ", ".join(sorted(value)) or "(none)"
        console.print(f"[key]{key}[/key]: [value]{value}[/value]")

def _typed_value(value: str):
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value

def config_set(
    key: str = typer.Argument(..., help="Configuration key"),
    value: str = typer.Argument(..., help="Configuration value")
):
    """Set a configuration value."""
    if key == "presets":
        print_error("Use the presets commands to edit presets")
        raise typer.Exit(2)
    typed_value = _typed_value(value)
    try:
        set_config_value(key, typed_value)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success(f"Configuration updated: {key} = {typed_value}")

def config_reset():
    """Reset configuration to default values."""
    try:
        reset_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success("Configuration reset to default values")

def create_presets_app():
    """Create the presets app."""
    presets_app = typer.Typer(help="Manage stored parameter presets")

    presets_app.command(name="list")(presets_list)
    presets_app.command(name="save")(presets_save)
    presets_app.command(name="show")(presets_show)
    presets_app.command(name="delete")(presets_delete)

    return presets_app

def presets_list():
    """List stored presets."""
    names = list_presets()
    if not names:
        console.print("No presets stored")
        return
    for name in names:
        console.print(f"- {name}")

def presets_save(
    name: str = typer.Argument(..., help="Preset name"),
    base: Optional[str] = typer.Option(None, "--from", help="Existing preset to start from"),
    settings: Optional[Path] = typer.Option(None, "--settings", help="JSON settings record", exists=True),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Parameter override name=value"),
):
    """Store a parameter set as a preset."""
    params = build_parameters(base, settings, assignments)
    try:
        save_preset(name, params)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success(f"Preset '{name}' saved")

def presets_show(name: str = typer.Argument(..., help="Preset name")):
    """Show the values of a preset."""
    try:
        params = load_preset(name)
    except (ConfigError, ProjectRecordError) as e:
        print_error(str(e))
        raise typer.Exit(1)
    rows = [
        {"Group": group, "Parameter": key, "Value": value}
        for group, values in params.to_record().items()
        for key, value in values.items()
    ]
    print_rich_table(rows, f"Preset {name}", [("Group", "header"), ("Parameter", "key"), ("Value", "value")])

def presets_delete(name: str = typer.Argument(..., help="Preset name")):
    """Delete a preset."""
    try:
        deleted = delete_preset(name)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1)
    if not deleted:
        print_error(f"Unknown preset: {name}")
        raise typer.Exit(1)
    print_success(f"Preset '{name}' deleted")
