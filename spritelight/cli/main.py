#!/usr/bin/env python3
"""SpriteLight Command-Line Interface"""
import sys

import typer

from ..config import get_config_value
from .apps.config_app import create_config_app, create_presets_app
from .apps.maps_app import batch_command, maps_command
from .apps.preview_app import preview_command, split_command
from .core.options import setup_logging
from .core.ui import console

# Create main app
app = typer.Typer(
    help="SpriteLight - Generate lighting maps for 2D sprites and preview them under dynamic lights",
    add_completion=False
)

app.command(name="maps", help="Generate normal, parallax, specular and occlusion maps")(maps_command)
app.command(name="batch", help="Generate maps for a directory of sprites")(batch_command)
app.command(name="preview", help="Render a lit preview")(preview_command)
app.command(name="split", help="Split a sprite sheet into frames")(split_command)

app.add_typer(create_config_app(), name="config", help="Configuration management")
app.add_typer(create_presets_app(), name="presets", help="Parameter presets")

@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
):
    """
    SpriteLight Command-Line Tools

    Generate normal, parallax, specular and ambient occlusion maps from sprite
    images, split sprite sheets and render lit previews.
    """
    setup_logging(verbose or bool(get_config_value("debug_mode", False)))

def main():
    """Run the SpriteLight CLI application."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[warning]Operation cancelled by user[/warning]")
        sys.exit(1)

if __name__ == "__main__":
    sys.exit(main())
