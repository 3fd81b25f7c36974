#!/usr/bin/env python3
"""
Preview rendering and frame splitting commands for the SpriteLight CLI.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import typer

from ...core.parameters import LIGHT_SCALE
from ...exceptions import FrameError
from ...image.exporters import export_processor_maps
from ...image.io import load_image_file, save_image
from ...lighting.compositor import ViewMode
from ...processor import SpriteProcessor
from ...workspace import Workspace
from ..core.options import build_parameters, parse_light, parse_map_kinds
from ..core.ui import display_written_files, print_error, print_success, print_warning

logger = logging.getLogger(__name__)

VIEW_MODES = {
    "texture": ViewMode.TEXTURE,
    "normal": ViewMode.NORMAL_MAP,
    "specular": ViewMode.SPECULAR_MAP,
    "parallax": ViewMode.PARALLAX_MAP,
    "occlusion": ViewMode.OCCLUSION_MAP,
    "preview": ViewMode.PREVIEW,
}

def preview_command(
    files: List[Path] = typer.Argument(..., help="Sprite images", exists=True, dir_okay=False),
    output: Path = typer.Option(Path("preview.png"), "--output", "-o", help="Output image of the whole scene"),
    per_sprite_dir: Optional[Path] = typer.Option(None, "--per-sprite", help="Also save <name>_v.png per sprite here"),
    view: str = typer.Option("preview", "--view", "-v", help="texture, normal, specular, parallax, occlusion or preview"),
    zoom: float = typer.Option(1.0, "--zoom", "-z", help="Zoom applied after composition"),
    lights: Optional[List[str]] = typer.Option(None, "--light", "-l", help="Light as x,y[,z[,r,g,b]]; repeatable"),
    ambient: int = typer.Option(50, "--ambient", help="Ambient light level 0-100"),
    blend: int = typer.Option(100, "--blend", help="Blend between unlit (0) and lit (100)"),
    toon: bool = typer.Option(False, "--toon", help="Posterize the lighting"),
    pixelated: bool = typer.Option(False, "--pixelated", help="Nearest-neighbour sampling"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Stored preset to start from"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Parameter override name=value"),
):
    """Render a lit preview of sprites side by side."""
    if view.lower() not in VIEW_MODES:
        print_error(f"Unknown view '{view}'. Available: {', '.join(VIEW_MODES)}")
        raise typer.Exit(2)
    params = build_parameters(preset, None, assignments)

    workspace = Workspace()
    processors = workspace.open_files([str(f) for f in files], as_animation=False)
    if not processors:
        print_warning("No sprite could be loaded")
        return
    workspace.apply_preset(params, processors)
    workspace.select(processors)
    workspace.view_mode = VIEW_MODES[view.lower()]
    workspace.settings.ambient_intensity = max(0, ambient) * LIGHT_SCALE
    workspace.settings.blend = min(max(blend, 0), 100)
    workspace.settings.toon = toon
    workspace.settings.pixelated = pixelated

    if lights:
        workspace.sample_processor.light_list = [parse_light(text) for text in lights]
    else:
        width, height = workspace.snapshot().scene_size()
        workspace.sample_lights[0].move_to(width / 2.0, height / 2.0)

    image = workspace.compositor.render_to_buffer(
        workspace.snapshot(),
        workspace.view_mode,
        zoom,
        str(per_sprite_dir) if per_sprite_dir else None,
    )
    save_image(image, str(output))
    print_success(f"Preview saved to {output}")

def split_command(
    file: Path = typer.Argument(..., help="Sprite sheet image", exists=True, dir_okay=False),
    columns: int = typer.Option(..., "--columns", "-c", help="Number of horizontal frames"),
    rows: int = typer.Option(1, "--rows", "-r", help="Number of vertical frames"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default: next to the sheet)"),
    maps: bool = typer.Option(False, "--maps", help="Also generate the maps of every frame"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Stored preset to start from"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Parameter override name=value"),
):
    """Split a sprite sheet into numbered frames."""
    params = build_parameters(preset, None, assignments)
    try:
        sheet = SpriteProcessor(file.stem, params)
        sheet.load_image(str(file), load_image_file(str(file)))
    except FrameError as e:
        print_error(str(e))
        raise typer.Exit(1)

    try:
        frames = sheet.split_frames(columns, rows)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(2)

    target = str(output_dir) if output_dir else str(file.parent)
    written = []
    for frame in frames.frames:
        frame.file_name = os.path.join(target, os.path.basename(frame.file_name))
        written.append(save_image(frame.pixels, frame.file_name, premultiplied=True))
    if maps:
        written.extend(export_processor_maps(frames, parse_map_kinds(None)))
    display_written_files(written)
    print_success(f"Split {file.name} into {frames.frame_count} frames")
