#!/usr/bin/env python3
"""
Map generation commands for the SpriteLight CLI.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn

from ...config import load_config
from ...image.exporters import export_processor_maps
from ...utils.files import EXPORT_SUFFIXES
from ...workspace import Workspace
from ..core.options import build_parameters, parse_map_kinds
from ..core.ui import console, display_written_files, print_success, print_warning

logger = logging.getLogger(__name__)

def _resolve_output(output_dir: Optional[Path]) -> Optional[str]:
    if output_dir is not None:
        return str(output_dir)
    configured = load_config().get("output_dir")
    return configured or None

def _is_generated(path: Path) -> bool:
    """Whether a file looks like an exported map rather than a source sprite."""
    return any(path.stem.endswith(suffix) for suffix in EXPORT_SUFFIXES.values())

def maps_command(
    files: List[Path] = typer.Argument(..., help="Sprite images", exists=True, dir_okay=False),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default: next to each source)"),
    types: Optional[List[str]] = typer.Option(None, "--types", "-t", help="Map types: normal, parallax, specular, occlusion"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Stored preset to start from"),
    settings: Optional[Path] = typer.Option(None, "--settings", help="JSON settings record", exists=True),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Parameter override name=value"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format (default: config image_format)"),
    animation: bool = typer.Option(False, "--animation/--no-animation", help="Group numbered files into animations"),
):
    """Generate lighting maps for sprite images."""
    params = build_parameters(preset, settings, assignments)
    kinds = parse_map_kinds(types)
    image_format = format or load_config().get("image_format", "png")

    workspace = Workspace()
    processors = workspace.open_files([str(f) for f in files], as_animation=animation)
    if not processors:
        print_warning("No sprite could be loaded")
        return
    workspace.apply_preset(params, processors)

    written = []
    for processor in processors:
        console.print(f"[info]Processing[/info] [filename]{processor.name}[/filename]")
        written.extend(export_processor_maps(processor, kinds, _resolve_output(output_dir), image_format))
    display_written_files(written)
    print_success(f"Generated {len(written)} maps for {len(processors)} sprites")

def batch_command(
    input_dir: Path = typer.Argument(..., help="Directory of sprite images", exists=True, file_okay=False),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default: next to each source)"),
    pattern: str = typer.Option("*.png", "--pattern", help="File pattern to match"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Search subdirectories"),
    types: Optional[List[str]] = typer.Option(None, "--types", "-t", help="Map types"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Stored preset to start from"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Parameter override name=value"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Worker threads (default: config max_workers)"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format"),
):
    """Generate maps for every sprite in a directory, using a thread pool."""
    config = load_config()
    params = build_parameters(preset, None, assignments)
    kinds = parse_map_kinds(types)
    max_workers = workers or config.get("max_workers", 4)
    image_format = format or config.get("image_format", "png")

    files = sorted(input_dir.rglob(pattern) if recursive else input_dir.glob(pattern))
    files = [f for f in files if f.is_file() and not _is_generated(f)]
    if not files:
        print_warning(f"No images matching {pattern} in {input_dir}")
        return

    workspace = Workspace(frame_interval_ms=config.get("frame_interval_ms", 100))
    with Progress(SpinnerColumn(), TextColumn("{task.description}"), console=console) as progress:
        task = progress.add_task("Loading sprites", total=None)
        processors = workspace.open_files([str(f) for f in files], as_animation=True)
        workspace.apply_preset(params, processors)
        progress.update(task, description=f"Generating maps with {max_workers} workers")
        workspace.regenerate_all(max_workers=max_workers)
        progress.update(task, description="Writing files")
        written = []
        for processor in processors:
            written.extend(export_processor_maps(processor, kinds, _resolve_output(output_dir), image_format))

    print_success(f"Batch complete: {len(written)} maps for {len(processors)} sprites")
