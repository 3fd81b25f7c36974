#!/usr/bin/env python3
"""
Option parsing shared by the SpriteLight CLI commands.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from ...config import load_preset
from ...core.parameters import MapKind, ParameterSet, coerce_parameter
from ...exceptions import ConfigError, ProjectRecordError
from ...lighting.light import LightSource
from .ui import print_error

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for a CLI run."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        force=True,
    )

def parse_assignment(text: str) -> Tuple[str, object]:
    """Parse 'name=value' into a typed pair (JSON values, else raw string)."""
    if "=" not in text:
        print_error(f"Expected name=value, got '{text}'")
        raise typer.Exit(2)
    name, raw = text.split("=", 1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return name.strip(), value

def build_parameters(
    preset: Optional[str] = None,
    settings_file: Optional[Path] = None,
    assignments: Optional[List[str]] = None,
) -> ParameterSet:
    """
    Build a parameter set from a preset, a settings record file and overrides.

    Later sources override earlier ones.
    """
    try:
        params = load_preset(preset) if preset else ParameterSet()
        if settings_file is not None:
            with open(settings_file, "r") as f:
                params = ParameterSet.from_record(json.load(f))
    except (ConfigError, ProjectRecordError, OSError, json.JSONDecodeError) as e:
        print_error(str(e))
        raise typer.Exit(2)

    for text in assignments or []:
        name, value = parse_assignment(text)
        try:
            setattr(params, name, coerce_parameter(name, value))
        except (TypeError, ValueError) as e:
            print_error(f"Invalid parameter {name}: {e}")
            raise typer.Exit(2)
    return params

def parse_map_kinds(names: Optional[List[str]]) -> List[MapKind]:
    """Map kind names from the command line; every kind when empty."""
    if not names:
        return list(MapKind)
    kinds = []
    for name in names:
        try:
            kinds.append(MapKind(name.lower()))
        except ValueError:
            print_error(f"Unknown map type '{name}'. Available: {', '.join(k.value for k in MapKind)}")
            raise typer.Exit(2)
    return kinds

def parse_light(text: str) -> LightSource:
    """
    Parse a light given as 'x,y[,z[,r,g,b]]'.

    z is the height as a fraction of the scene size.
    """
    try:
        values = [float(v) for v in text.split(",")]
    except ValueError:
        print_error(f"Invalid light '{text}', expected x,y[,z[,r,g,b]]")
        raise typer.Exit(2)
    if len(values) not in (2, 3, 6):
        print_error(f"Invalid light '{text}', expected x,y[,z[,r,g,b]]")
        raise typer.Exit(2)
    z = values[2] if len(values) > 2 else LightSource().height
    if len(values) == 6:
        color = tuple(values[3:6])
        return LightSource(position=(values[0], values[1], z), diffuse_color=color, specular_color=color)
    return LightSource(position=(values[0], values[1], z))
