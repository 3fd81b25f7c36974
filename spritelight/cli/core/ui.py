#!/usr/bin/env python3
"""
UI components for the SpriteLight CLI.

This module provides the shared rich console and helpers for consistent
command-line output.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

logger = logging.getLogger(__name__)

spritelight_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "filename": "bold blue",
    "path": "blue",
    "value": "green",
    "key": "cyan",
    "header": "bold magenta",
})

console = Console(theme=spritelight_theme)

def print_rich_table(data: List[Dict[str, Any]], title: str,
                     columns: Optional[List[Tuple[str, str]]] = None) -> None:
    """
    Print data as a rich table.

    Args:
        data: List of dictionaries with row data.
        title: Table title.
        columns: Optional list of (column_name, style) tuples.
    """
    table = Table(title=title)
    if not columns:
        columns = [(key, "cyan") for key in data[0].keys()] if data else []
    for name, style in columns:
        table.add_column(name, style=style)
    for row in data:
        table.add_row(*[str(row.get(col[0], "")) for col in columns])
    console.print(table)

def print_warning(message: str) -> None:
    console.print(f"[warning]{message}[/warning]")

def print_error(message: str) -> None:
    console.print(f"[error]{message}[/error]")

def print_success(message: str) -> None:
    console.print(f"[success]{message}[/success]")

def print_info(message: str) -> None:
    console.print(f"[info]{message}[/info]")

def display_written_files(paths: List[str], title: str = "Written files") -> None:
    """List written files in a table."""
    print_rich_table([{"File": p} for p in paths], title, [("File", "path")])
