#!/usr/bin/env python3
"""
Core functionality for the SpriteLight CLI.

Re-exports the console helpers and option parsing shared by the commands.
"""

from .ui import (
    console,
    print_warning,
    print_error,
    print_success,
    print_info,
    print_rich_table,
)

from .options import (
    setup_logging,
    build_parameters,
    parse_map_kinds,
    parse_light,
)
