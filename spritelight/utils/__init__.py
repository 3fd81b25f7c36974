"""
SpriteLight utilities module.
"""

from .files import (
    find_frame_sequence,
    sequence_base_name,
    unique_name,
    split_frame_names,
    export_file_name,
    collision_free_path,
    EXPORT_SUFFIXES,
)

__all__ = [
    'find_frame_sequence',
    'sequence_base_name',
    'unique_name',
    'split_frame_names',
    'export_file_name',
    'collision_free_path',
    'EXPORT_SUFFIXES',
]
