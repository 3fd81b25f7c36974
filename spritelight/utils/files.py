"""
File naming helpers.

Detection of numbered frame sequences, unique sprite names and the naming
conventions of split frames and exported maps.
"""

import logging
import os
import re
from typing import Callable, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Last group of digits in a file name
_LAST_NUMBER = re.compile(r"(\d+)(?!.*\d)")

# Suffix appended to exported files per map kind value
EXPORT_SUFFIXES = {
    "normal": "_n",
    "parallax": "_p",
    "specular": "_s",
    "occlusion": "_o",
    "preview": "_v",
}


def split_sequence_name(file_name: str) -> Optional[Tuple[str, int, str]]:
    """
    Split a file name around its last group of digits.

    Returns:
        (prefix, number, postfix), or None when the name has no digits
    """
    match = _LAST_NUMBER.search(file_name)
    if match is None:
        return None
    return file_name[:match.start()], int(match.group(1)), file_name[match.end():]


def find_frame_sequence(path: str, candidates: Optional[Iterable[str]] = None) -> List[str]:
    """
    Find the files that form an animation together with path.

    Files belong to the same sequence when their names differ only in the last
    group of digits. A name without digits, or with nothing before its last
    number, never forms a sequence.

    Args:
        path: One frame of the sequence
        candidates: File names to consider; defaults to the listing of path's directory

    Returns:
        Full paths of the sequence ordered by frame number, or [path] when
        no other frame is found
    """
    directory, file_name = os.path.split(path)
    parts = split_sequence_name(file_name)
    if parts is None or not parts[0]:
        return [path]
    prefix, _, postfix = parts

    if candidates is None:
        try:
            candidates = os.listdir(directory or ".")
        except OSError as e:
            logger.warning(f"Could not list directory '{directory}': {e}")
            return [path]

    frames = []
    for candidate in candidates:
        candidate = os.path.basename(candidate)
        other = split_sequence_name(candidate)
        if other is not None and other[0] == prefix and other[2] == postfix:
            frames.append((other[1], candidate))

    if len(frames) < 2:
        return [path]

    frames.sort()
    logger.debug(f"Found {len(frames)} frames matching {prefix}*{postfix}")
    return [os.path.join(directory, name) for _, name in frames]


def sequence_base_name(path: str) -> str:
    """Name of an animated sprite: the common prefix of its frame files."""
    file_name = os.path.basename(path)
    parts = split_sequence_name(file_name)
    if parts is None or not parts[0]:
        return os.path.splitext(file_name)[0]
    return parts[0]


def unique_name(name: str, existing: Iterable[str]) -> str:
    """
    Make a sprite name unique among existing names.

    The first clash becomes "name (2)", then "name (3)" and so on.
    """
    taken = set(existing)
    if name not in taken:
        return name
    i = 2
    while f"{name} ({i})" in taken:
        i += 1
    return f"{name} ({i})"


def split_frame_names(file_name: str, count: int) -> List[str]:
    """
    Synthetic names of the frames produced by splitting a sheet.

    The index is zero-padded to the width of the largest index, so sorting
    the names keeps frame order: "walk.png", 12 -> "walk_00.png" ... "walk_11.png".
    """
    stem, ext = os.path.splitext(file_name)
    width = len(str(max(count - 1, 0)))
    return [f"{stem}_{index:0{width}d}{ext}" for index in range(count)]


def export_file_name(source: str, suffix: str, ext: Optional[str] = None) -> str:
    """
    Path of an exported map next to its source ("dir/walk.png" -> "dir/walk_n.png").

    Args:
        source: Source image path
        suffix: Map suffix such as "_n"
        ext: Output extension; keeps the source's extension (or .png) when None
    """
    stem, source_ext = os.path.splitext(source)
    if ext is None:
        ext = source_ext or ".png"
    if not ext.startswith("."):
        ext = "." + ext
    return f"{stem}{suffix}{ext}"


def collision_free_path(
    directory: str,
    base_name: str,
    suffix: str,
    ext: str = ".png",
    exists: Callable[[str], bool] = os.path.exists,
) -> str:
    """
    Output path in a directory that does not overwrite an existing file.

    "walk_n.png" is tried first, then "walk(2)_n.png", "walk(3)_n.png" and so on.
    """
    if not ext.startswith("."):
        ext = "." + ext
    candidate = os.path.join(directory, f"{base_name}{suffix}{ext}")
    i = 1
    while exists(candidate):
        i += 1
        candidate = os.path.join(directory, f"{base_name}({i}){suffix}{ext}")
    return candidate
