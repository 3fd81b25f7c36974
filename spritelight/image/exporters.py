"""
Map export.

Generated maps are written next to their source with a suffix per kind
("walk.png" -> "walk_n.png", "walk_p.png", "walk_s.png", "walk_o.png"), or
into an output directory where existing files are never overwritten
("walk_n.png", then "walk(2)_n.png", ...).
"""
import logging
import os
from typing import Dict, Iterable, List, Optional

from ..core.parameters import ALL_MAP_KINDS, MapKind
from ..utils.files import EXPORT_SUFFIXES, collision_free_path, export_file_name
from .io import save_image

logger = logging.getLogger(__name__)

# Stable export order
EXPORT_ORDER = (MapKind.NORMAL, MapKind.PARALLAX, MapKind.SPECULAR, MapKind.OCCLUSION)


def export_processor_maps(
    processor,
    kinds: Iterable[MapKind] = ALL_MAP_KINDS,
    output_dir: Optional[str] = None,
    image_format: Optional[str] = None,
) -> List[str]:
    """
    Export the maps of every frame of a processor.

    Args:
        processor: SpriteProcessor to export
        kinds: Map kinds to write
        output_dir: Target directory; next to each source when None
        image_format: Output extension such as "png"; keeps the source's when None

    Returns:
        Paths of the written files
    """
    kinds = {MapKind(kind) for kind in kinds}
    written = []
    for index, frame in enumerate(processor.frames):
        for kind in EXPORT_ORDER:
            if kind not in kinds:
                continue
            data = processor.get_map(kind, index)
            suffix = EXPORT_SUFFIXES[kind.value]
            if output_dir is None:
                path = export_file_name(frame.file_name, suffix, image_format)
            else:
                stem, source_ext = os.path.splitext(os.path.basename(frame.file_name))
                ext = image_format or source_ext or "png"
                path = collision_free_path(output_dir, stem, suffix, ext)
            written.append(save_image(data, path))
    logger.info(f"Exported {len(written)} maps for '{processor.name}'")
    return written


def export_all(
    processors,
    kinds: Iterable[MapKind] = ALL_MAP_KINDS,
    output_dir: Optional[str] = None,
    image_format: Optional[str] = None,
) -> Dict[str, List[str]]:
    """
    Export the maps of several processors.

    Returns:
        Processor name to written paths
    """
    kinds = list(kinds)
    return {
        processor.name: export_processor_maps(processor, kinds, output_dir, image_format)
        for processor in processors
    }
