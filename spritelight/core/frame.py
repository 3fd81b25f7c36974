"""
Frame store.

A Frame is one still image of a sprite: its premultiplied diffuse pixels, the
path they were loaded from, optional height/specular overrides, the 3x3 grid
of neighbour frames used for tileable sampling, and the generated map caches
with their Clean/Dirty state.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..exceptions import DimensionMismatchError
from ..image.core.image_utils import validate_rgba
from .parameters import ALL_MAP_KINDS, MapKind, MapState

logger = logging.getLogger(__name__)

# Maps that depend on each frame source
DIFFUSE_DEPENDENTS = ALL_MAP_KINDS
HEIGHTMAP_DEPENDENTS = frozenset({MapKind.NORMAL, MapKind.PARALLAX})
SPECULAR_DEPENDENTS = frozenset({MapKind.SPECULAR})
NEIGHBOUR_DEPENDENTS = frozenset({MapKind.NORMAL})


class Frame:
    """
    One image of a sprite plus its override sources and map caches.

    Attributes:
        file_name: Path of the diffuse source
        heightmap_path: Path of the height override, or None
        specular_path: Path of the specular override, or None
        neighbours: 3x3 grid of neighbouring frames; the centre is this frame
            and None marks a missing neighbour
    """

    def __init__(self, file_name: str, pixels):
        """
        Initialize a frame from decoded pixels.

        Args:
            file_name: Source path of the image
            pixels: (H, W, 4) premultiplied RGBA buffer

        Raises:
            ImageDecodeError: If the buffer is not a valid image
        """
        self.file_name = file_name
        self._pixels = validate_rgba(pixels, file_name)
        self.heightmap: Optional[np.ndarray] = None
        self.heightmap_path: Optional[str] = None
        self.specular: Optional[np.ndarray] = None
        self.specular_path: Optional[str] = None
        self.neighbours: List[List[Optional["Frame"]]] = [[self] * 3 for _ in range(3)]
        self.maps: Dict[MapKind, Optional[np.ndarray]] = {kind: None for kind in MapKind}
        self.states: Dict[MapKind, MapState] = {kind: MapState.DIRTY for kind in MapKind}
        self.revisions: Dict[MapKind, int] = {kind: 0 for kind in MapKind}

    @property
    def pixels(self) -> np.ndarray:
        """Read-only diffuse pixels."""
        return self._pixels

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width) of the frame."""
        return self._pixels.shape[:2]

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    def get_file_name(self) -> str:
        return self.file_name

    def _check_shape(self, pixels: np.ndarray, path: Optional[str]) -> None:
        if pixels.shape[:2] != self.shape:
            raise DimensionMismatchError(self.shape, pixels.shape[:2], path)

    def replace_pixels(self, pixels) -> None:
        """
        Replace the diffuse pixels, keeping the frame's dimensions.

        Raises:
            ImageDecodeError: If the buffer is not a valid image
            DimensionMismatchError: If the new image has a different size
        """
        validated = validate_rgba(pixels, self.file_name)
        self._check_shape(validated, self.file_name)
        self._pixels = validated
        self.invalidate(DIFFUSE_DEPENDENTS)

    def set_heightmap(self, path: Optional[str], pixels) -> None:
        """Attach a height override; passing None pixels clears it."""
        if pixels is None:
            self.heightmap = None
            self.heightmap_path = None
        else:
            validated = validate_rgba(pixels, path or "heightmap")
            self._check_shape(validated, path)
            self.heightmap = validated
            self.heightmap_path = path
        self.invalidate(HEIGHTMAP_DEPENDENTS)

    def set_specular(self, path: Optional[str], pixels) -> None:
        """Attach a specular override; passing None pixels clears it."""
        if pixels is None:
            self.specular = None
            self.specular_path = None
        else:
            validated = validate_rgba(pixels, path or "specular")
            self._check_shape(validated, path)
            self.specular = validated
            self.specular_path = path
        self.invalidate(SPECULAR_DEPENDENTS)

    def set_neighbour(self, row: int, col: int, frame: Optional["Frame"]) -> None:
        """
        Set one cell of the neighbour grid.

        Raises:
            ValueError: If the cell is out of the grid or is the centre
        """
        if not (0 <= row < 3 and 0 <= col < 3):
            raise ValueError(f"Neighbour cell out of range: ({row}, {col})")
        if row == 1 and col == 1:
            raise ValueError("The centre cell always refers to the frame itself")
        self.neighbours[row][col] = frame
        self.invalidate(NEIGHBOUR_DEPENDENTS)

    def neighbour_pixels(self) -> List[List[Optional[np.ndarray]]]:
        """
        Pixels of the neighbour grid, with unusable cells set to None.

        A neighbour is unusable when missing or when its size differs.
        """
        grid: List[List[Optional[np.ndarray]]] = []
        for row in self.neighbours:
            cells = []
            for frame in row:
                if frame is None or frame.shape != self.shape:
                    cells.append(None)
                else:
                    cells.append(frame.pixels)
            grid.append(cells)
        return grid

    def neighbour_heightmaps(self) -> List[List[Optional[np.ndarray]]]:
        """Height overrides of the neighbour grid, None where a cell has none or is unusable."""
        return [
            [
                frame.heightmap if frame is not None and frame.shape == self.shape else None
                for frame in row
            ]
            for row in self.neighbours
        ]

    def neighbour_paths(self) -> List[List[Optional[str]]]:
        return [[f.file_name if f is not None else None for f in row] for row in self.neighbours]

    def invalidate(self, kinds: Iterable[MapKind]) -> None:
        """Mark the given map kinds dirty."""
        for kind in kinds:
            self.states[kind] = MapState.DIRTY
            self.revisions[kind] += 1

    def is_dirty(self, kind: MapKind) -> bool:
        return self.states[kind] is MapState.DIRTY

    def store_map(self, kind: MapKind, data: np.ndarray, revision: Optional[int] = None) -> bool:
        """
        Cache a freshly generated map and mark it clean.

        Args:
            kind: Map kind
            data: Generated map
            revision: Revision the map was generated from; a map generated
                before the latest invalidation is not cached

        Returns:
            True if the map was cached
        """
        if revision is not None and revision != self.revisions[kind]:
            logger.debug(f"Discarding stale {kind.value} map for {self.file_name}")
            return False
        data.setflags(write=False)
        self.maps[kind] = data
        self.states[kind] = MapState.CLEAN
        return True

    def get_image(self, kind: Optional[MapKind] = None) -> Optional[np.ndarray]:
        """Cached map of the given kind, or the diffuse pixels when kind is None."""
        if kind is None:
            return self._pixels
        return self.maps[kind]

    def source_paths(self) -> List[str]:
        """Every file path this frame reads from."""
        return [p for p in (self.file_name, self.heightmap_path, self.specular_path) if p]

    def __repr__(self) -> str:
        return f"Frame({self.file_name!r}, {self.width}x{self.height})"
