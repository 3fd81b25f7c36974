"""
Sprite processor module

This module provides the SpriteProcessor, the unit of editing: a named,
ordered sequence of frames sharing one parameter set, with lazily generated
and cached lighting maps, animation playback state and an optional private
light list.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from .core.animation import DEFAULT_FRAME_INTERVAL_MS, Animation
from .core.frame import Frame
from .core.parameters import (
    ALL_MAP_KINDS,
    MapKind,
    ParameterSet,
    affected_kinds,
    coerce_parameter,
    slider_to_value,
)
from .exceptions import DimensionMismatchError, ProjectRecordError
from .image.factory import MapGeneratorRegistry
from .lighting.light import LightSource
from .utils.files import split_frame_names

logger = logging.getLogger(__name__)

ProcessedCallback = Callable[["SpriteProcessor", MapKind], None]


class SpriteProcessor:
    """
    Orchestrates map generation for one sprite.

    Every public mutator runs on the owning thread. Map getters may be called
    from worker threads: generation for one processor is serialized by its
    lock and works on a snapshot of the frame sources and parameters.
    """

    def __init__(
        self,
        name: str = "",
        params: Optional[ParameterSet] = None,
        frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
    ):
        """
        Initialize an empty processor.

        Args:
            name: Display name of the sprite
            params: Initial parameter set (copied)
            frame_interval_ms: Animation frame interval
        """
        self.name = name
        self.frames: List[Frame] = []
        self.current_frame_index = 0
        self.params = params.copy() if params is not None else ParameterSet()
        self.animation = Animation(frame_interval_ms)
        self.light_list: List[LightSource] = []
        self.processed: List[ProcessedCallback] = []
        self._generators = {kind: MapGeneratorRegistry.create(kind) for kind in MapKind}
        # Serializes generation; _state_lock guards the snapshot and the cache write
        self._generation_lock = threading.Lock()
        self._state_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def current_frame(self) -> Optional[Frame]:
        if not self.frames:
            return None
        return self.frames[self.current_frame_index]

    @property
    def shape(self):
        """(height, width) shared by every frame, or None when empty."""
        return self.frames[0].shape if self.frames else None

    def get_name(self) -> str:
        return self.name

    def set_name(self, name: str) -> None:
        self.name = name

    def find_frame(self, path: str) -> Optional[Frame]:
        for frame in self.frames:
            if frame.file_name == path:
                return frame
        return None

    def load_image(self, path: str, pixels) -> Frame:
        """
        Add a frame, or replace the frame loaded from the same path.

        Args:
            path: Source path of the image
            pixels: (H, W, 4) premultiplied RGBA buffer

        Returns:
            The new or updated frame

        Raises:
            ImageDecodeError: If the buffer is invalid; the processor is unchanged
            DimensionMismatchError: If the size differs from existing frames;
                the processor is unchanged
        """
        with self._state_lock:
            existing = self.find_frame(path)
            if existing is not None:
                existing.replace_pixels(pixels)
                self._invalidate_neighbours_of(existing)
                logger.info(f"Reloaded frame {path} of '{self.name}'")
                return existing

            frame = Frame(path, pixels)
            if self.frames and frame.shape != self.shape:
                logger.warning(f"Rejected frame {path} for '{self.name}': size differs")
                raise DimensionMismatchError(self.shape, frame.shape, path)
            self.frames.append(frame)
            logger.info(f"Added frame {path} to '{self.name}' ({self.frame_count} frames)")
            return frame

    def load_height_map(self, path: str, pixels) -> None:
        """
        Attach a height override to the current frame.

        Raises:
            ImageDecodeError, DimensionMismatchError: The frame is unchanged
        """
        with self._state_lock:
            frame = self._require_current_frame()
            frame.set_heightmap(path, pixels)
            self._invalidate_neighbours_of(frame)
            logger.info(f"Loaded height map {path} for {frame.file_name}")

    def load_specular_map(self, path: str, pixels) -> None:
        """
        Attach a specular override to the current frame.

        Raises:
            ImageDecodeError, DimensionMismatchError: The frame is unchanged
        """
        with self._state_lock:
            frame = self._require_current_frame()
            frame.set_specular(path, pixels)
            logger.info(f"Loaded specular map {path} for {frame.file_name}")

    def reset_height_map(self) -> None:
        """Revert the current frame to luminance-derived height."""
        with self._state_lock:
            frame = self.current_frame
            if frame is not None and frame.heightmap is not None:
                frame.set_heightmap(None, None)
                self._invalidate_neighbours_of(frame)

    def reset_specular_map(self) -> None:
        """Revert the current frame to luminance-derived specular."""
        with self._state_lock:
            frame = self.current_frame
            if frame is not None and frame.specular is not None:
                frame.set_specular(None, None)

    def set_current_frame(self, index: int) -> int:
        """
        Select the current frame; out-of-range indices are clamped.

        Returns:
            The index actually selected
        """
        if not self.frames:
            self.current_frame_index = 0
        else:
            self.current_frame_index = min(max(int(index), 0), self.frame_count - 1)
        return self.current_frame_index

    def next_frame(self) -> int:
        """Advance to the next frame, wrapping to the first one."""
        if self.frames:
            self.current_frame_index = (self.current_frame_index + 1) % self.frame_count
        return self.current_frame_index

    def previous_frame(self) -> int:
        """Step back to the previous frame, wrapping to the last one."""
        if self.frames:
            self.current_frame_index = (self.current_frame_index - 1) % self.frame_count
        return self.current_frame_index

    def remove_current_frame(self) -> bool:
        """
        Remove the current frame.

        Returns:
            False without changes when only one frame remains or while playing
        """
        if self.frame_count <= 1 or self.animation.playing:
            return False
        with self._state_lock:
            removed = self.frames.pop(self.current_frame_index)
            for frame in self.frames:
                for row in range(3):
                    for col in range(3):
                        if frame.neighbours[row][col] is removed:
                            frame.set_neighbour(row, col, frame)
            self.set_current_frame(self.current_frame_index)
        logger.info(f"Removed frame {removed.file_name} from '{self.name}'")
        return True

    def set_neighbour(self, row: int, col: int, neighbour: Optional[Frame], frame_index: Optional[int] = None) -> None:
        """Set a neighbour of a frame (the current one by default) for tileable sampling."""
        with self._state_lock:
            self._frame_at(frame_index).set_neighbour(row, col, neighbour)

    def _invalidate_neighbours_of(self, changed: Frame) -> None:
        for frame in self.frames:
            if frame is changed:
                continue
            if any(cell is changed for row in frame.neighbours for cell in row):
                frame.invalidate({MapKind.NORMAL})

    def _require_current_frame(self) -> Frame:
        frame = self.current_frame
        if frame is None:
            raise IndexError(f"Processor '{self.name}' has no frames")
        return frame

    def _frame_at(self, index: Optional[int]) -> Frame:
        if index is None:
            return self._require_current_frame()
        if not self.frames:
            raise IndexError(f"Processor '{self.name}' has no frames")
        return self.frames[min(max(int(index), 0), self.frame_count - 1)]

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def editable(self) -> bool:
        """Structural edits and parameter editing are disabled while playing."""
        return not self.animation.playing

    def get_parameter(self, name: str) -> Any:
        if not hasattr(self.params, name):
            raise ValueError(f"Unknown parameter: {name}")
        return getattr(self.params, name)

    def set_parameter(self, name: str, value: Any) -> bool:
        """
        Set one parameter and mark the affected maps of every frame dirty.

        Returns:
            True if the value changed

        Raises:
            ValueError: If the parameter name is unknown
        """
        value = coerce_parameter(name, value)
        with self._state_lock:
            if getattr(self.params, name) == value:
                return False
            setattr(self.params, name, value)
            self._invalidate_all(affected_kinds([name]))
        logger.debug(f"Set {name}={value} on '{self.name}'")
        return True

    def set_slider(self, name: str, slider: int) -> bool:
        """Set a parameter from its integer slider position."""
        return self.set_parameter(name, slider_to_value(name, slider))

    def get_settings(self) -> ParameterSet:
        """Snapshot of the parameter set."""
        with self._state_lock:
            return self.params.copy()

    def copy_settings(self, params: ParameterSet) -> None:
        """
        Replace the whole parameter set, dirtying only the kinds whose fields changed.
        """
        with self._state_lock:
            changed = self.params.diff(params)
            self.params = params.copy()
            self._invalidate_all(affected_kinds(changed))
        if changed:
            logger.debug(f"Copied settings into '{self.name}': {', '.join(changed)}")

    def _invalidate_all(self, kinds) -> None:
        if not kinds:
            return
        for frame in self.frames:
            frame.invalidate(kinds)

    # ------------------------------------------------------------------
    # Maps
    # ------------------------------------------------------------------

    def get_map(self, kind, frame_index: Optional[int] = None) -> Optional[np.ndarray]:
        """
        Return a generated map, regenerating it first when dirty.

        Args:
            kind: MapKind or its string value
            frame_index: Frame to read; the current frame when None

        Returns:
            The cached map, or None when the processor has no frames
        """
        kind = MapKind(kind)
        if not self.frames:
            return None

        with self._generation_lock:
            with self._state_lock:
                frame = self._frame_at(frame_index)
                if not frame.is_dirty(kind):
                    return frame.maps[kind]
                params = self.params.copy()
                revision = frame.revisions[kind]
                diffuse = frame.pixels
                heightmap = frame.heightmap
                specular = frame.specular
                neighbours = frame.neighbour_pixels() if params.tileable else None
                neighbour_heights = frame.neighbour_heightmaps() if params.tileable else None

            logger.debug(f"Generating {kind.value} map for frame {frame.file_name} of '{self.name}'")
            result = self._generators[kind].generate(
                diffuse, params, heightmap=heightmap, specular=specular,
                neighbours=neighbours, neighbour_heights=neighbour_heights,
            )

            with self._state_lock:
                frame.store_map(kind, result, revision)

        self._notify_processed(kind)
        return result

    def get_normal(self, frame_index: Optional[int] = None) -> Optional[np.ndarray]:
        return self.get_map(MapKind.NORMAL, frame_index)

    def get_parallax(self, frame_index: Optional[int] = None) -> Optional[np.ndarray]:
        return self.get_map(MapKind.PARALLAX, frame_index)

    def get_specular(self, frame_index: Optional[int] = None) -> Optional[np.ndarray]:
        return self.get_map(MapKind.SPECULAR, frame_index)

    def get_occlusion(self, frame_index: Optional[int] = None) -> Optional[np.ndarray]:
        return self.get_map(MapKind.OCCLUSION, frame_index)

    def get_texture(self, frame_index: Optional[int] = None) -> Optional[np.ndarray]:
        """Premultiplied diffuse pixels of a frame."""
        if not self.frames:
            return None
        return self._frame_at(frame_index).pixels

    def is_dirty(self, kind, frame_index: Optional[int] = None) -> bool:
        return self._frame_at(frame_index).is_dirty(MapKind(kind))

    def generate_now(self, kinds=ALL_MAP_KINDS) -> int:
        """
        Regenerate every dirty map of every frame.

        Returns:
            Number of maps generated
        """
        generated = 0
        for index in range(self.frame_count):
            for kind in MapKind:
                if kind in kinds and self.frames[index].is_dirty(kind):
                    self.get_map(kind, index)
                    generated += 1
        return generated

    def add_processed_callback(self, callback: ProcessedCallback) -> None:
        self.processed.append(callback)

    def _notify_processed(self, kind: MapKind) -> None:
        for callback in list(self.processed):
            callback(self, kind)

    # ------------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------------

    def play(self) -> None:
        self.animation.start()

    def stop(self) -> None:
        self.animation.stop()

    def tick(self, elapsed_ms: float) -> int:
        """
        Advance playback by elapsed time, looping over the frames.

        Returns:
            The current frame index after advancing
        """
        steps = self.animation.tick(elapsed_ms)
        if steps and self.frames:
            self.current_frame_index = (self.current_frame_index + steps) % self.frame_count
        return self.current_frame_index

    # ------------------------------------------------------------------
    # Split frames
    # ------------------------------------------------------------------

    def split_frames(self, h_frames: int, v_frames: int) -> "SpriteProcessor":
        """
        Split the current frame into an h x v grid of new frames.

        Args:
            h_frames: Number of columns
            v_frames: Number of rows

        Returns:
            New processor named "<name>(frames)" with one frame per cell in
            row-major order, inheriting this processor's parameters

        Raises:
            ValueError: If the grid is empty or finer than the image
        """
        frame = self._require_current_frame()
        h_frames, v_frames = int(h_frames), int(v_frames)
        if h_frames < 1 or v_frames < 1:
            raise ValueError(f"Invalid split grid {h_frames}x{v_frames}")
        cell_w = frame.width // h_frames
        cell_h = frame.height // v_frames
        if cell_w == 0 or cell_h == 0:
            raise ValueError(
                f"Cannot split a {frame.width}x{frame.height} image into {h_frames}x{v_frames} cells"
            )

        split = SpriteProcessor(f"{self.name}(frames)", self.params, self.animation.interval_ms)
        names = split_frame_names(frame.file_name, h_frames * v_frames)
        pixels = frame.pixels
        index = 0
        for row in range(v_frames):
            for col in range(h_frames):
                cell = pixels[row * cell_h:(row + 1) * cell_h, col * cell_w:(col + 1) * cell_w]
                split.load_image(names[index], cell)
                index += 1
        logger.info(f"Split '{self.name}' into {index} frames of {cell_w}x{cell_h}")
        return split

    # ------------------------------------------------------------------
    # Sources and records
    # ------------------------------------------------------------------

    def source_paths(self) -> List[str]:
        """Every file path the processor reads from."""
        paths = []
        for frame in self.frames:
            paths.extend(frame.source_paths())
        return paths

    def reload_source(self, path: str, pixels) -> bool:
        """
        Reload every frame source whose path matches.

        Returns:
            True if any source matched

        Raises:
            ImageDecodeError, DimensionMismatchError: Matching sources are unchanged
        """
        matched = False
        with self._state_lock:
            for frame in self.frames:
                if frame.file_name == path:
                    frame.replace_pixels(pixels)
                    self._invalidate_neighbours_of(frame)
                    matched = True
                if frame.heightmap_path == path:
                    frame.set_heightmap(path, pixels)
                    self._invalidate_neighbours_of(frame)
                    matched = True
                if frame.specular_path == path:
                    frame.set_specular(path, pixels)
                    matched = True
        if matched:
            logger.info(f"Reloaded source {path} in '{self.name}'")
        return matched

    def settings_record(self) -> Dict[str, Any]:
        return self.params.to_record()

    def apply_settings_record(self, record: Dict[str, Any]) -> None:
        """
        Apply a parameter record.

        Raises:
            ProjectRecordError: If the record is malformed
        """
        self.copy_settings(ParameterSet.from_record(record))

    def to_record(self) -> Dict[str, Any]:
        """Project record: name, frame sources, settings and private lights."""
        return {
            "name": self.name,
            "frames": [
                {
                    "path": frame.file_name,
                    "heightmap": frame.heightmap_path,
                    "specular": frame.specular_path,
                }
                for frame in self.frames
            ],
            "current frame": self.current_frame_index,
            "settings": self.settings_record(),
            "lights": [light.to_record() for light in self.light_list],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], loader: Callable[[str], Any], **kwargs) -> "SpriteProcessor":
        """
        Rebuild a processor from its record.

        Args:
            record: Record produced by to_record()
            loader: Callable returning premultiplied RGBA pixels for a path
            **kwargs: Extra constructor arguments

        Raises:
            ProjectRecordError: If the record is malformed
            ImageDecodeError, DimensionMismatchError: If a source cannot be loaded
        """
        if not isinstance(record, dict) or "frames" not in record:
            raise ProjectRecordError("Processor record must be a mapping with 'frames'")

        processor = cls(record.get("name", ""), **kwargs)
        processor.apply_settings_record(record.get("settings", {}))
        for entry in record["frames"]:
            if isinstance(entry, str):
                entry = {"path": entry}
            path = entry.get("path")
            if not path:
                raise ProjectRecordError("Frame record without a path")
            processor.load_image(path, loader(path))
            processor.set_current_frame(processor.frame_count - 1)
            if entry.get("heightmap"):
                processor.load_height_map(entry["heightmap"], loader(entry["heightmap"]))
            if entry.get("specular"):
                processor.load_specular_map(entry["specular"], loader(entry["specular"]))

        processor.light_list = [LightSource.from_record(light) for light in record.get("lights", [])]
        processor.set_current_frame(record.get("current frame", 0))
        return processor

    def __repr__(self) -> str:
        return f"SpriteProcessor({self.name!r}, frames={self.frame_count})"
