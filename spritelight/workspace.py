"""
Workspace module

The Workspace holds every loaded sprite of a session: the processor list,
the sample processor owning the shared light list, the selection passed to
the compositor, the reference to the active processor used by brush tools,
and the scene-wide render settings. It also owns batch regeneration and the
project record.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Optional

import numpy as np

from .core.animation import DEFAULT_FRAME_INTERVAL_MS
from .core.parameters import LIGHT_SCALE, ParameterSet
from .exceptions import FrameError, ProjectRecordError, SpriteLightException
from .image.io import load_image_file
from .lighting.compositor import (
    PreviewCompositor,
    RenderSettings,
    RenderSnapshot,
    SpriteInstance,
    ViewMode,
)
from .lighting.light import LightSource
from .plugins import ActiveProcessorRef
from .processor import SpriteProcessor
from .utils.files import find_frame_sequence, sequence_base_name, unique_name
from .watch import DEFAULT_DEBOUNCE_MS, SourceChangeWatcher

logger = logging.getLogger(__name__)

Loader = Callable[[str], np.ndarray]


class Workspace:
    """Collection of sprites plus the scene state shared by the preview."""

    def __init__(
        self,
        settings: Optional[RenderSettings] = None,
        frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
    ):
        self.processors: List[SpriteProcessor] = []
        self.sample_processor = SpriteProcessor("sample", frame_interval_ms=frame_interval_ms)
        self.sample_processor.light_list.append(LightSource())
        self.settings = settings or RenderSettings()
        self.view_mode = ViewMode.PREVIEW
        self.selection: List[SpriteProcessor] = []
        self.active = ActiveProcessorRef()
        self.compositor = PreviewCompositor()
        self.frame_interval_ms = frame_interval_ms

    # ------------------------------------------------------------------
    # Processors
    # ------------------------------------------------------------------

    @property
    def sample_lights(self) -> List[LightSource]:
        return self.sample_processor.light_list

    @property
    def lights_per_texture(self) -> bool:
        return not self.settings.use_sample_lights

    @lights_per_texture.setter
    def lights_per_texture(self, value: bool) -> None:
        self.settings.use_sample_lights = not value

    def find_processor(self, name: str) -> Optional[SpriteProcessor]:
        for processor in self.processors:
            if processor.name == name:
                return processor
        return None

    def add_processor(self, processor: SpriteProcessor) -> SpriteProcessor:
        """Add a processor, renaming it when its name is taken."""
        processor.set_name(unique_name(processor.name, (p.name for p in self.processors)))
        self.processors.append(processor)
        if not self.selection:
            self.select([processor])
        logger.info(f"Added sprite '{processor.name}'")
        return processor

    def remove_processor(self, processor: SpriteProcessor) -> None:
        """Remove a sprite; when nothing stays selected the first sprite is selected."""
        self.processors.remove(processor)
        remaining = [p for p in self.selection if p is not processor]
        self.select(remaining or self.processors[:1])

    def open_files(
        self,
        paths: Iterable[str],
        loader: Loader = load_image_file,
        as_animation: bool = True,
    ) -> List[SpriteProcessor]:
        """
        Load image files as new sprites.

        Files whose names differ only in their last number become frames of
        one animated sprite when as_animation is set. New sprites start from
        the active processor's settings. Files that fail to load are logged
        and skipped.

        Returns:
            The processors created
        """
        created = []
        consumed = set()
        template = self.active.get()
        for path in paths:
            if path in consumed:
                continue
            sequence = find_frame_sequence(path) if as_animation else [path]
            if len(sequence) > 1:
                name = sequence_base_name(path)
            else:
                sequence = [path]
                name = os.path.splitext(os.path.basename(path))[0]
            consumed.update(sequence)

            processor = SpriteProcessor(name, frame_interval_ms=self.frame_interval_ms)
            if template is not None:
                processor.copy_settings(template.get_settings())
            for frame_path in sequence:
                try:
                    processor.load_image(frame_path, loader(frame_path))
                except FrameError as e:
                    logger.warning(f"Skipping {frame_path}: {e}")
            if processor.frame_count == 0:
                continue
            created.append(self.add_processor(processor))
        return created

    # ------------------------------------------------------------------
    # Selection and rendering
    # ------------------------------------------------------------------

    def select(self, processors: Iterable[SpriteProcessor]) -> None:
        """Set the selection; the first selected processor becomes active."""
        self.selection = list(processors)
        self.active.set(self.selection[0] if self.selection else None)

    def active_lights(self) -> List[LightSource]:
        """
        Light list used by the preview.

        With lights per texture, the first selected processor's private list
        is used when it has lights; otherwise the shared sample lights.
        """
        if self.lights_per_texture and self.selection and self.selection[0].light_list:
            return self.selection[0].light_list
        return self.sample_lights

    def snapshot(self, processors: Optional[Iterable[SpriteProcessor]] = None) -> RenderSnapshot:
        """
        Render input for the selected processors laid out left to right.
        """
        instances = []
        x = 0
        for processor in (self.selection if processors is None else processors):
            if processor.frame_count == 0:
                continue
            instances.append(SpriteInstance(processor, x, 0))
            x += processor.shape[1]
        return RenderSnapshot(instances, list(self.active_lights()), self.settings)

    def render(self, zoom: float = 1.0, view_mode: Optional[ViewMode] = None) -> np.ndarray:
        mode = self.view_mode if view_mode is None else view_mode
        return self.compositor.render(self.snapshot(), mode, zoom)

    def apply_preset(self, params: ParameterSet, processors: Optional[Iterable[SpriteProcessor]] = None) -> None:
        """Copy a parameter set into the given processors (the selection by default)."""
        targets = list(self.selection if processors is None else processors)
        for processor in targets:
            processor.copy_settings(params)
        logger.info(f"Applied settings to {len(targets)} sprites")

    # ------------------------------------------------------------------
    # Regeneration and file changes
    # ------------------------------------------------------------------

    def regenerate_all(self, max_workers: Optional[int] = None) -> Dict[str, int]:
        """
        Regenerate every dirty map of every processor on a thread pool.

        Returns:
            Processor name to number of maps generated
        """
        results: Dict[str, int] = {}
        if not self.processors:
            return results
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(p.generate_now): p for p in self.processors}
            for future in as_completed(futures):
                processor = futures[future]
                try:
                    results[processor.name] = future.result()
                except SpriteLightException as e:
                    logger.error(f"Error regenerating '{processor.name}': {e}")
                    results[processor.name] = 0
        logger.debug(f"Regenerated {sum(results.values())} maps across {len(results)} sprites")
        return results

    def on_source_changed(self, path: str, loader: Loader = load_image_file) -> List[SpriteProcessor]:
        """
        Reload a changed source file in every processor that reads it.

        Decode and dimension failures are logged and leave processors unchanged.

        Returns:
            Processors whose sources were reloaded
        """
        readers = [p for p in self.processors if path in p.source_paths()]
        if not readers:
            return []
        try:
            pixels = loader(path)
        except FrameError as e:
            logger.warning(f"Could not reload {path}: {e}")
            return []

        reloaded = []
        for processor in readers:
            try:
                if processor.reload_source(path, pixels):
                    reloaded.append(processor)
            except FrameError as e:
                logger.warning(f"Could not reload {path} in '{processor.name}': {e}")
        return reloaded

    def create_watcher(self, debounce_ms: int = DEFAULT_DEBOUNCE_MS) -> SourceChangeWatcher:
        """Watcher that reloads changed sources when drained on this workspace's thread."""
        return SourceChangeWatcher(self.on_source_changed, debounce_ms)

    def watched_paths(self) -> List[str]:
        paths = []
        for processor in self.processors:
            for path in processor.source_paths():
                if path not in paths:
                    paths.append(path)
        return paths

    # ------------------------------------------------------------------
    # Project record
    # ------------------------------------------------------------------

    def general_record(self) -> Dict[str, Any]:
        return {
            "viewmode": int(self.view_mode),
            "toon": self.settings.toon,
            "pixelated": self.settings.pixelated,
            "blend": self.settings.blend,
            "lights per texture": self.lights_per_texture,
            "ambient light": int(round(self.settings.ambient_intensity / LIGHT_SCALE)),
            "sample lights": [light.to_record() for light in self.sample_lights],
        }

    def apply_general_record(self, record: Dict[str, Any]) -> None:
        """
        Restore the general settings.

        Raises:
            ProjectRecordError: If the record is malformed
        """
        if not isinstance(record, dict):
            raise ProjectRecordError("General settings record must be a mapping")
        try:
            self.view_mode = ViewMode(int(record.get("viewmode", self.view_mode)))
            self.settings.toon = bool(record.get("toon", self.settings.toon))
            self.settings.pixelated = bool(record.get("pixelated", self.settings.pixelated))
            self.settings.blend = min(max(int(record.get("blend", self.settings.blend)), 0), 100)
            self.lights_per_texture = bool(record.get("lights per texture", self.lights_per_texture))
            if "ambient light" in record:
                self.settings.ambient_intensity = max(0.0, int(record["ambient light"]) * LIGHT_SCALE)
        except (TypeError, ValueError) as e:
            raise ProjectRecordError(f"Invalid general settings: {e}") from e
        if "sample lights" in record:
            self.sample_processor.light_list = [LightSource.from_record(r) for r in record["sample lights"]]

    def to_record(self) -> Dict[str, Any]:
        """Project record of the whole workspace."""
        return {
            "general": self.general_record(),
            "processors": [processor.to_record() for processor in self.processors],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], loader: Loader = load_image_file, **kwargs) -> "Workspace":
        """
        Rebuild a workspace from its project record.

        Args:
            record: Record produced by to_record()
            loader: Callable returning premultiplied RGBA pixels for a path

        Raises:
            ProjectRecordError: If the record is malformed
        """
        if not isinstance(record, dict):
            raise ProjectRecordError("Project record must be a mapping")
        workspace = cls(**kwargs)
        workspace.apply_general_record(record.get("general", {}))
        for entry in record.get("processors", []):
            processor = SpriteProcessor.from_record(entry, loader, frame_interval_ms=workspace.frame_interval_ms)
            workspace.add_processor(processor)
        return workspace
