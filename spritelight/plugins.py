"""
Plugin boundary for brush tools.

Tools are loaded by the host application; the core only defines the
capabilities a tool exposes and keeps a reference to the active processor
current so tools can edit the sprite under the cursor.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class ActiveProcessorRef:
    """Mutable reference to the processor currently bound to the editor."""

    def __init__(self, processor=None):
        self._processor = processor
        self._listeners: List[Callable[[Any], None]] = []

    def get(self):
        return self._processor

    def set(self, processor) -> None:
        if processor is self._processor:
            return
        self._processor = processor
        for listener in list(self._listeners):
            listener(processor)

    def subscribe(self, listener: Callable[[Any], None]) -> None:
        """Call listener with the new processor on every change."""
        self._listeners.append(listener)


class BrushTool(ABC):
    """
    Capability interface of a brush tool.

    A tool exposes its name, an icon and a configuration widget handle
    (opaque to the core), accepts the active processor and tracks whether
    it is the selected tool.
    """

    def __init__(self):
        self._selected = False
        self.processor = None

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    def icon(self) -> Optional[Any]:
        return None

    @property
    def widget(self) -> Optional[Any]:
        return None

    @property
    def selected(self) -> bool:
        return self._selected

    def set_selected(self, selected: bool) -> None:
        self._selected = bool(selected)

    def set_processor(self, processor) -> None:
        """Bind the tool to a processor (None unbinds)."""
        self.processor = processor

    def bind(self, ref: ActiveProcessorRef) -> None:
        """Follow an active processor reference."""
        self.set_processor(ref.get())
        ref.subscribe(self.set_processor)
        logger.debug(f"Brush tool '{self.name}' bound to active processor")
