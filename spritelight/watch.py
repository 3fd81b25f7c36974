"""
Source file change delivery.

File-system watchers fire several notifications for one save, from their own
threads, and may fire while the file is still being written.
SourceChangeWatcher coalesces the notifications of each path over a debounce
window and queues the path once they settle. The thread that owns the
workspace drains the queue with process_pending(), so the callback always
runs on that thread. Files that are missing or empty (mid-write) are skipped;
the next notification for that path retries.
"""

import logging
import os
import queue
import threading
from typing import Callable, Dict

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 200


class SourceChangeWatcher:
    """Debounced, per-path coalescing of file change notifications."""

    def __init__(self, callback: Callable[[str], object], debounce_ms: int = DEFAULT_DEBOUNCE_MS):
        """
        Args:
            callback: Called on the draining thread with each settled path,
                typically Workspace.on_source_changed
            debounce_ms: Quiet period before a path is queued
        """
        self.callback = callback
        self.debounce_ms = max(0, int(debounce_ms))
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()
        self._settled: "queue.Queue[str]" = queue.Queue()

    def notify(self, path: str) -> None:
        """Record a change notification for path, restarting its debounce window."""
        with self._lock:
            timer = self._timers.pop(path, None)
            if timer is not None:
                timer.cancel()
            timer = threading.Timer(self.debounce_ms / 1000.0, self._settle, args=(path,))
            timer.daemon = True
            self._timers[path] = timer
            timer.start()

    def pending(self) -> int:
        """Number of paths still inside their debounce window."""
        with self._lock:
            return len(self._timers)

    def ready(self) -> int:
        """Number of settled paths waiting for process_pending()."""
        return self._settled.qsize()

    def process_pending(self) -> int:
        """
        Deliver every settled path to the callback on the calling thread.

        Returns:
            Number of paths handed to the callback
        """
        delivered = 0
        seen = set()
        while True:
            try:
                path = self._settled.get_nowait()
            except queue.Empty:
                break
            if path in seen:
                continue
            seen.add(path)
            if self._dispatch(path):
                delivered += 1
        return delivered

    def flush(self) -> int:
        """Settle every pending notification now and deliver the queue."""
        with self._lock:
            timers = dict(self._timers)
            self._timers.clear()
        for path, timer in timers.items():
            timer.cancel()
            self._settled.put(path)
        return self.process_pending()

    def cancel(self) -> None:
        """Drop every pending and settled notification."""
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
        while True:
            try:
                self._settled.get_nowait()
            except queue.Empty:
                break

    def _settle(self, path: str) -> None:
        with self._lock:
            timer = self._timers.get(path)
            if timer is None or timer is not threading.current_thread():
                return
            del self._timers[path]
            self._settled.put(path)
        logger.debug(f"Change of {path} settled")

    def _dispatch(self, path: str) -> bool:
        try:
            size = os.path.getsize(path)
        except OSError:
            logger.debug(f"Ignoring change of missing file {path}")
            return False
        if size == 0:
            logger.debug(f"Ignoring change of empty file {path}")
            return False
        logger.info(f"Source changed: {path}")
        self.callback(path)
        return True
