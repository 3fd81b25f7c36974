"""
Animation timer state.

The Animation does not own a clock: the host advances it with tick() and it
reports how many frames to step. This keeps playback deterministic for tests
and lets any event loop drive it.
"""

import logging

logger = logging.getLogger(__name__)

DEFAULT_FRAME_INTERVAL_MS = 100


class Animation:
    """Play/stop state of a sprite animation with a fixed frame interval."""

    def __init__(self, interval_ms: int = DEFAULT_FRAME_INTERVAL_MS):
        if interval_ms <= 0:
            raise ValueError(f"Frame interval must be positive, got {interval_ms}")
        self.interval_ms = int(interval_ms)
        self._playing = False
        self._elapsed = 0.0

    @property
    def playing(self) -> bool:
        return self._playing

    def start(self) -> None:
        """Start playback from the current frame."""
        self._playing = True
        self._elapsed = 0.0
        logger.debug(f"Animation started ({self.interval_ms} ms per frame)")

    def stop(self) -> None:
        """Stop playback; the current frame stays selected."""
        self._playing = False
        self._elapsed = 0.0
        logger.debug("Animation stopped")

    def set_interval(self, interval_ms: int) -> None:
        if interval_ms <= 0:
            raise ValueError(f"Frame interval must be positive, got {interval_ms}")
        self.interval_ms = int(interval_ms)

    def tick(self, elapsed_ms: float) -> int:
        """
        Advance the timer.

        Args:
            elapsed_ms: Time since the previous tick

        Returns:
            Number of frames to advance (0 while stopped)
        """
        if not self._playing:
            return 0
        self._elapsed += max(0.0, float(elapsed_ms))
        steps = int(self._elapsed // self.interval_ms)
        self._elapsed -= steps * self.interval_ms
        return steps
