#!/usr/bin/env python3
"""
SpriteLight Exceptions

This module defines custom exceptions used throughout the SpriteLight library.
None of them is fatal: every failure leaves the caller's prior state intact.
"""

class SpriteLightException(Exception):
    """Base class for all SpriteLight exceptions."""
    pass

class FrameError(SpriteLightException):
    """Exception raised when a frame cannot be added or replaced."""
    pass

class ImageDecodeError(FrameError):
    """Exception raised when an image is unreadable or its buffer is malformed."""
    pass

class DimensionMismatchError(FrameError):
    """Exception raised when a new image does not match the sprite's frame size."""

    def __init__(self, expected, actual, path=None):
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        self.path = path
        where = f" for '{path}'" if path else ""
        super().__init__(
            f"Dimension mismatch{where}: expected {self.expected[1]}x{self.expected[0]}, "
            f"got {self.actual[1]}x{self.actual[0]}"
        )

class MapGenerationError(SpriteLightException):
    """Exception raised when map generation fails."""
    pass

class ProjectRecordError(SpriteLightException):
    """Exception raised when a project or settings record is malformed."""
    pass

class ConfigError(SpriteLightException):
    """Exception raised when the configuration cannot be read or written."""
    pass
