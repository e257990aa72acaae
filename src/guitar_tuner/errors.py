"""
Exception types raised by the tuner core.

Capture and device errors are caught at the listening-loop boundary and turned
into status text; computation errors propagate to the caller.
"""

from typing import Optional


class TunerError(Exception):
    """Base class for all tuner errors."""


class PermissionDenied(TunerError):
    """Audio capture permission was not granted."""


class DeviceInitFailed(TunerError):
    """The capture device could not be opened."""


class ReadFailure(TunerError):
    """A frame read returned a non-positive sample count."""

    def __init__(self, count: int, message: Optional[str] = None):
        self.count = count
        super().__init__(message or f"Audio read returned {count}")


class InvalidFrameSize(TunerError, ValueError):
    """The transform was given a frame whose length is not a power of two >= 2."""

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"Frame size must be a power of two >= 2, got {size}")


class ConfigError(TunerError, ValueError):
    """Invalid tuner configuration."""
