"""
Synthetic frame sources for demos and tests.
"""

from typing import Optional, Sequence

import numpy as np

from .base import FrameSource


def sine_frame(
    frequency_hz: float,
    sample_rate: int,
    n: int,
    amplitude: float = 10000.0,
    phase: float = 0.0,
    start: int = 0
) -> np.ndarray:
    """One int16 frame of a pure sine, beginning at sample index ``start``."""
    t = (np.arange(n) + start) / sample_rate
    wave = amplitude * np.sin(2 * np.pi * frequency_hz * t + phase)
    return np.round(wave).astype(np.int16)


class ToneSource(FrameSource):
    """
    Continuous sine tone (or silence when frequency_hz is 0).

    Args:
        frequency_hz: Tone frequency
        sample_rate: Sample rate in Hz
        amplitude: Peak amplitude in int16 units
        max_frames: Number of frames before end of stream (None for unlimited)
    """

    def __init__(
        self,
        frequency_hz: float,
        sample_rate: int = 44100,
        amplitude: float = 10000.0,
        max_frames: Optional[int] = None
    ):
        super().__init__(sample_rate)
        self.frequency_hz = frequency_hz
        self.amplitude = amplitude
        self.max_frames = max_frames
        self.frames_read = 0
        self.is_open = False
        self.open_count = 0
        self.close_count = 0
        self._position = 0

    def open(self) -> None:
        self.is_open = True
        self.open_count += 1
        self._position = 0
        self.frames_read = 0

    def read(self, buffer: np.ndarray) -> int:
        if not self.is_open:
            return -1
        if self.max_frames is not None and self.frames_read >= self.max_frames:
            return 0
        n = len(buffer)
        if self.frequency_hz > 0:
            buffer[:] = sine_frame(self.frequency_hz, self.sample_rate, n,
                                   amplitude=self.amplitude, start=self._position)
        else:
            buffer[:] = 0
        self._position += n
        self.frames_read += 1
        return n

    def close(self) -> None:
        self.is_open = False
        self.close_count += 1


class ArrayFrameSource(FrameSource):
    """Replays prepared frames in order, then reports end of stream (0)."""

    def __init__(self, frames: Sequence[np.ndarray], sample_rate: int = 44100):
        super().__init__(sample_rate)
        self.frames = [np.asarray(f, dtype=np.int16) for f in frames]
        self.is_open = False
        self.close_count = 0
        self._index = 0

    def open(self) -> None:
        self.is_open = True
        self._index = 0

    def read(self, buffer: np.ndarray) -> int:
        if not self.is_open or self._index >= len(self.frames):
            return 0
        frame = self.frames[self._index]
        self._index += 1
        count = min(len(frame), len(buffer))
        buffer[:count] = frame[:count]
        return count

    def close(self) -> None:
        self.is_open = False
        self.close_count += 1
