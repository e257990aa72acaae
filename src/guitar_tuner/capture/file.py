"""
Frames read from an audio file via soundfile.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
import soundfile as sf

from ..errors import DeviceInitFailed
from .base import FrameSource

logger = logging.getLogger(__name__)


class WavFileSource(FrameSource):
    """
    Reads int16 frames from the first channel of an audio file.

    The sample rate is taken from the file. A short final frame is zero-padded;
    after the last frame, read() returns 0.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file: Optional[sf.SoundFile] = None
        try:
            sample_rate = sf.info(str(self.path)).samplerate
        except RuntimeError as e:
            raise DeviceInitFailed(f"Cannot open {self.path}: {e}") from e
        super().__init__(sample_rate)

    def open(self) -> None:
        if self._file is not None:
            return
        try:
            self._file = sf.SoundFile(str(self.path))
        except RuntimeError as e:
            raise DeviceInitFailed(f"Cannot open {self.path}: {e}") from e
        logger.info("Opened %s (%d Hz, %d channel(s))",
                    self.path.name, self._file.samplerate, self._file.channels)

    def read(self, buffer: np.ndarray) -> int:
        if self._file is None:
            return -1
        data = self._file.read(frames=len(buffer), dtype='int16', always_2d=True)
        count = len(data)
        if count == 0:
            return 0
        buffer[:count] = data[:, 0]
        buffer[count:] = 0
        return count

    def close(self) -> None:
        if self._file is None:
            return
        self._file.close()
        self._file = None
