"""
Base class for frame sources.
"""

from abc import ABC, abstractmethod

import numpy as np


class FrameSource(ABC):
    """
    A blocking supplier of int16 PCM frames at a fixed sample rate.

    All sources must implement:
    - open(): acquire the underlying device or file
    - read(): fill a buffer, returning the number of samples written
      (non-positive means error or end of stream)
    - close(): release what open() acquired
    """

    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate

    @abstractmethod
    def open(self) -> None:
        pass

    @abstractmethod
    def read(self, buffer: np.ndarray) -> int:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self) -> 'FrameSource':
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
