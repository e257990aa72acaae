"""
Frame sources feeding the listening pipeline.

SoundDeviceSource lives in ``capture.microphone`` and WavFileSource in
``capture.file``; both need their audio library at import time.
"""

from .base import FrameSource
from .synthetic import ArrayFrameSource, ToneSource, sine_frame

__all__ = ['FrameSource', 'ArrayFrameSource', 'ToneSource', 'sine_frame']
