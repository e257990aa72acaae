"""
Pull-based listening pipeline: frame source -> transform/resolve -> sink.

Each frame is analysed independently; nothing is carried between frames.
"""

import logging
import threading
from typing import Callable, Iterator, Optional

import numpy as np

from ..capture.base import FrameSource
from ..config import TunerConfig
from ..errors import ReadFailure
from ..pitch.resolver import detect_pitch
from ..types import DetectionResult

logger = logging.getLogger(__name__)


def iter_frames(
    source: FrameSource,
    frame_size: int,
    stop_event: Optional[threading.Event] = None
) -> Iterator[np.ndarray]:
    """
    Yield frames from an opened source until stopped.

    The stop event is checked once before every read. A short read is
    zero-padded to frame_size. Yielded arrays are fresh copies.

    Raises:
        ReadFailure: When the source returns a non-positive count
    """
    buffer = np.zeros(frame_size, dtype=np.int16)
    while stop_event is None or not stop_event.is_set():
        count = source.read(buffer)
        logger.debug("Read count: %d", count)
        if count <= 0:
            raise ReadFailure(count)
        if count < frame_size:
            buffer[count:] = 0
        yield buffer.copy()


def run_pipeline(
    source: FrameSource,
    sink: Callable[[DetectionResult], None],
    config: TunerConfig,
    stop_event: Optional[threading.Event] = None,
    max_frames: Optional[int] = None
) -> int:
    """
    Analyse frames from an opened source and hand each result to sink.

    Args:
        source: Opened frame source
        sink: Receives one DetectionResult per frame
        config: Frame size, tolerance and reference pitches
        stop_event: Ends the loop when set
        max_frames: Stop after this many frames (None for no limit)

    Returns:
        Number of frames processed

    Raises:
        ReadFailure: Propagated from ``iter_frames``
    """
    frames = 0
    for frame in iter_frames(source, config.frame_size, stop_event):
        result = detect_pitch(
            frame,
            source.sample_rate,
            reference_pitches=config.reference_pitches,
            tolerance_hz=config.tolerance_hz,
            full_spectrum=config.full_spectrum,
        )
        sink(result)
        frames += 1
        if max_frames is not None and frames >= max_frames:
            break
    return frames
