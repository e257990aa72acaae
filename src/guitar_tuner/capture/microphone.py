"""
Microphone capture built on sounddevice blocking reads.
"""

import logging
from typing import Optional, Union

import numpy as np
import sounddevice as sd

from ..dsp_core.fft import next_power_of_two
from ..errors import DeviceInitFailed
from .base import FrameSource

logger = logging.getLogger(__name__)

MIN_FRAME_SIZE = 2048


def recommended_frame_size(
    sample_rate: int,
    device: Optional[Union[int, str]] = None,
    min_frame_size: int = MIN_FRAME_SIZE
) -> int:
    """
    Power-of-two frame size derived from the input device's low-latency block.

    Args:
        sample_rate: Capture rate in Hz
        device: sounddevice device id or name (None for the default input)
        min_frame_size: Floor that keeps the bin width usable for guitar pitches

    Returns:
        Frame size in samples
    """
    try:
        info = sd.query_devices(device, kind='input')
    except (sd.PortAudioError, ValueError) as e:
        raise DeviceInitFailed(f"Cannot query input device: {e}") from e

    latency = float(info.get('default_low_input_latency', 0.0) or 0.0)
    samples = max(1, int(round(latency * sample_rate)))
    return max(next_power_of_two(samples), next_power_of_two(min_frame_size))


class SoundDeviceSource(FrameSource):
    """Mono int16 input stream from a sounddevice input device."""

    def __init__(
        self,
        sample_rate: int,
        frame_size: int,
        device: Optional[Union[int, str]] = None
    ):
        super().__init__(sample_rate)
        self.frame_size = frame_size
        self.device = device
        self.stream: Optional[sd.InputStream] = None
        self._last_status: Optional[str] = None

    def open(self) -> None:
        if self.stream is not None:
            return
        logger.debug("Opening input stream (device=%s, %d Hz, block=%d)",
                     self.device, self.sample_rate, self.frame_size)
        stream = None
        try:
            stream = sd.InputStream(
                device=self.device,
                channels=1,
                samplerate=self.sample_rate,
                dtype='int16',
                blocksize=self.frame_size,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            logger.error("Failed to start input stream: %s", e)
            if stream is not None:
                try:
                    stream.close()
                except sd.PortAudioError as close_error:
                    logger.debug("Stream close error: %s", close_error)
            raise DeviceInitFailed(str(e)) from e
        self.stream = stream
        logger.info("Input stream started (%d Hz)", self.sample_rate)

    def read(self, buffer: np.ndarray) -> int:
        if self.stream is None:
            return -1
        try:
            data, overflowed = self.stream.read(len(buffer))
        except sd.PortAudioError as e:
            logger.error("Input stream read failed: %s", e)
            return -1

        if overflowed:
            status = "input overflow"
            if status != self._last_status:
                logger.warning("Audio stream status: %s", status)
                self._last_status = status

        mono = data[:, 0] if data.ndim > 1 else data
        count = len(mono)
        buffer[:count] = mono
        return count

    def close(self) -> None:
        stream = self.stream
        if stream is None:
            return
        self.stream = None
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as e:
            logger.debug("Stream close error: %s", e)
        logger.info("Input stream stopped")
