import time

import numpy as np
import pytest

from guitar_tuner.capture.synthetic import sine_frame

SAMPLE_RATE = 44100
FRAME_SIZE = 4096


def wait_for(predicate, timeout=5.0, interval=0.01):
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def a2_frame():
    return sine_frame(110.0, SAMPLE_RATE, FRAME_SIZE)


@pytest.fixture
def silent_frame():
    return np.zeros(FRAME_SIZE, dtype=np.int16)
