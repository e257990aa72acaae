"""
Guitar Tuner - FFT pitch detection for monophonic guitar audio

Frames of int16 PCM are transformed with a hand-written radix-2 FFT, the
magnitude peak is converted to Hz and matched against the open strings of a
guitar in standard tuning.

Modules:
    - dsp_core: in-place FFT
    - pitch: peak search and note matching
    - capture: microphone, file and synthetic frame sources
    - tuner: listening pipeline, start/stop controller, display values
"""

from .dsp_core import transform, fft
from .errors import (
    ConfigError,
    DeviceInitFailed,
    InvalidFrameSize,
    PermissionDenied,
    ReadFailure,
    TunerError,
)
from .pitch import detect_pitch, match_note, resolve
from .types import ComplexSpectrum, DetectionResult, ReferencePitch, STANDARD_TUNING

__all__ = [
    'transform',
    'fft',
    'resolve',
    'detect_pitch',
    'match_note',
    'ComplexSpectrum',
    'DetectionResult',
    'ReferencePitch',
    'STANDARD_TUNING',
    'TunerError',
    'PermissionDenied',
    'DeviceInitFailed',
    'ReadFailure',
    'InvalidFrameSize',
    'ConfigError',
]

__version__ = '1.0.0'
