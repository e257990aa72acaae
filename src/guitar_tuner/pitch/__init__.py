"""
Pitch resolution on top of the FFT.
"""

from .resolver import (
    DEFAULT_TOLERANCE_HZ,
    bin_to_hz,
    cents_between,
    detect_pitch,
    find_peak,
    match_note,
    nearest_pitch,
    resolve,
)

__all__ = [
    'DEFAULT_TOLERANCE_HZ',
    'bin_to_hz',
    'cents_between',
    'detect_pitch',
    'find_peak',
    'match_note',
    'nearest_pitch',
    'resolve',
]
