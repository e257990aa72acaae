"""
Pitch resolution: magnitude spectrum -> dominant frequency -> nearest string.

The resolver is a pure function of a spectrum, the sample rate and the
reference table. The peak is the first bin holding the strict maximum
magnitude, so ties always resolve to the lowest index.
"""

import math
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ..dsp_core.fft import transform
from ..types import ComplexSpectrum, DetectionResult, ReferencePitch, STANDARD_TUNING

DEFAULT_TOLERANCE_HZ = 5.0


def find_peak(magnitudes: np.ndarray, full_spectrum: bool = False) -> int:
    """
    Index of the largest magnitude, first occurrence on ties.

    Args:
        magnitudes: Per-bin magnitudes of an N-point spectrum
        full_spectrum: Scan all N bins instead of 0..N/2. For real input the
            upper half only mirrors the lower one, and a peak found there maps
            above the Nyquist frequency.

    Returns:
        Peak bin index
    """
    n = len(magnitudes)
    limit = n if full_spectrum else n // 2 + 1
    return int(np.argmax(magnitudes[:limit]))


def bin_to_hz(index: int, sample_rate: float, n: int) -> float:
    return index * float(sample_rate) / n


def cents_between(frequency_hz: float, reference_hz: float) -> Optional[float]:
    """Signed distance in cents from reference_hz to frequency_hz."""
    if frequency_hz <= 0 or reference_hz <= 0:
        return None
    return 1200.0 * math.log2(frequency_hz / reference_hz)


def nearest_pitch(
    frequency_hz: float,
    reference_pitches: Sequence[ReferencePitch] = STANDARD_TUNING
) -> Tuple[Optional[ReferencePitch], float]:
    """Closest reference pitch and its absolute distance in Hz (first wins ties)."""
    best = None
    best_diff = math.inf
    for pitch in reference_pitches:
        diff = abs(pitch.frequency_hz - frequency_hz)
        if diff < best_diff:
            best = pitch
            best_diff = diff
    return best, best_diff


def match_note(
    frequency_hz: float,
    reference_pitches: Sequence[ReferencePitch] = STANDARD_TUNING,
    tolerance_hz: float = DEFAULT_TOLERANCE_HZ
) -> Optional[ReferencePitch]:
    """
    Reference pitch nearest to frequency_hz, if it lies strictly within tolerance_hz.

    Args:
        frequency_hz: Estimated frequency
        reference_pitches: Candidate pitches
        tolerance_hz: Exclusive bound on the absolute difference

    Returns:
        The matching ReferencePitch, or None
    """
    pitch, diff = nearest_pitch(frequency_hz, reference_pitches)
    if pitch is not None and diff < tolerance_hz:
        return pitch
    return None


def resolve(
    spectrum: ComplexSpectrum,
    sample_rate: float,
    reference_pitches: Sequence[ReferencePitch] = STANDARD_TUNING,
    tolerance_hz: float = DEFAULT_TOLERANCE_HZ,
    full_spectrum: bool = False
) -> DetectionResult:
    """
    Turn a spectrum into a frequency estimate and a matched note.

    Args:
        spectrum: Output of ``transform``
        sample_rate: Sample rate the frame was captured at (Hz)
        reference_pitches: Candidate pitches to match against
        tolerance_hz: Exclusive matching tolerance in Hz
        full_spectrum: Search all N bins for the peak (see ``find_peak``)

    Returns:
        DetectionResult. A silent frame yields 0 Hz and no match.
    """
    magnitudes = spectrum.magnitudes()
    peak = find_peak(magnitudes, full_spectrum=full_spectrum)
    frequency = bin_to_hz(peak, sample_rate, spectrum.size)

    pitch = match_note(frequency, reference_pitches, tolerance_hz)
    if pitch is None:
        return DetectionResult(frequency_hz=frequency, peak_index=peak)

    return DetectionResult(
        frequency_hz=frequency,
        matched_label=pitch.label,
        peak_index=peak,
        cents=cents_between(frequency, pitch.frequency_hz),
    )


def detect_pitch(
    samples: Union[np.ndarray, Sequence[float]],
    sample_rate: float,
    reference_pitches: Sequence[ReferencePitch] = STANDARD_TUNING,
    tolerance_hz: float = DEFAULT_TOLERANCE_HZ,
    full_spectrum: bool = False
) -> DetectionResult:
    """``resolve(transform(samples))`` for one frame."""
    return resolve(
        transform(samples),
        sample_rate,
        reference_pitches=reference_pitches,
        tolerance_hz=tolerance_hz,
        full_spectrum=full_spectrum,
    )
