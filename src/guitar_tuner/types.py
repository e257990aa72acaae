"""
Value types passed between the transform, the resolver and the presentation layer.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

import numpy as np


class ReferencePitch(NamedTuple):
    """A target pitch, e.g. an open guitar string."""
    label: str
    frequency_hz: float


# Standard guitar tuning (E A D G B E), low to high
STANDARD_TUNING: Tuple[ReferencePitch, ...] = (
    ReferencePitch('E2', 82.41),
    ReferencePitch('A2', 110.00),
    ReferencePitch('D3', 146.83),
    ReferencePitch('G3', 196.00),
    ReferencePitch('B3', 246.94),
    ReferencePitch('E4', 329.63),
)

NO_NOTE_TEXT = "No guitar note detected"


@dataclass(frozen=True, eq=False)
class ComplexSpectrum:
    """
    Unnormalized DFT of one frame, stored as parallel real/imaginary arrays.

    Bin k corresponds to ``k * sample_rate / size`` Hz for k < size / 2; the
    upper half mirrors the negative frequencies of a real-valued frame.
    """
    real: np.ndarray
    imag: np.ndarray

    @property
    def size(self) -> int:
        return len(self.real)

    def magnitudes(self) -> np.ndarray:
        """Per-bin magnitude ``sqrt(re^2 + im^2)``."""
        return np.sqrt(self.real * self.real + self.imag * self.imag)

    def to_complex(self) -> np.ndarray:
        return self.real + 1j * self.imag


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of analysing a single frame."""
    frequency_hz: float
    matched_label: Optional[str] = None
    peak_index: int = 0
    cents: Optional[float] = None

    @property
    def matched(self) -> bool:
        return self.matched_label is not None

    @property
    def status_text(self) -> str:
        if self.matched_label is None:
            return NO_NOTE_TEXT
        return f"Note: {self.matched_label}"
