"""
DSP Core Module - Hand-written FFT for the tuner

Modules:
    - fft: in-place radix-2 Fast Fourier Transform (Cooley-Tukey algorithm)
"""

from .fft import transform, fft, frame_bits, is_power_of_two, next_power_of_two

__all__ = [
    'transform',
    'fft',
    'frame_bits',
    'is_power_of_two',
    'next_power_of_two',
]
