"""
In-place radix-2 FFT using Numba JIT

This module implements the iterative Cooley-Tukey FFT used by the tuner.
The transform operates directly on two float64 arrays (real and imaginary
parts), so no buffer beyond the frame itself is allocated.

Optimizations:
1. Numba JIT compilation (nopython mode)
2. Iterative (non-recursive) implementation
3. In-place bit-reversal permutation
4. One twiddle factor evaluation per butterfly column
"""

import math
from typing import Sequence, Union

import numpy as np
from numba import jit

from ..errors import InvalidFrameSize
from ..types import ComplexSpectrum


def is_power_of_two(n: int) -> bool:
    """True for 1, 2, 4, 8, ..."""
    return n > 0 and n & (n - 1) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (n >= 1)."""
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    return 1 << (int(n) - 1).bit_length()


def frame_bits(n: int) -> int:
    """
    Number of address bits for a frame of length n.

    Raises
    ------
    InvalidFrameSize
        If n is smaller than 2 or not an exact power of two.
    """
    if n < 2 or not is_power_of_two(n):
        raise InvalidFrameSize(n)
    return n.bit_length() - 1


@jit(nopython=True, cache=True)
def _bit_reverse(x: int, n_bits: int) -> int:
    """Reverse the bits of x with n_bits."""
    result = 0
    for _ in range(n_bits):
        result = (result << 1) | (x & 1)
        x >>= 1
    return result


@jit(nopython=True, cache=True)
def _fft_inplace(real: np.ndarray, imag: np.ndarray, n_bits: int) -> None:
    """
    Iterative radix-2 DIT FFT over separate real/imaginary arrays.

    Both arrays are overwritten with the unnormalized DFT coefficients.
    """
    N = len(real)

    # Bit-reversal permutation
    for i in range(1, N):
        j = _bit_reverse(i, n_bits)
        if i < j:
            tmp = real[i]
            real[i] = real[j]
            real[j] = tmp
            tmp = imag[i]
            imag[i] = imag[j]
            imag[j] = tmp

    # Butterflies: stages of size 2, 4, 8, ..., N
    step = 2
    while step <= N:
        half = step // 2
        delta = 2.0 * math.pi / step

        for k in range(half):
            cosine = math.cos(delta * k)
            sine = math.sin(delta * k)

            for i in range(k, N, step):
                j = i + half
                # b * e^{-i*theta}
                t_real = cosine * real[j] + sine * imag[j]
                t_imag = cosine * imag[j] - sine * real[j]

                real[j] = real[i] - t_real
                imag[j] = imag[i] - t_imag
                real[i] += t_real
                imag[i] += t_imag

        step *= 2


def transform(samples: Union[np.ndarray, Sequence[float]]) -> ComplexSpectrum:
    """
    Compute the DFT of a real-valued sample frame.

    Parameters
    ----------
    samples : array-like
        One frame of N amplitudes (typically int16 PCM). N must be a power
        of two and at least 2.

    Returns
    -------
    ComplexSpectrum
        Real and imaginary parts of the N unnormalized DFT coefficients.

    Raises
    ------
    InvalidFrameSize
        If N is not a power of two >= 2.

    Examples
    --------
    >>> spectrum = transform(np.array([1.0, 0.0, -1.0, 0.0]))
    >>> spectrum.real
    array([0., 2., 0., 2.])
    """
    real = np.array(samples, dtype=np.float64)
    if real.ndim != 1:
        raise ValueError(f"Expected a 1-D frame, got shape {real.shape}")

    n_bits = frame_bits(len(real))
    imag = np.zeros_like(real)

    _fft_inplace(real, imag, n_bits)
    return ComplexSpectrum(real=real, imag=imag)


def fft(x: Union[np.ndarray, Sequence[float]]) -> np.ndarray:
    """
    Compute the 1-D DFT of a real frame as a complex128 array.

    Same result as ``scipy.fft.fft`` for power-of-two lengths.
    """
    return transform(x).to_complex()
