# =============================================================================
# spectral.py - Spectrum Transformer
# =============================================================================
#
# window (read samples) → complex buffer[fft_size] → forward DFT
#
#   buffer[i] = (sample[i], 0)   for i < min(read, fft_size)
#   buffer[i] = (0, 0)           otherwise
#
# TRANSFORM CONVENTION:
#   numpy.fft.fft - unnormalized forward DFT, X[k] = Σ x[n]·e^(-2πikn/N).
#   The bar mapper divides magnitudes by fft_size, which is what its dB window
#   (-100 … 0 dB) is calibrated against.  Do not switch to norm="ortho".
#
# No window function is applied.  The implicit rectangular window leaks
# energy into neighbouring bins; that leakage is part of the expected look
# and is kept on purpose.
#
# Real input → conjugate-symmetric output.  Only [0, fft_size // 2) is ever
# read downstream.

from __future__ import annotations

import numpy as np

from SVRE.errors import TransformError


def validate_fft_size(fft_size: int) -> None:
    """
    Any length >= 2 is accepted: numpy's FFT handles arbitrary sizes, powers
    of two are only faster.
    """
    if isinstance(fft_size, bool) or not isinstance(fft_size, (int, np.integer)):
        raise TransformError(f"fft_size must be an integer, got {fft_size!r}")
    if fft_size < 2:
        raise TransformError(f"fft_size must be >= 2, got {fft_size}")


def build_spectrum_buffer(window: np.ndarray, read: int, fft_size: int) -> np.ndarray:
    """
    Zero-pad or truncate the first `read` samples of `window` to fft_size.

    Returns a fresh complex128 array; `window` is not modified.
    """
    validate_fft_size(fft_size)
    buffer = np.zeros(fft_size, dtype=np.complex128)
    n = min(read, fft_size, len(window))
    if n > 0:
        buffer.real[:n] = window[:n]
    return buffer


def forward_transform(buffer: np.ndarray) -> np.ndarray:
    """
    Forward DFT of a prepared buffer.

    Raises:
        TransformError if the buffer is too short or the result is not
        finite (NaN / inf samples in the input).
    """
    validate_fft_size(len(buffer))
    spectrum = np.fft.fft(buffer)
    if not np.all(np.isfinite(spectrum)):
        raise TransformError("spectrum contains non-finite values (NaN or inf in input samples)")
    return spectrum


def analyze_window(window: np.ndarray, read: int, fft_size: int) -> np.ndarray:
    return forward_transform(build_spectrum_buffer(window, read, fft_size))
