# pylint: disable=missing-module-docstring,missing-function-docstring

import numpy as np
import pytest

from SVRE.errors import TransformError
from SVRE.SAM.spectral import (
    analyze_window, build_spectrum_buffer, forward_transform, validate_fft_size,
)


def test_short_read_leaves_exact_zero_tail():
    window = np.random.default_rng(1).uniform(-1, 1, 1470).astype(np.float32)

    buf = build_spectrum_buffer(window, 700, 1024)

    assert buf.dtype == np.complex128
    assert len(buf) == 1024
    assert np.all(buf[700:] == 0)
    assert np.array_equal(buf.real[:700], window[:700].astype(np.float64))
    assert np.all(buf.imag == 0)


def test_long_window_is_truncated_to_fft_size():
    window = np.arange(1470, dtype=np.float32)

    buf = build_spectrum_buffer(window, 1470, 1024)

    assert len(buf) == 1024
    assert buf[-1].real == 1023.0


def test_window_is_not_modified():
    window = np.ones(64, dtype=np.float32)
    build_spectrum_buffer(window, 10, 32)
    assert np.all(window == 1.0)


def test_transform_is_unnormalized():
    # constant 1.0 over the whole buffer → all energy in bin 0, |X[0]| = N
    spectrum = analyze_window(np.ones(1024, dtype=np.float32), 1024, 1024)

    assert abs(spectrum[0]) == pytest.approx(1024.0)
    assert np.allclose(np.abs(spectrum[1:]), 0.0, atol=1e-9)


def test_real_input_gives_conjugate_symmetric_spectrum():
    window = np.random.default_rng(2).uniform(-1, 1, 256)
    spectrum = analyze_window(window, 256, 256)

    for k in range(1, 128):
        assert spectrum[k] == pytest.approx(np.conj(spectrum[256 - k]))


def test_no_window_function_is_applied():
    # A rectangular window keeps the first and last samples at full weight.
    window = np.zeros(64)
    window[0] = 1.0
    spectrum = analyze_window(window, 64, 64)
    assert np.allclose(np.abs(spectrum), 1.0)


@pytest.mark.parametrize("size", [0, 1, -8, 2.5, True])
def test_invalid_fft_size(size):
    with pytest.raises(TransformError):
        validate_fft_size(size)


def test_non_power_of_two_size_is_supported():
    spectrum = analyze_window(np.ones(1000), 1000, 1000)
    assert len(spectrum) == 1000


def test_non_finite_input_raises_transform_error():
    window = np.ones(32)
    window[3] = np.nan
    with pytest.raises(TransformError):
        forward_transform(build_spectrum_buffer(window, 32, 32))
