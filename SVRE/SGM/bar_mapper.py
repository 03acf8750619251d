# =============================================================================
# bar_mapper.py - Spectrum → Bars
# =============================================================================
#
# For bar i of bar_count:
#
#   bin_index  = i * (fft_size // 2 // bar_count)      point sample, no average
#   magnitude  = |spectrum[bin_index]|
#   db         = 20 * log10(magnitude / fft_size + 1e-9)
#   normalized = clamp((db + 100) / 100, 0, 1)
#   height_px  = clamp(round(normalized * height * 1.2), 0, height)
#   colour     = (round(normalized * 255), 255 - red, 50, 255)
#
# BIN SAMPLING:
#   Bars read single bins, spaced fft_size // 2 // bar_count apart.  Bins in
#   between are skipped, so narrow tones can fall between bars.  This is the
#   expected look; do not replace it with per-bar averaging.
#
#   fft_size=1024, bar_count=64  →  step 8  →  bar 10 reads bin 80.
#
# The 1.2 boost only touches the height.  Colour is computed from
# `normalized` so two bars with the same level always share a colour.
#
# All helpers accept scalars or numpy arrays.

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from SVRE.SMM.constants import (
    DB_EPSILON, DB_FLOOR, DB_RANGE, HEIGHT_BOOST,
    COLOR_MAX, BAR_BLUE, BAR_ALPHA,
)


class Bar(NamedTuple):
    index:        int                         # 0-based column
    bin_index:    int                         # spectrum bin this bar samples
    magnitude:    float                       # |spectrum[bin_index]|
    db:           float                       # dB before clamping
    normalized:   float                       # [0, 1]
    pixel_height: int                         # [0, canvas height]
    color:        tuple[int, int, int, int]   # RGBA


# ── Bin selection ────────────────────────────────────────────────────────────

def bin_step(fft_size: int, bar_count: int) -> int:
    return fft_size // 2 // bar_count


def bin_indices(fft_size: int, bar_count: int) -> np.ndarray:
    return np.arange(bar_count, dtype=np.int64) * bin_step(fft_size, bar_count)


# ── Level mapping ────────────────────────────────────────────────────────────

def magnitude_to_db(magnitude, fft_size: int):
    return 20.0 * np.log10(np.asarray(magnitude, dtype=np.float64) / fft_size + DB_EPSILON)


def normalize_db(db):
    """-100 dB → 0.0, 0 dB → 1.0, everything outside saturates."""
    return np.clip((np.asarray(db, dtype=np.float64) - DB_FLOOR) / DB_RANGE, 0.0, 1.0)


def pixel_heights(normalized, height: int):
    """
    Boost by HEIGHT_BOOST, round, re-clamp to the canvas.  Anything at or
    above 1 / 1.2 of full scale ends up at exactly `height`.
    """
    boosted = np.rint(np.asarray(normalized, dtype=np.float64) * height * HEIGHT_BOOST)
    return np.clip(boosted, 0, height).astype(np.int64)


def bar_colors(normalized) -> np.ndarray:
    """
    RGBA per bar, shape (..., 4), uint8.
    Quiet bars are green, loud bars are red, blue stays at BAR_BLUE.
    """
    red = np.rint(np.asarray(normalized, dtype=np.float64) * COLOR_MAX).astype(np.int64)
    red = np.clip(red, 0, COLOR_MAX)
    green = COLOR_MAX - red
    blue  = np.full_like(red, BAR_BLUE)
    alpha = np.full_like(red, BAR_ALPHA)
    return np.stack([red, green, blue, alpha], axis=-1).astype(np.uint8)


def bar_color(normalized: float) -> tuple[int, int, int, int]:
    r, g, b, a = bar_colors(normalized)
    return int(r), int(g), int(b), int(a)


# ── Full mapping ─────────────────────────────────────────────────────────────

def map_bars(spectrum: np.ndarray, fft_size: int, bar_count: int, height: int) -> tuple[Bar, ...]:
    """
    Turn one frame's spectrum into bar_count Bars.

    Args:
        spectrum:  complex array of length fft_size (forward_transform output)
        fft_size:  transform length used to produce `spectrum`
        bar_count: number of bars, <= fft_size // 2
        height:    canvas height in pixels

    Returns:
        Tuple of Bar, ordered by index.  Bars are independent of each other
        and of every other frame.
    """
    bins       = bin_indices(fft_size, bar_count)
    magnitudes = np.abs(spectrum[bins])
    dbs        = magnitude_to_db(magnitudes, fft_size)
    levels     = normalize_db(dbs)
    heights    = pixel_heights(levels, height)
    colors     = bar_colors(levels)

    return tuple(
        Bar(
            index=i,
            bin_index=int(bins[i]),
            magnitude=float(magnitudes[i]),
            db=float(dbs[i]),
            normalized=float(levels[i]),
            pixel_height=int(heights[i]),
            color=tuple(int(c) for c in colors[i]),
        )
        for i in range(bar_count)
    )
