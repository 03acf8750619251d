#!/usr/bin/env python3
# =============================================================================
# validate.py - SVRE Self-Validation Suite
# =============================================================================
#
# Run directly:  python -m SVRE.SVM.validate
#
# Tests:
#   1. Constants integrity  - dB window, colours, layout, naming
#   2. Timing math          - samples per frame, frame count
#   3. Spectrum + bars      - zero padding, bin sampling, dB boundaries
#   4. Rasterizer           - rect geometry, narrow canvases
#   5. Pipeline             - early end of stream, determinism
# =============================================================================

from __future__ import annotations

import sys

import numpy as np

from SVRE.SMM.constants import (
    DB_EPSILON, DB_FLOOR, DB_RANGE, HEIGHT_BOOST, SILENCE_DB,
    BAR_BLUE, BAR_GAP_PX, BACKGROUND_RGB, FRAME_PAD_WIDTH,
)
from SVRE.SMM.config import RenderConfig
from SVRE.SAM.audio_stream import ArrayAudioStream
from SVRE.SAM.window_extractor import samples_per_frame
from SVRE.SAM.spectral import build_spectrum_buffer, analyze_window
from SVRE.SGM.bar_mapper import (
    bin_indices, magnitude_to_db, normalize_db, pixel_heights, bar_color, map_bars,
)
from SVRE.SGM.rasterizer import bar_rect, frame_name, render_frame
from SVRE.SEM.frame_sink import MemoryFrameSink
from SVRE.SRM.render_pipeline import render

PASS = "[PASS]"
FAIL = "[FAIL]"
INFO = "[INFO]"


def _section(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def run_checks() -> int:
    """Run every check, print a report, return the number of failures."""
    failures = 0

    def check(label: str, condition: bool, detail: str = "") -> bool:
        nonlocal failures
        if condition:
            print(f"  {PASS} {label}")
        else:
            print(f"  {FAIL} {label}{(' -- ' + detail) if detail else ''}")
            failures += 1
        return condition

    # =========================================================================
    # TEST 1 - Constants Integrity
    # =========================================================================
    _section("TEST 1 - Constants Integrity")

    check("DB_FLOOR = -100",            DB_FLOOR == -100.0)
    check("DB_RANGE = 100",             DB_RANGE == 100.0)
    check("DB_EPSILON = 1e-9",          DB_EPSILON == 1e-9)
    check("HEIGHT_BOOST = 1.2",         HEIGHT_BOOST == 1.2)
    check("BAR_GAP_PX = 2",             BAR_GAP_PX == 2)
    check("BAR_BLUE = 50",              BAR_BLUE == 50)
    check("Background is black",        tuple(BACKGROUND_RGB) == (0, 0, 0))
    check("frame_name(42) = frame00042.png",
          frame_name(42) == "frame00042.png", f"got {frame_name(42)}")
    check("Pad width = 5",              FRAME_PAD_WIDTH == 5)

    # =========================================================================
    # TEST 2 - Timing Math
    # =========================================================================
    _section("TEST 2 - Timing Math")

    spf = samples_per_frame(44_100, 30)
    check("44100 Hz @ 30 fps = 1470 samples/frame", spf == 1470, f"got {spf}")
    check("48000 Hz @ 24 fps = 2000 samples/frame",
          samples_per_frame(48_000, 24) == 2000)

    cfg = RenderConfig()
    check("10.01 s @ 30 fps = 301 frames (ceil)",
          cfg.total_frames(10.01) == 301, f"got {cfg.total_frames(10.01)}")
    check("0 s = 0 frames", cfg.total_frames(0.0) == 0)

    # =========================================================================
    # TEST 3 - Spectrum + Bars
    # =========================================================================
    _section("TEST 3 - Spectrum + Bars")

    window = np.ones(1470, dtype=np.float32)
    buf = build_spectrum_buffer(window, 300, 1024)
    check("Zero tail beyond read",       np.all(buf[300:] == 0))
    check("Head copied as (sample, 0)",  np.all(buf[:300] == 1.0 + 0j))

    buf = build_spectrum_buffer(window, 1470, 1024)
    check("Window longer than FFT is truncated", len(buf) == 1024)

    bins = bin_indices(1024, 64)
    check("fft 1024 / 64 bars: bar 10 reads bin 80", bins[10] == 80, f"got {bins[10]}")

    check("-100 dB → normalized 0", float(normalize_db(-100.0)) == 0.0)
    check("0 dB → normalized 1",    float(normalize_db(0.0)) == 1.0)
    check("0 dB → full height",     int(pixel_heights(1.0, 720)) == 720)
    check("+40 dB saturates at 1",  float(normalize_db(40.0)) == 1.0)
    check("Silence dB = SILENCE_DB (-180)",
          abs(float(magnitude_to_db(0.0, 1024)) - SILENCE_DB) < 1e-9)

    silent = analyze_window(np.zeros(1470, dtype=np.float32), 1470, 1024)
    bars = map_bars(silent, 1024, 64, 720)
    check("Silence: every bar normalized 0", all(b.normalized == 0.0 for b in bars))
    check("Silence: every bar height 0",     all(b.pixel_height == 0 for b in bars))
    check("Silence: colour (0, 255, 50)",
          all(b.color[:3] == (0, 255, 50) for b in bars), f"got {bars[0].color}")
    check("Full scale colour (255, 0, 50)", bar_color(1.0)[:3] == (255, 0, 50))

    # =========================================================================
    # TEST 4 - Rasterizer
    # =========================================================================
    _section("TEST 4 - Rasterizer")

    left, top, w, h = bar_rect(3, 64, 1280, 720, 100)
    check("Bar 3 rect = (60, 620, 18, 100)",
          (left, top, w, h) == (60, 620, 18, 100), f"got {(left, top, w, h)}")

    left, top, w, h = bar_rect(0, 64, 100, 720, 100)
    check("Narrow canvas: rect width clamps to 0", w == 0, f"got {w}")

    try:
        img = render_frame(bars, 100, 50)
        check("Narrow canvas renders without error", img.shape == (50, 100, 3))
    except Exception as exc:  # pylint: disable=broad-exception-caught
        check("Narrow canvas renders without error", False, str(exc))

    # =========================================================================
    # TEST 5 - Pipeline
    # =========================================================================
    _section("TEST 5 - Pipeline")

    rng = np.random.default_rng(7)
    audio = (rng.standard_normal(44_100) * 0.3).astype(np.float32)
    small = RenderConfig(width=128, height=72, fft_size=1024, frame_rate=30, bar_count=16)

    sink_a = MemoryFrameSink()
    res_a  = render(ArrayAudioStream(audio, 44_100), small, sink_a)
    sink_b = MemoryFrameSink()
    render(ArrayAudioStream(audio, 44_100), small, sink_b)

    check("1 s @ 30 fps = 30 frames", res_a.frames_rendered == 30,
          f"got {res_a.frames_rendered}")
    check("Frame indices are gapless",
          [f.index for f in sink_a.frames] == list(range(res_a.frames_rendered)))
    check("Re-render is bit-identical",
          all(np.array_equal(a.pixels, b.pixels) for a, b in zip(sink_a.frames, sink_b.frames)))

    print(f"\n  {INFO} Mean bar level of frame 0: "
          f"{np.mean([b.normalized for b in map_bars(analyze_window(audio[:1470], 1470, 1024), 1024, 16, 72)]):.3f}")

    # =========================================================================
    # Summary
    # =========================================================================
    print("\n" + "=" * 60)
    if failures == 0:
        print("  ALL TESTS PASSED")
    else:
        print(f"  {failures} TEST(S) FAILED")
    print("=" * 60 + "\n")
    return failures


def main() -> int:
    return 0 if run_checks() == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
