#!/usr/bin/env python3
# =============================================================================
# spectrum_probe.py - Per-frame bar inspector
# =============================================================================
#
# Shows what the renderer would draw for a range of frames, as text, without
# writing any images.  Useful for checking levels on a new file before a long
# render.
#
# Usage:
#   python -m SVRE.SVM.spectrum_probe <audio_file>
#   python -m SVRE.SVM.spectrum_probe <audio_file> --start 300 --count 20
#   python -m SVRE.SVM.spectrum_probe <audio_file> --bars 32 --fft-size 2048
#
# Output per frame:
#   frame  time(s)  read  peak bar  peak dB  mean level  ▁▂▃▅▇ sparkline
# =============================================================================

from __future__ import annotations

import argparse
import sys

import numpy as np

from SVRE.errors import SpectrumRenderError
from SVRE.SMM.config import RenderConfig
from SVRE.SMM.constants import DEFAULT_FFT_SIZE, DEFAULT_FRAME_RATE, DEFAULT_BAR_COUNT
from SVRE.SAM.audio_stream import open_audio
from SVRE.SAM.window_extractor import SampleCursor, extract_window
from SVRE.SAM.spectral import analyze_window
from SVRE.SGM.bar_mapper import Bar, map_bars
from SVRE.SRM.render_pipeline import plan_render

SPARK_CHARS = " ▁▂▃▄▅▆▇█"
DIVIDER = "=" * 68


def probe_frames(
    stream,
    config: RenderConfig,
    start:  int = 0,
    count:  int = 10,
) -> list[tuple[int, int, tuple[Bar, ...]]]:
    """
    Return (frame_index, samples_read, bars) for frames [start, start+count).

    Frames before `start` are read and discarded: the stream cannot seek.
    Stops early at end of stream.
    """
    plan   = plan_render(stream, config)
    cursor = SampleCursor(stream)
    window = np.zeros(plan.samples_per_frame, dtype=np.float32)
    stop   = min(start + count, plan.total_frames)
    out    = []

    for frame_index in range(stop):
        read = extract_window(cursor, window)
        if read == 0:
            break
        if frame_index < start:
            continue
        spectrum = analyze_window(window, read, config.fft_size)
        out.append((frame_index, read, map_bars(spectrum, config.fft_size, config.bar_count, config.height)))
    return out


def sparkline(bars: tuple[Bar, ...]) -> str:
    top = len(SPARK_CHARS) - 1
    return "".join(SPARK_CHARS[int(round(b.normalized * top))] for b in bars)


def format_row(frame_index: int, read: int, bars: tuple[Bar, ...], frame_rate: int) -> str:
    peak  = max(bars, key=lambda b: b.normalized)
    mean  = sum(b.normalized for b in bars) / len(bars)
    t     = frame_index / frame_rate
    return (
        f"  {frame_index:05d}  {t:8.3f}  {read:5d}  "
        f"{peak.index:4d}  {peak.db:8.2f}  {mean:6.3f}  {sparkline(bars)}"
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print the bars the renderer would draw")
    parser.add_argument("audio", help="Audio file")
    parser.add_argument("--start", type=int, default=0, help="First frame, default 0")
    parser.add_argument("--count", type=int, default=10, help="Number of frames, default 10")
    parser.add_argument("--fft-size", type=int, default=DEFAULT_FFT_SIZE)
    parser.add_argument("--fps", type=int, default=DEFAULT_FRAME_RATE)
    parser.add_argument("--bars", type=int, default=DEFAULT_BAR_COUNT)
    args = parser.parse_args(argv)

    config = RenderConfig(fft_size=args.fft_size, frame_rate=args.fps, bar_count=args.bars)

    try:
        with open_audio(args.audio) as stream:
            rows = probe_frames(stream, config, args.start, args.count)
    except SpectrumRenderError as exc:
        print(f"  [!!] {exc}", file=sys.stderr)
        return 1

    print(f"\n{DIVIDER}")
    print(f"  Spectrum Probe - {args.audio}")
    print(DIVIDER)
    print(f"  {'frame':<5}  {'time(s)':>8}  {'read':>5}  {'peak':>4}  {'peak dB':>8}  {'mean':>6}  bars")
    if not rows:
        print("  (no frames in range)")
    for frame_index, read, bars in rows:
        print(format_row(frame_index, read, bars, config.frame_rate))
    print(DIVIDER + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
