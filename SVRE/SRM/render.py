#!/usr/bin/env python3
# =============================================================================
# render.py - Spectrum video renderer (CLI)
# =============================================================================
#
# Renders a spectrum-bar video for one audio file and muxes the original
# audio back in.
#
# Usage:
#   python -m SVRE.SRM.render <audio_file>
#   python -m SVRE.SRM.render <audio_file> -o show.mp4 --bars 32 --fps 60
#   python -m SVRE.SRM.render <audio_file> --mode pipe
#   python -m SVRE.SRM.render <audio_file> --frames-dir frames --keep-frames
#
# Modes:
#   png  (default) - frames → temp dir frame%05d.png → ffmpeg mux → cleanup
#   pipe           - frames streamed into ffmpeg stdin, no images on disk
#
# Exit codes:
#   0   video written
#   1   render failed (message names the frame that failed)
#   130 interrupted (Ctrl-C); partial frames are removed
# =============================================================================

from __future__ import annotations

import argparse
import os
import shutil
import sys
import tempfile

from SVRE.errors import SpectrumRenderError
from SVRE.SMM.config import RenderConfig
from SVRE.SMM.constants import (
    DEFAULT_WIDTH, DEFAULT_HEIGHT,
    DEFAULT_FFT_SIZE, DEFAULT_FRAME_RATE, DEFAULT_BAR_COUNT,
    DEFAULT_OUTPUT_NAME,
)
from SVRE.SAM.audio_stream import open_audio
from SVRE.SGM.rasterizer import pad_width_for
from SVRE.SEM.ffmpeg_mux import find_ffmpeg, mux_png_sequence
from SVRE.SEM.frame_sink import FfmpegPipeSink, PngSequenceSink
from .progress import ConsoleProgressBar
from .render_pipeline import RenderResult, render

DIVIDER = "=" * 68


def run_render(
    audio_path:   str,
    output_path:  str,
    config:       RenderConfig,
    mode:         str = "png",
    frames_dir:   str | None = None,
    keep_frames:  bool = False,
    ffmpeg:       str | None = None,
    quiet:        bool = False,
    cancel_event=None,
) -> RenderResult:
    """
    Full render: decode, draw every frame, encode, mux.

    A frames_dir supplied by the caller is never deleted; the temporary
    directory used otherwise is removed after muxing unless keep_frames.
    """
    config.validate()
    ffmpeg_bin = find_ffmpeg(ffmpeg)
    say = (lambda *a: None) if quiet else print

    with open_audio(audio_path) as stream:
        total = config.total_frames(stream.total_duration_seconds)
        say(f"\n{DIVIDER}")
        say("  Spectrum Video Renderer")
        say(DIVIDER)
        say(f"  File     : {os.path.basename(audio_path)}")
        say(f"  Rate     : {stream.sample_rate} Hz")
        say(f"  Channels : {stream.channels}{'  (downmixed to mono)' if stream.channels > 1 else ''}")
        say(f"  Duration : {stream.total_duration_seconds:.2f} s")
        say(f"  Canvas   : {config.width}x{config.height} @ {config.frame_rate} fps, "
            f"{config.bar_count} bars, FFT {config.fft_size}")
        say(f"\nRendering {total} frames...")

        temp_dir = None
        if mode == "pipe":
            sink = FfmpegPipeSink(
                output_path, audio_path,
                config.width, config.height, config.frame_rate, ffmpeg_bin,
            )
        else:
            if frames_dir is None:
                temp_dir = tempfile.mkdtemp(prefix="TempFrames_")
            sink = PngSequenceSink(frames_dir or temp_dir, pad_width_for(total))

        progress = None if quiet else ConsoleProgressBar()
        try:
            result = render(stream, config, sink, progress, cancel_event)
        except BaseException:
            if temp_dir is not None:
                shutil.rmtree(temp_dir, ignore_errors=True)
            raise

    if result.cancelled:
        say("\n[!!] Render cancelled - partial frames removed.")
        if temp_dir is not None:
            shutil.rmtree(temp_dir, ignore_errors=True)
        return result

    say(f"\nRendering complete: {result.frames_rendered}/{result.total_frames} frames.")

    if result.frames_rendered == 0:
        say("[!!] No audio samples were read - nothing to encode.")
        if temp_dir is not None:
            shutil.rmtree(temp_dir, ignore_errors=True)
        return result._replace(output=None)

    if mode == "pipe":
        say(f"Final video saved as {output_path}")
        return result._replace(output=output_path)

    try:
        say("Merging with audio...")
        mux_png_sequence(
            sink.directory, audio_path, output_path,
            config.frame_rate, ffmpeg_bin, sink.pad_width,
        )
        say(f"Final video saved as {output_path}")
    finally:
        if temp_dir is not None and not keep_frames:
            shutil.rmtree(temp_dir, ignore_errors=True)
        elif temp_dir is not None:
            say(f"[INFO] Frames kept in {temp_dir}")

    return result._replace(output=output_path)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a spectrum-bar video from an audio file",
    )
    parser.add_argument("audio", help="Audio file (WAV, FLAC, OGG, MP3 ...)")
    parser.add_argument(
        "-o", "--output", default=DEFAULT_OUTPUT_NAME,
        help=f"Output video path, default {DEFAULT_OUTPUT_NAME}",
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Canvas width (px)")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="Canvas height (px)")
    parser.add_argument("--fft-size", type=int, default=DEFAULT_FFT_SIZE, help="FFT length (samples)")
    parser.add_argument("--fps", type=int, default=DEFAULT_FRAME_RATE, help="Frames per second")
    parser.add_argument("--bars", type=int, default=DEFAULT_BAR_COUNT, help="Number of bars")
    parser.add_argument(
        "--mode", choices=["png", "pipe"], default="png",
        help="png = image sequence then mux (default), pipe = stream into ffmpeg",
    )
    parser.add_argument("--frames-dir", help="Write PNG frames here instead of a temp dir")
    parser.add_argument(
        "--keep-frames", action="store_true",
        help="Do not delete the temporary PNG frames after muxing",
    )
    parser.add_argument("--ffmpeg", help="Path to the ffmpeg binary")
    parser.add_argument("--quiet", action="store_true", help="No console output")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = RenderConfig.from_args(args)

    try:
        run_render(
            audio_path=args.audio,
            output_path=args.output,
            config=config,
            mode=args.mode,
            frames_dir=args.frames_dir,
            keep_frames=args.keep_frames,
            ffmpeg=args.ffmpeg,
            quiet=args.quiet,
        )
    except SpectrumRenderError as exc:
        print(f"\n[!!] Render failed ({type(exc).__name__}): {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[!!] Interrupted - partial output removed.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
