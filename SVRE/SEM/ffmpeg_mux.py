# =============================================================================
# ffmpeg_mux.py - ffmpeg discovery and command lines
# =============================================================================
#
# ffmpeg is an external collaborator: SVRE never links against it, it only
# builds argument lists and runs the binary as a child process.
#
# PNG sequence mux (two-stage flow):
#   ffmpeg -y -framerate 30 -i DIR/frame%05d.png -i AUDIO
#          -c:v libx264 -pix_fmt yuv420p -c:a flac OUT.mp4
#
# Raw pipe (single pass):
#   ffmpeg -y -f rawvideo -pix_fmt rgb24 -s 1280x720 -r 30 -i - -i AUDIO
#          -c:v libx264 -pix_fmt yuv420p -c:a flac OUT.mp4
#
# The frame pattern width MUST match the sink's frame_name() padding or
# ffmpeg silently stops at the first name it cannot find.

from __future__ import annotations

import os
import shutil
import subprocess

from SVRE.errors import ConfigurationError, SinkWriteError
from SVRE.SMM.constants import (
    FRAME_PREFIX, FRAME_EXTENSION, FRAME_PAD_WIDTH,
    VIDEO_CODEC, PIXEL_FORMAT, AUDIO_CODEC, RAW_PIXEL_FMT,
    FFMPEG_ENV_VAR,
)

STDERR_TAIL_CHARS = 800


def find_ffmpeg(explicit: str | None = None) -> str:
    """
    Resolve the ffmpeg binary: explicit path, then $FFMPEG, then PATH.

    Raises:
        ConfigurationError if nothing usable is found.
    """
    candidates = [explicit, os.environ.get(FFMPEG_ENV_VAR), "ffmpeg"]
    for cand in candidates:
        if not cand:
            continue
        if os.path.isfile(cand) and os.access(cand, os.X_OK):
            return cand
        found = shutil.which(cand)
        if found:
            return found
        if cand == explicit:
            raise ConfigurationError(f"ffmpeg not found at {explicit!r}")
    raise ConfigurationError(
        "ffmpeg is required to encode video. Install it, put it on PATH, "
        f"or point ${FFMPEG_ENV_VAR} / --ffmpeg at the binary."
    )


def frame_pattern(pad_width: int = FRAME_PAD_WIDTH) -> str:
    """frame_pattern(5) → 'frame%05d.png'"""
    return f"{FRAME_PREFIX}%0{pad_width}d{FRAME_EXTENSION}"


def build_mux_command(
    ffmpeg:      str,
    frames_dir:  str,
    audio_path:  str,
    output_path: str,
    frame_rate:  int,
    pad_width:   int = FRAME_PAD_WIDTH,
) -> list[str]:
    return [
        ffmpeg, "-y",
        "-framerate", str(frame_rate),
        "-i", os.path.join(frames_dir, frame_pattern(pad_width)),
        "-i", audio_path,
        "-c:v", VIDEO_CODEC,
        "-pix_fmt", PIXEL_FORMAT,
        "-c:a", AUDIO_CODEC,
        output_path,
    ]


def build_pipe_command(
    ffmpeg:      str,
    audio_path:  str,
    output_path: str,
    width:       int,
    height:      int,
    frame_rate:  int,
) -> list[str]:
    return [
        ffmpeg, "-y",
        "-loglevel", "error",
        "-f", "rawvideo",
        "-pix_fmt", RAW_PIXEL_FMT,
        "-s", f"{width}x{height}",
        "-r", str(frame_rate),
        "-i", "-",
        "-i", audio_path,
        "-c:v", VIDEO_CODEC,
        "-pix_fmt", PIXEL_FORMAT,
        "-c:a", AUDIO_CODEC,
        output_path,
    ]


def stderr_tail(raw: bytes | None) -> str:
    if not raw:
        return ""
    text = raw.decode("utf-8", errors="replace").strip()
    return text[-STDERR_TAIL_CHARS:]


def mux_png_sequence(
    frames_dir:  str,
    audio_path:  str,
    output_path: str,
    frame_rate:  int,
    ffmpeg:      str | None = None,
    pad_width:   int = FRAME_PAD_WIDTH,
) -> str:
    """
    Combine a finished PNG sequence with the original audio.

    Returns output_path.

    Raises:
        ConfigurationError if ffmpeg cannot be found.
        SinkWriteError if ffmpeg cannot be started or exits non-zero.
    """
    cmd = build_mux_command(
        find_ffmpeg(ffmpeg), frames_dir, audio_path, output_path, frame_rate, pad_width,
    )
    try:
        proc = subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE)
    except OSError as exc:
        raise SinkWriteError(f"could not start ffmpeg: {exc}") from exc

    if proc.returncode != 0:
        raise SinkWriteError(
            f"ffmpeg mux failed (exit {proc.returncode}): {stderr_tail(proc.stderr)}"
        )
    return output_path
