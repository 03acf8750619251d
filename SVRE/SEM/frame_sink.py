# =============================================================================
# frame_sink.py - Frame sinks
# =============================================================================
#
# CONTRACT:
#   sink.write(frame_index, pixels)   frame_index starts at 0 and goes up by
#                                     exactly 1 per call; anything else is a
#                                     SinkWriteError (the muxer cannot see
#                                     gaps, so the sink refuses to make one)
#   sink.finalize()                   run finished; returns the sink's output
#   sink.abort()                      fatal error or cancel; remove anything
#                                     partially written, safe to call twice
#
# The ordering guard lives in FrameSink.write(); subclasses only implement
# _write_frame / _finalize / _abort.
# =============================================================================

from __future__ import annotations

import os
import re
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod

import cv2
import numpy as np

from SVRE.errors import SinkWriteError
from SVRE.SMM.constants import FRAME_PAD_WIDTH, FRAME_PREFIX, FRAME_EXTENSION
from SVRE.SGM.rasterizer import Frame, frame_name
from .ffmpeg_mux import build_pipe_command, find_ffmpeg, stderr_tail

# Any padding width: a reused directory may hold frames from a longer run.
FRAME_FILE_RE = re.compile(rf"{re.escape(FRAME_PREFIX)}\d+{re.escape(FRAME_EXTENSION)}")


class FrameSink(ABC):

    def __init__(self) -> None:
        self._next_index = 0
        self._closed     = False

    @property
    def frames_written(self) -> int:
        return self._next_index

    # ── Public contract ──────────────────────────────────────────────────────

    def write(self, frame_index: int, pixels: np.ndarray) -> None:
        if self._closed:
            raise SinkWriteError("sink is already finalized or aborted", frame_index)
        if frame_index != self._next_index:
            raise SinkWriteError(
                f"out-of-order frame: expected {self._next_index}, got {frame_index}",
                frame_index,
            )
        self._write_frame(frame_index, pixels)
        self._next_index += 1

    def finalize(self):
        if self._closed:
            raise SinkWriteError("sink is already finalized or aborted")
        self._closed = True
        return self._finalize()

    def abort(self) -> None:
        self._closed = True
        self._abort()

    # ── Implementation hooks ─────────────────────────────────────────────────

    @abstractmethod
    def _write_frame(self, frame_index: int, pixels: np.ndarray) -> None:
        ...

    def _finalize(self):
        return None

    def _abort(self) -> None:
        return None


# ---------------------------------------------------------------------------
# In-memory sink
# ---------------------------------------------------------------------------

class MemoryFrameSink(FrameSink):
    """Keeps every Frame in a list.  finalize() returns that list."""

    def __init__(self) -> None:
        super().__init__()
        self.frames: list[Frame] = []

    def _write_frame(self, frame_index: int, pixels: np.ndarray) -> None:
        self.frames.append(Frame(frame_index, pixels))

    def _finalize(self) -> list[Frame]:
        return self.frames

    def _abort(self) -> None:
        self.frames.clear()


# ---------------------------------------------------------------------------
# PNG sequence sink (OpenCV)
# ---------------------------------------------------------------------------

class PngSequenceSink(FrameSink):
    """
    Writes DIR/frame00000.png, DIR/frame00001.png, ...

    OpenCV stores BGR, the rasterizer produces RGB, so every frame is
    converted before imwrite.  Frame files already in DIR are removed up
    front.  On abort every file written by this sink is deleted, and the
    directory too if this sink created it.
    """

    def __init__(self, directory: str, pad_width: int = FRAME_PAD_WIDTH) -> None:
        super().__init__()
        self.directory = directory
        self.pad_width = pad_width
        self._created  = not os.path.isdir(directory)
        self._written: list[str] = []
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise SinkWriteError(f"cannot create frame directory {directory}: {exc}") from exc
        self._clear_stale_frames()

    def _clear_stale_frames(self) -> None:
        """
        Delete frameNNNNN.png files left by an earlier run.  ffmpeg's
        frame%05d.png pattern would otherwise read past our last frame into
        the old sequence.  Other files in the directory are left alone.
        """
        for name in sorted(os.listdir(self.directory)):
            if not FRAME_FILE_RE.fullmatch(name):
                continue
            path = os.path.join(self.directory, name)
            try:
                os.remove(path)
            except OSError as exc:
                raise SinkWriteError(f"cannot remove stale frame {path}: {exc}") from exc

    def _write_frame(self, frame_index: int, pixels: np.ndarray) -> None:
        path = os.path.join(self.directory, frame_name(frame_index, self.pad_width))
        try:
            bgr = cv2.cvtColor(np.ascontiguousarray(pixels), cv2.COLOR_RGB2BGR)
            ok  = cv2.imwrite(path, bgr)
        except cv2.error as exc:
            raise SinkWriteError(f"PNG encode failed for {path}: {exc}", frame_index) from exc
        if not ok:
            raise SinkWriteError(f"could not write {path}", frame_index)
        self._written.append(path)

    def _finalize(self) -> str:
        return self.directory

    def _abort(self) -> None:
        for path in self._written:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
        self._written.clear()
        if self._created:
            shutil.rmtree(self.directory, ignore_errors=True)


# ---------------------------------------------------------------------------
# ffmpeg pipe sink
# ---------------------------------------------------------------------------

class FfmpegPipeSink(FrameSink):
    """
    Streams raw rgb24 frames into ffmpeg's stdin and muxes the audio file in
    the same pass.  No intermediate images on disk.

    ffmpeg's stderr goes to an anonymous temp file instead of a pipe so a
    chatty encoder can never block on a full stderr pipe while we are still
    writing frames.
    """

    def __init__(
        self,
        output_path: str,
        audio_path:  str,
        width:       int,
        height:      int,
        frame_rate:  int,
        ffmpeg:      str | None = None,
    ) -> None:
        super().__init__()
        self.output_path = output_path
        self.width       = width
        self.height      = height
        self._cmd = build_pipe_command(
            find_ffmpeg(ffmpeg), audio_path, output_path, width, height, frame_rate,
        )
        self._stderr = tempfile.TemporaryFile()
        try:
            self._process = subprocess.Popen(
                self._cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=self._stderr,
            )
        except OSError as exc:
            self._stderr.close()
            raise SinkWriteError(f"could not start ffmpeg: {exc}") from exc

    def _read_stderr(self) -> str:
        try:
            self._stderr.seek(0)
            return stderr_tail(self._stderr.read())
        except (OSError, ValueError):
            return ""

    def _write_frame(self, frame_index: int, pixels: np.ndarray) -> None:
        if pixels.shape != (self.height, self.width, 3):
            raise SinkWriteError(
                f"frame shape {pixels.shape} does not match "
                f"{self.height}x{self.width}x3",
                frame_index,
            )
        try:
            self._process.stdin.write(np.ascontiguousarray(pixels, dtype=np.uint8).tobytes())
        except (BrokenPipeError, OSError, ValueError) as exc:
            raise SinkWriteError(
                f"ffmpeg rejected frame ({type(exc).__name__}): {self._read_stderr()}",
                frame_index,
            ) from exc

    def _finalize(self) -> str | None:
        if self.frames_written == 0:
            # nothing to encode; do not leave an empty container behind
            self._abort()
            return None
        try:
            self._process.stdin.close()
        except (BrokenPipeError, OSError):
            pass
        code = self._process.wait()
        tail = self._read_stderr()
        self._stderr.close()
        if code != 0:
            raise SinkWriteError(f"ffmpeg exited with {code}: {tail}")
        return self.output_path

    def _abort(self) -> None:
        if self._process.poll() is None:
            self._process.kill()
            self._process.wait()
        try:
            self._process.stdin.close()
        except (BrokenPipeError, OSError):
            pass
        if not self._stderr.closed:
            self._stderr.close()
        if os.path.exists(self.output_path):
            os.remove(self.output_path)
