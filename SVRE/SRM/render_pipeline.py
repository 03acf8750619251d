# =============================================================================
# render_pipeline.py - Pipeline Driver
# =============================================================================
#
# Sequences extract → transform → map → rasterize for every frame index and
# hands each finished frame to a FrameSink.
#
# ORDERING GUARANTEE:
#   The stream is read exactly once per frame, in frame order, through one
#   SampleCursor owned by the FrameRenderer.  Frames reach the sink in the
#   same order, gapless, starting at 0.
#
# FRAME COUNT:
#   total_frames = ceil(duration_seconds * frame_rate)
#   The run ends early only when a read returns 0 samples.  A short read is
#   rendered as a normal (zero-padded) frame.
#
# FAILURE:
#   Any SpectrumRenderError is tagged with the frame index it happened on,
#   the sink is aborted so no partial sequence survives, and the error is
#   re-raised.  numpy errors raised while mapping or drawing become a
#   TransformError carrying the same frame index.  Nothing is retried.

from __future__ import annotations

import threading
from typing import Callable, Iterator, NamedTuple

import numpy as np

from SVRE.errors import SpectrumRenderError, SinkWriteError, TransformError
from SVRE.SMM.config import RenderConfig
from SVRE.SAM.window_extractor import SampleCursor, extract_window
from SVRE.SAM.spectral import analyze_window, validate_fft_size
from SVRE.SGM.bar_mapper import map_bars
from SVRE.SGM.rasterizer import Frame, render_frame

ProgressCallback = Callable[[int, int], None]


class RenderPlan(NamedTuple):
    samples_per_frame: int
    total_frames:      int


class RenderResult(NamedTuple):
    frames_rendered: int
    total_frames:    int
    cancelled:       bool
    output:          object = None   # whatever sink.finalize() returned


def plan_render(stream, config: RenderConfig) -> RenderPlan:
    """
    Validate everything that can be checked before frame 0.

    Raises:
        ConfigurationError / TransformError
    """
    config.validate()
    validate_fft_size(config.fft_size)
    return RenderPlan(
        samples_per_frame=config.samples_per_frame(stream.sample_rate),
        total_frames=config.total_frames(stream.total_duration_seconds),
    )


def _tag(exc: SpectrumRenderError, frame_index: int) -> SpectrumRenderError:
    if exc.frame_index is None:
        exc.frame_index = frame_index
    return exc


class FrameRenderer:
    """
    Owns the read cursor and the reusable window buffer for one run.

    next_frame() must be called with consecutive indices; each call consumes
    one window from the stream.
    """

    def __init__(self, stream, config: RenderConfig) -> None:
        self.config = config
        self.plan   = plan_render(stream, config)
        self.cursor = SampleCursor(stream)
        self._window = np.zeros(self.plan.samples_per_frame, dtype=np.float32)

    def next_frame(self, frame_index: int) -> Frame | None:
        """Render the next frame, or return None at end of stream."""
        cfg = self.config
        try:
            read = extract_window(self.cursor, self._window)
            if read == 0:
                return None
            spectrum = analyze_window(self._window, read, cfg.fft_size)
            bars     = map_bars(spectrum, cfg.fft_size, cfg.bar_count, cfg.height)
            pixels   = render_frame(bars, cfg.width, cfg.height)
        except SpectrumRenderError as exc:
            raise _tag(exc, frame_index)
        except (ArithmeticError, ValueError, MemoryError) as exc:
            raise TransformError(f"{type(exc).__name__}: {exc}", frame_index) from exc
        return Frame(frame_index, pixels)


def iter_frames(
    stream,
    config: RenderConfig,
    cancel_event: threading.Event | None = None,
) -> Iterator[Frame]:
    """Yield Frame records in order, without a sink."""
    renderer = FrameRenderer(stream, config)
    for frame_index in range(renderer.plan.total_frames):
        if cancel_event is not None and cancel_event.is_set():
            return
        frame = renderer.next_frame(frame_index)
        if frame is None:
            return
        yield frame


def _emit(sink, frame: Frame) -> None:
    try:
        sink.write(frame.index, frame.pixels)
    except SpectrumRenderError as exc:
        raise _tag(exc, frame.index)
    except OSError as exc:
        raise SinkWriteError(f"{type(exc).__name__}: {exc}", frame.index) from exc


def render(
    stream,
    config:       RenderConfig,
    sink,
    progress:     ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> RenderResult:
    """
    Render every frame of `stream` into `sink`.

    Args:
        stream:       AudioStream (sample_rate, total_duration_seconds, read)
        config:       RenderConfig, validated here before anything is read
        sink:         FrameSink receiving (frame_index, pixels)
        progress:     optional callback(frames_done, total_frames)
        cancel_event: optional threading.Event; checked before each frame

    Returns:
        RenderResult.  frames_rendered < total_frames when the stream ran dry
        early or the run was cancelled.
    """
    rendered = 0
    try:
        renderer = FrameRenderer(stream, config)
        total    = renderer.plan.total_frames

        for frame_index in range(total):
            if cancel_event is not None and cancel_event.is_set():
                sink.abort()
                return RenderResult(rendered, total, True)

            frame = renderer.next_frame(frame_index)
            if frame is None:
                break
            _emit(sink, frame)
            rendered += 1

            if progress is not None:
                progress(rendered, total)

        output = sink.finalize()
    except BaseException:
        sink.abort()
        raise

    return RenderResult(rendered, total, False, output)
