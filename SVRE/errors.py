# =============================================================================
# errors.py - SVRE fatal error hierarchy
# =============================================================================
#
# Every error here aborts the whole run.  Nothing is retried: the stream and
# the sink are both ordered and stateful, so a retry would desynchronize frame
# indices and leave a gap the muxer cannot see.
#
#   SpectrumRenderError
#     ├── ConfigurationError   bad settings, raised before frame 0
#     ├── StreamReadError      audio decoder failed mid-read
#     ├── TransformError       unsupported FFT size / non-finite spectrum
#     └── SinkWriteError       frame sink or encoder rejected a frame
# =============================================================================

from __future__ import annotations


class SpectrumRenderError(Exception):
    """
    Base class for all fatal render errors.

    frame_index is filled in by the pipeline driver when the failure happened
    while a specific frame was being produced; it stays None for start-up
    failures.
    """

    def __init__(self, message: str, frame_index: int | None = None) -> None:
        super().__init__(message)
        self.message     = message
        self.frame_index = frame_index

    def __str__(self) -> str:
        if self.frame_index is None:
            return self.message
        return f"frame {self.frame_index:05d}: {self.message}"


class ConfigurationError(SpectrumRenderError, ValueError):
    """Invalid width/height/fft_size/frame_rate/bar_count or missing tool."""


class StreamReadError(SpectrumRenderError):
    """The audio stream failed or misbehaved during a read."""


class TransformError(SpectrumRenderError):
    """The FFT could not be computed for this size or this input."""


class SinkWriteError(SpectrumRenderError):
    """The frame sink (file writer or encoder pipe) rejected a write."""
