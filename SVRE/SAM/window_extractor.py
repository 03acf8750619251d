# =============================================================================
# window_extractor.py - Per-frame sample windows
# =============================================================================
#
# One output frame = one window of samples_per_frame consecutive samples.
#
#   samples_per_frame = round(sample_rate / frame_rate)
#   44_100 Hz @ 30 fps  →  1470 samples
#
# READ CONTRACT:
#   read == samples_per_frame   normal frame
#   0 < read < samples_per_frame  last partial frame, tail zero-filled, the
#                                 run continues
#   read == 0                   end of stream, the run stops
#
# The read position lives in a SampleCursor object owned by the pipeline
# driver.  There is no module-level cursor.

from __future__ import annotations

import numpy as np

from SVRE.errors import ConfigurationError, SpectrumRenderError, StreamReadError


def samples_per_frame(sample_rate: int, frame_rate: int) -> int:
    if sample_rate <= 0 or frame_rate <= 0:
        raise ConfigurationError(
            f"sample_rate and frame_rate must be > 0, got {sample_rate} / {frame_rate}"
        )
    spf = int(round(sample_rate / frame_rate))
    if spf <= 0:
        raise ConfigurationError(
            f"frame_rate {frame_rate} is too high for {sample_rate} Hz audio "
            f"(samples per frame would be {spf})"
        )
    return spf


class SampleCursor:
    """
    Exclusive owner of an AudioStream's read position.

    The cursor only moves forward.  position counts every sample handed out
    so far, which is also the absolute sample index of the next read.
    """

    def __init__(self, stream) -> None:
        self._stream  = stream
        self.position = 0

    @property
    def sample_rate(self) -> int:
        return self._stream.sample_rate

    def read_into(self, buffer: np.ndarray) -> int:
        """
        Ask the stream for len(buffer) samples.

        Raises:
            StreamReadError if the stream raises, or reports a count outside
            [0, len(buffer)].
        """
        count = len(buffer)
        try:
            read = self._stream.read(buffer, count)
        except SpectrumRenderError:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise StreamReadError(
                f"audio read failed at sample {self.position}: "
                f"{type(exc).__name__}: {exc}"
            ) from exc

        if read is None or read < 0 or read > count:
            raise StreamReadError(
                f"audio stream returned {read!r} samples for a {count}-sample request "
                f"at sample {self.position}"
            )
        self.position += read
        return int(read)


def extract_window(cursor: SampleCursor, window: np.ndarray) -> int:
    """
    Fill `window` with the next block of samples.

    Returns the number of real samples read.  window[read:] is always zeroed,
    so a partial last frame is silence-padded and a reused buffer never leaks
    samples from the previous frame.
    """
    read = cursor.read_into(window)
    window[read:] = 0.0
    return read
