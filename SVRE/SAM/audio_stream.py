# =============================================================================
# audio_stream.py - AudioStream contract and adapters
# =============================================================================
#
# The render core only ever sees this contract:
#
#   stream.sample_rate             int    Hz, > 0
#   stream.total_duration_seconds  float  >= 0
#   stream.read(buffer, count)     int    samples written into buffer[:n]
#
# Samples are mono float32, roughly in [-1, 1].  Reads are sequential; there
# is no seek and no rewind.  A read returning 0 means end of stream.
#
# Adapters:
#   ArrayAudioStream - samples already in memory (tests, synthetic signals)
#   SoundFileStream  - decodes a file with soundfile (libsndfile)
#
# Multi-channel audio is downmixed to one stream by averaging the channels of
# each sample frame, so one read of N samples always covers N / sample_rate
# seconds regardless of the file's channel count.
# =============================================================================

from __future__ import annotations

import os
from typing import Protocol

import numpy as np
import soundfile as sf

from SVRE.errors import StreamReadError


class AudioStream(Protocol):
    sample_rate: int
    total_duration_seconds: float

    def read(self, buffer: np.ndarray, count: int) -> int:
        ...


def _to_mono(data: np.ndarray) -> np.ndarray:
    """(n,) stays as is; (n, channels) is averaged across channels."""
    if data.ndim == 1:
        return data
    if data.shape[1] == 1:
        return data[:, 0]
    return data.mean(axis=1)


# ---------------------------------------------------------------------------
# In-memory stream
# ---------------------------------------------------------------------------

class ArrayAudioStream:
    """
    Serves samples from a numpy array.

    Example:
        t = np.arange(44_100) / 44_100
        stream = ArrayAudioStream(np.sin(2 * np.pi * 440 * t), 44_100)
    """

    def __init__(self, samples, sample_rate: int) -> None:
        if sample_rate <= 0:
            raise StreamReadError(f"sample_rate must be > 0, got {sample_rate}")
        self._samples   = _to_mono(np.asarray(samples, dtype=np.float32))
        self._pos       = 0
        self.sample_rate = int(sample_rate)
        self.total_duration_seconds = len(self._samples) / self.sample_rate

    def read(self, buffer: np.ndarray, count: int) -> int:
        n = min(count, len(self._samples) - self._pos)
        if n <= 0:
            return 0
        buffer[:n] = self._samples[self._pos : self._pos + n]
        self._pos += n
        return n


# ---------------------------------------------------------------------------
# File-backed stream (soundfile)
# ---------------------------------------------------------------------------

class SoundFileStream:
    """
    Streams a decoded audio file block by block, never loading it whole.

    Usage:
        with SoundFileStream("song.flac") as stream:
            print(stream.sample_rate, stream.total_duration_seconds)
    """

    def __init__(self, path: str) -> None:
        if not os.path.exists(path):
            raise StreamReadError(f"Audio file not found: {path}")
        try:
            self._file = sf.SoundFile(path)
        except (RuntimeError, OSError) as exc:
            # soundfile.LibsndfileError derives from RuntimeError
            raise StreamReadError(f"Cannot decode {path}: {exc}") from exc

        self.path        = path
        self.channels    = self._file.channels
        self.sample_rate = self._file.samplerate
        self.total_duration_seconds = self._file.frames / self._file.samplerate

    def read(self, buffer: np.ndarray, count: int) -> int:
        data = self._file.read(frames=count, dtype="float32", always_2d=True)
        n = data.shape[0]
        if n:
            buffer[:n] = _to_mono(data)
        return n

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> SoundFileStream:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_audio(path: str) -> SoundFileStream:
    """Open any format libsndfile can decode (WAV, FLAC, OGG, MP3, ...)."""
    return SoundFileStream(path)
