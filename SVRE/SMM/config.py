# =============================================================================
# config.py - RenderConfig
# =============================================================================
#
# Settings fixed at pipeline start.  Built once (from the CLI or by a caller),
# validated once, then passed downward unchanged.  Nothing in the pipeline
# mutates it.

from __future__ import annotations

import math
from dataclasses import dataclass

from SVRE.errors import ConfigurationError
from SVRE.SMM.constants import (
    DEFAULT_WIDTH, DEFAULT_HEIGHT,
    DEFAULT_FFT_SIZE, DEFAULT_FRAME_RATE, DEFAULT_BAR_COUNT,
)
from SVRE.SAM.window_extractor import samples_per_frame


@dataclass(frozen=True)
class RenderConfig:
    """
    Immutable render settings.

    width, height : canvas size in pixels
    fft_size      : transform length in samples
    frame_rate    : output frames per second
    bar_count     : number of bars; must be <= fft_size // 2
    """

    width:      int = DEFAULT_WIDTH
    height:     int = DEFAULT_HEIGHT
    fft_size:   int = DEFAULT_FFT_SIZE
    frame_rate: int = DEFAULT_FRAME_RATE
    bar_count:  int = DEFAULT_BAR_COUNT

    # ── Validation ───────────────────────────────────────────────────────────

    def validate(self) -> RenderConfig:
        """
        Check every field.  Returns self so callers can chain.

        Raises:
            ConfigurationError on the first invalid field.
        """
        for name in ("width", "height", "fft_size", "frame_rate", "bar_count"):
            value = getattr(self, name)
            # bool is an int subclass; True is not a canvas width
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"{name} must be an integer, got {value!r}"
                )
            if value <= 0:
                raise ConfigurationError(f"{name} must be > 0, got {value}")

        if self.bar_count > self.fft_size // 2:
            raise ConfigurationError(
                f"bar_count ({self.bar_count}) must be <= fft_size // 2 "
                f"({self.fft_size // 2})"
            )
        return self

    # ── Derived timing ───────────────────────────────────────────────────────

    def samples_per_frame(self, sample_rate: int) -> int:
        return samples_per_frame(sample_rate, self.frame_rate)

    def total_frames(self, duration_seconds: float) -> int:
        """ceil(duration * frame_rate); a negative duration is an error."""
        if duration_seconds < 0 or math.isnan(duration_seconds):
            raise ConfigurationError(
                f"duration must be >= 0 seconds, got {duration_seconds}"
            )
        return int(math.ceil(duration_seconds * self.frame_rate))

    # ── Factory ──────────────────────────────────────────────────────────────

    @staticmethod
    def from_args(args) -> RenderConfig:
        """Build from an argparse namespace (see SRM/render.py)."""
        return RenderConfig(
            width=args.width,
            height=args.height,
            fft_size=args.fft_size,
            frame_rate=args.fps,
            bar_count=args.bars,
        )
