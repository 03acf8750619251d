# =============================================================================
# progress.py - Console progress bar
# =============================================================================
#
#   [#########################-------------------------] 150/300 frames (50.0%)
#
# Advisory only.  Redrawn in place with a carriage return after every frame.

from __future__ import annotations

import sys

from SVRE.SMM.constants import PROGRESS_BAR_WIDTH


def format_progress(done: int, total: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    percent = min(1.0, done / total) if total > 0 else 1.0
    filled  = min(max(int(percent * width), 0), width)
    return (
        f"[{'#' * filled}{'-' * (width - filled)}] "
        f"{min(done, total)}/{total} frames ({percent * 100:.1f}%)"
    )


class ConsoleProgressBar:
    """Callable progress reporter: pass it as render(..., progress=bar)."""

    def __init__(self, width: int = PROGRESS_BAR_WIDTH, stream=None) -> None:
        self.width  = width
        self.stream = stream if stream is not None else sys.stdout

    def __call__(self, done: int, total: int) -> None:
        self.stream.write("\r" + format_progress(done, total, self.width))
        self.stream.flush()
