# =============================================================================
# rasterizer.py - Bars → Pixels
# =============================================================================
#
# Canvas: numpy uint8 array, shape (height, width, 3), RGB, row 0 at the top.
#
# LAYOUT (all integer arithmetic):
#   bar_width = width // bar_count        remainder = right-side margin
#   left      = i * bar_width
#   rect_w    = max(bar_width - 2, 0)     2 px gap to the next bar
#   top       = height - pixel_height     bars grow up from the bottom edge
#
#   Rows [top, height), columns [left, left + rect_w) take the bar colour.
#   width=1280, bar_count=64 → bar_width=20, rect_w=18, no margin.
#
# Every frame starts from a freshly allocated canvas cleared to the
# background, and the returned array is read-only.  Too many bars for the
# width gives zero-width rectangles, never an exception.

from __future__ import annotations

from typing import NamedTuple, Sequence

import numpy as np

from SVRE.SMM.constants import (
    BAR_GAP_PX, BACKGROUND_RGB,
    FRAME_PREFIX, FRAME_EXTENSION, FRAME_PAD_WIDTH,
)
from .bar_mapper import Bar


class Frame(NamedTuple):
    index:  int          # 0-based, gapless, the muxer's ordering key
    pixels: np.ndarray   # (height, width, 3) uint8 RGB, read-only


def frame_name(index: int, pad_width: int = FRAME_PAD_WIDTH) -> str:
    """frame_name(42) → 'frame00042.png'"""
    return f"{FRAME_PREFIX}{index:0{pad_width}d}{FRAME_EXTENSION}"


def pad_width_for(total_frames: int) -> int:
    """Five digits unless the run needs more (over 100 000 frames)."""
    return max(FRAME_PAD_WIDTH, len(str(max(total_frames - 1, 0))))


def bar_rect(
    index:        int,
    bar_count:    int,
    width:        int,
    height:       int,
    pixel_height: int,
) -> tuple[int, int, int, int]:
    """Return (left, top, rect_width, rect_height) for one bar."""
    bar_width    = width // bar_count
    left         = index * bar_width
    rect_width   = max(bar_width - BAR_GAP_PX, 0)
    rect_height  = min(max(pixel_height, 0), height)
    top          = height - rect_height
    return left, top, rect_width, rect_height


def new_canvas(width: int, height: int, background=BACKGROUND_RGB) -> np.ndarray:
    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:, :] = background
    return canvas


def render_frame(
    bars:       Sequence[Bar],
    width:      int,
    height:     int,
    background: tuple[int, int, int] = BACKGROUND_RGB,
) -> np.ndarray:
    """
    Draw one frame.

    Args:
        bars:       output of map_bars(), one entry per column
        width:      canvas width in pixels
        height:     canvas height in pixels
        background: RGB clear colour

    Returns:
        Read-only (height, width, 3) uint8 array.
    """
    canvas    = new_canvas(width, height, background)
    bar_count = len(bars)

    for bar in bars:
        left, top, rect_w, rect_h = bar_rect(bar.index, bar_count, width, height, bar.pixel_height)
        if rect_w == 0 or rect_h == 0:
            continue
        canvas[top:height, left:left + rect_w] = bar.color[:3]

    canvas.flags.writeable = False
    return canvas
