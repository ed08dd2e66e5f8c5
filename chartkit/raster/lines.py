from __future__ import annotations

from typing import Mapping
from types import MappingProxyType

import numpy as np

from chartkit.raster.pixels import RGBA, fill_rect
from chartkit.style import LineStyle

# Alternating on/off run lengths in pixels.
DASH_PATTERNS: Mapping[LineStyle, tuple[int, ...]] = MappingProxyType(
    {
        LineStyle.SOLID: (),
        LineStyle.DASHED: (6, 4),
        LineStyle.DOTTED: (2, 3),
        LineStyle.DASH_DOT_DOT: (6, 3, 2, 3, 2, 3),
        LineStyle.LONG_DASH: (12, 6),
        LineStyle.LONG_DOT: (2, 8),
    }
)


def draw_line(
    dst: np.ndarray,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    color: RGBA,
    width: int = 1,
    line_style: LineStyle = LineStyle.SOLID,
) -> None:
    """Bresenham line stamped with a square brush of `width` pixels."""

    if width <= 0:
        return
    pattern = DASH_PATTERNS[LineStyle(line_style)]
    period = sum(pattern)
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    step = 0
    while True:
        if not pattern or _dash_on(pattern, step % period):
            _stamp(dst, x0, y0, color, width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
        step += 1


def draw_polyline(
    dst: np.ndarray,
    xs: list[int],
    ys: list[int],
    color: RGBA,
    width: int = 1,
    line_style: LineStyle = LineStyle.SOLID,
) -> None:
    for i in range(len(xs) - 1):
        draw_line(dst, xs[i], ys[i], xs[i + 1], ys[i + 1], color, width, line_style)


def _dash_on(pattern: tuple[int, ...], pos: int) -> bool:
    for i, run in enumerate(pattern):
        if pos < run:
            return i % 2 == 0
        pos -= run
    return False


def _stamp(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    r = width // 2
    fill_rect(dst, x - r, y - r, 2 * r + 1, 2 * r + 1, color)
