from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math


class PlotStyle(str, Enum):
    POINTS = "points"
    LINES = "lines"
    LINES_POINTS = "lines+points"
    BOX = "box"

    @property
    def has_points(self) -> bool:
        return self in (PlotStyle.POINTS, PlotStyle.LINES_POINTS)

    @property
    def has_lines(self) -> bool:
        return self in (PlotStyle.LINES, PlotStyle.LINES_POINTS)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class EPoint:
    """A point with optional error bars.

    `delta_x`/`delta_y` are the full error-bar extents (NaN: no bar) and
    `off_x`/`off_y` shift the bar center relative to the point.
    """

    x: float
    y: float
    delta_x: float = math.nan
    delta_y: float = math.nan
    off_x: float = 0.0
    off_y: float = 0.0

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Return (xl, yl, xh, yh) covering the point and its error bars."""

        xl = xh = self.x
        yl = yh = self.y
        if not math.isnan(self.delta_x):
            xl = self.x + self.off_x - self.delta_x / 2
            xh = self.x + self.off_x + self.delta_x / 2
        if not math.isnan(self.delta_y):
            yl = self.y + self.off_y - self.delta_y / 2
            yh = self.y + self.off_y + self.delta_y / 2
        return (min(xl, self.x), min(yl, self.y), max(xh, self.x), max(yh, self.y))


@dataclass(frozen=True)
class CatValue:
    cat: str
    val: float
    highlight: bool = False


@dataclass(frozen=True)
class Box:
    """Six-value summary of one sample plus its outliers."""

    x: float
    low: float
    q1: float
    med: float
    avg: float
    q3: float
    high: float
    outliers: tuple[float, ...] = field(default_factory=tuple)
