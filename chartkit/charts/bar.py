from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any, Sequence

from chartkit.adapters import normalize_xy
from chartkit.bars import (
    BarValues,
    bar_rects,
    bar_width,
    baseline,
    extreme_bar_widths,
    stacked_bar_rects,
    stacked_extent,
    validate_stacked,
    widen_for_bars,
)
from chartkit.canvas.base import Canvas
from chartkit.charts.base import XYChart, require_data
from chartkit.data import PlotStyle, Point
from chartkit.errors import ChartDataError, EmptyInputError
from chartkit.style import AUTO, Style, StyleSpec, resolve_style

LOGGER = logging.getLogger(__name__)


@dataclass
class BarData:
    name: str
    style: Style
    samples: list[Point]


def as_points(points: Sequence[Any]) -> list[Point]:
    out = []
    for p in points:
        if isinstance(p, Point):
            x, y = p.x, p.y
        else:
            try:
                x, y = p
            except (TypeError, ValueError) as exc:
                raise ChartDataError(f"expected a Point or an (x, y) pair, got {p!r}") from exc
        x, y = float(x), float(y)
        if math.isfinite(x) and math.isfinite(y):
            out.append(Point(x, y))
    return out


@dataclass
class BarChart(XYChart):
    """Bars over a numeric x axis.

    Each data set is drawn with its own inferred bar width (or the narrowest
    one if `same_bar_width`). Sets are painted in order, so a later set
    covers an earlier one at the same x. In `stacked` mode all sets must
    share one x sequence.
    """

    stacked: bool = False
    same_bar_width: bool = False
    bar_width_factor: float = 0.0
    show_values: BarValues = BarValues.OFF
    data: list[BarData] = field(default_factory=list)

    def add_data(self, name: str, points: Sequence[Any], style: StyleSpec = AUTO) -> "BarChart":
        samples = sorted(as_points(points), key=lambda p: p.x)
        if not samples:
            raise EmptyInputError(f"bar data set {name!r} is empty")
        resolved = resolve_style(style, len(self.data), filled=True)
        self.data.append(BarData(name, resolved, samples))
        for p in samples:
            self.x_range.autoscale(p.x)
            self.y_range.autoscale(p.y)
        if name:
            self.key.add_entry(name, resolved, PlotStyle.BOX)
        return self

    def add_data_pair(
        self,
        name: str,
        x: Any,
        y: Any,
        style: StyleSpec = AUTO,
        *,
        data: Any = None,
    ) -> "BarChart":
        xy = normalize_xy(y=y, x=x, data=data, source_name=name)
        return self.add_data(name, list(zip(xy.x.tolist(), xy.y.tolist())), style)

    def plot(self, canvas: Canvas) -> None:
        require_data(self, self.data)
        xr, yr = self._range_copies()
        layout = self._xy_layout(canvas, xr, yr)

        xs = [[p.x for p in d.samples] for d in self.data]
        if self.stacked:
            validate_stacked([(d.name, x) for d, x in zip(self.data, xs)])
            lo, hi = stacked_extent([[p.y for p in d.samples] for d in self.data])
            yr.autoscale(lo)
            yr.autoscale(hi)

        narrowest, widest = extreme_bar_widths(xs, self.bar_width_factor)
        width = narrowest if self.same_bar_width or self.stacked else widest

        nx, ny = layout.num_x_tics, layout.num_y_tics
        xr.setup(nx, nx + 4, layout.width, layout.left)
        yr.setup(ny, ny + 2, layout.height, layout.top, reversed=True)
        if widen_for_bars(xr, width):
            xr.setup(nx, nx + 4, layout.width, layout.left)
        self._remember(xr, yr)

        self._begin(canvas)
        canvas.draw_x_axis(xr, layout.bottom, layout.top)
        canvas.draw_y_axis(yr, layout.left, layout.right)

        xf, yf = xr.data_to_screen, yr.data_to_screen
        if self.stacked:
            rects = stacked_bar_rects([d.samples for d in self.data], narrowest, xf, yf, self.show_values)
            for d, r in zip(self.data, rects):
                canvas.draw_bars(r, d.style)
        else:
            y0 = baseline(yr, yf)
            all_x = [x for s in xs for x in s]
            span = max(all_x) - min(all_x)
            for d, x in zip(self.data, xs):
                w = narrowest if self.same_bar_width else bar_width(x, self.bar_width_factor, span)
                canvas.draw_bars(bar_rects(d.samples, w, xf, yf, y0, self.show_values), d.style)

        self._finish(canvas, layout)
