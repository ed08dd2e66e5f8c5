from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any

from chartkit.bars import bar_width, widen_for_bars
from chartkit.canvas.base import Canvas
from chartkit.charts.base import XYChart, require_data
from chartkit.data import Box, PlotStyle
from chartkit.stats import box_from_sample
from chartkit.style import AUTO, Style, StyleSpec, resolve_style


@dataclass
class BoxData:
    name: str
    style: Style
    boxes: list[Box] = field(default_factory=list)


@dataclass
class BoxChart(XYChart):
    """Box-whisker plots, one box per `add_set` call.

    `box_width` is in screen units; 0 derives it from the spacing of the
    boxes.
    """

    box_width: int = 0
    data: list[BoxData] = field(default_factory=list)

    def next_data_set(self, name: str, style: StyleSpec = AUTO) -> "BoxChart":
        resolved = resolve_style(style, len(self.data), filled=True)
        self.data.append(BoxData(name, resolved))
        if name:
            self.key.add_entry(name, resolved, PlotStyle.BOX)
        return self

    def add_set(self, x: float, data: Any, outliers: bool = True) -> "BoxChart":
        """Summarize `data` as a new box at `x` in the current data set."""

        box = box_from_sample(x, data, outliers=outliers, defaults=self.defaults)
        if not self.data:
            self.next_data_set("")
        self.data[-1].boxes.append(box)
        self.x_range.autoscale(box.x)
        self.y_range.autoscale(box.low)
        self.y_range.autoscale(box.high)
        for v in box.outliers:
            self.y_range.autoscale(v)
        return self

    def plot(self, canvas: Canvas) -> None:
        require_data(self, [b for d in self.data for b in d.boxes])
        xr, yr = self._range_copies()
        layout = self._xy_layout(canvas, xr, yr)

        xs = sorted({b.x for d in self.data for b in d.boxes})
        gap = bar_width(xs)
        nx, ny = layout.num_x_tics, layout.num_y_tics
        xr.setup(nx, nx + 2, layout.width, layout.left)
        yr.setup(ny, ny + 1, layout.height, layout.top, reversed=True)
        if widen_for_bars(xr, gap):
            xr.setup(nx, nx + 2, layout.width, layout.left)
        self._remember(xr, yr)

        xf, yf = xr.data_to_screen, yr.data_to_screen
        width = self.box_width or max(3, (xf(xr.min + gap) - xf(xr.min)) // 2)

        self._begin(canvas)
        canvas.draw_x_axis(xr, layout.bottom, layout.top)
        canvas.draw_y_axis(yr, layout.left, layout.right)

        def sy(v: float) -> float:
            return math.nan if math.isnan(v) else float(yf(v))

        for d in self.data:
            screen = [
                Box(
                    x=float(xf(b.x)),
                    low=sy(b.low),
                    q1=sy(b.q1),
                    med=sy(b.med),
                    avg=sy(b.avg),
                    q3=sy(b.q3),
                    high=sy(b.high),
                    outliers=tuple(sy(v) for v in b.outliers),
                )
                for b in d.boxes
            ]
            canvas.draw_boxes(screen, width, d.style)

        self._finish(canvas, layout)
