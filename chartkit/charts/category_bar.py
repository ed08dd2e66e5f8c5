from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any

from chartkit.adapters import normalize_categories
from chartkit.bars import BarValues, baseline, category_bar_rects, category_range, stacked_extent
from chartkit.canvas.base import Canvas
from chartkit.charts.base import Chart
from chartkit.data import PlotStyle
from chartkit.errors import EmptyInputError
from chartkit.scales import Range, RangeMode, Tic
from chartkit.style import AUTO, Style, StyleSpec, element_font, resolve_style


@dataclass
class CategoryData:
    name: str
    style: Style
    samples: dict[str, float]


@dataclass
class CategoryBarChart(Chart):
    """Bars over categorical x positions, side by side or stacked.

    Category i is centered at x = i + 1. Values for categories missing
    from `categories` are ignored. Stacked charts always start at zero.
    """

    categories: list[str] = field(default_factory=list)
    x_label: str = ""
    y_range: Range = field(default_factory=Range)
    stacked: bool = False
    show_values: BarValues = BarValues.OFF
    data: list[CategoryData] = field(default_factory=list)

    _last_x_range: Range | None = field(default=None, init=False, repr=False)
    _last_y_range: Range | None = field(default=None, init=False, repr=False)

    def add_data(self, name: str, values: Any, style: StyleSpec = AUTO) -> "CategoryBarChart":
        samples = normalize_categories(values)
        resolved = resolve_style(style, len(self.data), filled=True)
        self.data.append(CategoryData(name, resolved, samples))
        for v in samples.values():
            self.y_range.autoscale(v)
        if name:
            self.key.add_entry(name, resolved, PlotStyle.BOX)
        return self

    def last_x_range(self) -> Range | None:
        return self._last_x_range

    def last_y_range(self) -> Range | None:
        return self._last_y_range

    def _aligned(self) -> list[list[float]]:
        index = {c: i for i, c in enumerate(self.categories)}
        rows = []
        for d in self.data:
            row = [0.0] * len(self.categories)
            for cat, v in d.samples.items():
                if cat in index:
                    row[index[cat]] += v
            rows.append(row)
        return rows

    def plot(self, canvas: Canvas) -> None:
        n = len(self.categories)
        if n == 0 or not self.data:
            raise EmptyInputError("CategoryBarChart needs categories and data to plot")
        xr = category_range(n)
        xr.label = self.x_label
        yr = self.y_range.copy()
        yr.defaults = self.defaults
        if not yr.has_data:
            yr.autoscale(0.0)

        layout = self._compute_layout(
            canvas,
            x_label=self.x_label,
            y_label=yr.label,
            hide_x_tics=False,
            hide_y_tics=yr.tic_setting.hide,
        )
        fw, fh, _ = canvas.font_metrics(element_font("label"))
        # Inset the bars from the axes.
        left, width = layout.left + int(2 * fw), layout.width - int(2 * fw)
        top, height = layout.top, layout.height - fh

        if self.stacked:
            _, hi = stacked_extent(self._aligned())
            yr.min_mode = RangeMode.fixed_at(0.0)
            yr.autoscale(0.0)
            yr.autoscale(hi)
        ny = layout.num_y_tics
        yr.setup(ny, ny + 2, height, top, reversed=True)

        xr.setup(n, n, width, left)
        xr.tics = [Tic(pos=math.nan, label_pos=float(i + 1), label=cat) for i, cat in enumerate(self.categories)]
        self._last_x_range, self._last_y_range = xr, yr

        self._begin(canvas)
        canvas.draw_x_axis(xr, top + height + fh, top)
        canvas.draw_y_axis(yr, left - int(2 * fw), left + width)

        xf, yf = xr.data_to_screen, yr.data_to_screen
        rects = category_bar_rects(
            self.categories,
            [d.samples for d in self.data],
            xf,
            yf,
            baseline(yr, yf),
            stacked=self.stacked,
            show=self.show_values,
        )
        for d, r in zip(self.data, rects):
            canvas.draw_bars(r, d.style)

        self._finish(canvas, layout)
