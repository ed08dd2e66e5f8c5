from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

import numpy as np

from chartkit.adapters import normalize_values
from chartkit.bars import BarRect
from chartkit.canvas.base import Canvas
from chartkit.charts.base import XYChart, require_data
from chartkit.data import PlotStyle
from chartkit.scales import BoundKind, Expansion, RangeMode
from chartkit.style import AUTO, Style, StyleSpec, element_font, resolve_style

LOGGER = logging.getLogger(__name__)


@dataclass
class HistData:
    name: str
    style: Style
    samples: np.ndarray


def bin_counts(samples: np.ndarray, lo: float, bin_width: float, num_bins: int) -> np.ndarray:
    """Count samples per bin; bin k covers [lo + k*bin_width, lo + (k+1)*bin_width).

    The upper bound of the last bin is inclusive, samples outside all bins
    are not counted.
    """

    if num_bins <= 0:
        return np.zeros(0, dtype=np.int64)
    idx = np.floor((samples - lo) / bin_width).astype(np.int64)
    idx[(idx == num_bins) & np.isclose(samples, lo + num_bins * bin_width)] = num_bins - 1
    idx = idx[(idx >= 0) & (idx < num_bins)]
    return np.bincount(idx, minlength=num_bins)


@dataclass
class HistChart(XYChart):
    """Histogram of one or more samples.

    Bins are as wide as the x tic spacing. Several data sets are drawn side
    by side within each bin, or on top of each other when `stacked`.
    """

    stacked: bool = False
    show_values: bool = False
    data: list[HistData] = field(default_factory=list)

    def add_data(self, name: str, samples: Any, style: StyleSpec = AUTO) -> "HistChart":
        values = normalize_values(samples, label=f"histogram data {name!r}")
        resolved = resolve_style(style, len(self.data), filled=True)
        self.data.append(HistData(name, resolved, values))
        self.x_range.autoscale(float(values.min()))
        self.x_range.autoscale(float(values.max()))
        if name:
            self.key.add_entry(name, resolved, PlotStyle.BOX)
        return self

    def counts(self) -> list[np.ndarray]:
        """Per data set bin counts for the last plotted x range."""

        xr = self.last_x_range()
        if xr is None:
            return []
        return [bin_counts(d.samples, xr.min, xr.delta, self._num_bins(xr.min, xr.max, xr.delta)) for d in self.data]

    @staticmethod
    def _num_bins(lo: float, hi: float, width: float) -> int:
        return int((hi - lo) / width + 0.5)

    def plot(self, canvas: Canvas) -> None:
        require_data(self, self.data)
        xr, yr = self._range_copies()
        # Bins follow the tics, so auto bounds must land on a tic.
        for attr in ("min_mode", "max_mode"):
            mode = getattr(xr, attr)
            if mode.kind is BoundKind.AUTO and mode.expand is Expansion.NONE:
                setattr(xr, attr, RangeMode.auto(Expansion.TO_TIC))
        layout = self._compute_layout(
            canvas,
            x_label=xr.label,
            y_label=yr.label,
            hide_x_tics=xr.tic_setting.hide,
            hide_y_tics=yr.tic_setting.hide,
        )
        fw, fh, _ = canvas.font_metrics(element_font("label"))
        left, width = layout.left + int(2 * fw), layout.width - int(2 * fw)
        top, height = layout.top, layout.height - fh

        nx, ny = layout.num_x_tics, layout.num_y_tics
        xr.setup(nx, nx + 1, width, left)
        bw = xr.delta
        num_bins = self._num_bins(xr.min, xr.max, bw)
        counts = [bin_counts(d.samples, xr.min, bw, num_bins) for d in self.data]
        if self.stacked:
            highest = int(np.sum(counts, axis=0).max()) if num_bins else 0
        else:
            highest = max((int(c.max()) for c in counts if c.size), default=0)
        yr.min_mode = RangeMode.fixed_at(0.0)
        yr.autoscale(0.0)
        yr.autoscale(float(max(highest, 1)))
        yr.setup(ny, ny + 2, height, top, reversed=True)
        self._remember(xr, yr)
        LOGGER.debug("histogram: %d bins of width %g, highest count %d", num_bins, bw, highest)

        self._begin(canvas)
        canvas.draw_x_axis(xr, top + height + fh, top)
        canvas.draw_y_axis(yr, left - int(2 * fw), left + width)

        xf, yf = xr.data_to_screen, yr.data_to_screen
        n = len(self.data)
        rects: list[list[BarRect]] = [[] for _ in range(n)]
        for b in range(num_bins):
            sx0 = xf(xr.min + b * bw)
            sx1 = xf(min(xr.min + (b + 1) * bw, xr.max))
            block = sx1 - sx0 - 1 if self.stacked else (sx1 - sx0 - n) // n
            block = max(1, block)
            below = 0
            for d in range(n):
                cnt = int(counts[d][b])
                x = sx0 + 1 if self.stacked else sx0 + 1 + d * (block + 1)
                if cnt > 0:
                    y0, y = yf(float(below)), yf(float(below + cnt))
                    text = str(cnt) if self.show_values else ""
                    pos = ("ot" if n == 1 else "c") if text else ""
                    rects[d].append(BarRect(x=x, y=y, w=block, h=y0 - y, text=text, text_pos=pos))
                if self.stacked:
                    below += cnt
        for d, r in zip(self.data, rects):
            canvas.draw_bars(r, d.style)

        self._finish(canvas, layout)
