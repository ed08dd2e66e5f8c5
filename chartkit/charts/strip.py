from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

import numpy as np

from chartkit.adapters import normalize_values
from chartkit.canvas.base import Canvas
from chartkit.charts.base import require_data
from chartkit.charts.scatter import ScatterChart, ScatterData
from chartkit.data import EPoint, PlotStyle
from chartkit.scales import RangeMode
from chartkit.style import AUTO, StyleSpec


@dataclass
class StripChart(ScatterChart):
    """One-dimensional scatter plot, one row per data set.

    Data set i is drawn at y = i + 1. With `jitter` the points are spread
    vertically by up to `jitter_width` data units around their row; the
    offsets come from a generator seeded with `seed`, so repeated plots
    look the same. The stored samples are never changed.
    """

    jitter: bool = False
    jitter_width: float = 0.3
    seed: int = 0

    def add_data(
        self,
        name: str,
        points: Any,
        plot_style: PlotStyle = PlotStyle.POINTS,
        style: StyleSpec = AUTO,
    ) -> "StripChart":
        """Add one row; `points` is a 1-D sample of x values."""

        row = float(len(self.data) + 1)
        values = normalize_values(points, label=f"strip data {name!r}")
        super().add_data(name, [EPoint(float(v), row) for v in values], plot_style, style)
        return self

    def plot(self, canvas: Canvas) -> None:
        require_data(self, self.data)
        n = len(self.data)
        xr, yr = self._range_copies()
        yr.label = ""
        yr.tic_setting = replace(yr.tic_setting, hide=True)
        yr.min_mode = RangeMode.fixed_at(0.5)
        yr.max_mode = RangeMode.fixed_at(n + 0.5)
        layout = self._xy_layout(canvas, xr, yr)
        self._setup_ranges(xr, yr, layout)
        self._render(canvas, layout, xr, yr, self._jittered() if self.jitter else self.data)

    def _jittered(self) -> list[ScatterData]:
        rng = np.random.default_rng(self.seed)
        half = self.jitter_width / 2
        out = []
        for d in self.data:
            samples = d.samples or []
            offsets = rng.uniform(-half, half, size=len(samples))
            moved = [replace(p, y=p.y + float(o)) for p, o in zip(samples, offsets)]
            out.append(replace(d, samples=moved))
        return out
