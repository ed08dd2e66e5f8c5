from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Mapping, Sequence

from chartkit.adapters import coerce_1d_numeric
from chartkit.canvas.base import Canvas
from chartkit.charts.base import Chart, require_data
from chartkit.data import CatValue, PlotStyle
from chartkit.errors import ChartDataError
from chartkit.pie import PieValues, build_wedges, highlight_geometry, pie_radius, ring_radii, wedge_angles
from chartkit.style import Style, auto_style

LOGGER = logging.getLogger(__name__)


@dataclass
class PieData:
    name: str
    samples: list[CatValue]


def as_cat_values(values: Any) -> list[CatValue]:
    """Accept CatValues, (category, value) pairs or a category->value mapping."""

    if isinstance(values, Mapping):
        values = list(values.items())
    out = []
    for v in values:
        if isinstance(v, CatValue):
            out.append(v)
            continue
        try:
            cat, val = v
        except (TypeError, ValueError) as exc:
            raise ChartDataError(f"expected a CatValue or a (category, value) pair, got {v!r}") from exc
        try:
            out.append(CatValue(str(cat), float(val)))
        except (TypeError, ValueError) as exc:
            raise ChartDataError(f"category {cat!r} has non-numeric value: {val!r}") from exc
    return out


@dataclass
class PieChart(Chart):
    """Pie and ring charts.

    With `stacked` (the default) every further data set is drawn as a ring
    inside the previous one; otherwise the pies are placed side by side.
    `inner_fraction` > 0 leaves a hole in the innermost pie. Categories
    share their style across data sets by position.
    """

    show_values: PieValues = PieValues.OFF
    inner_fraction: float = 0.0
    stacked: bool = True
    data: list[PieData] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 0.0 <= self.inner_fraction < 1.0:
            raise ValueError("inner_fraction must be in [0, 1)")

    def add_data(self, name: str, values: Any) -> "PieChart":
        samples = as_cat_values(values)
        wedge_angles([s.val for s in samples], name)
        self.data.append(PieData(name, samples))
        if name:
            self.key.add_heading(name)
        for i, s in enumerate(samples):
            self.key.add_entry(s.cat, auto_style(i, filled=True), PlotStyle.BOX)
        return self

    def add_data_pair(self, name: str, categories: Sequence[str], values: Any) -> "PieChart":
        vals = coerce_1d_numeric(values, label=f"pie data {name!r}")
        if len(categories) != len(vals):
            raise ChartDataError(f"pie data {name!r}: {len(categories)} categories but {len(vals)} values")
        return self.add_data(name, list(zip(categories, vals.tolist())))

    def _styles(self) -> list[Style]:
        n = max(len(d.samples) for d in self.data)
        return [auto_style(i, filled=True) for i in range(n)]

    def plot(self, canvas: Canvas) -> None:
        require_data(self, self.data)
        layout = self._compute_layout(canvas)
        ecc = canvas.eccentricity
        styles = self._styles()
        highlighted = any(s.highlight for d in self.data for s in d.samples)
        show = PieValues(self.show_values)

        self._begin(canvas)
        if self.stacked:
            radius = pie_radius(layout.width, layout.height, ecc)
            r, shift = highlight_geometry(radius, highlighted, self.defaults)
            cx, cy = layout.left + layout.width // 2, layout.top + layout.height // 2
            radii = ring_radii(r, len(self.data), self.inner_fraction, self.defaults.pie_shrinkage)
            LOGGER.debug("pie at (%d, %d), radii %s, shift %d", cx, cy, radii, shift)
            for d, (ro, ri) in zip(self.data, radii):
                wedges = build_wedges(d.samples, styles, shift=shift, show=show, name=d.name)
                canvas.draw_rings(wedges, cx, cy, ro, ri)
        else:
            n = len(self.data)
            slot = layout.width // n
            radius = pie_radius(slot, layout.height, ecc)
            r, shift = highlight_geometry(radius, highlighted, self.defaults)
            ri = int(r * self.inner_fraction)
            cy = layout.top + layout.height // 2
            for i, d in enumerate(self.data):
                cx = layout.left + i * slot + slot // 2
                LOGGER.debug("pie %d at (%d, %d), radius %d", i, cx, cy, r)
                wedges = build_wedges(d.samples, styles, shift=shift, show=show, name=d.name)
                canvas.draw_rings(wedges, cx, cy, r, ri)

        self._finish(canvas, layout)
