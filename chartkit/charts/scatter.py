from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any, Callable, Sequence

from chartkit.adapters import normalize_xy
from chartkit.canvas.base import Canvas, ScreenPoint
from chartkit.charts.base import XYChart, require_data
from chartkit.data import EPoint, PlotStyle
from chartkit.errors import ChartDataError, EmptyInputError
from chartkit.layout import ChartLayout
from chartkit.scales import Range
from chartkit.style import AUTO, Style, StyleSpec, resolve_style

LOGGER = logging.getLogger(__name__)


@dataclass
class ScatterData:
    """One data set (`samples`) or one function (`func`) of a scatter chart."""

    name: str
    plot_style: PlotStyle
    style: Style
    samples: list[EPoint] | None = None
    func: Callable[[float], float] | None = None


def as_epoints(points: Sequence[Any]) -> list[EPoint]:
    """Accept EPoints, (x, y) pairs or (x, y, delta_x, delta_y) tuples."""

    out = []
    for p in points:
        if isinstance(p, EPoint):
            out.append(p)
            continue
        try:
            values = [float(v) for v in p]
        except (TypeError, ValueError) as exc:
            raise ChartDataError(f"expected an EPoint or a numeric tuple, got {p!r}") from exc
        if len(values) == 2:
            out.append(EPoint(values[0], values[1]))
        elif len(values) == 4:
            out.append(EPoint(*values))
        else:
            raise ChartDataError(f"expected 2 or 4 values per point, got {len(values)}")
    return out


def sampling_step(width: int) -> int:
    """Screen distance between two evaluations of a plotted function."""

    step = 8
    if width // step < 20:
        step = 4
    if width // step < 20:
        step = 2
    if width // step < 10:
        step = 1
    return step


def _error_span(center: float, delta: float, lo: float, hi: float) -> tuple[float, float] | None:
    if math.isnan(delta):
        return None
    return max(center - delta / 2, lo), min(center + delta / 2, hi)


def screen_points(points: Sequence[EPoint], xr: Range, yr: Range) -> list[ScreenPoint]:
    """Map points inside both ranges to the screen; error bars are clipped."""

    xf, yf = xr.data_to_screen, yr.data_to_screen
    out = []
    for p in points:
        if not (xr.contains(p.x) and yr.contains(p.y)):
            continue
        xs = _error_span(p.x + p.off_x, p.delta_x, xr.min, xr.max)
        ys = _error_span(p.y + p.off_y, p.delta_y, yr.min, yr.max)
        out.append(
            ScreenPoint(
                x=xf(p.x),
                y=yf(p.y),
                x_low=xf(xs[0]) if xs else None,
                x_high=xf(xs[1]) if xs else None,
                y_low=yf(ys[0]) if ys else None,
                y_high=yf(ys[1]) if ys else None,
            )
        )
    return out


def function_segments(
    func: Callable[[float], float],
    xr: Range,
    yr: Range,
    left: int,
    width: int,
) -> list[list[ScreenPoint]]:
    """Sample `func` across the x range, split where it leaves the y range.

    A segment leaving (or re-entering) the range ends (or starts) with a
    point clamped to the violated bound.
    """

    yf = yr.data_to_screen
    step = sampling_step(width)
    segments: list[list[ScreenPoint]] = []
    current: list[ScreenPoint] = []
    previous: tuple[int, float] | None = None
    for sx in range(left, left + width, step):
        y = func(xr.screen_to_data(sx))
        if y is None or math.isnan(y):
            if current:
                segments.append(current)
            current, previous = [], None
            continue
        if yr.contains(y):
            if not current and previous is not None:
                psx, py = previous
                current.append(ScreenPoint(psx, yf(yr.min if py < yr.min else yr.max)))
            current.append(ScreenPoint(sx, yf(y)))
        elif current:
            current.append(ScreenPoint(sx, yf(yr.min if y < yr.min else yr.max)))
            segments.append(current)
            current = []
        previous = (sx, y)
    if current:
        segments.append(current)
    return segments


@dataclass
class ScatterChart(XYChart):
    """Scatter plots, line charts and function plots.

    Points outside the resolved ranges are not drawn; functions are sampled
    at every few screen units and need an x range that is either fixed or
    fed by data.
    """

    data: list[ScatterData] = field(default_factory=list)

    def add_data(
        self,
        name: str,
        points: Sequence[Any],
        plot_style: PlotStyle = PlotStyle.POINTS,
        style: StyleSpec = AUTO,
    ) -> "ScatterChart":
        samples = [p for p in as_epoints(points) if math.isfinite(p.x) and math.isfinite(p.y)]
        if not samples:
            raise EmptyInputError(f"scatter data set {name!r} is empty")
        resolved = resolve_style(style, len(self.data))
        plot_style = PlotStyle(plot_style)
        self.data.append(ScatterData(name, plot_style, resolved, samples=samples))
        for p in samples:
            xl, yl, xh, yh = p.bounding_box()
            self.x_range.autoscale(xl)
            self.x_range.autoscale(xh)
            self.y_range.autoscale(yl)
            self.y_range.autoscale(yh)
        if name:
            self.key.add_entry(name, resolved, plot_style)
        return self

    def add_data_pair(
        self,
        name: str,
        x: Any,
        y: Any,
        plot_style: PlotStyle = PlotStyle.POINTS,
        style: StyleSpec = AUTO,
        *,
        data: Any = None,
    ) -> "ScatterChart":
        xy = normalize_xy(y=y, x=x, data=data, source_name=name)
        points = [EPoint(a, b) for a, b in zip(xy.x.tolist(), xy.y.tolist())]
        return self.add_data(name, points, plot_style, style)

    def add_func(
        self,
        name: str,
        func: Callable[[float], float],
        plot_style: PlotStyle = PlotStyle.LINES,
        style: StyleSpec = AUTO,
    ) -> "ScatterChart":
        if not callable(func):
            raise ChartDataError(f"function {name!r} is not callable")
        resolved = resolve_style(style, len(self.data))
        plot_style = PlotStyle(plot_style)
        self.data.append(ScatterData(name, plot_style, resolved, func=func))
        if name:
            self.key.add_entry(name, resolved, plot_style)
        return self

    def plot(self, canvas: Canvas) -> None:
        require_data(self, self.data)
        xr, yr = self._range_copies()
        layout = self._xy_layout(canvas, xr, yr)
        self._setup_ranges(xr, yr, layout)
        self._render(canvas, layout, xr, yr, self.data)

    def _setup_ranges(self, xr: Range, yr: Range, layout: ChartLayout) -> None:
        nx, ny = layout.num_x_tics, layout.num_y_tics
        xr.setup(nx, nx + 2, layout.width, layout.left)
        if not yr.has_data:
            # Functions only: scale y to what the functions reach.
            for d in self.data:
                if d.func is not None:
                    for sx in range(layout.left, layout.left + layout.width, sampling_step(layout.width)):
                        yr.autoscale(d.func(xr.screen_to_data(sx)))
        yr.setup(ny, ny + 2, layout.height, layout.top, reversed=True)
        self._remember(xr, yr)

    def _render(
        self,
        canvas: Canvas,
        layout: ChartLayout,
        xr: Range,
        yr: Range,
        data: Sequence[ScatterData],
    ) -> None:
        self._begin(canvas)
        canvas.draw_x_axis(xr, layout.bottom, layout.top)
        canvas.draw_y_axis(yr, layout.left, layout.right)

        for d in data:
            if d.samples is not None:
                canvas.draw_scatter(screen_points(d.samples, xr, yr), d.plot_style, d.style)
            elif d.func is not None:
                segments = function_segments(d.func, xr, yr, layout.left, layout.width)
                LOGGER.debug("function %r drawn in %d segment(s)", d.name, len(segments))
                for seg in segments:
                    canvas.draw_scatter(seg, d.plot_style, d.style)

        self._finish(canvas, layout)
