from __future__ import annotations

from dataclasses import dataclass, field
import logging

from chartkit.canvas.base import Canvas, key_size
from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults
from chartkit.errors import EmptyInputError
from chartkit.key import Key
from chartkit.layout import ChartLayout, compute_layout
from chartkit.scales import Range
from chartkit.style import element_font

LOGGER = logging.getLogger(__name__)


@dataclass
class Chart:
    """Shared configuration of every chart: title, key and tunable constants."""

    title: str = ""
    key: Key = field(default_factory=Key)
    defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS

    _last_layout: ChartLayout | None = field(default=None, init=False, repr=False)

    def plot(self, canvas: Canvas) -> None:
        raise NotImplementedError

    def last_layout(self) -> ChartLayout | None:
        return self._last_layout

    def _compute_layout(
        self,
        canvas: Canvas,
        *,
        x_label: str = "",
        y_label: str = "",
        hide_x_tics: bool = True,
        hide_y_tics: bool = True,
    ) -> ChartLayout:
        fw, fh, _ = canvas.font_metrics(element_font("label"))
        width, height = canvas.size
        layout = compute_layout(
            width,
            height,
            fw,
            fh,
            title=self.title,
            x_label=x_label,
            y_label=y_label,
            hide_x_tics=hide_x_tics,
            hide_y_tics=hide_y_tics,
            key_size=key_size(canvas, self.key, self.defaults),
            key_position=self.key.position,
        )
        self._last_layout = layout
        return layout

    def _begin(self, canvas: Canvas) -> None:
        canvas.begin_frame()
        if self.title:
            canvas.draw_title(self.title)

    def _finish(self, canvas: Canvas, layout: ChartLayout) -> None:
        if not self.key.is_empty:
            canvas.draw_key(layout.key_x, layout.key_y, self.key, self.defaults)
        canvas.end_frame()


@dataclass
class XYChart(Chart):
    """Chart with a numeric (or date/time) x and y axis.

    `x_range`/`y_range` hold the user configuration and the autoscaled data
    extrema; `plot()` works on copies, available afterwards through
    `last_x_range()`/`last_y_range()`.
    """

    x_range: Range = field(default_factory=Range)
    y_range: Range = field(default_factory=Range)

    _last_x_range: Range | None = field(default=None, init=False, repr=False)
    _last_y_range: Range | None = field(default=None, init=False, repr=False)

    def last_x_range(self) -> Range | None:
        return self._last_x_range

    def last_y_range(self) -> Range | None:
        return self._last_y_range

    def _range_copies(self) -> tuple[Range, Range]:
        xr, yr = self.x_range.copy(), self.y_range.copy()
        xr.defaults = yr.defaults = self.defaults
        return xr, yr

    def _xy_layout(self, canvas: Canvas, xr: Range, yr: Range) -> ChartLayout:
        return self._compute_layout(
            canvas,
            x_label=xr.label,
            y_label=yr.label,
            hide_x_tics=xr.tic_setting.hide,
            hide_y_tics=yr.tic_setting.hide,
        )

    def _remember(self, xr: Range, yr: Range) -> None:
        self._last_x_range, self._last_y_range = xr, yr
        LOGGER.debug(
            "%s ranges: x=(%g, %g) y=(%g, %g)",
            type(self).__name__,
            xr.min,
            xr.max,
            yr.min,
            yr.max,
        )


def require_data(chart: Chart, data: list) -> None:
    if not data:
        raise EmptyInputError(f"{type(chart).__name__} has no data to plot")
