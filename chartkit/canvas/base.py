from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math
from typing import Callable, Literal, Protocol, Sequence

from chartkit.bars import BarRect
from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults
from chartkit.data import Box, PlotStyle
from chartkit.key import DataEntry, Heading, Key, key_vertical_sep, measure_key, text_view_length
from chartkit.pie import Wedge, label_position, label_radius, wedge_center
from chartkit.scales import Range
from chartkit.style import Font, LineStyle, Style, element_font, element_style
from chartkit.timescale import to_datetime

LOGGER = logging.getLogger(__name__)

HAlign = Literal["l", "c", "r"]
VAlign = Literal["t", "c", "b"]

__all__ = [
    "Canvas",
    "CanvasBase",
    "Font",
    "HAlign",
    "ScreenPoint",
    "VAlign",
    "generic_bars",
    "generic_boxes",
    "generic_key",
    "generic_rect",
    "generic_rings",
    "generic_scatter",
    "generic_symbol",
    "generic_text_width",
    "generic_title",
    "generic_x_axis",
    "generic_y_axis",
    "key_size",
    "text_units",
    "tic_length",
]


class Canvas(Protocol):
    """Drawing backend used by every chart.

    Coordinates are screen units with y growing downwards. Angles are
    radians counter-clockwise from the positive x axis. Anything outside
    the canvas is clipped by the backend.
    """

    @property
    def size(self) -> tuple[int, int]: ...

    @property
    def eccentricity(self) -> float: ...

    def font_metrics(self, font: Font) -> tuple[float, int, bool]:
        """(character width, line height, monospaced)."""

    def measure_text(self, text: str, font: Font) -> int: ...

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, style: Style) -> None: ...

    def draw_rect(self, x: int, y: int, w: int, h: int, style: Style) -> None: ...

    def draw_symbol(self, x: int, y: int, symbol: str, style: Style) -> None: ...

    def draw_text(
        self,
        x: int,
        y: int,
        text: str,
        h_align: HAlign = "l",
        v_align: VAlign = "t",
        rotation: int = 0,
        font: Font | None = None,
    ) -> None: ...

    def draw_wedge(
        self,
        x: int,
        y: int,
        outer: int,
        inner: int,
        phi_start: float,
        phi_end: float,
        style: Style,
    ) -> None: ...

    def begin_frame(self) -> None: ...

    def end_frame(self) -> None: ...

    # Composite elements. CanvasBase builds them from the primitives above;
    # backends with special needs (character grids) override them.

    def draw_title(self, text: str) -> None: ...

    def draw_x_axis(self, rng: Range, y: int, y_mirror: int) -> None: ...

    def draw_y_axis(self, rng: Range, x: int, x_mirror: int) -> None: ...

    def draw_scatter(self, points: Sequence[ScreenPoint], plot_style: PlotStyle, style: Style) -> None: ...

    def draw_boxes(self, boxes: Sequence[Box], width: int, style: Style) -> None: ...

    def draw_bars(self, bars: Sequence[BarRect], style: Style) -> None: ...

    def draw_rings(self, wedges: Sequence[Wedge], x: int, y: int, outer: int, inner: int) -> None: ...

    def draw_key(self, x: int, y: int, key: Key, defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS) -> None: ...


@dataclass(frozen=True)
class ScreenPoint:
    """A data point in screen coordinates with optional error bar extents."""

    x: int
    y: int
    x_low: int | None = None
    x_high: int | None = None
    y_low: int | None = None
    y_high: int | None = None


def generic_text_width(text: str, font_width: float, mono: bool) -> int:
    """Width of the longest line of `text` in screen units."""

    lines = text.split("\n")
    if mono:
        return int(max(len(line) for line in lines) * font_width + 0.5)
    return int(max(text_view_length(line) for line in lines) * font_width + 0.5)


def generic_rect(canvas: Canvas, x: int, y: int, w: int, h: int, style: Style) -> None:
    """Rectangle from lines only: horizontal fill strokes, then the outline."""

    if style.fill_color is not None:
        fill = Style(line_color=style.fill_color, line_width=1, alpha=style.alpha)
        for i in range(1, h):
            canvas.draw_line(x + 1, y + i, x + w - 1, y + i, fill)
    if style.line_width > 0:
        canvas.draw_line(x, y, x + w, y, style)
        canvas.draw_line(x + w, y, x + w, y + h, style)
        canvas.draw_line(x + w, y + h, x, y + h, style)
        canvas.draw_line(x, y + h, x, y, style)


def _circle(canvas: Canvas, x: int, y: int, r: int, style: Style) -> None:
    x0, y0 = x + r, y
    a = 0.2
    while a < 2 * math.pi + 0.2:
        x1, y1 = int(r * math.cos(a)) + x, int(r * math.sin(a)) + y
        canvas.draw_line(x0, y0, x1, y1, style)
        x0, y0 = x1, y1
        a += 0.2


def _polygon(canvas: Canvas, xs: Sequence[int], ys: Sequence[int], style: Style) -> None:
    n = len(xs)
    for i in range(n):
        canvas.draw_line(xs[i], ys[i], xs[(i + 1) % n], ys[(i + 1) % n], style)


def _triangle(canvas: Canvas, x: int, y: int, a: int, c: int, d: int, up: bool, style: Style) -> None:
    if up:
        _polygon(canvas, [x - a, x + a, x], [y + d, y + d, y - c], style)
    else:
        _polygon(canvas, [x - a, x + a, x], [y - c, y - c, y + d], style)


def generic_symbol(canvas: Canvas, x: int, y: int, symbol: str, style: Style) -> None:
    """Draw a symbol glyph from lines in the symbol color.

    Filled variants are drawn as nested outlines.
    """

    f = style.symbol_size
    pen = replace(style, line_color=style.glyph_color, line_style=LineStyle.SOLID, line_width=max(1, style.line_width))
    n = 5
    a = int(n * f + 0.5)
    b = int(n / 2 * f + 0.5)
    c = int(1.155 * n * f + 0.5)
    d = int(0.577 * n * f + 0.5)
    e = int(0.866 * n * f + 0.5)

    if symbol in ("*", "X"):
        canvas.draw_line(x - e, y - e, x + e, y + e, pen)
        canvas.draw_line(x - e, y + e, x + e, y - e, pen)
    if symbol in ("*", "+"):
        canvas.draw_line(x - a, y, x + a, y, pen)
        canvas.draw_line(x, y - a, x, y + a, pen)
    elif symbol == "o":
        _circle(canvas, x, y, a, pen)
    elif symbol == "0":
        _circle(canvas, x, y, a, pen)
        _circle(canvas, x, y, b, pen)
    elif symbol == ".":
        _circle(canvas, x, y, b, pen)
    elif symbol == "@":
        for k in range(5, 0, -1):
            _circle(canvas, x, y, (k * a) // 5, pen)
        canvas.draw_line(x, y, x, y, pen)
    elif symbol == "=":
        generic_rect(canvas, x - e, y - e, 2 * e, 2 * e, replace(pen, fill_color=None))
    elif symbol == "#":
        generic_rect(canvas, x - e, y - e, 2 * e, 2 * e, replace(pen, fill_color=pen.line_color))
    elif symbol in ("%", "A", "V", "W"):
        up = symbol in ("%", "A")
        _triangle(canvas, x, y, a, c, d, up, pen)
        if symbol in ("A", "W"):
            for k in (3, 2, 1):
                _triangle(canvas, x, y, (k * a) // 4, (k * c) // 4, (k * d) // 4, up, pen)
    elif symbol in ("&", "Z"):
        _polygon(canvas, [x - e, x, x + e, x], [y, y + e, y, y - e], pen)
        if symbol == "Z":
            for k in (3, 2, 1):
                ee = (k * e) // 4
                _polygon(canvas, [x - ee, x, x + ee, x], [y, y + ee, y, y - ee], pen)
    elif symbol not in ("X", "*"):
        canvas.draw_text(x, y, symbol, "c", "c", 0, Font(color=pen.line_color or "#000000"))


def tic_length(canvas: Canvas) -> int:
    """Tic mark length; character grids have no room for tic marks."""

    _, fh, _ = canvas.font_metrics(element_font("label"))
    if fh <= 1:
        return 0
    return min(12, max(4, fh // 2))


def generic_title(canvas: Canvas, text: str, x: int, y: int = 0) -> None:
    if text:
        canvas.draw_text(x, y, text, "c", "t", 0, element_font("title"))


def _limit_label(rng: Range, value: float) -> str:
    if rng.time:
        return to_datetime(value).strftime("%Y-%m-%d %H:%M:%S")
    return f"{value:g}"


def generic_x_axis(canvas: Canvas, rng: Range, y: int, y_mirror: int) -> None:
    """Axis line, tics, grid, labels, limits and zero line of a horizontal axis."""

    fw, fh, _ = canvas.font_metrics(element_font("label"))
    setting = rng.tic_setting
    tl = 0 if setting.hide else tic_length(canvas)
    gap = 2 * tl if tl else fh
    xa, xe = rng.data_to_screen(rng.min), rng.data_to_screen(rng.max)

    label_y = y + gap
    if not setting.hide:
        label_y += (3 * fh) // 2
    if rng.show_limits:
        font = element_font("rangelimit")
        canvas.draw_text(xa, label_y, _limit_label(rng, rng.min), "l", "t", 0, font)
        canvas.draw_text(xe, label_y, _limit_label(rng, rng.max), "r", "t", 0, font)
    if rng.label:
        canvas.draw_text((xa + xe) // 2, label_y, rng.label, "c", "t", 0, element_font("label"))

    if not setting.hide:
        _draw_grid(canvas, rng, horizontal=True, a=y, b=y_mirror)
        tic_style = element_style("tic")
        font = element_font("tic")
        for tic in rng.tics:
            if not math.isnan(tic.pos) and tl:
                x = rng.data_to_screen(tic.pos)
                for lo, hi in _tic_spans(setting.marks, y, tl, inward=-1):
                    canvas.draw_line(x, lo, x, hi, tic_style)
                if setting.mirror >= 2:
                    for lo, hi in _tic_spans(setting.marks, y_mirror, tl, inward=1):
                        canvas.draw_line(x, lo, x, hi, tic_style)
            canvas.draw_text(rng.data_to_screen(tic.label_pos), y + gap, tic.label, "c", "t", 0, font)

    canvas.draw_line(xa, y, xe, y, element_style("axis"))
    if setting.mirror >= 1:
        canvas.draw_line(xa, y_mirror, xe, y_mirror, element_style("maxis"))
    if rng.show_zero and rng.min < 0 < rng.max:
        z = rng.data_to_screen(0.0)
        canvas.draw_line(z, y, z, y_mirror, element_style("zero"))


def generic_y_axis(canvas: Canvas, rng: Range, x: int, x_mirror: int, label_x: int | None = None) -> None:
    """Vertical counterpart of draw_x_axis; the label is written rotated at `label_x`."""

    fw, fh, _ = canvas.font_metrics(element_font("label"))
    setting = rng.tic_setting
    tl = 0 if setting.hide else tic_length(canvas)
    gap = 2 * tl if tl else int(2 * fw)
    ya, ye = rng.data_to_screen(rng.min), rng.data_to_screen(rng.max)

    if rng.label:
        lx = fh if label_x is None else label_x
        canvas.draw_text(lx, (ya + ye) // 2, rng.label, "c", "c", 90, element_font("label"))
    if rng.show_limits:
        font = element_font("rangelimit")
        canvas.draw_text(x - gap, ya, _limit_label(rng, rng.min), "r", "b", 0, font)
        canvas.draw_text(x - gap, ye, _limit_label(rng, rng.max), "r", "t", 0, font)

    if not setting.hide:
        _draw_grid(canvas, rng, horizontal=False, a=x, b=x_mirror)
        tic_style = element_style("tic")
        font = element_font("tic")
        for tic in rng.tics:
            if not math.isnan(tic.pos) and tl:
                y = rng.data_to_screen(tic.pos)
                for lo, hi in _tic_spans(setting.marks, x, tl, inward=1):
                    canvas.draw_line(lo, y, hi, y, tic_style)
                if setting.mirror >= 2:
                    for lo, hi in _tic_spans(setting.marks, x_mirror, tl, inward=-1):
                        canvas.draw_line(lo, y, hi, y, tic_style)
            canvas.draw_text(x - gap, rng.data_to_screen(tic.label_pos), tic.label, "r", "c", 0, font)

    canvas.draw_line(x, ya, x, ye, element_style("axis"))
    if setting.mirror >= 1:
        canvas.draw_line(x_mirror, ya, x_mirror, ye, element_style("maxis"))
    if rng.show_zero and rng.min < 0 < rng.max:
        z = rng.data_to_screen(0.0)
        canvas.draw_line(x, z, x_mirror, z, element_style("zero"))


def _tic_spans(marks: str, at: int, length: int, inward: int) -> list[tuple[int, int]]:
    if marks == "both":
        return [(at - length, at + length)]
    if marks == "inside":
        return [tuple(sorted((at, at + inward * length)))]  # type: ignore[list-item]
    if marks == "outside":
        return [tuple(sorted((at, at - inward * length)))]  # type: ignore[list-item]
    return []


def _draw_grid(canvas: Canvas, rng: Range, *, horizontal: bool, a: int, b: int) -> None:
    mode = rng.tic_setting.grid
    if mode == "none":
        return
    positions = [rng.data_to_screen(t.pos) for t in rng.tics if not math.isnan(t.pos)]
    if mode == "lines":
        style = element_style("gridl")
        lo, hi = sorted((a, b))
        for p in positions[1:-1]:
            if horizontal:
                canvas.draw_line(p, lo + 1, p, hi - 1, style)
            else:
                canvas.draw_line(lo + 1, p, hi - 1, p, style)
        return

    style = element_style("gridb")
    lo, hi = sorted((a, b))
    end = rng.data_to_screen(rng.max)
    for i, p in enumerate(positions):
        if i % 2 == 1:
            start = positions[i - 1]
        elif i == len(positions) - 1 and abs(end - p) > 1:
            start, p = p, end
        else:
            continue
        s0, s1 = sorted((start, p))
        if horizontal:
            canvas.draw_rect(s0, lo, s1 - s0, hi - lo, style)
        else:
            canvas.draw_rect(lo, s0, hi - lo, s1 - s0, style)


def generic_scatter(canvas: Canvas, points: Sequence[ScreenPoint], plot_style: PlotStyle, style: Style) -> None:
    """Error bars first, then connecting lines, then symbols on top."""

    bar_style = replace(element_style("errorbar"), line_color=style.fill_color or element_style("errorbar").line_color)
    for p in points:
        if p.x_low is not None and p.x_high is not None:
            canvas.draw_line(p.x_low, p.y, p.x_high, p.y, bar_style)
        if p.y_low is not None and p.y_high is not None:
            canvas.draw_line(p.x, p.y_low, p.x, p.y_high, bar_style)

    plot_style = PlotStyle(plot_style)
    if plot_style.has_lines and style.line_width > 0:
        for p0, p1 in zip(points, points[1:]):
            canvas.draw_line(p0.x, p0.y, p1.x, p1.y, style)
    if plot_style.has_points and style.symbol:
        for p in points:
            canvas.draw_symbol(p.x, p.y, style.symbol, style)


def generic_boxes(canvas: Canvas, boxes: Sequence[Box], width: int, style: Style) -> None:
    """Box-whisker glyphs; box fields are already screen coordinates."""

    if width % 2 == 0:
        width += 1
    hbw = (width - 1) // 2
    symbol = style.symbol or "o"
    for box in boxes:
        x = int(box.x)
        q1, q3 = int(box.q1), int(box.q3)
        top, bottom = min(q1, q3), max(q1, q3)
        canvas.draw_rect(x - hbw, top, width, bottom - top, style)
        if not math.isnan(box.med):
            med = int(box.med)
            canvas.draw_line(x - hbw, med, x + hbw, med, style)
        if not math.isnan(box.avg):
            canvas.draw_symbol(x, int(box.avg), symbol, style)
        if not math.isnan(box.high):
            canvas.draw_line(x, q3, x, int(box.high), style)
        if not math.isnan(box.low):
            canvas.draw_line(x, q1, x, int(box.low), style)
        for y in box.outliers:
            canvas.draw_symbol(x, int(y), symbol, style)


def generic_bars(canvas: Canvas, bars: Sequence[BarRect], style: Style, font: Font | None = None) -> None:
    font = font or element_font("value")
    _, fh, _ = canvas.font_metrics(font)
    off = fh // 2 if fh > 1 else fh
    for bar in bars:
        canvas.draw_rect(bar.x, bar.y, bar.w, bar.h, style)
        if not bar.text:
            continue
        cx = bar.x + bar.w // 2
        if bar.text_pos == "ot":
            canvas.draw_text(cx, bar.y - off, bar.text, "c", "b", 0, font)
        elif bar.text_pos == "it":
            canvas.draw_text(cx, bar.y + off, bar.text, "c", "t", 0, font)
        elif bar.text_pos == "ib":
            canvas.draw_text(cx, bar.y + bar.h - off, bar.text, "c", "b", 0, font)
        elif bar.text_pos == "ob":
            canvas.draw_text(cx, bar.y + bar.h + off, bar.text, "c", "t", 0, font)
        else:
            canvas.draw_text(cx, bar.y + bar.h // 2, bar.text, "c", "c", 0, font)


def generic_rings(
    canvas: Canvas,
    wedges: Sequence[Wedge],
    x: int,
    y: int,
    outer: int,
    inner: int,
    font: Font | None = None,
) -> None:
    """Wedges of one ring with their labels."""

    font = font or element_font("value")
    _, fh, _ = canvas.font_metrics(font)
    ecc = canvas.eccentricity
    for w in wedges:
        cx, cy = wedge_center(x, y, w, w.style.line_width, ecc)
        canvas.draw_wedge(cx, cy, outer, inner, w.phi_start, w.phi_end, w.style)
    for w in wedges:
        if w.label:
            cx, cy = wedge_center(x, y, w, w.style.line_width, ecc)
            tx, ty = label_position(cx, cy, label_radius(outer, inner, fh), w.mid, ecc)
            canvas.draw_text(tx, ty, w.label, "c", "c", 0, font)


def text_units(canvas: Canvas, font: Font) -> Callable[[str], float]:
    """Text width in character units as measured by `canvas`."""

    fw, _, _ = canvas.font_metrics(font)
    return lambda text: canvas.measure_text(text, font) / fw


def key_size(canvas: Canvas, key: Key, defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS) -> tuple[int, int] | None:
    """Measured (width, height) of the key, None if nothing is shown."""

    if key.is_empty:
        return None
    font = element_font("key")
    fw, fh, _ = canvas.font_metrics(font)
    metrics = measure_key(key.place(), fw, fh, text_units(canvas, font), defaults)
    return metrics.width, metrics.height


def generic_key(canvas: Canvas, x: int, y: int, key: Key, defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS) -> None:
    if key.is_empty:
        return
    matrix = key.place()
    font = element_font("key")
    fw, fh, _ = canvas.font_metrics(font)
    m = measure_key(matrix, fw, fh, text_units(canvas, font), defaults)
    frame = element_style("key")
    if key.border == -1:
        frame = replace(frame, line_width=0)
    canvas.draw_rect(x, y, m.width, m.height, frame)

    d = defaults
    sym_w = int(d.key_symbol_width * fw)
    x += int(d.key_hor_sep * fw)
    y += int(key_vertical_sep(fh, defaults)) + fh // 2
    for ci, column in enumerate(matrix):
        yy = y
        for ri, entry in enumerate(column):
            if entry is None:
                continue
            if isinstance(entry, Heading):
                _key_text(canvas, x, yy, entry.text, font, fh)
            elif isinstance(entry, DataEntry):
                _key_swatch(canvas, x, yy, sym_w, fh, entry)
                _key_text(canvas, x + int(fw * (d.key_symbol_width + d.key_symbol_sep)), yy, entry.text, font, fh)
            yy += fh * m.row_heights[ri] + int(d.key_row_sep * fh)
        x += int((d.key_symbol_width + d.key_symbol_sep + d.key_col_sep + m.col_widths[ci]) * fw)


def _key_text(canvas: Canvas, x: int, y: int, text: str, font: Font, fh: int) -> None:
    for i, line in enumerate(text.split("\n")):
        canvas.draw_text(x, y + i * fh, line, "l", "c", 0, font)


def _key_swatch(canvas: Canvas, x: int, y: int, width: int, fh: int, entry: DataEntry) -> None:
    style = entry.style
    if entry.plot_style is PlotStyle.BOX:
        h = max(1, fh // 2) if fh > 1 else 0
        canvas.draw_rect(x, y - h // 2, width, h, style)
        return
    if entry.plot_style.has_lines and style.line_width > 0:
        canvas.draw_line(x, y, x + width, y, style)
    if entry.plot_style.has_points and style.symbol:
        canvas.draw_symbol(x + width // 2, y, style.symbol, style)


class CanvasBase:
    """Composite drawing built from a backend's primitives.

    Subclasses provide `size`, `font_metrics`, `measure_text` and the
    draw_line/draw_rect/draw_text/draw_wedge primitives.
    """

    eccentricity = 1.0

    def draw_symbol(self, x: int, y: int, symbol: str, style: Style) -> None:
        generic_symbol(self, x, y, symbol, style)  # type: ignore[arg-type]

    def begin_frame(self) -> None:
        pass

    def end_frame(self) -> None:
        pass

    def draw_title(self, text: str) -> None:
        width, _ = self.size  # type: ignore[attr-defined]
        _, fh, _ = self.font_metrics(element_font("title"))  # type: ignore[attr-defined]
        generic_title(self, text, width // 2, fh // 2)  # type: ignore[arg-type]

    def draw_x_axis(self, rng: Range, y: int, y_mirror: int) -> None:
        generic_x_axis(self, rng, y, y_mirror)  # type: ignore[arg-type]

    def draw_y_axis(self, rng: Range, x: int, x_mirror: int) -> None:
        generic_y_axis(self, rng, x, x_mirror)  # type: ignore[arg-type]

    def draw_scatter(self, points: Sequence[ScreenPoint], plot_style: PlotStyle, style: Style) -> None:
        generic_scatter(self, points, plot_style, style)  # type: ignore[arg-type]

    def draw_boxes(self, boxes: Sequence[Box], width: int, style: Style) -> None:
        generic_boxes(self, boxes, width, style)  # type: ignore[arg-type]

    def draw_bars(self, bars: Sequence[BarRect], style: Style) -> None:
        generic_bars(self, bars, style)  # type: ignore[arg-type]

    def draw_rings(self, wedges: Sequence[Wedge], x: int, y: int, outer: int, inner: int) -> None:
        generic_rings(self, wedges, x, y, outer, inner)  # type: ignore[arg-type]

    def draw_key(self, x: int, y: int, key: Key, defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS) -> None:
        generic_key(self, x, y, key, defaults)  # type: ignore[arg-type]
