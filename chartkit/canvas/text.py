from __future__ import annotations

import logging
import math
from typing import Sequence

from chartkit.bars import BarRect
from chartkit.canvas.base import CanvasBase, HAlign, ScreenPoint, VAlign, generic_bars
from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults
from chartkit.data import Box, PlotStyle
from chartkit.key import DataEntry, Heading, Key, key_vertical_sep, measure_key
from chartkit.scales import Range
from chartkit.style import Font, Style, element_style
from chartkit.timescale import to_datetime

LOGGER = logging.getLogger(__name__)

# Corner characters (top-left, top-right, bottom-left, bottom-right).
EDGES: tuple[tuple[str, str, str, str], ...] = (
    ("+", "+", "+", "+"),
    (".", ".", "'", "'"),
    ("/", "\\", "\\", "/"),
)


class TextBuffer:
    """Fixed size grid of characters; writes outside the grid are dropped."""

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self._rows = [[" "] * self.width for _ in range(self.height)]

    def put(self, x: int, y: int, ch: str) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self._rows[y][x] = ch

    def get(self, x: int, y: int) -> str:
        if 0 <= x < self.width and 0 <= y < self.height:
            return self._rows[y][x]
        return ""

    def rect(self, x: int, y: int, w: int, h: int, edge: int = 0, fill: str | None = None) -> None:
        """Frame with corners from EDGES[edge]; (x+w, y+h) is the opposite corner."""

        corners = EDGES[edge % len(EDGES)]
        if h < 0:
            y, h = y + h, -h
        if w < 0:
            x, w = x + w, -w
        for i in range(1, w):
            self.put(x + i, y, "-")
            self.put(x + i, y + h, "-")
        for j in range(1, h):
            self.put(x, y + j, "|")
            self.put(x + w, y + j, "|")
            if fill is not None:
                for i in range(1, w):
                    self.put(x + i, y + j, fill)
        self.put(x, y, corners[0])
        self.put(x + w, y, corners[1])
        self.put(x, y + h, corners[2])
        self.put(x + w, y + h, corners[3])

    def block(self, x: int, y: int, w: int, h: int, fill: str) -> None:
        if h < 0:
            y, h = y + h, -h
        if w < 0:
            x, w = x + w, -w
        for j in range(h + 1):
            for i in range(w):
                self.put(x + i, y + j, fill)

    def text(self, x: int, y: int, text: str, align: HAlign = "l") -> None:
        if align == "c":
            x -= len(text) // 2
        elif align == "r":
            x -= len(text)
        for i, ch in enumerate(text):
            self.put(x + i, y, ch)

    def vertical_text(self, x: int, y: int, text: str, align: VAlign = "t") -> None:
        """Text written top to bottom, one character per row."""

        if align == "c":
            y -= len(text) // 2
        elif align == "b":
            y -= len(text)
        for i, ch in enumerate(text):
            self.put(x, y + i, ch)

    def line(self, x0: int, y0: int, x1: int, y1: int, ch: str) -> None:
        dx, dy = abs(x1 - x0), -abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx + dy
        while True:
            self.put(x0, y0, ch)
            if x0 == x1 and y0 == y1:
                return
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x0 += sx
            if e2 <= dx:
                err += dx
                y0 += sy

    def paste(self, x: int, y: int, other: TextBuffer) -> None:
        for j in range(other.height):
            for i in range(other.width):
                self.put(x + i, y + j, other._rows[j][i])

    def __str__(self) -> str:
        return "".join("".join(row) + "\n" for row in self._rows)


def _line_char(style: Style) -> str:
    if style.symbol is not None and " " < style.symbol <= "~":
        return style.symbol
    return "*"


def _fill_char(style: Style) -> str | None:
    if style.fill_color is None:
        return None
    if style.fill_color.lower().startswith("#000000"):
        return "#"
    if style.fill_color.lower().startswith("#ffffff"):
        return " "
    return style.symbol or "#"


class TextCanvas(CanvasBase):
    """Character-cell canvas; one cell is one screen unit.

    Cells are taller than wide, so round shapes are stretched horizontally
    by `aspect`.
    """

    def __init__(self, width: int, height: int, aspect: float = DEFAULT_CHART_DEFAULTS.text_aspect) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("TextCanvas size must be positive")
        self._width = int(width)
        self._height = int(height)
        self._aspect = float(aspect)
        self._buf = TextBuffer(self._width, self._height)

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def eccentricity(self) -> float:  # type: ignore[override]
        return self._aspect

    @property
    def buffer(self) -> TextBuffer:
        return self._buf

    def font_metrics(self, font: Font) -> tuple[float, int, bool]:
        return 1.0, 1, True

    def measure_text(self, text: str, font: Font) -> int:
        return max(len(line) for line in text.split("\n"))

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, style: Style) -> None:
        self._buf.line(x0, y0, x1, y1, _line_char(style))

    def draw_rect(self, x: int, y: int, w: int, h: int, style: Style) -> None:
        if style.line_width > 0:
            self._buf.rect(x, y, w, h, 0, _fill_char(style))
        elif style.fill_color is not None:
            self._buf.block(x, y, w + 1, h, _fill_char(style) or " ")

    def draw_symbol(self, x: int, y: int, symbol: str, style: Style) -> None:
        self._buf.put(x, y, symbol)

    def draw_text(
        self,
        x: int,
        y: int,
        text: str,
        h_align: HAlign = "l",
        v_align: VAlign = "t",
        rotation: int = 0,
        font: Font | None = None,
    ) -> None:
        lines = text.split("\n")
        if rotation:
            valign = {"l": "t", "c": "c", "r": "b"}[h_align]
            for i, line in enumerate(lines):
                self._buf.vertical_text(x + i, y, line, valign)  # type: ignore[arg-type]
            return
        if v_align == "c":
            y -= (len(lines) - 1) // 2
        elif v_align == "b":
            y -= len(lines) - 1
        for i, line in enumerate(lines):
            self._buf.text(x, y + i, line, h_align)

    def draw_wedge(
        self,
        x: int,
        y: int,
        outer: int,
        inner: int,
        phi_start: float,
        phi_end: float,
        style: Style,
    ) -> None:
        ry = float(outer)
        rx = self._aspect * ry
        iry, irx = float(inner), self._aspect * inner

        def at(r_x: float, r_y: float, phi: float) -> tuple[int, int]:
            return int(math.cos(phi) * r_x) + x, y - int(math.sin(phi) * r_y)

        fill = _fill_char(style)
        if fill is not None:
            delta = 1 / (4 * max(rx, 1.0))
            a = phi_start
            while a <= phi_end:
                self._buf.line(*at(irx, iry, a), *at(rx, ry, a), fill)
                a += delta

        edge = "*"
        if phi_end - phi_start < 2 * math.pi - 1e-9:
            self._buf.line(*at(irx, iry, phi_start), *at(rx, ry, phi_start), edge)
            self._buf.line(*at(irx, iry, phi_end), *at(rx, ry, phi_end), edge)
        radii = [(rx, ry)] + ([(irx, iry)] if inner > 0 else [])
        for r_x, r_y in radii:
            prev = at(r_x, r_y, phi_start)
            a = phi_start + 0.1
            while a < phi_end:
                cur = at(r_x, r_y, a)
                self._buf.line(*prev, *cur, edge)
                prev = cur
                a += 0.1
            self._buf.line(*prev, *at(r_x, r_y, phi_end), edge)

    def begin_frame(self) -> None:
        self._buf = TextBuffer(self._width, self._height)

    def draw_x_axis(self, rng: Range, y: int, y_mirror: int) -> None:
        buf = self._buf
        mirror = rng.tic_setting.mirror
        xa, xe = rng.data_to_screen(rng.min), rng.data_to_screen(rng.max)
        for sx in range(xa, xe + 1):
            buf.put(sx, y, "-")
            if mirror >= 1:
                buf.put(sx, y_mirror, "-")
        if rng.show_zero and rng.min < 0 < rng.max:
            z = rng.data_to_screen(0.0)
            for yy in range(y - 1, y_mirror + 1, -1):
                buf.put(z, yy, ":")

        if rng.label:
            yy = y + 1 if rng.tic_setting.hide else y + 2
            buf.text((xa + xe) // 2, yy, rng.label, "c")

        if not rng.tic_setting.hide:
            mark = "|" if rng.time else "+"
            for tic in rng.tics:
                lx = rng.data_to_screen(tic.label_pos)
                if not math.isnan(tic.pos):
                    x = rng.data_to_screen(tic.pos)
                    buf.put(x, y, mark)
                    if mirror >= 2:
                        buf.put(x, y_mirror, mark)
                    if rng.time:
                        buf.put(x, y + 1, "|")
                if rng.time and tic.align == -1:
                    buf.text(lx + 1, y + 1, tic.label, "l")
                else:
                    buf.text(lx, y + 1, tic.label, "c")
        if rng.show_limits:
            buf.text(xa, y + 2, _limit(rng, rng.min), "l")
            buf.text(xe, y + 2, _limit(rng, rng.max), "r")

    def draw_y_axis(self, rng: Range, x: int, x_mirror: int) -> None:
        buf = self._buf
        mirror = rng.tic_setting.mirror
        ya, ye = rng.data_to_screen(rng.min), rng.data_to_screen(rng.max)
        for sy in range(min(ya, ye), max(ya, ye) + 1):
            buf.put(x, sy, "|")
            if mirror >= 1:
                buf.put(x_mirror, sy, "|")
        if rng.show_zero and rng.min < 0 < rng.max:
            z = rng.data_to_screen(0.0)
            for xx in range(x + 1, x_mirror, 2):
                buf.put(xx, z, "-")

        if rng.label:
            buf.vertical_text(1, (ya + ye) // 2, rng.label, "c")

        if not rng.tic_setting.hide:
            for tic in rng.tics:
                ly = rng.data_to_screen(tic.label_pos)
                if not math.isnan(tic.pos):
                    sy = rng.data_to_screen(tic.pos)
                    buf.put(x, sy, "+")
                    if mirror >= 2:
                        buf.put(x_mirror, sy, "+")
                    if rng.time and tic.align == 0:
                        buf.put(x - 1, sy, "-")
                        buf.put(x - 2, sy, "-")
                if rng.time:
                    buf.text(x, ly, tic.label + " ", "r")
                else:
                    buf.text(x - 2, ly, tic.label, "r")
        if rng.show_limits:
            buf.text(x - 2, ya + 1, _limit(rng, rng.min), "r")
            buf.text(x - 2, ye - 1, _limit(rng, rng.max), "r")

    def draw_scatter(self, points: Sequence[ScreenPoint], plot_style: PlotStyle, style: Style) -> None:
        buf = self._buf
        for p in points:
            if p.x_low is not None and p.x_high is not None:
                buf.line(p.x_low, p.y, p.x_high, p.y, "-")
            if p.y_low is not None and p.y_high is not None:
                buf.line(p.x, p.y_low, p.x, p.y_high, "|")
        plot_style = PlotStyle(plot_style)
        ch = _line_char(style)
        if plot_style.has_lines:
            for p0, p1 in zip(points, points[1:]):
                buf.line(p0.x, p0.y, p1.x, p1.y, ch)
        if plot_style.has_points:
            for p in points:
                buf.put(p.x, p.y, style.symbol or ch)

    def draw_boxes(self, boxes: Sequence[Box], width: int, style: Style) -> None:
        buf = self._buf
        if width % 2 == 0:
            width += 1
        hbw = (width - 1) // 2
        symbol = style.symbol or "*"
        for box in boxes:
            x = int(box.x)
            q1, q3 = int(box.q1), int(box.q3)
            buf.rect(x - hbw, q1, 2 * hbw, q3 - q1, 0, " ")
            if not math.isnan(box.med):
                med = int(box.med)
                for i in range(hbw):
                    buf.put(x - i, med, "-")
                    buf.put(x + i, med, "-")
                buf.put(x - hbw, med, "+")
                buf.put(x + hbw, med, "+")
            if not math.isnan(box.avg):
                buf.put(x, int(box.avg), symbol)
            if not math.isnan(box.high):
                for yy in range(int(box.high), q3):
                    buf.put(x, yy, "|")
            if not math.isnan(box.low):
                for yy in range(int(box.low), q1, -1):
                    buf.put(x, yy, "|")
            for ol in box.outliers:
                buf.put(x, int(ol), symbol)

    def draw_bars(self, bars: Sequence[BarRect], style: Style) -> None:
        generic_bars(self, bars, style)

    def draw_key(self, x: int, y: int, key: Key, defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS) -> None:
        if key.is_empty:
            return
        buf = self._buf
        matrix = key.place()
        m = measure_key(matrix, 1.0, 1, lambda text: float(len(text)), defaults)
        frame = element_style("key")
        if key.border != -1 and (frame.line_width > 0 or frame.fill_color is not None):
            buf.rect(x, y, m.width, m.height, 1, " ")
        d = defaults
        sym_w = int(d.key_symbol_width)
        x += int(d.key_hor_sep)
        y += int(key_vertical_sep(1, defaults))
        for ci, column in enumerate(matrix):
            yy = y
            for ri, entry in enumerate(column):
                if entry is None:
                    continue
                if isinstance(entry, Heading):
                    self.draw_text(x, yy, entry.text)
                elif isinstance(entry, DataEntry):
                    ps = entry.plot_style
                    if ps.has_lines:
                        self.draw_line(x, yy, x + sym_w, yy, entry.style)
                    if ps.has_points or ps is PlotStyle.BOX:
                        buf.put(x + sym_w // 2, yy, entry.style.symbol or "#")
                    self.draw_text(x + int(d.key_symbol_width + d.key_symbol_sep), yy, entry.text)
                yy += m.row_heights[ri] + int(d.key_row_sep)
            x += int(d.key_symbol_width + d.key_symbol_sep + d.key_col_sep + m.col_widths[ci])

    def to_string(self) -> str:
        return str(self._buf)

    def __str__(self) -> str:
        return str(self._buf)


def _limit(rng: Range, value: float) -> str:
    if rng.time:
        return to_datetime(value).strftime("%Y-%m-%d %H:%M:%S")
    return f"{value:g}"
