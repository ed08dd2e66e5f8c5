from __future__ import annotations

import colorsys
from dataclasses import dataclass, replace
from enum import Enum
import re
from types import MappingProxyType
from typing import Mapping, Union

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")

RGBA = tuple[int, int, int, int]


class LineStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"
    DASH_DOT_DOT = "dashdotdot"
    LONG_DASH = "longdash"
    LONG_DOT = "longdot"


LINE_STYLE_CYCLE = (
    LineStyle.SOLID,
    LineStyle.DASHED,
    LineStyle.DOTTED,
    LineStyle.DASH_DOT_DOT,
    LineStyle.LONG_DASH,
    LineStyle.LONG_DOT,
    LineStyle.SOLID,
)

# Glyphs understood by every backend. Order matters for next_symbol().
SYMBOLS: tuple[str, ...] = (
    "o",  # empty circle
    "=",  # empty square
    "%",  # empty triangle up
    "&",  # empty diamond
    "+",
    "X",
    "*",
    "0",  # bulls eye
    "@",  # filled circle
    "#",  # filled square
    "A",  # filled triangle up
    "Z",  # filled diamond
    ".",
    "W",  # filled triangle down
    "V",  # empty triangle down
)


@dataclass(frozen=True)
class Style:
    """Explicit drawing style for one data set or chart element."""

    symbol: str | None = None
    symbol_color: str | None = None
    symbol_size: float = 1.0
    line_style: LineStyle = LineStyle.SOLID
    line_color: str | None = None
    line_width: int = 1
    fill_color: str | None = None
    alpha: float = 1.0

    def __post_init__(self) -> None:
        if self.symbol is not None and len(self.symbol) != 1:
            raise ValueError("Style `symbol` must be a single character")
        for name in ("symbol_color", "line_color", "fill_color"):
            value = getattr(self, name)
            if value is not None and not _HEX_COLOR.match(value):
                raise ValueError(f"Style `{name}` must be a hex color (#RRGGBB or #RRGGBBAA)")
        if self.line_width < 0:
            raise ValueError("Style `line_width` must be >= 0")
        if self.symbol_size <= 0:
            raise ValueError("Style `symbol_size` must be > 0")
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError("Style `alpha` must be in [0, 1]")

    @property
    def stroke_color(self) -> str:
        return self.line_color or self.symbol_color or self.fill_color or "#000000"

    @property
    def glyph_color(self) -> str:
        return self.symbol_color or self.line_color or self.fill_color or "#000000"


@dataclass(frozen=True)
class AutoStyle:
    """Marker requesting a style picked from DEFAULT_STYLES by data-set index."""


AUTO = AutoStyle()

StyleSpec = Union[Style, AutoStyle]


DEFAULT_STYLES: tuple[Style, ...] = (
    Style(symbol="o", symbol_color="#cc0000", line_color="#cc0000", line_style=LineStyle.SOLID),
    Style(symbol="=", symbol_color="#00bb00", line_color="#00bb00", line_style=LineStyle.DASHED),
    Style(symbol="%", symbol_color="#0000dd", line_color="#0000dd", line_style=LineStyle.DOTTED),
    Style(symbol="&", symbol_color="#996600", line_color="#996600", line_style=LineStyle.DASH_DOT_DOT),
    Style(symbol="+", symbol_color="#bb00bb", line_color="#bb00bb", line_style=LineStyle.LONG_DASH),
    Style(symbol="X", symbol_color="#00aaaa", line_color="#00aaaa", line_style=LineStyle.LONG_DOT),
    Style(symbol="*", symbol_color="#aaaa00", line_color="#aaaa00", line_style=LineStyle.SOLID),
)


def auto_style(index: int, *, filled: bool = False) -> Style:
    """Return the index-th automatic style.

    Symbols cycle fastest, colors shift by one after every full symbol cycle
    and line styles by two, so the first n*n styles are pairwise distinct.
    """

    if index < 0:
        raise ValueError("style index must be >= 0")
    n = len(DEFAULT_STYLES)
    si = index % n
    ci = (si + index // n) % n
    li = (si + 2 * index // n) % n
    base = DEFAULT_STYLES[si]
    color = DEFAULT_STYLES[ci].symbol_color
    style = replace(
        base,
        symbol_color=color,
        line_color=color,
        line_style=DEFAULT_STYLES[li].line_style,
    )
    if filled and color is not None:
        style = replace(style, fill_color=lighter(color, 0.35))
    return style


def resolve_style(spec: StyleSpec, index: int, *, filled: bool = False) -> Style:
    if isinstance(spec, AutoStyle):
        return auto_style(index, filled=filled)
    if filled and spec.fill_color is None:
        return replace(spec, fill_color=lighter(spec.stroke_color, 0.35))
    return spec


def symbol_index(symbol: str) -> int:
    try:
        return SYMBOLS.index(symbol)
    except ValueError:
        return -1


def next_symbol(symbol: str) -> str:
    idx = symbol_index(symbol)
    if idx != -1:
        return SYMBOLS[(idx + 1) % len(SYMBOLS)]
    return chr(ord(symbol) + 1)


def parse_color(color: str, alpha: float = 1.0) -> RGBA:
    if not _HEX_COLOR.match(color):
        raise ValueError(f"not a hex color: {color!r}")
    r = int(color[1:3], 16)
    g = int(color[3:5], 16)
    b = int(color[5:7], 16)
    a = int(color[7:9], 16) if len(color) == 9 else 255
    a = int(max(0.0, min(1.0, alpha)) * a)
    return (r, g, b, a)


def format_color(rgba: tuple[int, ...]) -> str:
    r, g, b = (max(0, min(255, int(c))) for c in rgba[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def rgb_to_hsv(color: str) -> tuple[float, float, float]:
    r, g, b, _ = parse_color(color)
    return colorsys.rgb_to_hsv(r / 255.0, g / 255.0, b / 255.0)


def hsv_to_rgb(h: float, s: float, v: float) -> str:
    r, g, b = colorsys.hsv_to_rgb(h % 1.0, max(0.0, min(1.0, s)), max(0.0, min(1.0, v)))
    return format_color((round(r * 255), round(g * 255), round(b * 255)))


def lighter(color: str, factor: float) -> str:
    """Blend `color` towards white; factor 1 keeps it, factor 0 yields white."""

    h, s, v = rgb_to_hsv(color)
    f = max(0.0, min(1.0, factor))
    return hsv_to_rgb(h, s * f, v + (1.0 - v) * (1.0 - f))


@dataclass(frozen=True)
class Font:
    name: str = "DejaVu Sans"
    size: float = 12.0
    color: str = "#000000"

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError("Font `size` must be > 0")


_BLACK = "#000000"

ELEMENT_STYLES: Mapping[str, Style] = MappingProxyType(
    {
        "axis": Style(line_color=_BLACK, line_width=2),
        "maxis": Style(line_color=_BLACK, line_width=2),
        "tic": Style(line_color=_BLACK, line_width=1),
        "mtic": Style(line_color=_BLACK, line_width=1),
        "zero": Style(line_color="#404040", line_width=1, line_style=LineStyle.DASHED),
        "gridl": Style(line_color="#c0c0c0", line_width=1),
        "gridb": Style(line_color="#f0f0f0", fill_color="#f0f0f0", line_width=0),
        "key": Style(line_color=_BLACK, fill_color="#f8f8f8", line_width=1),
        "errorbar": Style(line_color="#404040", line_width=1),
        "box": Style(line_color=_BLACK, line_width=1),
    }
)

ELEMENT_FONTS: Mapping[str, Font] = MappingProxyType(
    {
        "title": Font(size=16.0, color="#aa9933"),
        "label": Font(size=13.0),
        "tic": Font(size=11.0),
        "key": Font(size=11.0),
        "rangelimit": Font(size=9.0, color="#404040"),
        "value": Font(size=10.0),
    }
)


def element_style(name: str) -> Style:
    try:
        return ELEMENT_STYLES[name]
    except KeyError as exc:
        raise ValueError(f"Unknown element style: {name}") from exc


def element_font(name: str) -> Font:
    try:
        return ELEMENT_FONTS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown element font: {name}") from exc
