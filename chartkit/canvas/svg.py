from __future__ import annotations

import logging
import math
from pathlib import Path
import xml.etree.ElementTree as ET

from chartkit.canvas.base import CanvasBase, HAlign, VAlign, generic_text_width
from chartkit.raster import DASH_PATTERNS
from chartkit.style import Font, Style

LOGGER = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"

_ANCHOR = {"l": "start", "c": "middle", "r": "end"}
_BASELINE = {"t": "hanging", "c": "central", "b": "auto"}


def _fmt(v: float) -> str:
    return f"{v:.2f}".rstrip("0").rstrip(".")


class SvgCanvas(CanvasBase):
    """Collects drawing calls into an SVG document.

    Text metrics are estimated from per-character widths, so layouts are
    stable without a font engine.
    """

    def __init__(self, width: int, height: int, background: str | None = "#ffffff") -> None:
        if width <= 0 or height <= 0:
            raise ValueError("SvgCanvas size must be positive")
        self._width = int(width)
        self._height = int(height)
        self._background = background
        self._root = self._new_root()

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def root(self) -> ET.Element:
        return self._root

    def _new_root(self) -> ET.Element:
        root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": str(self._width),
                "height": str(self._height),
                "viewBox": f"0 0 {self._width} {self._height}",
            },
        )
        if self._background:
            ET.SubElement(root, "rect", {"x": "0", "y": "0", "width": "100%", "height": "100%", "fill": self._background})
        return root

    def font_metrics(self, font: Font) -> tuple[float, int, bool]:
        return font.size * 0.6, max(1, int(round(font.size * 1.25))), False

    def measure_text(self, text: str, font: Font) -> int:
        fw, _, mono = self.font_metrics(font)
        return generic_text_width(text, fw, mono)

    def _stroke(self, style: Style) -> dict[str, str]:
        attrs = {"stroke": style.stroke_color, "stroke-width": str(style.line_width)}
        pattern = DASH_PATTERNS[style.line_style]
        if pattern:
            attrs["stroke-dasharray"] = ",".join(str(p * max(1, style.line_width)) for p in pattern)
        if style.alpha < 1.0:
            attrs["stroke-opacity"] = _fmt(style.alpha)
        return attrs

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, style: Style) -> None:
        if style.line_width <= 0:
            return
        attrs = {"x1": str(x0), "y1": str(y0), "x2": str(x1), "y2": str(y1)}
        attrs.update(self._stroke(style))
        ET.SubElement(self._root, "line", attrs)

    def draw_rect(self, x: int, y: int, w: int, h: int, style: Style) -> None:
        if h < 0:
            y, h = y + h, -h
        if w < 0:
            x, w = x + w, -w
        attrs = {"x": str(x), "y": str(y), "width": str(w), "height": str(h)}
        attrs["fill"] = style.fill_color or "none"
        if style.fill_color and style.alpha < 1.0:
            attrs["fill-opacity"] = _fmt(style.alpha)
        if style.line_width > 0:
            attrs.update(self._stroke(style))
        ET.SubElement(self._root, "rect", attrs)

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
        if not text:
            return
        font = font or Font()
        _, fh, _ = self.font_metrics(font)
        lines = text.split("\n")
        if v_align == "c":
            y -= (fh * (len(lines) - 1)) // 2
        elif v_align == "b":
            y -= fh * (len(lines) - 1)
        for i, line in enumerate(lines):
            ly = y + i * fh
            attrs = {
                "x": str(x),
                "y": str(ly),
                "font-family": font.name,
                "font-size": _fmt(font.size),
                "fill": font.color,
                "text-anchor": _ANCHOR[h_align],
                "dominant-baseline": _BASELINE[v_align],
            }
            if rotation:
                attrs["transform"] = f"rotate({-rotation} {x} {ly})"
            elem = ET.SubElement(self._root, "text", attrs)
            elem.text = line

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
        attrs = {"d": wedge_path(x, y, outer, inner, phi_start, phi_end, self.eccentricity)}
        attrs["fill"] = style.fill_color or "none"
        if inner > 0:
            attrs["fill-rule"] = "evenodd"
        if style.line_width > 0:
            attrs.update(self._stroke(style))
        ET.SubElement(self._root, "path", attrs)

    def begin_frame(self) -> None:
        self._root = self._new_root()

    def end_frame(self) -> None:
        LOGGER.debug("svg frame finished: %d elements", len(self._root))

    def to_markup(self) -> str:
        return ET.tostring(self._root, encoding="unicode")

    def save(self, path: str | Path) -> None:
        Path(path).write_text(self.to_markup(), encoding="utf-8")


def wedge_path(x: int, y: int, outer: int, inner: int, phi_start: float, phi_end: float, eccentricity: float = 1.0) -> str:
    """Path data of a pie wedge or ring segment.

    Angles run counter-clockwise on screen, which is SVG sweep flag 0.
    """

    rx, ry = outer * eccentricity, float(outer)
    irx, iry = inner * eccentricity, float(inner)

    def at(r_x: float, r_y: float, phi: float) -> str:
        return f"{_fmt(x + r_x * math.cos(phi))} {_fmt(y - r_y * math.sin(phi))}"

    sweep = phi_end - phi_start
    if sweep >= 2 * math.pi - 1e-9:
        d = _full_ellipse(at, rx, ry)
        if inner > 0:
            d += " " + _full_ellipse(at, irx, iry)
        return d

    large = 1 if sweep > math.pi else 0
    if inner > 0:
        return (
            f"M {at(rx, ry, phi_start)} A {_fmt(rx)} {_fmt(ry)} 0 {large} 0 {at(rx, ry, phi_end)} "
            f"L {at(irx, iry, phi_end)} A {_fmt(irx)} {_fmt(iry)} 0 {large} 1 {at(irx, iry, phi_start)} Z"
        )
    return f"M {x} {y} L {at(rx, ry, phi_start)} A {_fmt(rx)} {_fmt(ry)} 0 {large} 0 {at(rx, ry, phi_end)} Z"


def _full_ellipse(at, rx: float, ry: float) -> str:
    r = f"{_fmt(rx)} {_fmt(ry)}"
    return f"M {at(rx, ry, 0.0)} A {r} 0 1 0 {at(rx, ry, math.pi)} A {r} 0 1 0 {at(rx, ry, 0.0)} Z"
