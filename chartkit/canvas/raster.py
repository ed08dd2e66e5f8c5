from __future__ import annotations

import logging

import numpy as np

from chartkit.canvas.base import CanvasBase, HAlign, VAlign, generic_text_width
from chartkit.raster import blend_mask, draw_line, fill_rect, font_metrics, new_buffer, text_mask, wedge_masks
from chartkit.style import Font, Style, parse_color

LOGGER = logging.getLogger(__name__)


class RasterCanvas(CanvasBase):
    """RGBA pixel canvas backed by a numpy uint8 buffer of shape (h, w, 4)."""

    def __init__(self, width: int, height: int, background: str = "#ffffff") -> None:
        if width <= 0 or height <= 0:
            raise ValueError("RasterCanvas size must be positive")
        self._width = int(width)
        self._height = int(height)
        self._background = parse_color(background)
        self._buffer = new_buffer(self._width, self._height, self._background)

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    def font_metrics(self, font: Font) -> tuple[float, int, bool]:
        fw, fh = font_metrics(font.name, font.size)
        return fw, fh, False

    def measure_text(self, text: str, font: Font) -> int:
        fw, _, _ = self.font_metrics(font)
        widths = [text_mask(line, font.name, font.size).shape[1] for line in text.split("\n") if line]
        if not widths:
            return generic_text_width(text, fw, False)
        return max(widths)

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, style: Style) -> None:
        if style.line_width <= 0:
            return
        color = parse_color(style.stroke_color, style.alpha)
        draw_line(self._buffer, x0, y0, x1, y1, color, style.line_width, style.line_style)

    def draw_rect(self, x: int, y: int, w: int, h: int, style: Style) -> None:
        if h < 0:
            y, h = y + h, -h
        if w < 0:
            x, w = x + w, -w
        if style.fill_color is not None:
            fill_rect(self._buffer, x, y, w + 1, h + 1, parse_color(style.fill_color, style.alpha))
        if style.line_width > 0:
            self.draw_line(x, y, x + w, y, style)
            self.draw_line(x + w, y, x + w, y + h, style)
            self.draw_line(x + w, y + h, x, y + h, style)
            self.draw_line(x, y + h, x, y, style)

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
        color = parse_color(font.color)
        lines = text.split("\n")
        _, fh = font_metrics(font.name, font.size)
        # Lines stack downwards; alignment applies to the whole block.
        block_h = fh * len(lines)
        if v_align == "c":
            y -= block_h // 2 - fh // 2
        elif v_align == "b":
            y -= block_h - fh
        for i, line in enumerate(lines):
            if not line:
                continue
            mask = text_mask(line, font.name, font.size, rotation)
            h, w = mask.shape
            left = {"l": x, "c": x - w // 2, "r": x - w}[h_align]
            ly = y + i * fh
            top = {"t": ly, "c": ly - h // 2, "b": ly - h}[v_align]
            blend_mask(self._buffer, left, top, mask, color)

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
        fill, outline = wedge_masks(outer, inner, phi_start, phi_end, self.eccentricity, style.line_width)
        h, w = fill.shape
        left, top = x - (w - 1) // 2, y - (h - 1) // 2
        if style.fill_color is not None:
            blend_mask(self._buffer, left, top, fill, parse_color(style.fill_color, style.alpha))
        if style.line_width > 0:
            blend_mask(self._buffer, left, top, outline, parse_color(style.stroke_color, style.alpha))

    def begin_frame(self) -> None:
        self._buffer = new_buffer(self._width, self._height, self._background)

    def end_frame(self) -> None:
        LOGGER.debug("raster frame finished: %dx%d", self._width, self._height)

    def to_rgba(self) -> np.ndarray:
        """Copy of the pixel buffer, shape (height, width, 4), dtype uint8."""

        return self._buffer.copy()
