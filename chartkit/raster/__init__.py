from .glyphs import font_metrics, text_mask, text_size, wedge_masks
from .lines import DASH_PATTERNS, draw_line, draw_polyline
from .pixels import blend_mask, draw_hline, draw_pixel, draw_vline, fill_rect, new_buffer

__all__ = [
    "DASH_PATTERNS",
    "blend_mask",
    "draw_hline",
    "draw_line",
    "draw_pixel",
    "draw_polyline",
    "draw_vline",
    "fill_rect",
    "font_metrics",
    "new_buffer",
    "text_mask",
    "text_size",
    "wedge_masks",
]
