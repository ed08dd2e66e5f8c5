from .base import Canvas, CanvasBase, HAlign, ScreenPoint, VAlign, key_size
from .raster import RasterCanvas
from .svg import SvgCanvas
from .text import TextBuffer, TextCanvas

__all__ = [
    "Canvas",
    "CanvasBase",
    "HAlign",
    "RasterCanvas",
    "ScreenPoint",
    "SvgCanvas",
    "TextBuffer",
    "TextCanvas",
    "VAlign",
    "key_size",
]
