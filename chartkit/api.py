from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from chartkit.canvas import RasterCanvas, SvgCanvas, TextCanvas
from chartkit.charts import Chart


def render_text(chart: Chart, width: int = 80, height: int = 24) -> str:
    canvas = TextCanvas(width, height)
    chart.plot(canvas)
    return canvas.to_string()


def render_svg(chart: Chart, width: int = 640, height: int = 480) -> str:
    canvas = SvgCanvas(width, height)
    chart.plot(canvas)
    return canvas.to_markup()


def render_rgba(chart: Chart, width: int = 640, height: int = 480, *, background: str = "#ffffff") -> np.ndarray:
    """Render into a (height, width, 4) uint8 RGBA array."""

    canvas = RasterCanvas(width, height, background=background)
    chart.plot(canvas)
    return canvas.to_rgba()


def save_png(chart: Chart, path: str | Path, width: int = 640, height: int = 480) -> Path:
    path = Path(path)
    Image.fromarray(render_rgba(chart, width, height)).save(path, format="PNG")
    return path
