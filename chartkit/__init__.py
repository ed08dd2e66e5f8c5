from chartkit.api import render_rgba, render_svg, render_text, save_png
from chartkit.bars import BarValues
from chartkit.charts import BarChart, BoxChart, CategoryBarChart, Chart, HistChart, PieChart, ScatterChart, StripChart
from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults, validate_chart_defaults
from chartkit.data import Box, CatValue, EPoint, PlotStyle, Point
from chartkit.errors import (
    ChartDataError,
    ChartError,
    ConsistencyError,
    DegenerateDataError,
    EmptyInputError,
    LayoutError,
    RangeError,
)
from chartkit.key import DataEntry, FillOrder, Heading, Key
from chartkit.pie import PieValues
from chartkit.scales import Expansion, Range, RangeMode, Tic, TicSetting
from chartkit.style import AUTO, LineStyle, Style

__all__ = [
    "AUTO",
    "BarChart",
    "BarValues",
    "Box",
    "BoxChart",
    "CatValue",
    "CategoryBarChart",
    "Chart",
    "ChartDataError",
    "ChartDefaults",
    "ChartError",
    "ConsistencyError",
    "DEFAULT_CHART_DEFAULTS",
    "DataEntry",
    "DegenerateDataError",
    "EPoint",
    "EmptyInputError",
    "Expansion",
    "FillOrder",
    "Heading",
    "HistChart",
    "Key",
    "LayoutError",
    "LineStyle",
    "PieChart",
    "PieValues",
    "PlotStyle",
    "Point",
    "Range",
    "RangeError",
    "RangeMode",
    "ScatterChart",
    "StripChart",
    "Style",
    "Tic",
    "TicSetting",
    "render_rgba",
    "render_svg",
    "render_text",
    "save_png",
]
