from .bar import BarChart
from .base import Chart, XYChart
from .box import BoxChart
from .category_bar import CategoryBarChart
from .histogram import HistChart
from .pie import PieChart
from .scatter import ScatterChart
from .strip import StripChart

__all__ = [
    "BarChart",
    "BoxChart",
    "CategoryBarChart",
    "Chart",
    "HistChart",
    "PieChart",
    "ScatterChart",
    "StripChart",
    "XYChart",
]
