from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Sequence

from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults
from chartkit.data import CatValue
from chartkit.errors import DegenerateDataError
from chartkit.style import Style


class PieValues(str, Enum):
    OFF = "off"
    PERCENT = "percent"
    VALUE = "value"


@dataclass(frozen=True)
class Wedge:
    """Angular slice of a pie or ring, angles in radians (counter-clockwise)."""

    phi_start: float
    phi_end: float
    style: Style
    shift: int = 0
    label: str = ""
    category: str = ""

    @property
    def sweep(self) -> float:
        return self.phi_end - self.phi_start

    @property
    def mid(self) -> float:
        return (self.phi_start + self.phi_end) / 2


def wedge_angles(values: Sequence[float], name: str = "") -> list[tuple[float, float]]:
    """Split the full circle proportionally to `values`, starting at -pi.

    Order follows the input. Negative, non-finite or all-zero values make the
    partition undefined and raise DegenerateDataError.
    """

    for v in values:
        if not math.isfinite(v) or v < 0:
            raise DegenerateDataError(f"pie data set {name!r} has invalid value {v!r}")
    total = math.fsum(values)
    if total <= 0:
        raise DegenerateDataError(f"pie data set {name!r} sums to zero")

    out = []
    phi = -math.pi
    acc = 0.0
    for i, v in enumerate(values):
        acc += v
        end = math.pi if i == len(values) - 1 else -math.pi + 2 * math.pi * acc / total
        out.append((phi, end))
        phi = end
    return out


def format_pie_value(v: float, total: float, show: PieValues) -> str:
    show = PieValues(show)
    if show is PieValues.OFF:
        return ""
    if show is PieValues.PERCENT:
        v = v * 100 / total
    if v < 0.1:
        text = f"{v:.2f}"
    elif v < 1:
        text = f"{v:.1f}"
    else:
        text = f"{v:.0f}"
    return text + "%" if show is PieValues.PERCENT else text


def build_wedges(
    samples: Sequence[CatValue],
    styles: Sequence[Style],
    *,
    shift: int = 0,
    show: PieValues = PieValues.OFF,
    name: str = "",
) -> list[Wedge]:
    """Wedges of one data set; highlighted categories get `shift`."""

    values = [s.val for s in samples]
    angles = wedge_angles(values, name)
    total = math.fsum(values)
    wedges = []
    for i, (sample, (start, end)) in enumerate(zip(samples, angles)):
        wedges.append(
            Wedge(
                phi_start=start,
                phi_end=end,
                style=styles[i % len(styles)],
                shift=shift if sample.highlight else 0,
                label=format_pie_value(sample.val, total, show),
                category=sample.cat,
            )
        )
    return wedges


def pie_radius(width: int, height: int, eccentricity: float = 1.0) -> float:
    """Largest radius (in vertical units) fitting a width x height box."""

    return max(0.0, min(width / (2 * eccentricity), height / 2))


def highlight_geometry(
    radius: float,
    highlighted: bool,
    defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS,
) -> tuple[int, int]:
    """Return (shrunk radius, highlight shift).

    The radius shrinks only if some wedge is highlighted, so the shifted
    wedge stays inside the original circle.
    """

    if not highlighted:
        return int(radius), 0
    frac = defaults.pie_highlight_fraction
    r = int(radius / (1 + frac))
    return r, max(defaults.pie_min_highlight_shift, int(radius * frac))


def ring_radii(
    radius: int,
    num_sets: int,
    inner_fraction: float = 0.0,
    shrinkage: float = DEFAULT_CHART_DEFAULTS.pie_shrinkage,
) -> list[tuple[int, int]]:
    """(outer, inner) radius per data set, outermost first.

    Each set is `shrinkage` times the size of the one before; every ring
    keeps a hole of `inner_fraction` times its own outer radius.
    """

    if not 0.0 <= inner_fraction < 1.0:
        raise ValueError("inner_fraction must be in [0, 1)")
    outers = [int(radius * shrinkage**k) for k in range(num_sets)]
    return [(ro, int(ro * inner_fraction)) for ro in outers]


def wedge_center(x: int, y: int, wedge: Wedge, line_width: int, eccentricity: float = 1.0) -> tuple[int, int]:
    """Center for drawing `wedge`, moved outwards by its shift and line width.

    The line-width part keeps a constant gap between neighbouring wedges.
    """

    half = math.sin(wedge.sweep / 2)
    p = float(wedge.shift)
    if line_width and half > 0.05:
        p += 0.4 * line_width / half
    dx = p * math.cos(wedge.mid) * eccentricity
    dy = p * math.sin(wedge.mid)
    return x + int(round(dx)), y - int(round(dy))


def label_radius(outer: int, inner: int, font_height: int) -> int:
    if inner > 0:
        return (inner + outer) // 2
    rt = outer - 3 * font_height
    if rt <= outer // 2:
        rt = outer - 2 * font_height
    return max(0, rt)


def label_position(x: int, y: int, radius: float, alpha: float, eccentricity: float = 1.0) -> tuple[int, int]:
    tx = x + int(round(radius * math.cos(alpha) * eccentricity))
    ty = y - int(round(radius * math.sin(alpha)))
    return tx, ty
