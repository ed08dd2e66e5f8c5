from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Callable, Sequence

from chartkit.data import Point
from chartkit.errors import ConsistencyError
from chartkit.scales import Range, RangeMode, almost_equal

LOGGER = logging.getLogger(__name__)

ScreenMap = Callable[[float], int]


class BarValues(str, Enum):
    """Where bar values are printed, if at all."""

    OFF = "off"
    ABOVE = "above"
    INSIDE = "inside"
    CENTER = "center"


@dataclass(frozen=True)
class BarRect:
    """One bar in screen coordinates, plus its optional value label.

    `text_pos` is "ot"/"ob" (outside top/bottom), "it"/"ib" (inside
    top/bottom), "c" (centered) or "" when no label is drawn.
    """

    x: int
    y: int
    w: int
    h: int
    text: str = ""
    text_pos: str = ""


def _rect(x: int, y: int, w: int, h: int, text: str = "", text_pos: str = "") -> BarRect:
    if h < 0:
        y, h = y + h, -h
    return BarRect(x=x, y=y, w=w, h=h, text=text, text_pos=text_pos)


def bar_width(xs: Sequence[float], factor: float = 0.0, span: float | None = None) -> float:
    """Bar width of one data set: the smallest gap between consecutive x values.

    `span` seeds the search (the full x extent of the chart by default) so a
    single-sample set still gets a width. A non-zero `factor` scales the
    result by its absolute value.
    """

    if not xs:
        return 1.0
    width = (max(xs) - min(xs)) if span is None else span
    for a, b in zip(xs, xs[1:]):
        gap = abs(b - a)
        if gap < width:
            width = gap
    if width <= 0:
        width = 1.0
    if factor:
        width *= abs(factor)
    return width


def extreme_bar_widths(sets: Sequence[Sequence[float]], factor: float = 0.0) -> tuple[float, float]:
    """Return (narrowest, widest) bar width over all data sets."""

    if not sets:
        return (1.0, 1.0)
    all_x = [x for xs in sets for x in xs]
    span = (max(all_x) - min(all_x)) if all_x else 0.0
    widths = [bar_width(xs, factor, span) for xs in sets]
    for i, w in enumerate(widths):
        LOGGER.debug("bar width for data set %d: %g", i, w)
    return (min(widths), max(widths))


def widen_for_bars(x_range: Range, width: float) -> bool:
    """Extend the data extent of an already set up range by half a bar.

    Only ends where the bar would be clipped are widened. Returns True if
    the range must be set up again.
    """

    if x_range.data_min is None or x_range.data_max is None:
        return False
    half = width / 2
    changed = False
    if x_range.data_min - half < x_range.min:
        x_range.data_min -= half
        changed = True
    if x_range.data_max + half > x_range.max:
        x_range.data_max += half
        changed = True
    return changed


def screen_bar_width(xf: ScreenMap, width: float) -> int:
    return max(1, xf(2 * width) - xf(width) - 1)


def baseline(y_range: Range, yf: ScreenMap) -> int:
    """Screen position bars grow from: zero if visible, else the nearer bound."""

    if y_range.min >= 0:
        return yf(y_range.min)
    if y_range.max <= 0:
        return yf(y_range.max)
    return yf(0.0)


def bar_rects(
    points: Sequence[Point],
    width: float,
    xf: ScreenMap,
    yf: ScreenMap,
    y0: int,
    show: BarValues = BarValues.OFF,
) -> list[BarRect]:
    sbw = screen_bar_width(xf, width)
    out = []
    for p in points:
        sy = yf(p.y)
        text, pos = _value_label(p.y, show)
        out.append(_rect(xf(p.x - width / 2) + 1, sy, sbw, y0 - sy, text, pos))
    return out


def validate_stacked(sets: Sequence[tuple[str, Sequence[float]]]) -> None:
    """Stacked bars need one identical x sequence in every data set."""

    if not sets:
        return
    ref_name, ref = sets[0]
    for idx, (name, xs) in enumerate(sets[1:], start=1):
        if len(xs) != len(ref):
            raise ConsistencyError(
                f"stacked data set {idx} ({name!r}) has {len(xs)} samples, data set 0 ({ref_name!r}) has {len(ref)}"
            )
        for a, b in zip(ref, xs):
            if not almost_equal(a, b, abs_tol=1e-12):
                raise ConsistencyError(
                    f"stacked data set {idx} ({name!r}) has x={b:g} where data set 0 ({ref_name!r}) has x={a:g}"
                )


def stacked_bar_rects(
    sets: Sequence[Sequence[Point]],
    width: float,
    xf: ScreenMap,
    yf: ScreenMap,
    show: BarValues = BarValues.OFF,
) -> list[list[BarRect]]:
    """Rectangles for stacked data sets; each set starts where the previous ended."""

    if not sets:
        return []
    sbw = screen_bar_width(xf, width)
    totals = [0.0] * len(sets[0])
    out: list[list[BarRect]] = []
    for points in sets:
        rects = []
        for i, p in enumerate(points):
            top = totals[i] + p.y
            sy = yf(top)
            text, pos = _value_label(p.y, show)
            rects.append(_rect(xf(p.x - width / 2) + 1, sy, sbw, yf(totals[i]) - sy, text, pos))
            totals[i] = top
        out.append(rects)
    return out


def stacked_extent(sets: Sequence[Sequence[float]]) -> tuple[float, float]:
    """(min, max) reached by running sums across stacked data sets."""

    if not sets:
        return (0.0, 0.0)
    totals = [0.0] * max(len(s) for s in sets)
    lo = hi = 0.0
    for values in sets:
        for i, v in enumerate(values):
            totals[i] += v
            lo = min(lo, totals[i])
            hi = max(hi, totals[i])
    return lo, hi


def category_range(n: int) -> Range:
    """Fixed x range placing category i (0-based) at i + 1."""

    rng = Range(
        min_mode=RangeMode.fixed_at(0.5),
        max_mode=RangeMode.fixed_at(n + 0.5),
    )
    rng.autoscale(1.0)
    rng.autoscale(float(max(n, 1)))
    return rng


def category_slot(xf: ScreenMap, num_sets: int, stacked: bool) -> tuple[int, int]:
    """Return (single bar width, full group width) in screen units."""

    if stacked:
        sbw = max(1, (xf(2.0) - xf(0.0)) // 4)
        return sbw, sbw
    sbw = max(1, (xf(1.0) - xf(0.0)) // (num_sets + 1) - 1)
    return sbw, num_sets * sbw + num_sets - 1


def category_bar_x(xf: ScreenMap, index: int, set_index: int, sbw: int, fbw: int, stacked: bool) -> int:
    sx = xf(float(index + 1)) - fbw // 2
    if not stacked:
        sx += set_index * (sbw + 1)
    return sx


def category_bar_rects(
    categories: Sequence[str],
    data_sets: Sequence[dict[str, float]],
    xf: ScreenMap,
    yf: ScreenMap,
    y0: int,
    *,
    stacked: bool,
    show: BarValues = BarValues.OFF,
) -> list[list[BarRect]]:
    """Bars of every data set; values of unknown categories are ignored."""

    index = {cat: i for i, cat in enumerate(categories)}
    sbw, fbw = category_slot(xf, len(data_sets), stacked)
    current = [0.0] * len(categories)
    out: list[list[BarRect]] = []
    for dn, samples in enumerate(data_sets):
        rects = []
        for cat, v in samples.items():
            i = index.get(cat)
            if i is None:
                continue
            sx = category_bar_x(xf, i, dn, sbw, fbw, stacked)
            text, pos = _value_label(v, show)
            if stacked:
                sy = yf(v + current[i])
                rects.append(_rect(sx, sy, sbw, yf(current[i]) - sy, text, pos))
            else:
                sy = yf(v)
                rects.append(_rect(sx, sy, sbw, y0 - sy, text, pos))
            current[i] += v
        out.append(rects)
    return out


def format_bar_value(v: float) -> str:
    av = abs(v)
    if av >= 100:
        return f"{v:.0f}"
    if av >= 10:
        return f"{v:.1f}"
    if av >= 1:
        return f"{v:.2f}"
    return f"{v:.3f}"


def _value_label(v: float, show: BarValues) -> tuple[str, str]:
    show = BarValues(show)
    if show is BarValues.OFF or not math.isfinite(v):
        return "", ""
    if show is BarValues.ABOVE:
        pos = "ot" if v >= 0 else "ob"
    elif show is BarValues.INSIDE:
        pos = "it" if v >= 0 else "ib"
    else:
        pos = "c"
    return format_bar_value(v), pos
