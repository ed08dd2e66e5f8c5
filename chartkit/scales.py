from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
import logging
import math
from typing import Callable, Literal, NamedTuple

from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults
from chartkit.errors import RangeError
from chartkit.timescale import (
    TimeDelta,
    ceil_time,
    matching_time_delta,
    next_time_delta,
    round_down,
    round_up,
    to_datetime,
    to_seconds,
)

LOGGER = logging.getLogger(__name__)

TicMarks = Literal["both", "inside", "outside", "none"]
GridMode = Literal["none", "lines", "blocks"]

_TIC_MARKS = ("both", "inside", "outside", "none")
_GRID_MODES = ("none", "lines", "blocks")


class Expansion(str, Enum):
    """How far an autoscaled bound is pushed beyond the data extremum."""

    NONE = "none"
    NEXT_TIC = "nexttic"
    TO_TIC = "totic"
    TIGHT = "tight"
    A_BIT = "abit"


class BoundKind(str, Enum):
    AUTO = "auto"
    FIXED = "fixed"
    CONSTRAINED = "constrained"


@dataclass(frozen=True)
class RangeMode:
    """Bounding rule for one end of an axis.

    Build instances with `RangeMode.auto()`, `RangeMode.fixed_at()` or
    `RangeMode.constrained()`. Date/time bounds may be given as datetimes;
    they are stored as POSIX seconds.
    """

    kind: BoundKind = BoundKind.AUTO
    value: float | None = None
    lower: float = -math.inf
    upper: float = math.inf
    expand: Expansion = Expansion.NONE

    def __post_init__(self) -> None:
        for name in ("value", "lower", "upper"):
            raw = getattr(self, name)
            if isinstance(raw, datetime):
                object.__setattr__(self, name, to_seconds(raw))
        if self.kind is BoundKind.FIXED:
            if self.value is None or not math.isfinite(self.value):
                raise ValueError("fixed RangeMode needs a finite `value`")
        if self.kind is BoundKind.CONSTRAINED:
            if math.isnan(self.lower) or math.isnan(self.upper):
                raise ValueError("constrained RangeMode bounds must not be NaN")
            if self.lower > self.upper:
                raise ValueError("constrained RangeMode needs lower <= upper")

    @classmethod
    def auto(cls, expand: Expansion = Expansion.NONE) -> RangeMode:
        return cls(kind=BoundKind.AUTO, expand=Expansion(expand))

    @classmethod
    def fixed_at(cls, value: float | datetime) -> RangeMode:
        return cls(kind=BoundKind.FIXED, value=value)  # type: ignore[arg-type]

    @classmethod
    def constrained(
        cls,
        lower: float | datetime = -math.inf,
        upper: float | datetime = math.inf,
        expand: Expansion = Expansion.NONE,
    ) -> RangeMode:
        return cls(kind=BoundKind.CONSTRAINED, lower=lower, upper=upper, expand=Expansion(expand))  # type: ignore[arg-type]

    @property
    def is_fixed(self) -> bool:
        return self.kind is BoundKind.FIXED


@dataclass(frozen=True)
class TicSetting:
    """How (and whether) tics are shown on an axis.

    `label_format` is None for step-derived decimals, "si" for SI suffixes,
    or any format spec accepted by `format()`. `mirror` is 0 (off), 1 (axis
    line on the opposite side) or 2 (axis line plus tics).
    """

    hide: bool = False
    delta: float | None = None
    time_delta: TimeDelta | None = None
    label_format: str | None = None
    marks: TicMarks = "both"
    grid: GridMode = "none"
    mirror: int = 0

    def __post_init__(self) -> None:
        if self.delta is not None and not (math.isfinite(self.delta) and self.delta > 0):
            raise ValueError("TicSetting `delta` must be a positive finite number")
        if self.marks not in _TIC_MARKS:
            raise ValueError(f"TicSetting `marks` must be one of {_TIC_MARKS}")
        if self.grid not in _GRID_MODES:
            raise ValueError(f"TicSetting `grid` must be one of {_GRID_MODES}")
        if self.mirror not in (0, 1, 2):
            raise ValueError("TicSetting `mirror` must be 0, 1 or 2")


@dataclass(frozen=True)
class Tic:
    pos: float
    label_pos: float
    label: str
    align: int = 0


@dataclass(frozen=True)
class TicSchedule:
    first: float
    last: float
    delta: float


class RangeSetup(NamedTuple):
    min: float
    max: float
    tics: list[Tic]
    data_to_screen: Callable[[float], int]
    screen_to_data: Callable[[float], float]


def almost_equal(a: float, b: float, rel_tol: float = 1e-5, abs_tol: float = 0.0) -> bool:
    """Relative comparison with an absolute floor for values near zero."""

    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


def nice_delta(delta: float, min_delta: float = 0.0) -> float:
    """Round a raw tic distance to 1, 2 or 5 times a power of ten.

    Mantissas below 2 become 1, below 4 become 2, below 9 become 5 and the
    rest 10. A result smaller than `min_delta` is bumped one step up the
    1-2-5 ladder.
    """

    if not math.isfinite(delta) or delta <= 0:
        return 1.0
    exp = math.floor(math.log10(delta))
    f = delta / _pow10(exp)
    if f < 2:
        mantissa = 1
    elif f < 4:
        mantissa = 2
    elif f < 9:
        mantissa = 5
    else:
        mantissa, exp = 1, exp + 1

    if _scaled(mantissa, exp) < min_delta:
        if mantissa == 1:
            mantissa = 2
        elif mantissa == 2:
            mantissa = 5
        else:
            mantissa, exp = 1, exp + 1
    return _scaled(mantissa, exp)


def _pow10(exp: int) -> float:
    return 10.0**exp if exp >= 0 else 1.0 / 10.0 ** (-exp)


def _scaled(mantissa: int, exp: int) -> float:
    # Dividing by an exact power of ten keeps 0.2, 0.05, ... exact.
    if exp >= 0:
        return float(mantissa * 10**exp)
    return mantissa / 10.0 ** (-exp)


def _snap_quotient(value: float, delta: float, rel_tol: float) -> tuple[float, bool]:
    q = value / delta
    r = round(q)
    if almost_equal(q, r, rel_tol=rel_tol, abs_tol=rel_tol):
        return float(r), True
    return q, False


def apply_range_mode(
    mode: RangeMode,
    value: float,
    tic_delta: float,
    upper: bool,
    *,
    log: bool = False,
    defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS,
) -> float:
    """Resolve one axis bound from its data extremum `value`."""

    if mode.kind is BoundKind.FIXED:
        return float(mode.value)  # type: ignore[arg-type]
    if mode.kind is BoundKind.CONSTRAINED:
        value = min(max(value, mode.lower), mode.upper)

    expand = mode.expand
    tol = defaults.almost_equal_rel_tol
    if expand in (Expansion.TO_TIC, Expansion.NEXT_TIC):
        if log:
            exp, on_tic = _snap_quotient(math.log10(value), 1.0, tol)
            exp = math.ceil(exp) if upper else math.floor(exp)
            if expand is Expansion.NEXT_TIC and on_tic:
                exp += 1 if upper else -1
            return _pow10(exp)
        q, on_tic = _snap_quotient(value, tic_delta, tol)
        n = math.ceil(q) if upper else math.floor(q)
        if expand is Expansion.NEXT_TIC and on_tic:
            n += 1 if upper else -1
        return n * tic_delta
    if expand is Expansion.A_BIT:
        frac = defaults.expand_a_bit_fraction
        if log:
            factor = 10.0**frac
            return value * factor if upper else value / factor
        shift = tic_delta * frac
        return value + shift if upper else value - shift
    return value


def apply_time_range_mode(
    mode: RangeMode,
    value: float,
    step: TimeDelta,
    upper: bool,
) -> tuple[float, float]:
    """Resolve one bound of a date/time axis.

    Returns `(bound, tic)` in POSIX seconds where `tic` is the outermost tic
    position that still lies inside the bound.
    """

    def inner_tic(bound: datetime) -> datetime:
        return round_down(bound, step) if upper else ceil_time(bound, step)

    if mode.kind is BoundKind.FIXED:
        bound = to_datetime(float(mode.value))  # type: ignore[arg-type]
        return to_seconds(bound), to_seconds(inner_tic(bound))
    if mode.kind is BoundKind.CONSTRAINED:
        value = min(max(value, mode.lower), mode.upper)

    t = to_datetime(value)
    half = timedelta(seconds=step.seconds / 2)
    expand = mode.expand
    if expand is Expansion.TO_TIC:
        bound = ceil_time(t, step) if upper else round_down(t, step)
        return to_seconds(bound), to_seconds(bound)
    if expand is Expansion.NEXT_TIC:
        tic = ceil_time(t, step) if upper else round_down(t, step)
        if abs(to_seconds(tic) - value) / step.seconds < 0.15:
            if upper:
                tic = round_up(tic + half, step)
            else:
                tic = round_down(tic - half, step)
        return to_seconds(tic), to_seconds(tic)
    if expand is Expansion.A_BIT:
        bound = t + half if upper else t - half
        return to_seconds(bound), to_seconds(inner_tic(bound))
    return value, to_seconds(inner_tic(t))


_SI_SUFFIXES = {
    -8: " y", -7: " z", -6: " a", -5: " f", -4: " p", -3: " n", -2: " µ", -1: " m",
    1: " k", 2: " M", 3: " G", 4: " T", 5: " P", 6: " E", 7: " Z", 8: " Y",
}


def format_si(value: float) -> str:
    """Short label with an SI suffix: 0.05 -> '50 m', 2500 -> '2.5 k'."""

    if not math.isfinite(value):
        return str(value)
    if value == 0:
        return "0"
    if 0.1 <= abs(value) <= 1000:
        return _format_si_mantissa(value)
    exp3 = 0
    while abs(value) < 1 and exp3 > -8:
        value *= 1000
        exp3 -= 1
    while abs(value) > 1000 and exp3 < 8:
        value /= 1000
        exp3 += 1
    return _format_si_mantissa(value) + _SI_SUFFIXES[exp3]


def _format_si_mantissa(value: float) -> str:
    av = abs(value)
    if 0.1 <= av < 10:
        return f"{value:.1f}"
    if 10 <= av <= 1000:
        return f"{value:.0f}"
    return f"{value:g}"


def format_tick(value: float, *, step: float | None = None) -> str:
    """Plain decimal label with as many places as the tic step needs."""

    if not math.isfinite(value):
        return str(value)
    if step is not None and math.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    places = _decimals_from_step(step) if step is not None else 6
    av = abs(value)
    if av != 0 and (av >= 1e6 or av < 1e-6 or (step is not None and abs(step) < 1e-4)):
        return f"{value:.4e}"

    try:
        text = format(Decimal(str(value)).quantize(Decimal(1).scaleb(-places)), "f")
    except InvalidOperation:
        text = repr(value)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_tic_label(value: float, *, step: float | None, label_format: str | None) -> str:
    if label_format is None:
        return format_tick(value, step=step)
    if label_format == "si":
        return format_si(value)
    return format(value, label_format)


def format_ticks_for_axis(values: list[float], label_format: str | None = None) -> list[str]:
    if not values:
        return []
    step = abs(values[1] - values[0]) if len(values) > 1 else None
    return [format_tic_label(v, step=step, label_format=label_format) for v in values]


def _decimals_from_step(step: float | None) -> int:
    if step is None or step <= 0 or not math.isfinite(step):
        return 6
    exp = Decimal(str(step)).normalize().as_tuple().exponent
    return min(12, max(0, -int(exp)))


@dataclass
class Range:
    """Bounds, tics and data/screen mapping for one axis.

    Feed data extrema with `autoscale()`, then call `setup()` once the
    screen extent is known. `setup()` may be repeated; it never touches
    `data_min`/`data_max`.
    """

    label: str = ""
    log: bool = False
    time: bool = False
    min_mode: RangeMode = field(default_factory=RangeMode)
    max_mode: RangeMode = field(default_factory=RangeMode)
    tic_setting: TicSetting = field(default_factory=TicSetting)
    show_zero: bool = False
    show_limits: bool = False
    defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS

    data_min: float | None = None
    data_max: float | None = None

    min: float = math.nan
    max: float = math.nan
    delta: float = math.nan
    time_delta: TimeDelta | None = None
    tics: list[Tic] = field(default_factory=list)

    _schedule: TicSchedule | None = field(default=None, init=False, repr=False)
    _screen: tuple[int, int, bool] | None = field(default=None, init=False, repr=False)

    def reset(self) -> None:
        """Forget observed data and any previous setup."""

        self.data_min = None
        self.data_max = None
        self.min = self.max = self.delta = math.nan
        self.time_delta = None
        self.tics = []
        self._schedule = None
        self._screen = None

    @property
    def has_data(self) -> bool:
        return self.data_min is not None

    def autoscale(self, value: float) -> None:
        if value is None or not math.isfinite(value):
            return
        value = float(value)
        if self.data_min is None or self.data_max is None:
            self.data_min = self.data_max = value
            return
        if value < self.data_min:
            self.data_min = value
        if value > self.data_max:
            self.data_max = value

    def copy(self) -> Range:
        return copy.deepcopy(self)

    def setup(
        self,
        num_tics: int,
        max_tics: int | None = None,
        screen_width: int = 0,
        screen_offset: int = 0,
        reversed: bool = False,
    ) -> RangeSetup:
        """Fix bounds, tic schedule and the data/screen mapping."""

        if screen_width <= 0:
            raise RangeError(f"screen width must be > 0, got {screen_width}")
        if num_tics <= 1:
            num_tics = 2
        if max_tics is None:
            max_tics = num_tics + 2
        max_tics = max(max_tics, num_tics)

        dmin, dmax = self._data_extent()
        if dmax == dmin:
            dmax = dmin + 1
        span = dmax - dmin
        raw_delta = span / (num_tics - 1)
        min_delta = span / (max_tics - 1)

        if self.time:
            self._time_setup(dmin, dmax, raw_delta, max_tics)
        else:
            self._float_setup(dmin, dmax, raw_delta, min_delta)

        self._screen = (int(screen_width), int(screen_offset), bool(reversed))
        LOGGER.debug(
            "range setup: data=(%g, %g) bounds=(%g, %g) delta=%g tics=%d",
            dmin,
            dmax,
            self.min,
            self.max,
            self.delta,
            len(self.tics),
        )
        return RangeSetup(self.min, self.max, list(self.tics), self.data_to_screen, self.screen_to_data)

    def _data_extent(self) -> tuple[float, float]:
        dmin, dmax = self.data_min, self.data_max
        if dmin is None or dmax is None:
            if self.min_mode.is_fixed and self.max_mode.is_fixed:
                return float(self.min_mode.value), float(self.max_mode.value)  # type: ignore[arg-type]
            raise RangeError("range has no data and no fixed bounds")
        if self.min_mode.is_fixed and self.min_mode.value > dmax:  # type: ignore[operator]
            dmax = float(self.min_mode.value)  # type: ignore[arg-type]
        if self.max_mode.is_fixed and self.max_mode.value < dmin:  # type: ignore[operator]
            dmin = float(self.max_mode.value)  # type: ignore[arg-type]
        return dmin, dmax

    def _float_setup(self, dmin: float, dmax: float, raw_delta: float, min_delta: float) -> None:
        if self.log:
            if dmin <= 0:
                raise RangeError(f"log axis needs positive data, got minimum {dmin:g}")
            delta = 10.0
        elif self.tic_setting.delta is not None:
            delta = float(self.tic_setting.delta)
        else:
            delta = nice_delta(raw_delta, min_delta)

        lo = apply_range_mode(self.min_mode, dmin, delta, False, log=self.log, defaults=self.defaults)
        hi = apply_range_mode(self.max_mode, dmax, delta, True, log=self.log, defaults=self.defaults)
        if not hi > lo:
            raise RangeError(f"invalid axis range: max {hi:g} <= min {lo:g}")
        if self.log and lo <= 0:
            raise RangeError(f"log axis needs a positive minimum, got {lo:g}")
        self.min, self.max, self.delta, self.time_delta = lo, hi, delta, None

        tol = self.defaults.almost_equal_rel_tol
        label_format = self.tic_setting.label_format
        if self.log:
            label_format = label_format or "si"
            first_exp = math.ceil(_snap_quotient(math.log10(lo), 1.0, tol)[0])
            last_exp = math.floor(_snap_quotient(math.log10(hi), 1.0, tol)[0])
            positions = [_pow10(e) for e in range(first_exp, last_exp + 1)]
            first, last = _pow10(first_exp), _pow10(last_exp)
        else:
            first_n = math.ceil(_snap_quotient(lo, delta, tol)[0])
            last_n = math.floor(_snap_quotient(hi, delta, tol)[0])
            positions = [_clean(n * delta, delta) for n in range(first_n, last_n + 1)]
            first, last = first_n * delta, last_n * delta
        positions = [min(max(p, lo), hi) for p in positions]
        self._schedule = TicSchedule(first=max(first, lo), last=min(last, hi), delta=delta)
        self.tics = [
            Tic(pos=p, label_pos=p, label=format_tic_label(p, step=None if self.log else delta, label_format=label_format))
            for p in positions
        ]

    def _time_setup(self, dmin: float, dmax: float, raw_delta: float, max_tics: int) -> None:
        td = self.tic_setting.time_delta or matching_time_delta(raw_delta, self.defaults.time_delta_factor)
        lo, first, hi, last = self._time_bounds(dmin, dmax, td)
        if int((hi - lo) / td.seconds) > max_tics and self.tic_setting.time_delta is None:
            bigger = next_time_delta(td)
            LOGGER.debug("switching time delta %s -> %s (max %d tics)", td, bigger, max_tics)
            td = bigger
            lo, first, hi, last = self._time_bounds(dmin, dmax, td)
        if not hi > lo:
            raise RangeError(f"invalid time range: max {hi:g} <= min {lo:g}")
        self.min, self.max, self.delta, self.time_delta = lo, hi, float(td.seconds), td

        tics: list[Tic] = []
        t = to_datetime(first)
        end = to_datetime(last)
        step = timedelta(seconds=td.seconds)
        while t <= end and len(tics) <= max_tics + 3:
            pos = to_seconds(t)
            label_pos = pos + td.seconds / 2 if td.is_period else pos
            tics.append(Tic(pos=pos, label_pos=label_pos, label=td.format(t)))
            t = round_down(t + step + step / 5, td)
        self.tics = tics
        self._schedule = TicSchedule(first=first, last=last, delta=float(td.seconds))

    def _time_bounds(self, dmin: float, dmax: float, td: TimeDelta) -> tuple[float, float, float, float]:
        lo, first = apply_time_range_mode(self.min_mode, dmin, td, False)
        hi, last = apply_time_range_mode(self.max_mode, dmax, td, True)
        return lo, first, hi, last

    @property
    def is_setup(self) -> bool:
        return self._schedule is not None and self._screen is not None

    @property
    def tic(self) -> TicSchedule:
        if self._schedule is None:
            raise RangeError("range is not set up")
        return self._schedule

    def norm(self, x: float) -> float:
        """Map [min, max] onto [0, 1]."""

        if self.log:
            return math.log10(x / self.min) / math.log10(self.max / self.min)
        return (x - self.min) / (self.max - self.min)

    def inv_norm(self, f: float) -> float:
        if self.log:
            return self.min * (self.max / self.min) ** f
        return self.min + f * (self.max - self.min)

    def data_to_screen(self, x: float) -> int:
        width, offset, reverse = self._require_screen()
        # Absorb float noise so screen positions survive a round trip.
        pos = math.floor(width * self.norm(x) + 1e-9)
        if reverse:
            return width - pos + offset
        return pos + offset

    def screen_to_data(self, s: float) -> float:
        width, offset, reverse = self._require_screen()
        if reverse:
            return self.inv_norm((offset + width - s) / width)
        return self.inv_norm((s - offset) / width)

    def contains(self, x: float) -> bool:
        return self.min <= x <= self.max

    def _require_screen(self) -> tuple[int, int, bool]:
        if self._screen is None:
            raise RangeError("range is not set up")
        return self._screen


def _clean(value: float, step: float) -> float:
    if abs(value) <= step * 1e-9:
        return 0.0
    return value
