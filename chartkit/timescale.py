from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum


class TimeUnit(str, Enum):
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


_UNIT_SECONDS: dict[TimeUnit, int] = {
    TimeUnit.SECOND: 1,
    TimeUnit.MINUTE: 60,
    TimeUnit.HOUR: 60 * 60,
    TimeUnit.DAY: 24 * 60 * 60,
    TimeUnit.WEEK: 7 * 24 * 60 * 60,
    # Nominal lengths, only used for spacing decisions.
    TimeUnit.MONTH: int(24 * 60 * 60 * 365.25 / 12),
    TimeUnit.YEAR: int(24 * 60 * 60 * 365.25),
}

_PERIOD_UNITS = frozenset({TimeUnit.DAY, TimeUnit.WEEK, TimeUnit.MONTH, TimeUnit.YEAR})


@dataclass(frozen=True)
class TimeDelta:
    """A tic spacing on a date/time axis, e.g. 15 minutes or 3 months."""

    unit: TimeUnit
    num: int = 1

    def __post_init__(self) -> None:
        if self.num < 1:
            raise ValueError("TimeDelta `num` must be >= 1")

    @property
    def seconds(self) -> int:
        return _UNIT_SECONDS[self.unit] * self.num

    @property
    def is_period(self) -> bool:
        """True for deltas that name an interval (a day, a month) rather than an instant."""
        return self.unit in _PERIOD_UNITS

    def round_down(self, t: datetime) -> datetime:
        n = self.num
        if self.unit is TimeUnit.SECOND:
            return t.replace(second=n * (t.second // n), microsecond=0)
        if self.unit is TimeUnit.MINUTE:
            return t.replace(minute=n * (t.minute // n), second=0, microsecond=0)
        if self.unit is TimeUnit.HOUR:
            return t.replace(hour=n * (t.hour // n), minute=0, second=0, microsecond=0)
        midnight = t.replace(hour=0, minute=0, second=0, microsecond=0)
        if self.unit is TimeUnit.DAY:
            return midnight.replace(day=n * ((t.day - 1) // n) + 1)
        if self.unit is TimeUnit.WEEK:
            return midnight - timedelta(days=t.weekday())
        if self.unit is TimeUnit.MONTH:
            return midnight.replace(day=1, month=n * ((t.month - 1) // n) + 1)
        return midnight.replace(day=1, month=1, year=max(1, n * (t.year // n)))

    def format(self, t: datetime) -> str:
        if self.unit is TimeUnit.SECOND:
            return f"{t.minute:02d}'{t.second:02d}\""
        if self.unit is TimeUnit.MINUTE:
            return f"{t.minute:02d}'"
        if self.unit is TimeUnit.HOUR:
            return f"{t.hour:02d}:{t.minute:02d}"
        if self.unit is TimeUnit.DAY:
            return t.strftime("%a")
        if self.unit is TimeUnit.WEEK:
            return f"W {calendar_week(t)}"
        if self.unit is TimeUnit.MONTH:
            if self.num == 3:
                return f"Q{(t.month - 1) // 3 + 1} {t.year}"
            if self.num == 6:
                return f"H{(t.month - 1) // 6 + 1} {t.year}"
            return f"{t.month:02d}.{t.year}"
        return f"{t.year}"

    def __str__(self) -> str:
        return f"{self.num} {self.unit.value}(s)"


# Sorted by length; every entry is at least 1.5 times its predecessor,
# which round_up() relies on.
TIME_DELTAS: tuple[TimeDelta, ...] = (
    TimeDelta(TimeUnit.SECOND, 1),
    TimeDelta(TimeUnit.SECOND, 5),
    TimeDelta(TimeUnit.SECOND, 15),
    TimeDelta(TimeUnit.MINUTE, 1),
    TimeDelta(TimeUnit.MINUTE, 5),
    TimeDelta(TimeUnit.MINUTE, 15),
    TimeDelta(TimeUnit.HOUR, 1),
    TimeDelta(TimeUnit.HOUR, 6),
    TimeDelta(TimeUnit.DAY, 1),
    TimeDelta(TimeUnit.WEEK, 1),
    TimeDelta(TimeUnit.MONTH, 1),
    TimeDelta(TimeUnit.MONTH, 3),
    TimeDelta(TimeUnit.MONTH, 6),
    TimeDelta(TimeUnit.YEAR, 1),
    TimeDelta(TimeUnit.YEAR, 10),
)


def to_datetime(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def to_seconds(t: datetime) -> float:
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    return t.timestamp()


def calendar_week(t: datetime) -> int:
    return t.isocalendar()[1]


def round_down(t: datetime, delta: TimeDelta) -> datetime:
    return delta.round_down(t)


def round_up(t: datetime, delta: TimeDelta) -> datetime:
    """Round `t` to the next boundary strictly above its own floor."""

    floor = delta.round_down(t)
    return delta.round_down(floor + timedelta(seconds=1.5 * delta.seconds))


def round_next(t: datetime, delta: TimeDelta) -> datetime:
    lower = delta.round_down(t)
    upper = round_up(t, delta)
    if t - lower < upper - t:
        return lower
    return upper


def ceil_time(t: datetime, delta: TimeDelta) -> datetime:
    """Smallest boundary >= t."""

    floor = delta.round_down(t)
    if floor == t:
        return floor
    return round_up(t, delta)


def next_time_delta(delta: TimeDelta) -> TimeDelta:
    for candidate in TIME_DELTAS:
        if candidate.seconds > delta.seconds:
            return candidate
    return TIME_DELTAS[-1]


def matching_time_delta(delta: float, factor: float = 3.0) -> TimeDelta:
    """Pick the ladder entry for a raw tic distance of `delta` seconds.

    Walks the ladder while `delta` exceeds `factor` times the next entry.
    """

    i = 0
    while i + 1 < len(TIME_DELTAS) and delta > factor * TIME_DELTAS[i + 1].seconds:
        i += 1
    if i + 1 < len(TIME_DELTAS):
        return TIME_DELTAS[i + 1]
    return TIME_DELTAS[-1]
