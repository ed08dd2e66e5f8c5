from __future__ import annotations


class ChartError(ValueError):
    """Base class for every error raised by chartkit."""


class ChartDataError(ChartError):
    """Input data could not be coerced into numeric samples."""


class RangeError(ChartError):
    """An axis range could not be resolved into a valid [min, max] interval."""


class DegenerateDataError(ChartError):
    """Data is present but geometrically meaningless (e.g. a pie summing to zero)."""


class EmptyInputError(ChartError):
    """A computation received no samples at all."""


class ConsistencyError(ChartError):
    """Data sets that must line up with each other do not."""


class LayoutError(ChartError):
    """The canvas leaves no room for the plot area."""
