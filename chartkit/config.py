from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class ChartDefaults:
    """Tunable constants shared by range bounding, geometry and key layout.

    Instances are immutable; derive variants with `validate_chart_defaults`.
    """

    expand_a_bit_fraction: float = 0.5
    almost_equal_rel_tol: float = 1e-5
    box_percentile: float = 25.0
    outlier_iqr_factor: float = 1.5
    pie_shrinkage: float = 0.65
    pie_label_position: float = 0.75
    pie_highlight_fraction: float = 0.15
    pie_min_highlight_shift: int = 6
    text_aspect: float = 1.9
    key_hor_sep: float = 1.5
    key_vert_sep: float = 0.5
    key_col_sep: float = 2.0
    key_symbol_width: float = 4.0
    key_symbol_sep: float = 1.0
    key_row_sep: float = 0.75
    time_delta_factor: float = 3.0

    def __post_init__(self) -> None:
        if not 0.0 < self.pie_shrinkage < 1.0:
            raise ValueError("pie_shrinkage must be in (0, 1)")
        if not 0.0 < self.box_percentile < 50.0:
            raise ValueError("box_percentile must be in (0, 50)")
        if self.almost_equal_rel_tol <= 0:
            raise ValueError("almost_equal_rel_tol must be > 0")
        if self.pie_min_highlight_shift < 0:
            raise ValueError("pie_min_highlight_shift must be >= 0")


DEFAULT_CHART_DEFAULTS = ChartDefaults()

_INT_FIELDS = {"pie_min_highlight_shift"}


def validate_chart_defaults(overrides: Mapping[str, Any] | None = None) -> ChartDefaults:
    """Validate and merge user overrides against the built-in defaults."""

    raw: dict[str, Any] = asdict(DEFAULT_CHART_DEFAULTS)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown chart default: {key}")
            raw[key] = value

    for f in fields(ChartDefaults):
        value = raw[f.name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Chart default `{f.name}` must be a number")
        if f.name in _INT_FIELDS:
            raw[f.name] = int(value)
            continue
        if float(value) < 0:
            raise ValueError(f"Chart default `{f.name}` must be >= 0")
        raw[f.name] = float(value)

    return ChartDefaults(**raw)
