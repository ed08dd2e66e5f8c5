from __future__ import annotations

from typing import Any

import numpy as np

from chartkit.adapters.normalize import coerce_1d_numeric
from chartkit.config import DEFAULT_CHART_DEFAULTS, ChartDefaults
from chartkit.data import Box
from chartkit.errors import EmptyInputError


def sixval(data: Any, percentile: float = 25.0) -> tuple[float, float, float, float, float, float]:
    """Return (min, lower quartile, median, mean, upper quartile, max).

    Quartiles use linear interpolation between closest ranks; NaNs are
    ignored.
    """

    arr = coerce_1d_numeric(data, label="sample")
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        raise EmptyInputError("cannot summarize an empty sample")
    if not 0.0 < percentile < 50.0:
        raise ValueError("percentile must be in (0, 50)")
    lq, med, uq = np.percentile(arr, [percentile, 50.0, 100.0 - percentile])
    return (
        float(arr.min()),
        float(lq),
        float(med),
        float(arr.mean()),
        float(uq),
        float(arr.max()),
    )


def box_from_sample(
    x: float,
    data: Any,
    *,
    outliers: bool = True,
    defaults: ChartDefaults = DEFAULT_CHART_DEFAULTS,
) -> Box:
    """Summarize `data` as a box at position `x`.

    With `outliers` enabled, values beyond the IQR fences are reported
    separately and the whiskers stop at the most extreme values inside the
    fences. Otherwise whiskers span the full sample.
    """

    low, q1, med, avg, q3, high = sixval(data, defaults.box_percentile)
    if not outliers:
        return Box(x=float(x), low=low, q1=q1, med=med, avg=avg, q3=q3, high=high)

    arr = coerce_1d_numeric(data, label="sample")
    arr = arr[np.isfinite(arr)]
    fence = defaults.outlier_iqr_factor * (q3 - q1)
    lower_fence, upper_fence = q1 - fence, q3 + fence
    outside = (arr < lower_fence) | (arr > upper_fence)
    inside = arr[~outside]
    # Fences always enclose [q1, q3], so `inside` is never empty.
    return Box(
        x=float(x),
        low=float(inside.min()),
        q1=q1,
        med=med,
        avg=avg,
        q3=q3,
        high=float(inside.max()),
        outliers=tuple(float(v) for v in arr[outside]),
    )
