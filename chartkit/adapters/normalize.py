from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

import numpy as np

from chartkit.errors import ChartDataError, EmptyInputError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


@dataclass(frozen=True)
class XYSamples:
    x: np.ndarray
    y: np.ndarray
    source_name: str | None = None

    def __len__(self) -> int:
        return int(self.x.size)


def normalize_xy(
    y: Any = None,
    *,
    x: Any = None,
    data: Any = None,
    source_name: str | None = None,
) -> XYSamples:
    """Coerce paired x/y input into finite float64 arrays.

    Pairs where either coordinate is NaN/inf are dropped. Omitting `x`
    numbers the samples 1..n.
    """

    y_values = _resolve_input(y, key="y", data=data)
    if y_values is None:
        raise ChartDataError("y input is required")

    y_arr = coerce_1d_numeric(y_values, label="y")
    if y_arr.size == 0:
        raise EmptyInputError("empty series")

    if x is None:
        x_arr = np.arange(1, y_arr.size + 1, dtype=np.float64)
    else:
        x_values = _resolve_input(x, key="x", data=data)
        x_arr = coerce_1d_numeric(x_values, label="x")

    if x_arr.shape != y_arr.shape:
        raise ChartDataError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")

    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    if not np.any(mask):
        raise EmptyInputError("series contains no finite points")

    return XYSamples(x=x_arr[mask], y=y_arr[mask], source_name=source_name)


def normalize_values(values: Any, *, data: Any = None, label: str = "values") -> np.ndarray:
    """Coerce a 1-D sample into a finite float64 array."""

    resolved = _resolve_input(values, key="y", data=data)
    if resolved is None:
        raise ChartDataError(f"{label} input is required")
    arr = coerce_1d_numeric(resolved, label=label)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        raise EmptyInputError(f"{label} contains no finite values")
    return arr


def normalize_categories(values: Any) -> dict[str, float]:
    """Coerce a category->value mapping (dict or pandas Series) into floats."""

    if pd is not None and isinstance(values, pd.Series):
        values = values.to_dict()
    if not isinstance(values, Mapping):
        raise ChartDataError(f"unsupported category input type: {type(values)!r}")
    out: dict[str, float] = {}
    for key, raw in values.items():
        try:
            out[str(key)] = float(raw)
        except (TypeError, ValueError) as exc:
            raise ChartDataError(f"category {key!r} has non-numeric value: {raw!r}") from exc
    return out


def _resolve_input(value: Any, key: str, data: Any) -> Any:
    if data is not None:
        if pd is None:
            raise ChartDataError("pandas is required when using `data=`")
        if not isinstance(data, pd.DataFrame):
            raise ChartDataError("`data` must be a pandas DataFrame")
        if isinstance(value, str):
            if value not in data.columns:
                raise ChartDataError(f"column not found: {value}")
            return data[value]
        if value is None:
            if key == "y":
                numeric_cols = [c for c in data.columns if _is_numeric_dtype(data[c])]
                if len(numeric_cols) != 1:
                    raise ChartDataError("when y is omitted, data must have exactly one numeric column")
                return data[numeric_cols[0]]
            return None
        return value

    if pd is not None and isinstance(value, pd.DataFrame):
        numeric_cols = [c for c in value.columns if _is_numeric_dtype(value[c])]
        if len(numeric_cols) != 1:
            raise ChartDataError("1-D DataFrame input must contain exactly one numeric column")
        return value[numeric_cols[0]]

    return value


def _is_numeric_dtype(series: Any) -> bool:
    if pd is None:
        return False
    return bool(pd.api.types.is_numeric_dtype(series))


def coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise ChartDataError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise ChartDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _coerce_ndarray(np.asarray(list(value), dtype=object), label=label)

    raise ChartDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)
    if arr.dtype.kind == "M":
        # datetime64 -> POSIX seconds
        return arr.astype("datetime64[ns]").astype(np.int64) / 1e9
    if arr.ndim != 1:
        raise ChartDataError(f"{label} must be 1-D")

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        if isinstance(raw, datetime):
            out[i] = raw.timestamp()
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise ChartDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
