from .normalize import XYSamples, coerce_1d_numeric, normalize_categories, normalize_values, normalize_xy

__all__ = [
    "XYSamples",
    "coerce_1d_numeric",
    "normalize_categories",
    "normalize_values",
    "normalize_xy",
]
