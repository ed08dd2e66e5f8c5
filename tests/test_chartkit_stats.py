from __future__ import annotations

import math
import unittest

import numpy as np

from chartkit.config import validate_chart_defaults
from chartkit.errors import EmptyInputError
from chartkit.stats import box_from_sample, sixval


class SixvalTests(unittest.TestCase):
    def test_summary_of_small_sample(self) -> None:
        self.assertEqual(sixval([1, 2, 3, 4]), (1.0, 1.75, 2.5, 2.5, 3.25, 4.0))

    def test_nan_is_ignored(self) -> None:
        self.assertEqual(sixval([1.0, math.nan, 3.0])[0], 1.0)
        self.assertEqual(sixval([1.0, math.nan, 3.0])[5], 3.0)

    def test_empty_sample_raises(self) -> None:
        with self.assertRaises(EmptyInputError):
            sixval([])
        with self.assertRaises(EmptyInputError):
            sixval([math.nan])

    def test_percentile_range_is_validated(self) -> None:
        with self.assertRaises(ValueError):
            sixval([1, 2, 3], percentile=60.0)

    def test_recomputing_is_identical(self) -> None:
        sample = np.random.default_rng(3).normal(size=101)
        self.assertEqual(sixval(sample), sixval(sample))


class BoxFromSampleTests(unittest.TestCase):
    def test_far_value_becomes_outlier(self) -> None:
        box = box_from_sample(1.0, [1, 2, 3, 4, 5, 6, 7, 8, 9, 100])
        self.assertEqual(box.outliers, (100.0,))
        self.assertEqual(box.high, 9.0)
        self.assertEqual(box.low, 1.0)
        self.assertEqual(box.x, 1.0)

    def test_disabled_outliers_span_full_sample(self) -> None:
        box = box_from_sample(1.0, [1, 2, 3, 4, 5, 6, 7, 8, 9, 100], outliers=False)
        self.assertEqual(box.outliers, ())
        self.assertEqual(box.high, 100.0)

    def test_sample_inside_fences_has_no_outliers(self) -> None:
        sample = [3.0, 4.0, 4.5, 5.0, 5.5, 6.0, 7.0]
        box = box_from_sample(0.0, sample)
        self.assertEqual(box.outliers, ())
        self.assertEqual((box.low, box.high), (3.0, 7.0))

    def test_iqr_factor_comes_from_defaults(self) -> None:
        sample = [1, 2, 3, 4, 5, 6, 7, 8, 9, 20]
        self.assertEqual(box_from_sample(0.0, sample).outliers, (20.0,))
        wide = validate_chart_defaults({"outlier_iqr_factor": 3.0})
        self.assertEqual(box_from_sample(0.0, sample, defaults=wide).outliers, ())

    def test_low_outlier(self) -> None:
        box = box_from_sample(0.0, [-50, 10, 11, 12, 13, 14, 15])
        self.assertEqual(box.outliers, (-50.0,))
        self.assertEqual(box.low, 10.0)


if __name__ == "__main__":
    unittest.main()
