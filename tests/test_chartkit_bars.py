from __future__ import annotations

import unittest

from chartkit.bars import (
    BarRect,
    BarValues,
    bar_rects,
    bar_width,
    baseline,
    category_bar_rects,
    category_range,
    extreme_bar_widths,
    format_bar_value,
    screen_bar_width,
    stacked_bar_rects,
    stacked_extent,
    validate_stacked,
    widen_for_bars,
)
from chartkit.data import Point
from chartkit.errors import ConsistencyError
from chartkit.scales import Range, RangeMode


def xf(x: float) -> int:
    return int(x * 10)


def yf(y: float) -> int:
    return 100 - int(y * 10)


class BarWidthTests(unittest.TestCase):
    def test_smallest_gap(self) -> None:
        self.assertEqual(bar_width([1.0, 2.0, 4.0, 7.0]), 1.0)

    def test_factor_scales_by_absolute_value(self) -> None:
        self.assertEqual(bar_width([1.0, 2.0, 4.0], factor=2.0), 2.0)
        self.assertEqual(bar_width([1.0, 2.0, 4.0], factor=-3.0), 3.0)

    def test_factor_is_monotone(self) -> None:
        xs = [0.0, 0.5, 2.0, 2.75]
        widths = [bar_width(xs, factor=f) for f in (0.5, 1.0, 1.5, 2.0)]
        self.assertEqual(widths, sorted(widths))
        self.assertEqual(len(set(widths)), len(widths))
        self.assertAlmostEqual(widths[3] / widths[1], 2.0)

    def test_single_sample_uses_span(self) -> None:
        self.assertEqual(bar_width([5.0], span=4.0), 4.0)
        self.assertEqual(bar_width([5.0]), 1.0)

    def test_extremes_over_sets(self) -> None:
        self.assertEqual(extreme_bar_widths([[0.0, 1.0, 2.0], [0.0, 2.0, 4.0]]), (1.0, 2.0))

    def test_screen_width_at_least_one(self) -> None:
        self.assertEqual(screen_bar_width(xf, 1.0), 9)
        self.assertEqual(screen_bar_width(xf, 0.01), 1)


class WidenTests(unittest.TestCase):
    def test_widens_clipped_ends(self) -> None:
        r = Range()
        r.autoscale(1.0)
        r.autoscale(4.0)
        r.setup(3, screen_width=100)
        self.assertTrue(widen_for_bars(r, 1.0))
        self.assertEqual((r.data_min, r.data_max), (0.5, 4.5))

    def test_no_widening_inside_fixed_bounds(self) -> None:
        r = Range(min_mode=RangeMode.fixed_at(0.0), max_mode=RangeMode.fixed_at(10.0))
        r.autoscale(2.0)
        r.autoscale(8.0)
        r.setup(3, screen_width=100)
        self.assertFalse(widen_for_bars(r, 1.0))


class BarRectTests(unittest.TestCase):
    def test_bar_from_baseline(self) -> None:
        rects = bar_rects([Point(1.0, 5.0)], 1.0, xf, yf, yf(0.0))
        self.assertEqual(rects, [BarRect(x=6, y=50, w=9, h=50)])

    def test_negative_bar_is_normalized(self) -> None:
        rects = bar_rects([Point(1.0, -2.0)], 1.0, xf, yf, yf(0.0))
        self.assertEqual((rects[0].y, rects[0].h), (100, 20))

    def test_value_labels(self) -> None:
        up = bar_rects([Point(1.0, 5.0)], 1.0, xf, yf, 100, BarValues.ABOVE)[0]
        down = bar_rects([Point(1.0, -5.0)], 1.0, xf, yf, 100, BarValues.INSIDE)[0]
        self.assertEqual((up.text, up.text_pos), ("5.00", "ot"))
        self.assertEqual((down.text, down.text_pos), ("-5.00", "ib"))

    def test_format_bar_value(self) -> None:
        self.assertEqual(format_bar_value(123.4), "123")
        self.assertEqual(format_bar_value(12.34), "12.3")
        self.assertEqual(format_bar_value(1.234), "1.23")
        self.assertEqual(format_bar_value(0.1234), "0.123")

    def test_baseline_prefers_zero(self) -> None:
        for lo, hi, expected in ((-5.0, 5.0, 0.0), (2.0, 10.0, 2.0), (-10.0, -2.0, -2.0)):
            r = Range(min_mode=RangeMode.fixed_at(lo), max_mode=RangeMode.fixed_at(hi))
            r.setup(3, screen_width=100, reversed=True)
            self.assertEqual(baseline(r, r.data_to_screen), r.data_to_screen(expected))


class StackedTests(unittest.TestCase):
    def test_mismatched_x_names_data_set(self) -> None:
        with self.assertRaises(ConsistencyError) as ctx:
            validate_stacked([("a", [1.0, 2.0, 3.0]), ("b", [1.0, 2.0, 4.0])])
        self.assertIn("data set 1", str(ctx.exception))
        self.assertIn("'b'", str(ctx.exception))

    def test_length_mismatch(self) -> None:
        with self.assertRaises(ConsistencyError):
            validate_stacked([("a", [1.0, 2.0]), ("b", [1.0])])

    def test_matching_sets_pass(self) -> None:
        validate_stacked([("a", [0.1 + 0.2, 1.0]), ("b", [0.3, 1.0])])

    def test_extent_tracks_running_sums(self) -> None:
        self.assertEqual(stacked_extent([[1.0, 2.0], [3.0, -5.0]]), (-3.0, 4.0))

    def test_stacked_rects_start_on_previous_top(self) -> None:
        sets = [[Point(1.0, 1.0)], [Point(1.0, 3.0)]]
        lower, upper = stacked_bar_rects(sets, 1.0, xf, yf)
        self.assertEqual((lower[0].y, lower[0].h), (90, 10))
        self.assertEqual((upper[0].y, upper[0].h), (60, 30))


class CategoryBarTests(unittest.TestCase):
    def test_category_range_is_fixed(self) -> None:
        r = category_range(3)
        r.setup(3, screen_width=90)
        self.assertEqual((r.min, r.max), (0.5, 3.5))

    def test_side_by_side_slots(self) -> None:
        def cxf(x: float) -> int:
            return int(x * 20)

        rects = category_bar_rects(
            ["a", "b"],
            [{"a": 1.0, "b": 2.0}, {"a": 3.0, "zzz": 9.0}],
            cxf,
            yf,
            100,
            stacked=False,
        )
        self.assertEqual(rects[0][0], BarRect(x=15, y=90, w=5, h=10))
        self.assertEqual(rects[1], [BarRect(x=21, y=70, w=5, h=30)])

    def test_stacked_categories(self) -> None:
        def cxf(x: float) -> int:
            return int(x * 20)

        lower, upper = category_bar_rects(["a"], [{"a": 1.0}, {"a": 3.0}], cxf, yf, 100, stacked=True)
        self.assertEqual(lower[0], BarRect(x=15, y=90, w=10, h=10))
        self.assertEqual(upper[0], BarRect(x=15, y=60, w=10, h=30))


if __name__ == "__main__":
    unittest.main()
