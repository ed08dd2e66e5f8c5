from __future__ import annotations

import math
import unittest
from unittest import mock

import numpy as np

from chartkit.canvas import TextCanvas
from chartkit.charts import BarChart, BoxChart, CategoryBarChart, HistChart, PieChart, ScatterChart, StripChart
from chartkit.charts.histogram import bin_counts
from chartkit.charts.scatter import function_segments, sampling_step, screen_points
from chartkit.data import EPoint
from chartkit.errors import ConsistencyError, DegenerateDataError, EmptyInputError, RangeError
from chartkit.key import DataEntry, Heading
from chartkit.scales import Range, RangeMode


def _fixed(lo: float, hi: float) -> Range:
    return Range(min_mode=RangeMode.fixed_at(lo), max_mode=RangeMode.fixed_at(hi))


def _canvas() -> TextCanvas:
    return TextCanvas(80, 24)


class BarChartTests(unittest.TestCase):
    def test_plot_works_on_range_copies(self) -> None:
        chart = BarChart()
        chart.add_data("a", [(3.0, 1.0), (1.0, 2.0), (2.0, 3.0)])
        chart.plot(_canvas())
        self.assertFalse(chart.x_range.is_setup)
        self.assertTrue(chart.last_x_range().is_setup)
        self.assertLessEqual(chart.last_y_range().min, 1.0)
        self.assertEqual([p.x for p in chart.data[0].samples], [1.0, 2.0, 3.0])

    def test_stacked_sets_need_same_x(self) -> None:
        chart = BarChart(stacked=True)
        chart.add_data("a", [(1.0, 1.0), (2.0, 2.0)])
        chart.add_data("b", [(1.0, 1.0), (3.0, 2.0)])
        with self.assertRaises(ConsistencyError):
            chart.plot(_canvas())

    def test_stacked_range_covers_sums(self) -> None:
        chart = BarChart(stacked=True)
        chart.add_data("a", [(1.0, 4.0), (2.0, 2.0)])
        chart.add_data("b", [(1.0, 5.0), (2.0, 1.0)])
        chart.plot(_canvas())
        self.assertGreaterEqual(chart.last_y_range().max, 9.0)

    def test_empty_chart(self) -> None:
        with self.assertRaises(EmptyInputError):
            BarChart().plot(_canvas())
        with self.assertRaises(EmptyInputError):
            BarChart().add_data("a", [(1.0, math.nan)])

    def test_same_bar_width(self) -> None:
        chart = BarChart(same_bar_width=True)
        chart.add_data("a", [(1.0, 1.0), (2.0, 2.0), (3.0, 1.0)])
        chart.add_data("b", [(1.0, 1.0), (3.0, 2.0), (5.0, 1.0)])
        with mock.patch.object(TextCanvas, "draw_bars", autospec=True) as draw_bars:
            chart.plot(_canvas())
        self.assertEqual(draw_bars.call_count, 2)
        widths = {r.w for call in draw_bars.call_args_list for r in call.args[1]}
        self.assertEqual(len(widths), 1)

    def test_own_bar_widths(self) -> None:
        chart = BarChart()
        chart.add_data("a", [(1.0, 1.0), (2.0, 2.0), (3.0, 1.0)])
        chart.add_data("b", [(1.0, 1.0), (3.0, 2.0), (5.0, 1.0)])
        with mock.patch.object(TextCanvas, "draw_bars", autospec=True) as draw_bars:
            chart.plot(_canvas())
        narrow, wide = (call.args[1][0].w for call in draw_bars.call_args_list)
        self.assertGreater(wide, narrow)

    def test_key_entry_per_named_set(self) -> None:
        chart = BarChart()
        chart.add_data("a", [(1.0, 1.0)])
        chart.add_data("", [(2.0, 1.0)])
        self.assertEqual([e.text for e in chart.key.entries], ["a"])


class BoxChartTests(unittest.TestCase):
    def test_one_draw_call_per_set(self) -> None:
        chart = BoxChart()
        chart.next_data_set("first")
        chart.add_set(1.0, [1, 2, 3, 4, 5, 6, 7, 8, 9, 100])
        chart.add_set(2.0, [2, 3, 4])
        chart.next_data_set("second")
        chart.add_set(3.0, [5, 6, 7])
        with mock.patch.object(TextCanvas, "draw_boxes", autospec=True) as draw_boxes:
            chart.plot(_canvas())
        self.assertEqual(draw_boxes.call_count, 2)
        self.assertEqual(len(draw_boxes.call_args_list[0].args[1]), 2)
        self.assertGreaterEqual(chart.last_y_range().max, 100.0)

    def test_add_set_without_data_set(self) -> None:
        chart = BoxChart()
        chart.add_set(1.0, [1.0, 2.0])
        self.assertEqual(len(chart.data), 1)
        self.assertTrue(chart.key.is_empty)


class CategoryBarChartTests(unittest.TestCase):
    def test_stacked_starts_at_zero(self) -> None:
        chart = CategoryBarChart(categories=["a", "b"], stacked=True)
        chart.add_data("s1", {"a": 1.0, "b": 2.0})
        chart.add_data("s2", {"a": 3.0, "b": 4.0})
        chart.plot(_canvas())
        self.assertEqual(chart.last_y_range().min, 0.0)
        self.assertGreaterEqual(chart.last_y_range().max, 6.0)
        self.assertEqual([t.label for t in chart.last_x_range().tics], ["a", "b"])

    def test_needs_categories(self) -> None:
        chart = CategoryBarChart()
        chart.add_data("s", {"a": 1.0})
        with self.assertRaises(EmptyInputError):
            chart.plot(_canvas())

    def test_bars_are_drawn_per_set(self) -> None:
        chart = CategoryBarChart(categories=["x", "y", "z"])
        chart.add_data("s1", {"x": 1.0, "z": 2.0})
        chart.add_data("s2", {"y": 3.0})
        with mock.patch.object(TextCanvas, "draw_bars", autospec=True) as draw_bars:
            chart.plot(_canvas())
        self.assertEqual([len(call.args[1]) for call in draw_bars.call_args_list], [2, 1])


class PieChartTests(unittest.TestCase):
    def test_zero_sum_rejected_on_add(self) -> None:
        with self.assertRaises(DegenerateDataError):
            PieChart().add_data("z", {"a": 0.0, "b": 0.0})

    def test_key_heading_and_category_entries(self) -> None:
        chart = PieChart()
        chart.add_data("share", {"a": 1.0, "b": 2.0})
        self.assertIsInstance(chart.key.entries[0], Heading)
        self.assertEqual([e.text for e in chart.key.entries[1:]], ["a", "b"])
        self.assertTrue(all(isinstance(e, DataEntry) for e in chart.key.entries[1:]))

    def test_one_ring_per_set(self) -> None:
        chart = PieChart()
        chart.add_data("outer", [("a", 1.0), ("b", 2.0)])
        chart.add_data_pair("inner", ["a", "b"], [3.0, 1.0])
        with mock.patch.object(TextCanvas, "draw_rings", autospec=True) as draw_rings:
            chart.plot(_canvas())
        self.assertEqual(draw_rings.call_count, 2)
        (_, _, _, _, outer, inner), (_, _, _, _, outer2, inner2) = (c.args for c in draw_rings.call_args_list)
        self.assertLess(outer2, outer)
        self.assertEqual((inner, inner2), (0, 0))

    def test_rings_keep_inner_fraction(self) -> None:
        chart = PieChart(inner_fraction=0.7)
        chart.add_data("outer", {"a": 1.0, "b": 2.0})
        chart.add_data("inner", {"a": 3.0, "b": 1.0})
        with mock.patch.object(TextCanvas, "draw_rings", autospec=True) as draw_rings:
            chart.plot(_canvas())
        for call in draw_rings.call_args_list:
            outer, inner = call.args[4], call.args[5]
            self.assertEqual(inner, int(outer * 0.7))

    def test_side_by_side(self) -> None:
        chart = PieChart(stacked=False)
        chart.add_data("a", {"x": 1.0})
        chart.add_data("b", {"x": 1.0})
        with mock.patch.object(TextCanvas, "draw_rings", autospec=True) as draw_rings:
            chart.plot(_canvas())
        centers = [c.args[2] for c in draw_rings.call_args_list]
        self.assertLess(centers[0], centers[1])

    def test_inner_fraction_validated(self) -> None:
        with self.assertRaises(ValueError):
            PieChart(inner_fraction=1.0)


class ScatterHelperTests(unittest.TestCase):
    def test_sampling_step(self) -> None:
        self.assertEqual([sampling_step(w) for w in (400, 100, 60, 15)], [8, 4, 2, 1])

    def test_points_outside_range_are_dropped_and_bars_clipped(self) -> None:
        xr, yr = _fixed(0.0, 10.0), _fixed(0.0, 10.0)
        xr.setup(3, screen_width=100)
        yr.setup(3, screen_width=100)
        points = [EPoint(5.0, 5.0, 4.0), EPoint(11.0, 5.0), EPoint(9.0, 5.0, 4.0)]
        out = screen_points(points, xr, yr)
        self.assertEqual(len(out), 2)
        self.assertEqual((out[0].x_low, out[0].x_high), (30, 70))
        self.assertEqual((out[1].x_low, out[1].x_high), (70, 100))
        self.assertIsNone(out[0].y_low)

    def test_function_leaving_range_ends_on_bound(self) -> None:
        xr, yr = _fixed(0.0, 10.0), _fixed(0.0, 5.0)
        xr.setup(3, screen_width=100)
        yr.setup(3, screen_width=50, reversed=True)
        segments = function_segments(lambda x: x, xr, yr, 0, 100)
        self.assertEqual(len(segments), 1)
        self.assertEqual(len(segments[0]), 14)
        self.assertEqual(segments[0][-1].y, 0)

    def test_function_reentering_range_starts_on_bound(self) -> None:
        xr, yr = _fixed(0.0, 10.0), _fixed(0.0, 5.0)
        xr.setup(3, screen_width=100)
        yr.setup(3, screen_width=50, reversed=True)
        segments = function_segments(lambda x: 10.0 if 3 < x < 6 else 1.0, xr, yr, 0, 100)
        self.assertEqual(len(segments), 2)
        self.assertEqual((segments[1][0].x, segments[1][0].y), (56, 0))

    def test_nan_breaks_function(self) -> None:
        xr, yr = _fixed(0.0, 10.0), _fixed(0.0, 5.0)
        xr.setup(3, screen_width=100)
        yr.setup(3, screen_width=50, reversed=True)
        segments = function_segments(lambda x: math.nan if 4 < x < 6 else 1.0, xr, yr, 0, 100)
        self.assertEqual(len(segments), 2)


class ScatterChartTests(unittest.TestCase):
    def test_non_finite_points_filtered(self) -> None:
        chart = ScatterChart()
        chart.add_data("s", [(1.0, 2.0), (math.inf, 1.0), (2.0, math.nan)])
        self.assertEqual(len(chart.data[0].samples), 1)
        with self.assertRaises(EmptyInputError):
            chart.add_data("t", [(math.nan, 1.0)])

    def test_error_bars_extend_autoscale(self) -> None:
        chart = ScatterChart()
        chart.add_data("s", [(1.0, 2.0, 0.0, 6.0), (2.0, 3.0)])
        self.assertEqual((chart.y_range.data_min, chart.y_range.data_max), (-1.0, 5.0))

    def test_function_only_chart_scales_y(self) -> None:
        chart = ScatterChart(x_range=_fixed(0.0, 10.0))
        chart.add_func("square", lambda x: x * x)
        chart.plot(_canvas())
        self.assertGreater(chart.last_y_range().max, 50.0)
        self.assertFalse(chart.y_range.has_data)

    def test_function_needs_x_bounds(self) -> None:
        chart = ScatterChart()
        chart.add_func("f", math.sin)
        with self.assertRaises(RangeError):
            chart.plot(_canvas())

    def test_add_data_pair(self) -> None:
        chart = ScatterChart()
        chart.add_data_pair("p", [1, 2, 3], [4, None, 6])
        self.assertEqual([(p.x, p.y) for p in chart.data[0].samples], [(1.0, 4.0), (3.0, 6.0)])


class StripChartTests(unittest.TestCase):
    def test_rows_and_deterministic_jitter(self) -> None:
        chart = StripChart(jitter=True, seed=3)
        chart.add_data("a", [1.0, 2.0, 3.0])
        chart.add_data("b", [2.0, 4.0])
        first, again = chart._jittered(), chart._jittered()
        self.assertEqual([p.y for p in first[0].samples], [p.y for p in again[0].samples])
        self.assertTrue(all(abs(p.y - 1.0) <= 0.15 + 1e-9 for p in first[0].samples))
        self.assertTrue(all(p.y == 2.0 for p in chart.data[1].samples))
        self.assertTrue(all(p.y == 1.0 for p in chart.data[0].samples))

    def test_plot_fixes_rows(self) -> None:
        chart = StripChart()
        chart.add_data("a", [1.0, 2.0])
        chart.add_data("b", [3.0])
        chart.plot(_canvas())
        self.assertEqual((chart.last_y_range().min, chart.last_y_range().max), (0.5, 2.5))
        self.assertFalse(chart.y_range.tic_setting.hide)


class HistChartTests(unittest.TestCase):
    def test_bin_counts(self) -> None:
        counts = bin_counts(np.array([0.0, 1.0, 1.5, 2.0, 10.0]), 0.0, 2.0, 5)
        self.assertEqual(counts.tolist(), [3, 1, 0, 0, 1])

    def test_out_of_range_samples_not_counted(self) -> None:
        counts = bin_counts(np.array([-1.0, 0.5, 7.0]), 0.0, 1.0, 2)
        self.assertEqual(counts.tolist(), [1, 0])

    def test_counts_cover_all_samples(self) -> None:
        chart = HistChart()
        self.assertEqual(chart.counts(), [])
        chart.add_data("h", [0.0, 1.0, 1.5, 2.0, 10.0])
        chart.plot(_canvas())
        self.assertEqual(int(chart.counts()[0].sum()), 5)
        self.assertEqual(chart.last_y_range().min, 0.0)

    def test_stacked_sets(self) -> None:
        chart = HistChart(stacked=True)
        chart.add_data("a", np.arange(10.0))
        chart.add_data("b", np.arange(5.0))
        chart.plot(_canvas())
        total = sum(int(c.sum()) for c in chart.counts())
        self.assertEqual(total, 15)


if __name__ == "__main__":
    unittest.main()
