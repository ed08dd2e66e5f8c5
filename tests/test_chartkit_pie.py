from __future__ import annotations

import math
import unittest

import numpy as np

from chartkit.data import CatValue
from chartkit.errors import DegenerateDataError
from chartkit.pie import (
    PieValues,
    Wedge,
    build_wedges,
    format_pie_value,
    highlight_geometry,
    label_radius,
    pie_radius,
    ring_radii,
    wedge_angles,
    wedge_center,
)
from chartkit.style import auto_style


class WedgeAngleTests(unittest.TestCase):
    def test_ten_twenty_thirty(self) -> None:
        angles = wedge_angles([10.0, 20.0, 30.0])
        self.assertAlmostEqual(angles[0][0], -math.pi)
        sweeps = [math.degrees(b - a) for a, b in angles]
        for got, want in zip(sweeps, (60.0, 120.0, 180.0)):
            self.assertAlmostEqual(got, want)

    def test_closure_and_contiguity(self) -> None:
        rng = np.random.default_rng(11)
        for _ in range(50):
            values = rng.uniform(0.0, 100.0, size=int(rng.integers(1, 12))).tolist()
            angles = wedge_angles(values)
            self.assertAlmostEqual(sum(b - a for a, b in angles), 2 * math.pi)
            for (_, end), (start, _) in zip(angles, angles[1:]):
                self.assertEqual(end, start)
            self.assertEqual(angles[-1][1], math.pi)

    def test_zero_sum_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateDataError):
            wedge_angles([0.0, 0.0], "empty")

    def test_negative_or_nan_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateDataError):
            wedge_angles([1.0, -1.0])
        with self.assertRaises(DegenerateDataError):
            wedge_angles([1.0, math.nan])


class RingGeometryTests(unittest.TestCase):
    def test_nested_rings_shrink(self) -> None:
        self.assertEqual(ring_radii(100, 3), [(100, 0), (65, 0), (42, 0)])

    def test_every_ring_has_its_own_hole(self) -> None:
        self.assertEqual(ring_radii(100, 1, inner_fraction=0.5), [(100, 50)])
        self.assertEqual(ring_radii(100, 2, inner_fraction=0.7), [(100, 70), (65, 45)])
        with self.assertRaises(ValueError):
            ring_radii(100, 1, inner_fraction=1.0)

    def test_highlight_shrinks_radius(self) -> None:
        self.assertEqual(highlight_geometry(100.0, False), (100, 0))
        self.assertEqual(highlight_geometry(100.0, True), (86, 15))
        self.assertEqual(highlight_geometry(200.0, True), (173, 30))
        self.assertEqual(highlight_geometry(20.0, True), (17, 6))

    def test_pie_radius_honours_eccentricity(self) -> None:
        self.assertEqual(pie_radius(200, 100), 50.0)
        self.assertAlmostEqual(pie_radius(100, 100, 1.9), 100 / 3.8)

    def test_wedge_center_moves_along_bisector(self) -> None:
        w = Wedge(0.0, math.pi / 2, auto_style(0), shift=10)
        self.assertEqual(wedge_center(50, 50, w, 0), (57, 43))

    def test_label_radius(self) -> None:
        self.assertEqual(label_radius(100, 60, 10), 80)
        self.assertEqual(label_radius(100, 0, 10), 70)


class WedgeBuildTests(unittest.TestCase):
    def test_highlighted_wedges_get_shift(self) -> None:
        samples = [CatValue("a", 1.0, highlight=True), CatValue("b", 1.0)]
        wedges = build_wedges(samples, [auto_style(0)], shift=7)
        self.assertEqual([w.shift for w in wedges], [7, 0])
        self.assertEqual([w.category for w in wedges], ["a", "b"])

    def test_labels(self) -> None:
        self.assertEqual(format_pie_value(10.0, 60.0, PieValues.PERCENT), "17%")
        self.assertEqual(format_pie_value(0.05, 60.0, PieValues.VALUE), "0.05")
        self.assertEqual(format_pie_value(0.5, 60.0, PieValues.VALUE), "0.5")
        self.assertEqual(format_pie_value(10.0, 60.0, PieValues.OFF), "")


if __name__ == "__main__":
    unittest.main()
