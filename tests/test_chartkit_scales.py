from __future__ import annotations

import math
import unittest

import numpy as np

from chartkit.errors import RangeError
from chartkit.scales import (
    Expansion,
    Range,
    RangeMode,
    TicSetting,
    almost_equal,
    apply_range_mode,
    format_si,
    format_tick,
    format_ticks_for_axis,
    nice_delta,
)


def _range(lo: float, hi: float, **kwargs) -> Range:
    r = Range(**kwargs)
    r.autoscale(lo)
    r.autoscale(hi)
    return r


class NiceDeltaTests(unittest.TestCase):
    def test_mantissa_thresholds(self) -> None:
        self.assertEqual(nice_delta(11.75), 10.0)
        self.assertEqual(nice_delta(0.3), 0.2)
        self.assertEqual(nice_delta(7.0), 5.0)
        self.assertEqual(nice_delta(9.5), 10.0)
        self.assertEqual(nice_delta(0.0), 1.0)

    def test_min_delta_bumps_one_step(self) -> None:
        self.assertEqual(nice_delta(1.1, min_delta=1.5), 2.0)
        self.assertEqual(nice_delta(2.5, min_delta=3.0), 5.0)
        self.assertEqual(nice_delta(6.0, min_delta=6.0), 10.0)

    def test_setup_delta_is_one_two_or_five_times_power_of_ten(self) -> None:
        rng = np.random.default_rng(7)
        for _ in range(200):
            lo = float(rng.uniform(-1e4, 1e4))
            span = float(10 ** rng.uniform(-3, 5))
            num_tics = int(rng.integers(2, 12))
            r = _range(lo, lo + span)
            r.setup(num_tics, screen_width=500)
            exp = math.floor(math.log10(r.delta))
            mantissa = r.delta / 10**exp
            self.assertTrue(
                any(math.isclose(mantissa, f, rel_tol=1e-9) for f in (1.0, 2.0, 5.0)),
                msg=f"delta {r.delta} for span {span}",
            )


class RangeSetupTests(unittest.TestCase):
    def test_zero_to_forty_seven_with_five_tics(self) -> None:
        r = _range(0.0, 47.0)
        r.setup(5, screen_width=100)
        self.assertEqual(r.delta, 10.0)
        self.assertEqual((r.min, r.max), (0.0, 47.0))
        self.assertEqual([t.pos for t in r.tics], [0.0, 10.0, 20.0, 30.0, 40.0])
        self.assertEqual(r.tic.first, 0.0)
        self.assertLessEqual(r.tic.last, 47.0)

    def test_fixed_bounds_ignore_data(self) -> None:
        r = _range(0.0, 47.0, min_mode=RangeMode.fixed_at(-3.0), max_mode=RangeMode.fixed_at(12.0))
        r.setup(5, screen_width=100)
        self.assertEqual((r.min, r.max), (-3.0, 12.0))
        for t in r.tics:
            self.assertTrue(-3.0 <= t.pos <= 12.0)

    def test_fixed_bounds_without_data(self) -> None:
        r = Range(min_mode=RangeMode.fixed_at(1.0), max_mode=RangeMode.fixed_at(2.0))
        r.setup(3, screen_width=50)
        self.assertEqual((r.min, r.max), (1.0, 2.0))

    def test_expand_to_tic_contains_tics(self) -> None:
        mode = RangeMode.auto(Expansion.TO_TIC)
        r = _range(3.0, 47.0, min_mode=mode, max_mode=mode)
        r.setup(5, screen_width=100)
        self.assertEqual((r.min, r.max), (0.0, 50.0))
        self.assertGreaterEqual(r.tic.first, r.min)
        self.assertLessEqual(r.tic.last, r.max)

    def test_expand_to_next_tic_moves_off_boundary(self) -> None:
        mode = RangeMode.auto(Expansion.NEXT_TIC)
        r = _range(0.0, 40.0, min_mode=mode, max_mode=mode)
        r.setup(5, screen_width=100)
        self.assertEqual((r.min, r.max), (-10.0, 50.0))

    def test_expand_a_bit_adds_half_a_tic(self) -> None:
        mode = RangeMode.auto(Expansion.A_BIT)
        r = _range(0.0, 47.0, min_mode=mode, max_mode=mode)
        r.setup(5, screen_width=100)
        self.assertEqual((r.min, r.max), (-5.0, 52.0))

    def test_constrained_clamps_data_extremum(self) -> None:
        r = _range(0.0, 47.0, max_mode=RangeMode.constrained(upper=30.0))
        r.setup(5, screen_width=100)
        self.assertEqual(r.max, 30.0)

    def test_constrained_upper_is_expanded_after_clamping(self) -> None:
        mode = RangeMode.constrained(upper=33.0, expand=Expansion.TO_TIC)
        r = _range(0.0, 47.0, max_mode=mode)
        r.setup(5, screen_width=100)
        self.assertEqual(r.max, 40.0)

    def test_constrained_lower_is_expanded_after_clamping(self) -> None:
        r = _range(0.0, 47.0, min_mode=RangeMode.constrained(lower=5.0, expand=Expansion.NEXT_TIC))
        r.setup(5, screen_width=100)
        self.assertEqual(r.min, 0.0)
        r = _range(0.0, 47.0, min_mode=RangeMode.constrained(lower=20.0, expand=Expansion.NEXT_TIC))
        r.setup(5, screen_width=100)
        self.assertEqual(r.min, 10.0)

    def test_explicit_tic_delta(self) -> None:
        r = _range(0.0, 100.0, tic_setting=TicSetting(delta=25.0))
        r.setup(3, screen_width=100)
        self.assertEqual([t.pos for t in r.tics], [0.0, 25.0, 50.0, 75.0, 100.0])

    def test_setup_keeps_data_extrema(self) -> None:
        r = _range(2.0, 9.0, min_mode=RangeMode.auto(Expansion.TO_TIC))
        r.setup(4, screen_width=80)
        r.setup(6, screen_width=120)
        self.assertEqual((r.data_min, r.data_max), (2.0, 9.0))

    def test_single_value_gets_unit_span(self) -> None:
        r = _range(5.0, 5.0)
        r.setup(3, screen_width=100)
        self.assertGreater(r.max, r.min)

    def test_inverted_fixed_bounds_raise(self) -> None:
        r = Range(min_mode=RangeMode.fixed_at(10.0), max_mode=RangeMode.fixed_at(5.0))
        with self.assertRaises(RangeError):
            r.setup(3, screen_width=100)

    def test_no_data_and_no_fixed_bounds_raise(self) -> None:
        with self.assertRaises(RangeError):
            Range().setup(3, screen_width=100)

    def test_non_positive_screen_width_raises(self) -> None:
        with self.assertRaises(RangeError):
            _range(0.0, 1.0).setup(3, screen_width=0)

    def test_mapping_requires_setup(self) -> None:
        with self.assertRaises(RangeError):
            _range(0.0, 1.0).data_to_screen(0.5)

    def test_log_axis_tics_at_powers_of_ten(self) -> None:
        r = _range(3.0, 870.0, log=True)
        r.setup(4, screen_width=100)
        self.assertEqual(r.delta, 10.0)
        self.assertEqual([t.pos for t in r.tics], [10.0, 100.0])
        self.assertEqual([t.label for t in r.tics], ["10", "100"])
        self.assertAlmostEqual(r.screen_to_data(r.data_to_screen(30.0)), 30.0, delta=3.0)

    def test_log_axis_rejects_non_positive_data(self) -> None:
        with self.assertRaises(RangeError):
            _range(0.0, 10.0, log=True).setup(3, screen_width=100)

    def test_copy_is_independent(self) -> None:
        r = _range(0.0, 10.0)
        c = r.copy()
        c.autoscale(100.0)
        self.assertEqual(r.data_max, 10.0)


class CoordinateMappingTests(unittest.TestCase):
    def test_round_trip_within_one_unit(self) -> None:
        for reversed_ in (False, True):
            r = _range(0.0, 47.0)
            r.setup(5, screen_width=200, screen_offset=30, reversed=reversed_)
            for s in range(30, 231):
                self.assertLessEqual(abs(r.data_to_screen(r.screen_to_data(s)) - s), 1)

    def test_bounds_map_to_screen_edges(self) -> None:
        r = _range(0.0, 10.0, min_mode=RangeMode.fixed_at(0.0), max_mode=RangeMode.fixed_at(10.0))
        r.setup(3, screen_width=100, screen_offset=20)
        self.assertEqual(r.data_to_screen(0.0), 20)
        self.assertEqual(r.data_to_screen(10.0), 120)
        r.setup(3, screen_width=100, screen_offset=20, reversed=True)
        self.assertEqual(r.data_to_screen(0.0), 120)
        self.assertEqual(r.data_to_screen(10.0), 20)


class RangeModeTests(unittest.TestCase):
    def test_fixed_needs_finite_value(self) -> None:
        with self.assertRaises(ValueError):
            RangeMode.fixed_at(math.nan)

    def test_constrained_needs_ordered_bounds(self) -> None:
        with self.assertRaises(ValueError):
            RangeMode.constrained(lower=5.0, upper=1.0)

    def test_tic_setting_validation(self) -> None:
        with self.assertRaises(ValueError):
            TicSetting(delta=-1.0)
        with self.assertRaises(ValueError):
            TicSetting(marks="sideways")  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            TicSetting(mirror=3)

    def test_apply_range_mode_on_tic_uses_tolerance(self) -> None:
        mode = RangeMode.auto(Expansion.NEXT_TIC)
        self.assertEqual(apply_range_mode(mode, 0.30000000000000004, 0.1, True), 0.4)


class AlmostEqualTests(unittest.TestCase):
    def test_relative(self) -> None:
        self.assertTrue(almost_equal(1.0, 1.000001))
        self.assertFalse(almost_equal(1.0, 1.001))

    def test_opposite_signs_near_zero_need_absolute_floor(self) -> None:
        self.assertFalse(almost_equal(1e-12, -1e-12))
        self.assertTrue(almost_equal(1e-12, -1e-12, abs_tol=1e-9))


class TicLabelTests(unittest.TestCase):
    def test_si_suffixes(self) -> None:
        self.assertEqual(format_si(0.0), "0")
        self.assertEqual(format_si(0.05), "50 m")
        self.assertEqual(format_si(2500.0), "2.5 k")
        self.assertEqual(format_si(5.0), "5.0")

    def test_decimals_follow_step(self) -> None:
        self.assertEqual(format_tick(0.30000000000000004, step=0.1), "0.3")
        self.assertEqual(format_ticks_for_axis([1.5, 2.0, 2.5, 3.0]), ["1.5", "2", "2.5", "3"])
        self.assertEqual(format_ticks_for_axis([20.0, 30.0, 40.0]), ["20", "30", "40"])

    def test_near_zero_snaps(self) -> None:
        self.assertEqual(format_ticks_for_axis([-1.0, -4.4409e-16, 1.0])[1], "0")

    def test_format_spec_labels(self) -> None:
        r = _range(0.0, 1.0, tic_setting=TicSetting(label_format=".0%"))
        r.setup(3, screen_width=100)
        self.assertEqual(r.tics[-1].label, "100%")


if __name__ == "__main__":
    unittest.main()
