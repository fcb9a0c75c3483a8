from __future__ import annotations

import math
import unittest

import numpy as np

from parallel_coords.brush import CategorySet, ClosedInterval, HalfOpenInterval
from parallel_coords.errors import EmptyDomainError, ScaleDomainError
from parallel_coords.scales import (
    ContinuousScale,
    LogScale,
    PointScale,
    QuantileScale,
    build_scale,
    format_ticks_for_axis,
    generate_nice_ticks,
    natural_sort_key,
)


class ContinuousScaleTests(unittest.TestCase):
    def test_maps_domain_onto_pixel_extent(self) -> None:
        scale = build_scale([0.0, 5.0, 10.0], 200.0, "continuous")
        self.assertIsInstance(scale, ContinuousScale)
        self.assertEqual(scale(0.0), 0.0)
        self.assertEqual(scale(5.0), 100.0)
        self.assertEqual(scale(10.0), 200.0)

    def test_degenerate_domain_maps_to_midpoint(self) -> None:
        scale = build_scale([3.0, 3.0], 200.0, "continuous")
        self.assertEqual(scale(3.0), 100.0)
        self.assertTrue(scale.invert_range(90.0, 110.0).contains(3.0))
        self.assertTrue(scale.invert_range(0.0, 50.0).is_empty)

    def test_inverse_image_is_closed(self) -> None:
        scale = build_scale([0.0, 10.0], 200.0, "continuous")
        extent = scale.invert_range(scale(4.0), scale(6.0))
        self.assertIsInstance(extent, ClosedInterval)
        self.assertTrue(extent.contains(4.0))
        self.assertTrue(extent.contains(6.0))
        self.assertFalse(extent.contains(3.99))
        self.assertFalse(extent.contains(6.01))

    def test_inverse_ignores_selection_direction(self) -> None:
        scale = build_scale([0.0, 10.0], 200.0, "continuous")
        self.assertEqual(scale.invert_range(120.0, 80.0), scale.invert_range(80.0, 120.0))

    def test_nice_ticks_stay_inside_domain(self) -> None:
        scale = build_scale([0.0, 10.0], 200.0, "continuous")
        labels = scale.tick_labels()
        self.assertEqual(labels[0], ("0", 0.0))
        self.assertEqual(labels[-1], ("10", 200.0))
        self.assertTrue(all(0.0 <= px <= 200.0 for _, px in labels))

    def test_empty_domain_fails(self) -> None:
        with self.assertRaises(EmptyDomainError):
            build_scale([], 200.0, "continuous", column="lr")

    def test_rejects_non_numeric_domain(self) -> None:
        with self.assertRaises(ScaleDomainError):
            build_scale(["adam", "sgd"], 200.0, "continuous")

    def test_rejects_unknown_kind_and_bad_extent(self) -> None:
        with self.assertRaises(ValueError):
            build_scale([1.0], 200.0, "sqrt")  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            build_scale([1.0], 0.0, "continuous")


class LogScaleTests(unittest.TestCase):
    def test_positions_by_order_of_magnitude(self) -> None:
        scale = build_scale([1.0, 10.0, 100.0], 200.0, "logarithmic")
        self.assertIsInstance(scale, LogScale)
        self.assertEqual(scale.kind, "logarithmic")
        self.assertAlmostEqual(scale(10.0), 100.0, places=9)
        self.assertAlmostEqual(scale.invert(100.0), 10.0, places=9)

    def test_inverse_is_closed(self) -> None:
        scale = build_scale([1.0, 100.0], 200.0, "logarithmic")
        extent = scale.invert_range(scale(10.0), scale(100.0))
        self.assertTrue(extent.contains(10.0))
        self.assertTrue(extent.contains(100.0))
        self.assertFalse(extent.contains(9.0))

    def test_ticks_at_powers_of_ten(self) -> None:
        scale = build_scale([0.5, 2000.0], 200.0, "logarithmic")
        self.assertEqual([v for v, _ in scale.ticks()], [1.0, 10.0, 100.0, 1000.0])

    def test_non_positive_domain_rejected(self) -> None:
        with self.assertRaises(ScaleDomainError):
            build_scale([0.0, 10.0], 200.0, "logarithmic")


class QuantileScaleTests(unittest.TestCase):
    def _scale(self) -> QuantileScale:
        # Nine evenly spaced values split into four buckets at 2, 4 and 6.
        scale = build_scale([float(v) for v in range(9)], 300.0, "quantile", quantile_count=4)
        assert isinstance(scale, QuantileScale)
        return scale

    def test_thresholds_and_bucket_pixels(self) -> None:
        scale = self._scale()
        self.assertEqual(scale.thresholds, (2.0, 4.0, 6.0))
        self.assertEqual(scale(0.0), 0.0)
        self.assertEqual(scale(1.9), 0.0)
        self.assertEqual(scale(2.0), 100.0)
        self.assertEqual(scale(8.0), 300.0)

    def test_inverse_is_half_open(self) -> None:
        scale = self._scale()
        extent = scale.invert_range(90.0, 110.0)
        self.assertIsInstance(extent, HalfOpenInterval)
        self.assertEqual((extent.lo, extent.hi), (2.0, 4.0))
        self.assertTrue(extent.contains(2.0))
        self.assertTrue(extent.contains(3.0))
        self.assertFalse(extent.contains(4.0))

    def test_top_bucket_is_unbounded_above(self) -> None:
        scale = self._scale()
        extent = scale.invert_range(250.0, 300.0)
        self.assertEqual(extent.lo, 6.0)
        self.assertTrue(math.isinf(extent.hi))
        self.assertTrue(extent.contains(8.0))

    def test_range_between_buckets_is_empty(self) -> None:
        scale = self._scale()
        self.assertTrue(scale.invert_range(10.0, 20.0).is_empty)

    def test_ticks_on_quantile_boundaries(self) -> None:
        scale = self._scale()
        self.assertEqual([v for v, _ in scale.ticks()], [0.0, 2.0, 4.0, 6.0])

    def test_single_valued_domain_sits_at_midpoint(self) -> None:
        scale = build_scale([3.0, 3.0, 3.0], 200.0, "quantile")
        self.assertEqual(scale(3.0), 100.0)
        self.assertEqual(scale.ticks(), [(3.0, 100.0)])
        extent = scale.invert_range(90.0, 110.0)
        self.assertIsInstance(extent, HalfOpenInterval)
        self.assertTrue(extent.contains(3.0))
        self.assertFalse(extent.contains(3.5))
        self.assertTrue(scale.invert_range(0.0, 50.0).is_empty)

    def test_collapsed_buckets_do_not_stack_ticks(self) -> None:
        scale = build_scale([1.0, 1.0, 1.0, 1.0, 5.0], 300.0, "quantile", quantile_count=4)
        pixels = [px for _, px in scale.ticks()]
        self.assertEqual(len(pixels), len(set(pixels)))
        self.assertLess(len(pixels), 4)


class PointScaleTests(unittest.TestCase):
    def test_evenly_spaced_in_natural_order(self) -> None:
        scale = build_scale(["z", "x", "y", "x"], 200.0, "point")
        self.assertIsInstance(scale, PointScale)
        self.assertEqual(scale.categories, ("x", "y", "z"))
        np.testing.assert_allclose(scale.positions, [200.0 / 6.0, 100.0, 1000.0 / 6.0])

    def test_inverse_picks_categories_inside_range(self) -> None:
        scale = build_scale(["x", "y", "z"], 200.0, "point")
        self.assertEqual(scale.invert_range(90.0, 110.0), CategorySet(frozenset({"y"})))
        self.assertTrue(scale.invert_range(40.0, 60.0).is_empty)

    def test_category_order_is_respected(self) -> None:
        scale = build_scale(["x", "y", "z"], 200.0, "point", category_order=("z", "y"))
        self.assertEqual(scale.categories, ("z", "y", "x"))

    def test_single_category_sits_at_midpoint(self) -> None:
        scale = build_scale(["only"], 200.0, "point", padding=0.0)
        self.assertEqual(scale("only"), 100.0)

    def test_unknown_value_raises(self) -> None:
        scale = build_scale(["x"], 200.0, "point")
        with self.assertRaises(ScaleDomainError):
            scale("w")

    def test_natural_order_groups_numbers_before_strings(self) -> None:
        self.assertEqual(sorted([10, "b", 2, "a"], key=natural_sort_key), [2, 10, "a", "b"])


class TickFormattingTests(unittest.TestCase):
    def test_tick_formatting_uses_consistent_decimals_from_step(self) -> None:
        ticks = np.asarray([1.5, 2.0, 2.5, 3.0], dtype=np.float64)
        self.assertEqual(format_ticks_for_axis(ticks), ["1.5", "2", "2.5", "3"])

    def test_nice_ticks_use_one_two_five_steps(self) -> None:
        self.assertEqual(generate_nice_ticks(0.0, 10.0, 6).tolist(), [0.0, 2.0, 4.0, 6.0, 8.0, 10.0])
        self.assertEqual(generate_nice_ticks(0.3, 1.7, 4).tolist(), [0.5, 1.0, 1.5])
        self.assertEqual(generate_nice_ticks(4.0, 4.0, 6).tolist(), [4.0])

    def test_small_steps_keep_enough_decimals(self) -> None:
        ticks = np.asarray([0.001, 0.0015, 0.002], dtype=np.float64)
        self.assertEqual(format_ticks_for_axis(ticks), ["0.001", "0.0015", "0.002"])

    def test_tick_formatting_snaps_near_zero(self) -> None:
        ticks = np.asarray([-1.0, -4.4409e-16, 1.0], dtype=np.float64)
        self.assertEqual(format_ticks_for_axis(ticks)[1], "0")


if __name__ == "__main__":
    unittest.main()
