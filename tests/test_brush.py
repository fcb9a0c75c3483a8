from __future__ import annotations

import unittest

import numpy as np

from parallel_coords.axes import AxisModel
from parallel_coords.brush import (
    BrushSelection,
    CategorySet,
    ClosedInterval,
    HalfOpenInterval,
    passes,
    passing_mask,
    passing_records,
)
from parallel_coords.scales import build_scale
from parallel_coords.schema import Record, domain_values


def _records(count: int = 40) -> list[Record]:
    rng = np.random.default_rng(7)
    values = rng.uniform(0.0, 1.0, size=(count, 3))
    return [Record(record_id=i, values={j: float(v) for j, v in enumerate(row)}) for i, row in enumerate(values.tolist())]


def _model(records: list[Record], kind: str = "continuous") -> AxisModel:
    model = AxisModel(column_count=3, plot_width=600.0)
    for state in model.axes:
        state.set_scale(build_scale(domain_values(records, state.column_index), 200.0, kind))  # type: ignore[arg-type]
    return model


class BrushExtentTests(unittest.TestCase):
    def test_selection_normalizes_and_clamps(self) -> None:
        selection = BrushSelection(250.0, -10.0).clamped(200.0)
        self.assertEqual((selection.lo, selection.hi), (0.0, 200.0))
        self.assertTrue(BrushSelection(5.0, 5.0).collapsed)

    def test_membership_rules_per_extent_type(self) -> None:
        self.assertTrue(CategorySet(frozenset({"y"})).contains("y"))
        self.assertFalse(CategorySet(frozenset({"y"})).contains(["unhashable"]))
        self.assertTrue(ClosedInterval(1.0, 2.0).contains(2.0))
        self.assertFalse(HalfOpenInterval(1.0, 2.0).contains(2.0))
        self.assertTrue(HalfOpenInterval(1.0, 2.0).contains(1.0))
        self.assertFalse(ClosedInterval(1.0, 2.0).contains("1.5"))
        self.assertTrue(ClosedInterval.empty().is_empty)


class BrushFilterTests(unittest.TestCase):
    def test_no_brush_passes_everything(self) -> None:
        records = _records()
        model = _model(records)
        self.assertTrue(all(passes(r, model.axes) for r in records))
        self.assertTrue(bool(np.all(passing_mask(records, model.axes))))

    def test_brushes_combine_by_conjunction(self) -> None:
        records = _records()
        model = _model(records)
        model.axis(0).set_brush(BrushSelection(0.0, 100.0))
        model.axis(2).set_brush(BrushSelection(100.0, 200.0))
        out = passing_records(records, model.axes)
        for record in records:
            expected = model.axis(0).brush_extent.contains(record.value(0)) and model.axis(2).brush_extent.contains(record.value(2))
            self.assertEqual(record in out, expected)

    def test_adding_or_narrowing_brushes_never_grows_passing_set(self) -> None:
        records = _records(80)
        for kind in ("continuous", "quantile"):
            model = _model(records, kind)
            counts = [int(passing_mask(records, model.axes).sum())]
            model.axis(1).set_brush(BrushSelection(20.0, 180.0))
            counts.append(int(passing_mask(records, model.axes).sum()))
            model.axis(1).set_brush(BrushSelection(60.0, 140.0))
            counts.append(int(passing_mask(records, model.axes).sum()))
            model.axis(0).set_brush(BrushSelection(0.0, 150.0))
            counts.append(int(passing_mask(records, model.axes).sum()))
            self.assertEqual(counts, sorted(counts, reverse=True), kind)

            model.axis(1).clear_brush()
            self.assertGreaterEqual(int(passing_mask(records, model.axes).sum()), counts[-1])

    def test_empty_extent_on_active_brush_excludes_all(self) -> None:
        records = [Record(record_id=i, values={0: c}) for i, c in enumerate(["x", "y", "z"])]
        model = AxisModel(column_count=1, plot_width=100.0)
        model.axis(0).set_scale(build_scale(["x", "y", "z"], 200.0, "point"))
        model.axis(0).set_brush(BrushSelection(40.0, 60.0))
        self.assertEqual(passing_records(records, model.axes), ())


if __name__ == "__main__":
    unittest.main()
