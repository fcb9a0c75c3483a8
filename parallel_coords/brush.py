from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Hashable, Iterable, Sequence, Union

import numpy as np

if TYPE_CHECKING:
    from parallel_coords.axes import AxisState
    from parallel_coords.schema import Record


@dataclass(frozen=True)
class BrushSelection:
    """A brushed pixel range on one axis, in axis-local pixels (0 at the axis bottom)."""

    p0: float
    p1: float

    @property
    def lo(self) -> float:
        return min(self.p0, self.p1)

    @property
    def hi(self) -> float:
        return max(self.p0, self.p1)

    @property
    def collapsed(self) -> bool:
        return self.hi - self.lo <= 0.0

    def clamped(self, extent: float) -> "BrushSelection":
        return BrushSelection(_clamp(self.p0, 0.0, extent), _clamp(self.p1, 0.0, extent))


@dataclass(frozen=True)
class CategorySet:
    """Brushed extent of a point axis: the categories whose tick lies inside the brush."""

    values: frozenset[Hashable]

    @property
    def is_empty(self) -> bool:
        return not self.values

    def contains(self, value: Any) -> bool:
        try:
            return value in self.values
        except TypeError:
            return False


@dataclass(frozen=True)
class HalfOpenInterval:
    """Brushed extent of a quantile axis: ``lo <= v < hi``."""

    lo: float
    hi: float

    @classmethod
    def empty(cls) -> "HalfOpenInterval":
        return cls(math.inf, math.inf)

    @property
    def is_empty(self) -> bool:
        return not self.lo < self.hi

    def contains(self, value: Any) -> bool:
        v = _as_float(value)
        return v is not None and self.lo <= v < self.hi


@dataclass(frozen=True)
class ClosedInterval:
    """Brushed extent of a continuous axis: ``lo <= v <= hi``."""

    lo: float
    hi: float

    @classmethod
    def empty(cls) -> "ClosedInterval":
        return cls(math.inf, -math.inf)

    @property
    def is_empty(self) -> bool:
        return self.lo > self.hi

    def contains(self, value: Any) -> bool:
        v = _as_float(value)
        return v is not None and self.lo <= v <= self.hi


BrushedExtent = Union[CategorySet, HalfOpenInterval, ClosedInterval]


def brushed_extent(scale: Any, selection: BrushSelection) -> BrushedExtent:
    """Inverse image of ``selection`` under ``scale``, typed by the scale kind."""
    return scale.invert_range(selection.lo, selection.hi)


def passes(record: "Record", axes: Iterable["AxisState"]) -> bool:
    # Conjunction over brushed axes; an axis without a brush is the neutral element.
    for axis in axes:
        extent = axis.brush_extent
        if extent is None:
            continue
        if not extent.contains(record.value(axis.column_index)):
            return False
    return True


def passing_mask(records: Sequence["Record"], axes: Sequence["AxisState"]) -> np.ndarray:
    brushed = [axis for axis in axes if axis.brush_extent is not None]
    mask = np.ones(len(records), dtype=bool)
    if not brushed:
        return mask
    for i, record in enumerate(records):
        mask[i] = passes(record, brushed)
    return mask


def passing_records(records: Sequence["Record"], axes: Sequence["AxisState"]) -> tuple["Record", ...]:
    mask = passing_mask(records, axes)
    return tuple(r for r, keep in zip(records, mask.tolist(), strict=True) if keep)


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, (str, bytes)):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(value)))
