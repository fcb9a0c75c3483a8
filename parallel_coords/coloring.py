from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from parallel_coords.schema import Record, Schema, domain_values


RGBA = tuple[int, int, int, int]


def coerce_color(color: Sequence[int], alpha: float = 1.0) -> RGBA:
    if len(color) == 3:
        r, g, b = color
        return (int(r), int(g), int(b), int(max(0.0, min(1.0, alpha)) * 255))
    r, g, b, a = color
    return (int(r), int(g), int(b), int(max(0.0, min(1.0, alpha)) * int(a)))


def lerp_color(a: RGBA, b: RGBA, t: float) -> RGBA:
    t = max(0.0, min(1.0, float(t)))
    mixed = np.rint(np.asarray(a, dtype=np.float64) * (1.0 - t) + np.asarray(b, dtype=np.float64) * t)
    r, g, bb, alpha = (int(v) for v in mixed.tolist())
    return (r, g, bb, alpha)


@dataclass(frozen=True)
class LineColorMap:
    """Linear color ramp over one numeric column's valid-value domain."""

    min_color: RGBA
    max_color: RGBA
    column_index: int | None = None
    vmin: float = 0.0
    vmax: float = 0.0

    @classmethod
    def build(
        cls,
        schema: Schema,
        records: Sequence[Record],
        column_index: int | None,
        min_color: Sequence[int],
        max_color: Sequence[int],
    ) -> "LineColorMap":
        lo = coerce_color(min_color)
        hi = coerce_color(max_color)
        if column_index is None or not schema.column(column_index).is_numeric:
            return cls(min_color=lo, max_color=hi)
        values = np.asarray([float(v) for v in domain_values(records, column_index)], dtype=np.float64)
        if values.size == 0:
            return cls(min_color=lo, max_color=hi)
        return cls(
            min_color=lo,
            max_color=hi,
            column_index=column_index,
            vmin=float(np.min(values)),
            vmax=float(np.max(values)),
        )

    def color_for(self, record: Record) -> RGBA:
        if self.column_index is None:
            return self.max_color
        return self.color_for_value(record.value(self.column_index))

    def color_for_value(self, value: Any) -> RGBA:
        if self.vmin == self.vmax:
            return lerp_color(self.min_color, self.max_color, 0.5)
        t = (float(value) - self.vmin) / (self.vmax - self.vmin)
        return lerp_color(self.min_color, self.max_color, t)
