from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np

from parallel_coords.axes import AxisState
from parallel_coords.errors import PlotDataError
from parallel_coords.schema import Record


DEFAULT_HOVER_THRESHOLD_PX = 20.0


@dataclass(frozen=True, eq=False)
class LinePath:
    """A record's polyline: one control point per axis, in current left-to-right order.

    Points are axis-local: x from the plot's left edge, y upward from the axis bottom.
    """

    record: Record
    points: np.ndarray

    @property
    def record_id(self) -> object:
        return self.record.record_id


def control_points(
    record: Record,
    axes: Sequence[AxisState],
    positions: Mapping[int, float] | None = None,
) -> np.ndarray:
    out = np.empty((len(axes), 2), dtype=np.float64)
    for i, axis in enumerate(axes):
        if axis.scale is None:
            raise PlotDataError(f"axis {axis.column_index} has no scale")
        x = axis.pixel_position if positions is None else positions[axis.column_index]
        out[i, 0] = x
        out[i, 1] = axis.scale(record.value(axis.column_index))
    return out


def build_paths(
    records: Sequence[Record],
    axes: Sequence[AxisState],
    positions: Mapping[int, float] | None = None,
) -> tuple[LinePath, ...]:
    return tuple(LinePath(record=r, points=control_points(r, axes, positions)) for r in records)


def path_data(points: np.ndarray, *, plot_height: float | None = None, x_offset: float = 0.0, y_offset: float = 0.0) -> str:
    """SVG-style ``M x,y L x,y ...`` path string.

    With ``plot_height`` the y coordinates are flipped into a top-down screen frame.
    """
    if points.size == 0:
        return ""
    xs = points[:, 0] + x_offset
    ys = points[:, 1] if plot_height is None else plot_height - points[:, 1]
    ys = ys + y_offset
    parts = [f"{'M' if i == 0 else 'L'}{_fmt(x)},{_fmt(y)}" for i, (x, y) in enumerate(zip(xs.tolist(), ys.tolist(), strict=True))]
    return "".join(parts)


def segment_index(axis_positions: Sequence[float], x: float) -> int | None:
    """Index ``i`` of the segment between axes ``i`` and ``i + 1`` that is relevant at ``x``.

    Pointers left of the first axis or right of the last one use the outermost segment.
    Returns None when fewer than two axes exist.
    """
    n = len(axis_positions)
    if n < 2:
        return None
    i = bisect_right(list(axis_positions), float(x)) - 1
    return max(0, min(n - 2, i))


def point_segment_distances(query: tuple[float, float], a: np.ndarray, b: np.ndarray) -> np.ndarray:
    q = np.asarray(query, dtype=np.float64).reshape(1, 2)
    ab = b - a
    length_sq = np.einsum("ij,ij->i", ab, ab)
    safe = np.where(length_sq > 0.0, length_sq, 1.0)
    t = np.einsum("ij,ij->i", q - a, ab) / safe
    t = np.where(length_sq > 0.0, np.clip(t, 0.0, 1.0), 0.0)
    nearest = a + ab * t[:, None]
    return np.hypot(nearest[:, 0] - q[0, 0], nearest[:, 1] - q[0, 1])


def find_closest(
    paths: Sequence[LinePath],
    axis_positions: Sequence[float],
    query: tuple[float, float],
    threshold: float = DEFAULT_HOVER_THRESHOLD_PX,
) -> LinePath | None:
    """Nearest path to ``query`` within ``threshold``, measured on the local segment only."""
    if not paths or paths[0].points.shape[0] == 0:
        return None
    seg = segment_index(axis_positions, query[0])
    if seg is None:
        a = np.stack([p.points[0] for p in paths])
        b = a
    else:
        a = np.stack([p.points[seg] for p in paths])
        b = np.stack([p.points[seg + 1] for p in paths])
    distances = point_segment_distances(query, a, b)
    # argmin keeps the first path on ties.
    best = int(np.argmin(distances))
    if distances[best] > threshold:
        return None
    return paths[best]


def _fmt(value: float) -> str:
    out = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if out == "-0" else out
