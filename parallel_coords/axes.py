from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from parallel_coords.brush import BrushedExtent, BrushSelection, brushed_extent
from parallel_coords.scales import DEFAULT_POINT_PADDING, AxisScale, PointScale


LOGGER = logging.getLogger(__name__)

DEFAULT_SETTLE_DURATION_S = 0.5


@dataclass
class AxisState:
    """Per-column axis state. One instance per displayed column for the schema's lifetime."""

    column_index: int
    settled_position: float = 0.0
    scale: AxisScale | None = None
    live_position: float | None = None
    brush_selection: BrushSelection | None = None
    brush_extent: BrushedExtent | None = None

    @property
    def pixel_position(self) -> float:
        if self.live_position is not None:
            return self.live_position
        return self.settled_position

    @property
    def brushed(self) -> bool:
        return self.brush_selection is not None

    def set_scale(self, scale: AxisScale | None) -> None:
        self.scale = scale
        self.refresh_brush_extent()

    def set_brush(self, selection: BrushSelection | None) -> None:
        self.brush_selection = selection
        self.refresh_brush_extent()

    def clear_brush(self) -> None:
        self.set_brush(None)

    def refresh_brush_extent(self) -> None:
        if self.brush_selection is None or self.scale is None:
            self.brush_extent = None
            return
        self.brush_extent = brushed_extent(self.scale, self.brush_selection)


@dataclass
class AxisTransition:
    """Animated move of axes from their drag-time positions to their settled positions."""

    start: dict[int, float]
    end: dict[int, float]
    started_at: float
    duration: float = DEFAULT_SETTLE_DURATION_S

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return max(0.0, min(1.0, (now - self.started_at) / self.duration))

    def done(self, now: float) -> bool:
        return self.progress(now) >= 1.0

    def positions_at(self, now: float) -> dict[int, float]:
        t = _ease_cubic_in_out(self.progress(now))
        return {col: x0 + (self.end[col] - x0) * t for col, x0 in self.start.items()}


@dataclass
class AxisModel:
    """Ordered axis container plus drag-to-reorder logic.

    Settled x positions come from an evenly spaced point scale over the current order. While an
    axis is dragged its live position follows the pointer and the order is re-derived on every
    drag tick by a stable sort of effective positions.
    """

    column_count: int
    plot_width: float
    padding: float = DEFAULT_POINT_PADDING
    _axes: list[AxisState] = field(default_factory=list)
    _dragging: int | None = None
    _transition: AxisTransition | None = None

    def __post_init__(self) -> None:
        if self.plot_width <= 0:
            raise ValueError("plot_width must be > 0")
        self.reset(self.column_count)

    def reset(self, column_count: int) -> None:
        if column_count < 0:
            raise ValueError("column_count must be >= 0")
        self.column_count = column_count
        self._axes = [AxisState(column_index=i) for i in range(column_count)]
        self._dragging = None
        self._transition = None
        self._settle()

    @property
    def axes(self) -> tuple[AxisState, ...]:
        return tuple(self._axes)

    @property
    def order(self) -> tuple[int, ...]:
        return tuple(a.column_index for a in self._axes)

    @property
    def dragging(self) -> int | None:
        return self._dragging

    @property
    def transition(self) -> AxisTransition | None:
        return self._transition

    def axis(self, column_index: int) -> AxisState:
        for state in self._axes:
            if state.column_index == column_index:
                return state
        raise KeyError(column_index)

    def positions(self) -> tuple[float, ...]:
        return tuple(a.pixel_position for a in self._axes)

    def set_plot_width(self, plot_width: float) -> None:
        if plot_width <= 0:
            raise ValueError("plot_width must be > 0")
        self.plot_width = float(plot_width)
        self._settle()

    def set_order(self, order: Sequence[int]) -> None:
        if sorted(order) != list(range(self.column_count)):
            raise ValueError("axis order must be a permutation of the column indices")
        by_column = {a.column_index: a for a in self._axes}
        self._axes = [by_column[c] for c in order]
        self._settle()

    def start_drag(self, column_index: int) -> None:
        if self._transition is not None:
            self._finish_transition()
        state = self.axis(column_index)
        self._dragging = column_index
        state.live_position = state.settled_position

    def drag_to(self, column_index: int, x: float) -> bool:
        """Move the dragged axis to ``x``; returns True when the axis order changed."""
        if self._dragging != column_index:
            raise ValueError(f"axis {column_index} is not being dragged")
        state = self.axis(column_index)
        state.live_position = max(0.0, min(self.plot_width, float(x)))
        before = self.order
        # Stable: on exact ties the current order wins.
        self._axes = sorted(self._axes, key=lambda a: a.pixel_position)
        self._settle()
        changed = self.order != before
        if changed:
            LOGGER.debug("axis %d reordered: %s -> %s", column_index, before, self.order)
        return changed

    def end_drag(self, column_index: int, now: float, duration: float = DEFAULT_SETTLE_DURATION_S) -> AxisTransition:
        if self._dragging != column_index:
            raise ValueError(f"axis {column_index} is not being dragged")
        self._dragging = None
        start = {a.column_index: a.pixel_position for a in self._axes}
        end = {a.column_index: a.settled_position for a in self._axes}
        self._transition = AxisTransition(start=start, end=end, started_at=float(now), duration=float(duration))
        return self._transition

    def displayed_positions(self, now: float) -> dict[int, float]:
        if self._transition is not None:
            return self._transition.positions_at(now)
        return {a.column_index: a.pixel_position for a in self._axes}

    def advance(self, now: float) -> bool:
        """Completes a finished settle transition; returns True when one completed."""
        if self._transition is None or not self._transition.done(now):
            return False
        self._finish_transition()
        return True

    def _finish_transition(self) -> None:
        self._transition = None
        for state in self._axes:
            if self._dragging != state.column_index:
                state.live_position = None

    def _settle(self) -> None:
        if not self._axes:
            return
        spacing = PointScale(categories=self.order, extent=self.plot_width, padding=self.padding)
        for state, x in zip(self._axes, spacing.positions, strict=True):
            state.settled_position = x


def _ease_cubic_in_out(t: float) -> float:
    t *= 2.0
    if t <= 1.0:
        return (t * t * t) / 2.0
    t -= 2.0
    return (t * t * t + 2.0) / 2.0
