from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Hashable, Literal, Sequence

import numpy as np

from parallel_coords.axes import AxisModel
from parallel_coords.brush import BrushSelection, passing_mask
from parallel_coords.coloring import RGBA, LineColorMap
from parallel_coords.errors import PlotDataError
from parallel_coords.events import PlotEvent
from parallel_coords.geometry import LinePath, build_paths, find_closest, path_data
from parallel_coords.options import ControllerSettings, PlotLayout, PlotOptions
from parallel_coords.scales import ScaleKind, build_scale
from parallel_coords.scheduler import DebouncedRecompute, RecomputeTier
from parallel_coords.schema import Record, Schema, domain_values, valid_records
from parallel_coords.selection import SelectionListener, SelectionState


LOGGER = logging.getLogger(__name__)

InteractionMode = Literal["idle", "dragging", "brushing"]


@dataclass(frozen=True)
class InteractionState:
    mode: InteractionMode = "idle"
    column: int | None = None


@dataclass(frozen=True)
class AxisView:
    column_index: int
    name: str
    x: float
    scale_kind: ScaleKind
    tick_labels: tuple[tuple[str, float], ...]
    brush: tuple[float, float] | None = None


@dataclass(frozen=True)
class LineView:
    record_id: Hashable
    points: np.ndarray
    path: str
    color: RGBA
    active: bool
    hovered: bool = False
    selected: bool = False


@dataclass(frozen=True)
class PlotFrame:
    """Immutable snapshot of what the plot shows. Coordinates are axis-local."""

    plot_width: float
    plot_height: float
    axes: tuple[AxisView, ...] = ()
    lines: tuple[LineView, ...] = ()
    revision: int = 0

    @property
    def active_ids(self) -> tuple[Hashable, ...]:
        return tuple(line.record_id for line in self.lines if line.active)

    @property
    def suppressed_ids(self) -> tuple[Hashable, ...]:
        return tuple(line.record_id for line in self.lines if not line.active)


class InteractionController:
    """Owns the plot's interactive state and keeps derived geometry consistent with it.

    Upstream inputs (schema, records, options, layout) are debounced and recomputed in tiers:
    valid-record filtering, then scales, then geometry and filtering. Until the recompute runs,
    frames and gestures keep using the previously applied inputs. Pointer, drag and brush
    input is handled synchronously. Every time-dependent call takes ``now`` in seconds.
    """

    def __init__(
        self,
        schema: Schema | None = None,
        records: Sequence[Record] = (),
        options: PlotOptions | None = None,
        *,
        settings: ControllerSettings | None = None,
        listener: SelectionListener | None = None,
    ) -> None:
        self._settings = settings or ControllerSettings()
        self._schema = schema or Schema(columns=())
        self._records: tuple[Record, ...] = tuple(records)
        self._options = options or PlotOptions()
        self._layout = self._settings.layout
        self._axis_model = AxisModel(
            column_count=len(self._schema),
            plot_width=float(self._layout.plot_width),
            padding=self._settings.point_padding,
        )
        self._scheduler = DebouncedRecompute(debounce_s=self._settings.debounce_s)
        self._selection = SelectionState(listener=listener)
        self._interaction = InteractionState()
        self._valid: tuple[Record, ...] = ()
        self._scales_ready = False
        self._color_map = LineColorMap.build(self._schema, (), None, self._options.min_color, self._options.max_color)
        self._paths: tuple[LinePath, ...] = ()
        self._active = np.zeros(0, dtype=bool)
        # Upstream inputs wait here until the debounced recompute applies them.
        self._pending_schema: Schema | None = None
        self._pending_options: PlotOptions | None = None
        self._pending_layout: PlotLayout | None = None
        self._revision = 0
        self._recompute(("records", "scales", "geometry"))

    # -- upstream inputs -------------------------------------------------------------------

    def set_schema(self, schema: Schema, now: float) -> None:
        self._pending_schema = schema
        self._scheduler.request("records", now)

    def set_records(self, records: Sequence[Record], now: float) -> None:
        self._records = tuple(records)
        self._scheduler.request("records", now)

    def set_options(self, options: PlotOptions, now: float) -> None:
        self._pending_options = options
        self._scheduler.request("scales", now)

    def set_layout(self, layout: PlotLayout, now: float) -> None:
        self._pending_layout = layout
        self._scheduler.request("scales", now)

    def tick(self, now: float) -> bool:
        """Runs a due debounced recompute and completes a finished axis settle animation."""
        changed = False
        tiers = self._scheduler.take(now)
        if tiers:
            self._recompute(tiers)
            changed = True
        if self._axis_model.advance(now):
            # Lines follow the axes only once the settle animation is over.
            self._recompute(("geometry",))
            changed = True
        return changed

    def flush(self) -> bool:
        tiers = self._scheduler.flush()
        if tiers:
            self._recompute(tiers)
        return bool(tiers)

    # -- outputs ---------------------------------------------------------------------------

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def options(self) -> PlotOptions:
        return self._options

    @property
    def layout(self) -> PlotLayout:
        return self._layout

    @property
    def axis_model(self) -> AxisModel:
        return self._axis_model

    @property
    def interaction(self) -> InteractionState:
        return self._interaction

    @property
    def selected_record(self) -> Record | None:
        return self._selection.selected

    @property
    def hovered_record(self) -> Record | None:
        return self._selection.hovered

    @property
    def valid_records(self) -> tuple[Record, ...]:
        return self._valid

    @property
    def paths(self) -> tuple[LinePath, ...]:
        return self._paths

    @property
    def passing_records(self) -> tuple[Record, ...]:
        return tuple(p.record for p, keep in zip(self._paths, self._active.tolist(), strict=True) if keep)

    @property
    def ready(self) -> bool:
        return self._scales_ready

    @property
    def revision(self) -> int:
        return self._revision

    def frame(self, now: float | None = None) -> PlotFrame:
        layout = self._layout
        if not self._scales_ready:
            return PlotFrame(plot_width=layout.plot_width, plot_height=layout.plot_height, revision=self._revision)
        if now is None:
            positions = {a.column_index: a.pixel_position for a in self._axis_model.axes}
        else:
            positions = self._axis_model.displayed_positions(now)
        axes = []
        for state in self._axis_model.axes:
            assert state.scale is not None
            brush = None
            if state.brush_selection is not None:
                brush = (state.brush_selection.lo, state.brush_selection.hi)
            axes.append(
                AxisView(
                    column_index=state.column_index,
                    name=self._schema.column(state.column_index).name,
                    x=positions[state.column_index],
                    scale_kind=state.scale.kind,
                    tick_labels=tuple(state.scale.tick_labels()),
                    brush=brush,
                )
            )
        selected = self._selection.selected
        hovered = self._selection.hovered
        lines = []
        for path, active in zip(self._paths, self._active.tolist(), strict=True):
            rid = path.record_id
            lines.append(
                LineView(
                    record_id=rid,
                    points=path.points,
                    path=path_data(path.points, plot_height=layout.plot_height),
                    color=self._color_map.color_for(path.record),
                    active=bool(active),
                    hovered=hovered is not None and hovered.record_id == rid,
                    selected=selected is not None and selected.record_id == rid,
                )
            )
        return PlotFrame(
            plot_width=layout.plot_width,
            plot_height=layout.plot_height,
            axes=tuple(axes),
            lines=tuple(lines),
            revision=self._revision,
        )

    # -- pointer / hover / selection -------------------------------------------------------

    def handle(self, event: PlotEvent) -> bool:
        kind = event.event_type
        if kind in ("pointer_enter", "pointer_move"):
            if event.x is None or event.y is None:
                return False
            return self.pointer_move(event.x, event.y)
        if kind == "pointer_leave":
            return self.pointer_leave()
        if kind == "click":
            return self.click()
        assert event.column is not None
        if kind == "drag_start":
            self.start_drag(event.column)
            return True
        if kind == "drag":
            if event.x is None:
                return False
            return self.drag(event.column, event.x)
        if kind == "drag_end":
            self.end_drag(event.column, now=event.timestamp)
            return True
        if kind == "brush_start":
            self.start_brush(event.column)
            return True
        if kind == "brush":
            return self.brush(event.column, event.y0, event.y1)
        if kind == "brush_end":
            return self.end_brush(event.column, event.y0, event.y1)
        return False

    def pointer_move(self, x: float, y: float) -> bool:
        if self._interaction.mode != "idle" or not self._scales_ready:
            return False
        query = self._layout.to_axis_coords(x, y)
        visible = [p for p, keep in zip(self._paths, self._active.tolist(), strict=True) if keep]
        closest = find_closest(
            visible,
            self._axis_model.positions(),
            query,
            threshold=self._settings.hover_threshold_px,
        )
        return self._set_hovered(closest.record if closest is not None else None)

    def pointer_leave(self) -> bool:
        return self._set_hovered(None)

    def click(self) -> bool:
        changed = self._selection.click()
        if changed:
            self._revision += 1
        return changed

    # -- axis drag -------------------------------------------------------------------------

    def start_drag(self, column: int) -> None:
        if self._interaction.mode != "idle":
            raise ValueError(f"cannot start dragging while {self._interaction.mode}")
        self._axis_model.start_drag(column)
        self._interaction = InteractionState(mode="dragging", column=column)
        self._set_hovered(None)

    def drag(self, column: int, x: float) -> bool:
        self._require("dragging", column)
        plot_x, _ = self._layout.to_axis_coords(x, 0.0)
        reordered = self._axis_model.drag_to(column, plot_x)
        self._recompute(("geometry",))
        return reordered

    def end_drag(self, column: int, now: float) -> None:
        self._require("dragging", column)
        self._axis_model.end_drag(column, now=now, duration=self._settings.settle_duration_s)
        self._interaction = InteractionState()
        LOGGER.debug("axis %d dropped; order is now %s", column, self._axis_model.order)

    # -- brushing --------------------------------------------------------------------------

    def start_brush(self, column: int) -> None:
        if self._interaction.mode != "idle":
            raise ValueError(f"cannot start brushing while {self._interaction.mode}")
        self._axis_model.axis(column)
        self._interaction = InteractionState(mode="brushing", column=column)

    def brush(self, column: int, y0: float | None, y1: float | None) -> bool:
        self._require("brushing", column)
        return self._apply_brush(column, y0, y1, final=False)

    def end_brush(self, column: int, y0: float | None, y1: float | None) -> bool:
        self._require("brushing", column)
        self._interaction = InteractionState()
        return self._apply_brush(column, y0, y1, final=True)

    def set_brush(self, column: int, lo: float, hi: float) -> None:
        """Brushes ``column`` over the axis-local pixel range ``[lo, hi]`` directly."""
        state = self._axis_model.axis(column)
        selection = BrushSelection(lo, hi).clamped(float(self._layout.plot_height))
        state.set_brush(None if selection.collapsed else selection)
        self._refilter()

    def clear_brush(self, column: int) -> None:
        self._axis_model.axis(column).clear_brush()
        self._refilter()

    def clear_all_brushes(self) -> None:
        for state in self._axis_model.axes:
            state.clear_brush()
        self._refilter()

    def _apply_brush(self, column: int, y0: float | None, y1: float | None, *, final: bool) -> bool:
        state = self._axis_model.axis(column)
        before = state.brush_extent
        if y0 is None or y1 is None:
            state.clear_brush()
        else:
            _, lo = self._layout.to_axis_coords(0.0, y0)
            _, hi = self._layout.to_axis_coords(0.0, y1)
            selection = BrushSelection(lo, hi).clamped(float(self._layout.plot_height))
            if final and selection.collapsed:
                state.clear_brush()
            else:
                state.set_brush(selection)
        self._refilter()
        LOGGER.debug("brush on axis %d: %s", column, state.brush_extent)
        return state.brush_extent != before

    def _require(self, mode: InteractionMode, column: int) -> None:
        if self._interaction.mode != mode or self._interaction.column != column:
            raise ValueError(f"axis {column} is not {mode}")

    def _set_hovered(self, record: Record | None) -> bool:
        changed = self._selection.set_hovered(record)
        if changed:
            self._revision += 1
        return changed

    # -- recompute pipeline ----------------------------------------------------------------

    def _recompute(self, tiers: Sequence[RecomputeTier]) -> None:
        LOGGER.debug("recompute tiers: %s", ", ".join(tiers))
        if "records" in tiers:
            self._rebuild_records()
        if "scales" in tiers:
            self._rebuild_scales()
        if "geometry" in tiers:
            self._rebuild_geometry()
        self._revision += 1

    def _rebuild_records(self) -> None:
        if self._pending_schema is not None:
            self._schema = self._pending_schema
            self._pending_schema = None
            self._axis_model.reset(len(self._schema))
            # Fresh axes: no gesture can continue across a schema change.
            if self._interaction.mode != "idle":
                LOGGER.debug("%s interrupted by schema change", self._interaction.mode)
            self._interaction = InteractionState()
            self._selection.clear_hovered()
        self._valid = valid_records(self._records, self._schema)
        dropped = len(self._records) - len(self._valid)
        if dropped:
            LOGGER.debug("excluded %d incomplete records", dropped)
        self._selection.resolve(self._valid)

    def _rebuild_scales(self) -> None:
        if self._pending_options is not None:
            self._options = self._pending_options
            self._pending_options = None
        if self._pending_layout is not None:
            self._layout = self._pending_layout
            self._pending_layout = None
        self._scales_ready = False
        self._axis_model.set_plot_width(float(self._layout.plot_width))
        extent = float(self._layout.plot_height)
        self._clamp_brushes(extent)
        try:
            self._options.validate(self._schema)
            scales = []
            for column in self._schema.columns:
                col_opts = self._options.column_options(column.index)
                scales.append(
                    build_scale(
                        domain_values(self._valid, column.index),
                        extent,
                        self._options.scale_kind(column),
                        quantile_count=self._settings.quantile_count,
                        padding=self._settings.point_padding,
                        category_order=col_opts.category_order,
                        column=column.name,
                    )
                )
        except (PlotDataError, ValueError) as exc:
            LOGGER.warning("plot redraw aborted: %s", exc)
            for state in self._axis_model.axes:
                state.set_scale(None)
            return
        for column, scale in zip(self._schema.columns, scales, strict=True):
            self._axis_model.axis(column.index).set_scale(scale)
        self._color_map = LineColorMap.build(
            self._schema,
            self._valid,
            self._options.color_by_column,
            self._options.min_color,
            self._options.max_color,
        )
        self._scales_ready = len(self._schema) > 0

    def _clamp_brushes(self, extent: float) -> None:
        for state in self._axis_model.axes:
            if state.brush_selection is None:
                continue
            selection = state.brush_selection.clamped(extent)
            state.set_brush(None if selection.collapsed else selection)

    def _rebuild_geometry(self) -> None:
        if not self._scales_ready:
            self._paths = ()
            self._active = np.zeros(0, dtype=bool)
            return
        self._paths = build_paths(self._valid, self._axis_model.axes)
        self._refilter(count_revision=False)

    def _refilter(self, *, count_revision: bool = True) -> None:
        if not self._paths:
            self._active = np.zeros(0, dtype=bool)
        else:
            self._active = passing_mask([p.record for p in self._paths], self._axis_model.axes)
        hovered = self._selection.hovered
        if hovered is not None and hovered.record_id not in set(self._passing_ids()):
            self._selection.clear_hovered()
        if count_revision:
            self._revision += 1

    def _passing_ids(self) -> list[Hashable]:
        return [p.record_id for p, keep in zip(self._paths, self._active.tolist(), strict=True) if keep]

