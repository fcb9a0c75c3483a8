from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Optional


PlotEventType = Literal[
    "pointer_enter",
    "pointer_move",
    "pointer_leave",
    "click",
    "drag_start",
    "drag",
    "drag_end",
    "brush_start",
    "brush",
    "brush_end",
]
PLOT_EVENT_TYPES: tuple[str, ...] = (
    "pointer_enter",
    "pointer_move",
    "pointer_leave",
    "click",
    "drag_start",
    "drag",
    "drag_end",
    "brush_start",
    "brush",
    "brush_end",
)
AXIS_EVENT_TYPES: tuple[str, ...] = ("drag_start", "drag", "drag_end", "brush_start", "brush", "brush_end")


@dataclass(frozen=True)
class PlotEvent:
    """Pointer, drag and brush input in figure pixels (origin top-left).

    ``column`` names the axis for drag/brush events. Brush events carry the brushed span as
    ``y0``/``y1``; a brush event with both unset clears that axis' brush.
    """

    event_type: PlotEventType
    timestamp: float
    x: Optional[float] = None
    y: Optional[float] = None
    column: Optional[int] = None
    y0: Optional[float] = None
    y1: Optional[float] = None

    def __post_init__(self) -> None:
        if self.event_type not in PLOT_EVENT_TYPES:
            raise ValueError(f"unsupported plot event type: {self.event_type}")
        if self.event_type in AXIS_EVENT_TYPES and self.column is None:
            raise ValueError(f"{self.event_type} events require a column")


def parse_plot_event(payload: object) -> PlotEvent | None:
    """Parse a host-supplied mapping into a :class:`PlotEvent`; unknown payloads yield None."""

    if not isinstance(payload, Mapping):
        return None
    event_type = payload.get("type", payload.get("event_type"))
    if event_type not in PLOT_EVENT_TYPES:
        return None
    column = payload.get("column")
    if event_type in AXIS_EVENT_TYPES and not isinstance(column, int):
        return None
    return PlotEvent(
        event_type=event_type,
        timestamp=float(payload.get("timestamp", 0.0)),
        x=_optional_float(payload.get("x")),
        y=_optional_float(payload.get("y")),
        column=column if isinstance(column, int) else None,
        y0=_optional_float(payload.get("y0")),
        y1=_optional_float(payload.get("y1")),
    )


def _optional_float(raw: object) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
