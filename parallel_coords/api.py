from __future__ import annotations

from typing import Any, Sequence

from parallel_coords.adapters.normalize import records_from_array, records_from_frame
from parallel_coords.controller import InteractionController
from parallel_coords.options import DEFAULT_HEIGHT, DEFAULT_WIDTH, ControllerSettings, PlotLayout, PlotOptions
from parallel_coords.scales import ScaleKind
from parallel_coords.schema import Record, Schema
from parallel_coords.selection import SelectionListener


def parallel_coordinates(
    data: Any = None,
    *,
    schema: Schema | None = None,
    records: Sequence[Record] | None = None,
    names: Sequence[str] | None = None,
    scale_kinds: Sequence[ScaleKind | None] = (),
    color_by: str | int | None = None,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    listener: SelectionListener | None = None,
) -> InteractionController:
    """Builds a ready controller from a schema + records, a DataFrame, or a 2-D array + names."""
    if data is not None:
        if names is not None:
            schema, records = records_from_array(data, names)
        else:
            schema, records = records_from_frame(data)
    if schema is None or records is None:
        raise ValueError("either data or schema and records are required")

    color_index = schema.index_of(color_by) if isinstance(color_by, str) else color_by
    options = PlotOptions.for_schema(schema, scale_kinds, color_by_column=color_index)
    settings = ControllerSettings(layout=PlotLayout(width=width, height=height))
    return InteractionController(schema, records, options, settings=settings, listener=listener)
