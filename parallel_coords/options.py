from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Sequence

from parallel_coords.axes import DEFAULT_SETTLE_DURATION_S
from parallel_coords.geometry import DEFAULT_HOVER_THRESHOLD_PX
from parallel_coords.scales import DEFAULT_POINT_PADDING, DEFAULT_QUANTILE_COUNT, NUMERIC_SCALE_KINDS, SCALE_KINDS, ScaleKind
from parallel_coords.scheduler import DEFAULT_DEBOUNCE_S
from parallel_coords.schema import Column, Schema


RGB = tuple[int, int, int]
RGBA = tuple[int, int, int, int]

DEFAULT_WIDTH = 960
DEFAULT_HEIGHT = 400
DEFAULT_MIN_COLOR: RGB = (12, 80, 190)
DEFAULT_MAX_COLOR: RGB = (255, 140, 40)


@dataclass(frozen=True)
class PlotLayout:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    margin_left: int = 48
    margin_right: int = 48
    margin_top: int = 36
    margin_bottom: int = 24

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be > 0")
        if min(self.margin_left, self.margin_right, self.margin_top, self.margin_bottom) < 0:
            raise ValueError("margins must be >= 0")
        if self.plot_width <= 1 or self.plot_height <= 1:
            raise ValueError("plot area must be larger than 1px after margins")

    @property
    def plot_width(self) -> int:
        return self.width - self.margin_left - self.margin_right

    @property
    def plot_height(self) -> int:
        return self.height - self.margin_top - self.margin_bottom

    def to_axis_coords(self, x: float, y: float) -> tuple[float, float]:
        """Figure pixels (top-left origin) -> axis-local coords (y up from the axis bottom)."""
        return (float(x) - self.margin_left, float(self.plot_height) - (float(y) - self.margin_top))

    def to_figure_coords(self, x: float, y: float) -> tuple[float, float]:
        return (float(x) + self.margin_left, self.margin_top + float(self.plot_height) - float(y))


@dataclass(frozen=True)
class ColumnOptions:
    scale_kind: ScaleKind | None = None
    category_order: tuple[Hashable, ...] | None = None

    def __post_init__(self) -> None:
        if self.scale_kind is not None and self.scale_kind not in SCALE_KINDS:
            raise ValueError(f"unsupported scale kind: {self.scale_kind}")


@dataclass(frozen=True)
class PlotOptions:
    columns: tuple[ColumnOptions, ...] = ()
    color_by_column: int | None = None
    min_color: RGB | RGBA = DEFAULT_MIN_COLOR
    max_color: RGB | RGBA = DEFAULT_MAX_COLOR

    def __post_init__(self) -> None:
        for color in (self.min_color, self.max_color):
            if len(color) not in (3, 4) or any(not 0 <= int(c) <= 255 for c in color):
                raise ValueError(f"invalid color: {color!r}")
        if self.color_by_column is not None and self.color_by_column < 0:
            raise ValueError("color_by_column must be >= 0")

    @classmethod
    def for_schema(cls, schema: Schema, scale_kinds: Sequence[ScaleKind | None] = (), **kwargs) -> "PlotOptions":
        kinds = list(scale_kinds) + [None] * (len(schema) - len(scale_kinds))
        return cls(columns=tuple(ColumnOptions(scale_kind=k) for k in kinds[: len(schema)]), **kwargs)

    def column_options(self, column_index: int) -> ColumnOptions:
        if column_index < len(self.columns):
            return self.columns[column_index]
        return ColumnOptions()

    def scale_kind(self, column: Column) -> ScaleKind:
        requested = self.column_options(column.index).scale_kind
        if requested is None:
            return "continuous" if column.is_numeric else "point"
        if not column.is_numeric and requested in NUMERIC_SCALE_KINDS:
            raise ValueError(f"column {column.name!r} is categorical and cannot use a {requested} scale")
        return requested

    def validate(self, schema: Schema) -> None:
        if len(self.columns) > len(schema):
            raise ValueError("options list more columns than the schema has")
        for column in schema.columns:
            self.scale_kind(column)
        if self.color_by_column is not None and self.color_by_column >= len(schema):
            raise ValueError("color_by_column is out of range")


@dataclass(frozen=True)
class ControllerSettings:
    hover_threshold_px: float = DEFAULT_HOVER_THRESHOLD_PX
    settle_duration_s: float = DEFAULT_SETTLE_DURATION_S
    debounce_s: float = DEFAULT_DEBOUNCE_S
    quantile_count: int = DEFAULT_QUANTILE_COUNT
    point_padding: float = DEFAULT_POINT_PADDING
    layout: PlotLayout = field(default_factory=PlotLayout)

    def __post_init__(self) -> None:
        if self.hover_threshold_px < 0:
            raise ValueError("hover_threshold_px must be >= 0")
        if self.settle_duration_s < 0:
            raise ValueError("settle_duration_s must be >= 0")
        if self.debounce_s < 0:
            raise ValueError("debounce_s must be >= 0")
        if self.quantile_count < 2:
            raise ValueError("quantile_count must be >= 2")
        if self.point_padding < 0:
            raise ValueError("point_padding must be >= 0")
