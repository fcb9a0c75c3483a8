from parallel_coords.api import parallel_coordinates
from parallel_coords.axes import AxisModel, AxisState, AxisTransition
from parallel_coords.brush import BrushSelection, CategorySet, ClosedInterval, HalfOpenInterval, passes
from parallel_coords.controller import InteractionController, PlotFrame
from parallel_coords.errors import EmptyDomainError, PlotDataError, ScaleDomainError
from parallel_coords.events import PlotEvent, parse_plot_event
from parallel_coords.options import ColumnOptions, ControllerSettings, PlotLayout, PlotOptions
from parallel_coords.render import render_frame
from parallel_coords.scales import build_scale
from parallel_coords.schema import Column, Record, Schema

__all__ = [
    "AxisModel",
    "AxisState",
    "AxisTransition",
    "BrushSelection",
    "CategorySet",
    "ClosedInterval",
    "Column",
    "ColumnOptions",
    "ControllerSettings",
    "EmptyDomainError",
    "HalfOpenInterval",
    "InteractionController",
    "PlotDataError",
    "PlotEvent",
    "PlotFrame",
    "PlotLayout",
    "PlotOptions",
    "Record",
    "ScaleDomainError",
    "Schema",
    "build_scale",
    "parallel_coordinates",
    "parse_plot_event",
    "passes",
    "render_frame",
]
