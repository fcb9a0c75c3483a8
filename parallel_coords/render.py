from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from parallel_coords.coloring import RGBA
from parallel_coords.controller import LineView, PlotFrame
from parallel_coords.options import PlotLayout


@dataclass(frozen=True)
class RenderStyle:
    background: RGBA = (12, 16, 23, 255)
    axis_color: RGBA = (124, 138, 156, 255)
    text_color: RGBA = (208, 218, 232, 255)
    suppressed_color: RGBA = (90, 98, 110, 40)
    brush_fill: RGBA = (225, 232, 242, 60)
    brush_outline: RGBA = (225, 232, 242, 160)
    hover_color: RGBA = (255, 255, 255, 255)
    line_width: int = 1
    highlight_width: int = 3
    tick_len: int = 4


def render_frame(frame: PlotFrame, layout: PlotLayout, style: RenderStyle | None = None) -> np.ndarray:
    """Rasterizes a :class:`PlotFrame` into an ``(H, W, 4)`` uint8 RGBA array."""
    style = style or RenderStyle()
    image = Image.new("RGBA", (layout.width, layout.height), style.background)
    draw = ImageDraw.Draw(image, "RGBA")

    # Suppressed lines underneath, emphasised lines on top.
    ordered = sorted(frame.lines, key=_line_rank)
    for line in ordered:
        _draw_line(draw, line, layout, style)

    font = _font()
    for axis in frame.axes:
        x, top = layout.to_figure_coords(axis.x, frame.plot_height)
        _, bottom = layout.to_figure_coords(axis.x, 0.0)
        if axis.brush is not None:
            _, y_hi = layout.to_figure_coords(axis.x, axis.brush[1])
            _, y_lo = layout.to_figure_coords(axis.x, axis.brush[0])
            draw.rectangle((x - 6, y_hi, x + 6, y_lo), fill=style.brush_fill, outline=style.brush_outline)
        draw.line((x, top, x, bottom), fill=style.axis_color, width=1)
        for label, px in axis.tick_labels:
            _, ty = layout.to_figure_coords(axis.x, px)
            draw.line((x - style.tick_len, ty, x, ty), fill=style.axis_color, width=1)
            tw, th = _text_size(draw, label, font)
            draw.text((x - style.tick_len - 2 - tw, ty - th / 2.0), label, fill=style.text_color, font=font)
        nw, nh = _text_size(draw, axis.name, font)
        draw.text((x - nw / 2.0, max(0.0, top - nh - 8)), axis.name, fill=style.text_color, font=font)

    return np.asarray(image, dtype=np.uint8).copy()


def _line_rank(line: LineView) -> int:
    if line.selected or line.hovered:
        return 2
    return 1 if line.active else 0


def _draw_line(draw: ImageDraw.ImageDraw, line: LineView, layout: PlotLayout, style: RenderStyle) -> None:
    if line.points.shape[0] < 2:
        return
    pts = [layout.to_figure_coords(x, y) for x, y in line.points.tolist()]
    if not line.active:
        draw.line(pts, fill=style.suppressed_color, width=style.line_width)
        return
    if line.hovered or line.selected:
        color = style.hover_color if line.hovered and not line.selected else line.color
        draw.line(pts, fill=color, width=style.highlight_width, joint="curve")
        return
    draw.line(pts, fill=line.color, width=style.line_width)


def _text_size(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont | ImageFont.FreeTypeFont) -> tuple[int, int]:
    if not text:
        return (0, 0)
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return (max(0, int(right - left)), max(1, int(bottom - top)))


@lru_cache(maxsize=1)
def _font() -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    return ImageFont.load_default()
