"""Raster emission and page rendering onto a cairo image surface."""

from __future__ import annotations

import io
import math
from collections.abc import Iterable

import cairocffi as cairo
import numpy as np
from PIL import Image

from inkrender.models.stroke import Stroke
from inkrender.render.curves import PathCommand, parse_color, quadratic_to_cubic, stroke_color, trace_outline
from inkrender.render.outline import stroke_outline

BACKGROUND = (255, 255, 255)

# Cairo stores path coordinates as 24.8 fixed point; keep far off-page vertices inside that range.
_COORD_LIMIT = float(1 << 22)


def _clamp(v: float) -> float:
    return min(max(v, -_COORD_LIMIT), _COORD_LIMIT)


class RasterCanvas:
    """Path-filling canvas over a cairo RGB surface.

    Mirrors the 2D-canvas path API (begin/move/quadratic/line/close/fill). Paths
    are filled with the non-zero winding rule and anti-aliased by cairo, so a
    stroke that crosses itself stays solid at the crossing.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._surface = cairo.ImageSurface(cairo.FORMAT_RGB24, width, height)
        self._ctx = cairo.Context(self._surface)
        self._ctx.set_fill_rule(cairo.FILL_RULE_WINDING)
        r, g, b = BACKGROUND
        self._ctx.set_source_rgb(r / 255, g / 255, b / 255)
        self._ctx.paint()
        self._pen: tuple[float, float] | None = None
        self._start: tuple[float, float] | None = None
        self._finite = True

    def _point(self, x: float, y: float) -> tuple[float, float]:
        if not (math.isfinite(x) and math.isfinite(y)):
            self._finite = False
            return (0.0, 0.0)
        return (_clamp(x), _clamp(y))

    def begin_path(self) -> None:
        self._ctx.new_path()
        self._pen = None
        self._start = None
        self._finite = True

    def move_to(self, x: float, y: float) -> None:
        self._pen = self._start = self._point(x, y)
        self._ctx.move_to(*self._pen)

    def line_to(self, x: float, y: float) -> None:
        if self._pen is None:
            self.move_to(x, y)
            return
        self._pen = self._point(x, y)
        self._ctx.line_to(*self._pen)

    def quadratic_curve_to(self, cx: float, cy: float, x: float, y: float) -> None:
        if self._pen is None:
            self.move_to(cx, cy)
        x0, y0 = self._pen
        cx, cy = self._point(cx, cy)
        x, y = self._point(x, y)
        self._ctx.curve_to(*quadratic_to_cubic(x0, y0, cx, cy, x, y), x, y)
        self._pen = (x, y)

    def close_path(self) -> None:
        if self._start is None:
            return
        self._ctx.close_path()
        self._pen = self._start

    def fill(self, color: str | None = None) -> None:
        if not self._finite:
            self._ctx.new_path()
            return
        r, g, b = parse_color(color)
        self._ctx.set_source_rgb(r / 255, g / 255, b / 255)
        self._ctx.fill()

    def run(self, commands: list[PathCommand]) -> None:
        """Replay a traced outline as drawing operations."""
        for cmd in commands:
            if cmd.op == "M":
                self.move_to(*cmd.args)
            elif cmd.op == "Q":
                self.quadratic_curve_to(*cmd.args)
            elif cmd.op == "L":
                self.line_to(*cmd.args)
            elif cmd.op == "Z":
                self.close_path()

    def to_image(self) -> Image.Image:
        self._surface.flush()
        stride = self._surface.get_stride()
        # RGB24 pixels are native-endian 32-bit words with the top byte unused
        px = np.frombuffer(self._surface.get_data(), dtype=np.uint32)
        px = px.reshape(self.height, stride // 4)[:, : self.width]
        rgb = np.stack([(px >> 16) & 0xFF, (px >> 8) & 0xFF, px & 0xFF], axis=-1).astype(np.uint8)
        return Image.fromarray(rgb)


def draw_stroke(canvas: RasterCanvas, stroke: Stroke, scale_x: float = 1.0, scale_y: float = 1.0) -> bool:
    """Paint one stroke. Returns False (and draws nothing) for an empty outline."""
    commands = trace_outline(stroke_outline(stroke), scale_x, scale_y)
    if not commands:
        return False
    canvas.begin_path()
    canvas.run(commands)
    canvas.fill(stroke_color(stroke.color))
    return True


def render_page(
    strokes: Iterable[Stroke],
    width: int,
    height: int,
    scale_x: float,
    scale_y: float,
) -> Image.Image:
    """Render strokes in order onto an opaque white buffer of ``width``×``height``."""
    canvas = RasterCanvas(width, height)
    for stroke in strokes:
        draw_stroke(canvas, stroke, scale_x, scale_y)
    return canvas.to_image()


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def render_page_png(
    strokes: Iterable[Stroke],
    width: int,
    height: int,
    scale_x: float,
    scale_y: float,
) -> bytes:
    return encode_png(render_page(strokes, width, height, scale_x, scale_y))
