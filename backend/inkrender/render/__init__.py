"""Ink stroke rendering: outlines, shared curve fitting, raster and vector emitters."""

from inkrender.render.curves import PathCommand, trace_outline
from inkrender.render.outline import stroke_outline
from inkrender.render.raster import RasterCanvas, encode_png, render_page, render_page_png
from inkrender.render.vector import (
    PageDimensions,
    PageSize,
    page_dimensions,
    render_page_to_document,
    stroke_to_svg_path,
)

__all__ = [
    "PathCommand",
    "trace_outline",
    "stroke_outline",
    "RasterCanvas",
    "encode_png",
    "render_page",
    "render_page_png",
    "PageDimensions",
    "PageSize",
    "page_dimensions",
    "render_page_to_document",
    "stroke_to_svg_path",
]
