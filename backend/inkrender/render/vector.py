"""Vector emission (SVG path data) and PDF page rendering.

Stroke paths are emitted in top-left-origin page units and drawn under a y-flip so
the PDF page reads the same way as the raster output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen.canvas import FILL_NON_ZERO, Canvas
from svgpathtools import CubicBezier, Line, QuadraticBezier, parse_path

from inkrender.models.stroke import PAGE_HEIGHT, PAGE_WIDTH, Stroke
from inkrender.render.curves import PathCommand, parse_color, quadratic_to_cubic, stroke_color, trace_outline
from inkrender.render.outline import stroke_outline

logger = logging.getLogger(__name__)

# Searchable text layer: font, size, line gap and page margin (points).
_TEXT_FONT = "Helvetica"
_TEXT_SIZE = 12
_TEXT_LINE_GAP = 4
_TEXT_MARGIN = 50

# PDF text render mode 3: neither fill nor stroke (invisible, still selectable).
_INVISIBLE_TEXT = 3
_VISIBLE_TEXT = 0

# A single point cannot enclose anything and does not round-trip through path parsing.
_MIN_PATH_POINTS = 2


class PageSize(str, Enum):
    ORIGINAL = "original"
    A4 = "a4"
    LETTER = "letter"


@dataclass(frozen=True)
class PageDimensions:
    width: float
    height: float

    @property
    def scale(self) -> tuple[float, float]:
        """Logical page space → these dimensions."""
        return (self.width / PAGE_WIDTH, self.height / PAGE_HEIGHT)


_PAGE_DIMENSIONS = {
    PageSize.ORIGINAL: PageDimensions(PAGE_WIDTH, PAGE_HEIGHT),
    PageSize.A4: PageDimensions(595.28, 841.89),
    PageSize.LETTER: PageDimensions(612.0, 792.0),
}


def page_dimensions(page_size: PageSize | str = PageSize.ORIGINAL) -> PageDimensions:
    """Absolute point dimensions for a target page size."""
    return _PAGE_DIMENSIONS[PageSize(page_size)]


@dataclass(frozen=True)
class SvgPath:
    path: str
    color: str


def _num(v: float) -> str:
    # Shortest round-trip repr: parsing the string gives back the exact float
    return repr(float(v))


def commands_to_path_data(commands: list[PathCommand]) -> str:
    return " ".join(
        cmd.op if not cmd.args else f"{cmd.op} " + " ".join(_num(a) for a in cmd.args)
        for cmd in commands
    )


def stroke_to_svg_path(stroke: Stroke, scale_x: float = 1.0, scale_y: float = 1.0) -> SvgPath | None:
    """``M x y [Q cx cy ex ey]... L x y Z`` fill path, or None when the outline is too small."""
    outline = stroke_outline(stroke)
    if len(outline) < _MIN_PATH_POINTS:
        return None
    commands = trace_outline(outline, scale_x, scale_y)
    return SvgPath(path=commands_to_path_data(commands), color=stroke_color(stroke.color))


def draw_svg_path(doc: Canvas, path_data: str, color: str) -> bool:
    """Fill SVG path data on a reportlab canvas. Returns False if the path has no segments."""
    parsed = parse_path(path_data)
    if len(parsed) == 0:
        return False

    pdf_path = doc.beginPath()
    current: complex | None = None
    for seg in parsed:
        if current is None or seg.start != current:
            pdf_path.moveTo(seg.start.real, seg.start.imag)
        if isinstance(seg, QuadraticBezier):
            c1x, c1y, c2x, c2y = quadratic_to_cubic(
                seg.start.real, seg.start.imag, seg.control.real, seg.control.imag, seg.end.real, seg.end.imag
            )
            pdf_path.curveTo(c1x, c1y, c2x, c2y, seg.end.real, seg.end.imag)
        elif isinstance(seg, CubicBezier):
            pdf_path.curveTo(
                seg.control1.real, seg.control1.imag,
                seg.control2.real, seg.control2.imag,
                seg.end.real, seg.end.imag,
            )
        elif isinstance(seg, Line):
            pdf_path.lineTo(seg.end.real, seg.end.imag)
        else:
            logger.warning("Skipping unsupported segment %s in stroke path", type(seg).__name__)
            continue
        current = seg.end
    pdf_path.close()

    r, g, b = parse_color(color)
    doc.setFillColorRGB(r / 255, g / 255, b / 255)
    doc.drawPath(pdf_path, stroke=0, fill=1, fillMode=FILL_NON_ZERO)
    return True


def _draw_text_block(doc: Canvas, text: str, dims: PageDimensions, render_mode: int) -> None:
    lines = simpleSplit(text, _TEXT_FONT, _TEXT_SIZE, dims.width - 2 * _TEXT_MARGIN)
    block = doc.beginText(_TEXT_MARGIN, dims.height - _TEXT_MARGIN - _TEXT_SIZE)
    block.setFont(_TEXT_FONT, _TEXT_SIZE, leading=_TEXT_SIZE + _TEXT_LINE_GAP)
    block.setTextRenderMode(render_mode)
    for line in lines:
        block.textLine(line)
    doc.drawText(block)


def render_page_to_document(
    doc: Canvas,
    strokes: Iterable[Stroke],
    dims: PageDimensions,
    transcription: str | None = None,
    searchable: bool = False,
) -> int:
    """Draw one page's background and strokes onto the current canvas page.

    With ``searchable`` and non-blank ``transcription`` the text is laid over the page
    invisibly so the document is full-text searchable. Returns the number of strokes
    drawn (strokes with no path are skipped).
    """
    doc.setFillColorRGB(1, 1, 1)
    doc.rect(0, 0, dims.width, dims.height, stroke=0, fill=1)

    scale_x, scale_y = dims.scale
    drawn = 0
    doc.saveState()
    doc.translate(0, dims.height)
    doc.scale(1, -1)
    for stroke in strokes:
        svg = stroke_to_svg_path(stroke, scale_x, scale_y)
        if svg is None:
            continue
        if draw_svg_path(doc, svg.path, svg.color):
            drawn += 1
    doc.restoreState()

    if searchable and transcription and transcription.strip():
        doc.saveState()
        _draw_text_block(doc, transcription, dims, _INVISIBLE_TEXT)
        doc.restoreState()

    return drawn


def render_transcription_page(doc: Canvas, transcription: str, dims: PageDimensions) -> None:
    """Draw a visible transcription text page onto the current canvas page."""
    doc.setFillColorRGB(1, 1, 1)
    doc.rect(0, 0, dims.width, dims.height, stroke=0, fill=1)
    doc.setFillColorRGB(0, 0, 0)
    _draw_text_block(doc, transcription, dims, _VISIBLE_TEXT)
