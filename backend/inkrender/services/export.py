"""User-facing PNG and PDF exports at page and notebook granularity.

Stroke outlines are always computed in full-resolution logical page space and only
remapped per target by a scale factor.
"""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from enum import Enum

from reportlab.pdfgen.canvas import Canvas

from inkrender.config import Settings, settings as default_settings
from inkrender.models.stroke import PAGE_HEIGHT, PAGE_WIDTH, Stroke
from inkrender.render.raster import render_page_png
from inkrender.render.vector import (
    PageDimensions,
    PageSize,
    page_dimensions,
    render_page_to_document,
    render_transcription_page,
)
from inkrender.storage.pages import PageSource

logger = logging.getLogger(__name__)


class TranscriptionLayout(str, Enum):
    # Invisible text over the ink page (searchable, visually unchanged)
    OVERLAY = "overlay"
    # A visible text page after the ink page
    PAGE = "page"


@dataclass(frozen=True)
class PdfExportOptions:
    include_transcription: bool = False
    page_size: PageSize = PageSize.ORIGINAL
    transcription_layout: TranscriptionLayout = TranscriptionLayout.OVERLAY


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def png_dimensions(scale: float) -> tuple[int, int]:
    return (
        max(1, _round_half_up(PAGE_WIDTH * scale)),
        max(1, _round_half_up(PAGE_HEIGHT * scale)),
    )


class ExportService:
    def __init__(self, pages: PageSource, settings: Settings | None = None) -> None:
        self.pages = pages
        self.settings = settings or default_settings

    def export_page_png(self, page_id: str, scale: float = 1.0) -> bytes | None:
        """PNG of a page at ``scale``; None only when the page does not exist."""
        if not math.isfinite(scale) or scale <= 0:
            raise ValueError(f"PNG export scale must be a positive number, got {scale!r}")

        strokes = self.pages.get_strokes(page_id)
        if strokes is None:
            return None

        width, height = png_dimensions(scale)
        data = render_page_png(strokes, width, height, scale, scale)
        logger.debug("Exported page %s as %dx%d PNG (%d bytes)", page_id, width, height, len(data))
        return data

    def export_page_pdf(self, page_id: str, options: PdfExportOptions | None = None) -> bytes | None:
        """Single-page PDF; None only when the page does not exist."""
        options = options or PdfExportOptions()
        strokes = self.pages.get_strokes(page_id)
        if strokes is None:
            return None

        dims = page_dimensions(options.page_size)
        buf = io.BytesIO()
        doc = self._new_document(buf, dims)
        self._add_page(doc, page_id, strokes, dims, options)
        doc.save()
        data = buf.getvalue()
        logger.debug("Exported page %s as %gx%g PDF (%d bytes)", page_id, dims.width, dims.height, len(data))
        return data

    def export_notebook_pdf(
        self,
        notebook_id: str,
        page_ids: list[str],
        options: PdfExportOptions | None = None,
    ) -> bytes | None:
        """One PDF page per page id, in the given order; None only for an empty list.

        A page whose stroke lookup fails still gets a blank page.
        """
        if not page_ids:
            return None
        options = options or PdfExportOptions()

        dims = page_dimensions(options.page_size)
        buf = io.BytesIO()
        doc = self._new_document(buf, dims)
        for page_id in page_ids:
            try:
                strokes = self.pages.get_strokes(page_id) or []
            except (OSError, ValueError) as e:
                logger.warning("Stroke lookup failed for page %s in notebook %s: %s", page_id, notebook_id, e)
                strokes = []
            self._add_page(doc, page_id, strokes, dims, options)
        doc.save()
        data = buf.getvalue()
        logger.debug(
            "Exported notebook %s (%d pages) as PDF (%d bytes)", notebook_id, len(page_ids), len(data)
        )
        return data

    @staticmethod
    def _new_document(buf: io.BytesIO, dims: PageDimensions) -> Canvas:
        # invariant=1 drops timestamps and random ids so identical input gives identical bytes
        return Canvas(buf, pagesize=(dims.width, dims.height), invariant=1)

    def _transcription(self, page_id: str) -> str | None:
        """Non-blank transcription text, or None. A failed read leaves the page without text."""
        try:
            text = self.pages.get_transcription_text(page_id)
        except (OSError, ValueError) as e:
            logger.warning("Transcription lookup failed for page %s: %s", page_id, e)
            return None
        if text is None or not text.strip():
            return None
        return text

    def _add_page(
        self,
        doc: Canvas,
        page_id: str,
        strokes: list[Stroke],
        dims: PageDimensions,
        options: PdfExportOptions,
    ) -> None:
        text = self._transcription(page_id) if options.include_transcription else None

        overlay = text is not None and options.transcription_layout == TranscriptionLayout.OVERLAY
        render_page_to_document(doc, strokes, dims, transcription=text, searchable=overlay)
        doc.showPage()

        if text is not None and options.transcription_layout == TranscriptionLayout.PAGE:
            render_transcription_page(doc, text, dims)
            doc.showPage()
