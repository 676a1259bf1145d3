"""Reduced-resolution page image for the handwriting-recognition collaborator.

The recognizer is called elsewhere; this only prepares the image it is handed.
"""

from __future__ import annotations

from inkrender.config import Settings, settings as default_settings
from inkrender.models.stroke import PAGE_HEIGHT, PAGE_WIDTH
from inkrender.render.raster import render_page_png
from inkrender.storage.pages import PageSource


def recognition_size(width: int) -> tuple[int, int]:
    return width, max(1, round(PAGE_HEIGHT * width / PAGE_WIDTH))


def render_for_recognition(
    pages: PageSource,
    page_id: str,
    settings: Settings | None = None,
) -> bytes | None:
    """PNG at the recognition width; None for an unknown page or a page with no strokes."""
    settings = settings or default_settings
    strokes = pages.get_strokes(page_id)
    if not strokes:
        return None

    width, height = recognition_size(settings.recognition_width)
    scale = width / PAGE_WIDTH
    return render_page_png(strokes, width, height, scale, scale)


class RecognitionImagePreparer:
    def __init__(self, pages: PageSource, settings: Settings | None = None) -> None:
        self.pages = pages
        self.settings = settings or default_settings

    def render_for_recognition(self, page_id: str) -> bytes | None:
        return render_for_recognition(self.pages, page_id, self.settings)
