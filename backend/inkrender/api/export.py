"""Export endpoints: page and container PDF, page PNG downloads."""

from __future__ import annotations

import math
import re

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from inkrender.config import Settings
from inkrender.dependencies import get_export_service, get_page_source, get_settings
from inkrender.models.responses import ErrorResponse
from inkrender.render.vector import PageSize
from inkrender.services.export import ExportService, PdfExportOptions, TranscriptionLayout
from inkrender.storage.pages import PageSource

router = APIRouter()

_UNSAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9_-]")

_NOT_FOUND = {404: {"model": ErrorResponse}}


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": message})


def _attachment(data: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def safe_filename(title: str) -> str:
    return _UNSAFE_FILENAME_RE.sub("_", title)


def parse_scale(raw: str | None, settings: Settings) -> float:
    """Lenient ``?scale=``: unparseable, zero or non-finite means 1, then clamped."""
    try:
        scale = float(raw) if raw else 1.0
    except ValueError:
        scale = 1.0
    if not math.isfinite(scale) or scale == 0:
        scale = 1.0
    return min(max(scale, settings.png_scale_min), settings.png_scale_max)


def _pdf_options(
    include_transcription: bool = Query(False, alias="includeTranscription"),
    page_size: PageSize = Query(PageSize.ORIGINAL, alias="pageSize"),
    transcription_layout: TranscriptionLayout = Query(
        TranscriptionLayout.OVERLAY, alias="transcriptionLayout"
    ),
) -> PdfExportOptions:
    return PdfExportOptions(
        include_transcription=include_transcription,
        page_size=page_size,
        transcription_layout=transcription_layout,
    )


@router.get(
    "/pages/{page_id}/export/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}, **_NOT_FOUND},
)
def export_page_pdf(
    page_id: str,
    options: PdfExportOptions = Depends(_pdf_options),
    exporter: ExportService = Depends(get_export_service),
) -> Response:
    data = exporter.export_page_pdf(page_id, options)
    if data is None:
        return _not_found("Page not found")
    return _attachment(data, "application/pdf", f"{page_id}.pdf")


@router.get(
    "/containers/{container_id}/export/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}, **_NOT_FOUND},
)
def export_container_pdf(
    container_id: str,
    options: PdfExportOptions = Depends(_pdf_options),
    exporter: ExportService = Depends(get_export_service),
    pages: PageSource = Depends(get_page_source),
) -> Response:
    title = pages.get_container_title(container_id)
    if title is None:
        return _not_found("Notebook not found")

    page_ids = pages.list_pages(container_id)
    data = exporter.export_notebook_pdf(container_id, page_ids, options)
    if data is None:
        return _not_found("Notebook has no pages")
    return _attachment(data, "application/pdf", f"{safe_filename(title)}.pdf")


@router.get(
    "/pages/{page_id}/export/png",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, **_NOT_FOUND},
)
def export_page_png(
    page_id: str,
    scale: str | None = Query(None),
    exporter: ExportService = Depends(get_export_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    data = exporter.export_page_png(page_id, parse_scale(scale, settings))
    if data is None:
        return _not_found("Page not found")
    return _attachment(data, "image/png", f"{page_id}.png")
