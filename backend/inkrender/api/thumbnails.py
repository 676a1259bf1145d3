"""GET /api/pages/{page_id}/thumbnail: cached page preview."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from inkrender.config import Settings
from inkrender.dependencies import get_settings, get_thumbnail_cache
from inkrender.models.responses import ErrorResponse
from inkrender.services.thumbnail import ThumbnailCache

router = APIRouter()


@router.get(
    "/pages/{page_id}/thumbnail",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 404: {"model": ErrorResponse}},
)
def page_thumbnail(
    page_id: str,
    thumbnails: ThumbnailCache = Depends(get_thumbnail_cache),
    settings: Settings = Depends(get_settings),
) -> Response:
    data = thumbnails.get_or_generate(page_id)
    if data is None:
        return JSONResponse(status_code=404, content={"error": "Page not found"})

    # Inline display only: no Content-Disposition
    return Response(
        content=data,
        media_type="image/png",
        headers={"Cache-Control": f"public, max-age={settings.thumbnail_max_age}"},
    )
