"""Master API router: mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from inkrender.api import export, health, thumbnails

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(thumbnails.router)
api_router.include_router(export.router)
