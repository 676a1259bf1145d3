"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import Request

from inkrender.config import Settings
from inkrender.services.export import ExportService
from inkrender.services.thumbnail import ThumbnailCache
from inkrender.storage.pages import PageSource


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_page_source(request: Request) -> PageSource:
    return request.app.state.pages


def get_thumbnail_cache(request: Request) -> ThumbnailCache:
    return request.app.state.thumbnails


def get_export_service(request: Request) -> ExportService:
    return request.app.state.exporter
