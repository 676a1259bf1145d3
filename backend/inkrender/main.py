"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkrender.config import Settings, settings as default_settings
from inkrender.services.export import ExportService
from inkrender.services.thumbnail import ThumbnailCache
from inkrender.storage.cache import FileCacheStorage
from inkrender.storage.pages import FilePageStore, PageSource

load_dotenv()

logging.basicConfig(
    level=getattr(logging, default_settings.inkrender_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app(settings: Settings | None = None, pages: PageSource | None = None) -> FastAPI:
    settings = settings or default_settings
    if pages is None:
        pages = FilePageStore(settings.data_dir)

    app = FastAPI(
        title="InkRender",
        description="Ink stroke rendering: page thumbnails, PNG and PDF export",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Services are built once per app; nothing is cached at module level
    app.state.settings = settings
    app.state.pages = pages
    app.state.thumbnails = ThumbnailCache(pages, FileCacheStorage(settings.data_dir), settings)
    app.state.exporter = ExportService(pages, settings)

    from inkrender.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
