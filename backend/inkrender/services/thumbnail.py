"""Per-page thumbnail cache.

Each page is either uncached or cached. ``generate_and_cache`` always re-renders and
overwrites; ``invalidate`` drops the entry and is a no-op when nothing is cached. The
storage backend is the source of truth; this object holds no per-page state.
"""

from __future__ import annotations

import logging

from inkrender.config import Settings, settings as default_settings
from inkrender.models.stroke import PAGE_HEIGHT, PAGE_WIDTH
from inkrender.render.raster import render_page_png
from inkrender.storage.cache import CacheKey, CacheStorage
from inkrender.storage.pages import PageSource

logger = logging.getLogger(__name__)


def thumbnail_size(width: int) -> tuple[int, int]:
    """Thumbnail dimensions at a fixed width, keeping the page aspect ratio."""
    return width, max(1, round(width * PAGE_HEIGHT / PAGE_WIDTH))


class ThumbnailCache:
    def __init__(
        self,
        pages: PageSource,
        storage: CacheStorage,
        settings: Settings | None = None,
    ) -> None:
        self.pages = pages
        self.storage = storage
        self.settings = settings or default_settings
        self.width, self.height = thumbnail_size(self.settings.thumbnail_width)

    def _key(self, page_id: str) -> CacheKey | None:
        container_id = self.pages.get_page_owner_container(page_id)
        if not container_id:
            return None
        return CacheKey(container_id, page_id)

    def render(self, page_id: str) -> bytes | None:
        """Render a page thumbnail without touching the cache."""
        strokes = self.pages.get_strokes(page_id)
        if strokes is None:
            return None
        return render_page_png(
            strokes,
            self.width,
            self.height,
            self.width / PAGE_WIDTH,
            self.height / PAGE_HEIGHT,
        )

    def get_cached(self, page_id: str) -> bytes | None:
        key = self._key(page_id)
        if key is None:
            return None
        data = self.storage.read(key)
        logger.debug("Thumbnail cache %s for page %s", "hit" if data is not None else "miss", page_id)
        return data

    def generate_and_cache(self, page_id: str) -> bytes | None:
        key = self._key(page_id)
        if key is None:
            return None
        data = self.render(page_id)
        if data is None:
            return None
        self.storage.write(key, data)
        logger.debug("Cached %d-byte thumbnail for page %s", len(data), page_id)
        return data

    def invalidate(self, page_id: str) -> None:
        key = self._key(page_id)
        if key is None:
            return
        self.storage.delete(key)
        logger.debug("Invalidated thumbnail for page %s", page_id)

    def get_or_generate(self, page_id: str) -> bytes | None:
        """Serve cached bytes, generating and caching them on a miss."""
        data = self.get_cached(page_id)
        if data is None:
            data = self.generate_and_cache(page_id)
        return data
