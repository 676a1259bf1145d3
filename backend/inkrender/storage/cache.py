"""Storage backends for cached page images.

Entries are keyed by ``(container_id, page_id)``. Writes replace the whole entry
atomically: readers see either the previous bytes or the new bytes, never a
partially written file. Concurrent writers for the same key are last-writer-wins.
"""

from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path
from typing import NamedTuple, Protocol


class CacheKey(NamedTuple):
    container_id: str
    page_id: str


class CacheStorage(Protocol):
    def read(self, key: CacheKey) -> bytes | None:
        """Cached bytes, or None on a miss."""
        ...

    def write(self, key: CacheKey, data: bytes) -> None: ...

    def delete(self, key: CacheKey) -> None:
        """Remove an entry; no-op when absent."""
        ...


class FileCacheStorage:
    """One file per key under ``<root>/notebooks/<container>/pages/<page>/<filename>``."""

    def __init__(self, root: Path, filename: str = "thumbnail.png") -> None:
        self.root = Path(root)
        self.filename = filename

    def path_for(self, key: CacheKey) -> Path:
        return self.root / "notebooks" / key.container_id / "pages" / key.page_id / self.filename

    def read(self, key: CacheKey) -> bytes | None:
        try:
            return self.path_for(key).read_bytes()
        except FileNotFoundError:
            return None

    def write(self, key: CacheKey, data: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: CacheKey) -> None:
        self.path_for(key).unlink(missing_ok=True)


class MemoryCacheStorage:
    """Process-local cache storage."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, bytes] = {}
        self._lock = threading.Lock()

    def read(self, key: CacheKey) -> bytes | None:
        with self._lock:
            return self._entries.get(key)

    def write(self, key: CacheKey, data: bytes) -> None:
        with self._lock:
            self._entries[key] = bytes(data)

    def delete(self, key: CacheKey) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
