"""Page/stroke collaborators consumed by the rendering services.

``PageSource`` is the read-only contract the services need. Two implementations:
an in-memory store (tests, embedding) and a JSON-file store over the data directory:

    <data_dir>/page-index.json                               {pageId: notebookId}
    <data_dir>/notebooks/<nb>/meta.json                      {"id", "title", ...}
    <data_dir>/notebooks/<nb>/pages/<page>/meta.json         {"id", "pageNumber", ...}
    <data_dir>/notebooks/<nb>/pages/<page>/strokes.json      [Stroke, ...]
    <data_dir>/notebooks/<nb>/pages/<page>/transcription.md  optional
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter

from inkrender.models.stroke import Stroke

logger = logging.getLogger(__name__)

_STROKES = TypeAdapter(list[Stroke])

_FRONTMATTER_RE = re.compile(r"\A---\r?\n.*?\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


class PageSource(Protocol):
    def get_strokes(self, page_id: str) -> list[Stroke] | None:
        """Strokes on a page; None means the page does not exist."""
        ...

    def get_page_owner_container(self, page_id: str) -> str | None: ...

    def get_transcription_text(self, page_id: str) -> str | None: ...

    def get_container_title(self, container_id: str) -> str | None: ...

    def list_pages(self, container_id: str) -> list[str]:
        """Page ids of a container in page-number order."""
        ...


def strip_frontmatter(text: str) -> str:
    return _FRONTMATTER_RE.sub("", text, count=1)


@dataclass
class _PageRecord:
    container_id: str
    page_number: int
    strokes: list[Stroke] = field(default_factory=list)
    transcription: str | None = None


class InMemoryPageStore:
    """Dict-backed ``PageSource``."""

    def __init__(self) -> None:
        self._containers: dict[str, str] = {}
        self._pages: dict[str, _PageRecord] = {}

    def add_container(self, container_id: str, title: str = "") -> None:
        self._containers[container_id] = title

    def add_page(
        self,
        container_id: str,
        page_id: str,
        strokes: list[Stroke] | None = None,
        transcription: str | None = None,
        page_number: int | None = None,
    ) -> None:
        self._containers.setdefault(container_id, "")
        if page_number is None:
            page_number = sum(1 for p in self._pages.values() if p.container_id == container_id) + 1
        self._pages[page_id] = _PageRecord(
            container_id=container_id,
            page_number=page_number,
            strokes=list(strokes or []),
            transcription=transcription,
        )

    def set_strokes(self, page_id: str, strokes: list[Stroke]) -> None:
        self._pages[page_id].strokes = list(strokes)

    def set_transcription(self, page_id: str, text: str | None) -> None:
        self._pages[page_id].transcription = text

    def get_strokes(self, page_id: str) -> list[Stroke] | None:
        page = self._pages.get(page_id)
        return list(page.strokes) if page else None

    def get_page_owner_container(self, page_id: str) -> str | None:
        page = self._pages.get(page_id)
        return page.container_id if page else None

    def get_transcription_text(self, page_id: str) -> str | None:
        page = self._pages.get(page_id)
        return page.transcription if page else None

    def get_container_title(self, container_id: str) -> str | None:
        return self._containers.get(container_id)

    def list_pages(self, container_id: str) -> list[str]:
        pages = [(p.page_number, pid) for pid, p in self._pages.items() if p.container_id == container_id]
        return [pid for _, pid in sorted(pages)]


def _page_number(meta: dict[str, Any]) -> float:
    """Sort key from a page's meta; missing or non-numeric page numbers sort first."""
    try:
        return float(meta.get("pageNumber") or 0)
    except (TypeError, ValueError):
        return 0.0


class FilePageStore:
    """JSON-file ``PageSource`` rooted at the data directory."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def notebook_dir(self, notebook_id: str) -> Path:
        return self.data_dir / "notebooks" / notebook_id

    def page_dir(self, notebook_id: str, page_id: str) -> Path:
        return self.notebook_dir(notebook_id) / "pages" / page_id

    def _read_json(self, path: Path) -> Any | None:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None

    def _page_index(self) -> dict[str, str]:
        return self._read_json(self.data_dir / "page-index.json") or {}

    def get_page_owner_container(self, page_id: str) -> str | None:
        return self._page_index().get(page_id)

    def get_strokes(self, page_id: str) -> list[Stroke] | None:
        notebook_id = self.get_page_owner_container(page_id)
        if not notebook_id:
            return None
        raw = self._read_json(self.page_dir(notebook_id, page_id) / "strokes.json")
        return _STROKES.validate_python(raw or [])

    def get_transcription_text(self, page_id: str) -> str | None:
        notebook_id = self.get_page_owner_container(page_id)
        if not notebook_id:
            return None
        try:
            raw = (self.page_dir(notebook_id, page_id) / "transcription.md").read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return strip_frontmatter(raw)

    def get_container_title(self, container_id: str) -> str | None:
        meta = self._read_json(self.notebook_dir(container_id) / "meta.json")
        if meta is None:
            return None
        return str(meta.get("title", ""))

    def list_pages(self, container_id: str) -> list[str]:
        pages_dir = self.notebook_dir(container_id) / "pages"
        if not pages_dir.is_dir():
            return []
        pages: list[tuple[float, str]] = []
        for entry in pages_dir.iterdir():
            if not entry.is_dir():
                continue
            meta = self._read_json(entry / "meta.json")
            if meta is None:
                continue
            pages.append((_page_number(meta), str(meta.get("id") or entry.name)))
        pages.sort()
        return [pid for _, pid in pages]
