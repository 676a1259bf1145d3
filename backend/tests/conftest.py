"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from inkrender.config import Settings
from inkrender.models.stroke import PenStyle, Stroke, StrokePoint
from inkrender.storage.pages import InMemoryPageStore

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
PDF_MAGIC = b"%PDF-"

# Diagonal stroke with a pressure swell in the middle
DIAGONAL_POINTS = [(0, 0, 0.2), (25, 25, 0.5), (50, 50, 0.8), (75, 75, 0.5), (100, 100, 0.2)]

STROKE_COLORS = ["#000000", "#e53935", "#1e88e5", "#43a047", "#fb8c00"]


def make_stroke(
    points: list[tuple[float, float, float]] | None = None,
    pen_style: PenStyle | str = PenStyle.PRESSURE,
    width: float = 3.0,
    color: str = "",
    stroke_id: str = "s1",
) -> Stroke:
    pts = DIAGONAL_POINTS if points is None else points
    return Stroke(
        id=stroke_id,
        points=[StrokePoint(x=x, y=y, pressure=p) for x, y, p in pts],
        color=color,
        width=width,
        pen_style=pen_style,
        created_at="2026-01-01T00:00:00Z",
    )


def wavy_points(x0: float, y0: float, length: float = 600, n: int = 40) -> list[tuple[float, float, float]]:
    """A long left-to-right wave with varying pressure."""
    pts = []
    for i in range(n):
        t = i / (n - 1)
        y = y0 + 40 * ((i % 8) - 4) / 4
        pts.append((x0 + t * length, y, 0.3 + 0.5 * t))
    return pts


def mixed_strokes(count: int = 10) -> list[Stroke]:
    return [
        make_stroke(
            wavy_points(100, 150 + i * 150),
            pen_style=list(PenStyle)[i % 3],
            width=8.0,
            color=STROKE_COLORS[i % len(STROKE_COLORS)],
            stroke_id=f"s{i}",
        )
        for i in range(count)
    ]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def page_store() -> InMemoryPageStore:
    store = InMemoryPageStore()
    store.add_container("nb1", title="Field Notes: 2026/Q1")
    store.add_page("nb1", "blank")
    store.add_page("nb1", "inked", strokes=mixed_strokes())
    store.add_page("nb1", "diagonal", strokes=[make_stroke(width=6.0)], transcription="hello ink")
    return store


def write_file_store(data_dir: Path, notebooks: dict[str, dict]) -> None:
    """Lay out the JSON page store on disk.

    ``notebooks`` maps notebook id → {"title": str, "pages": [{"id", "strokes", "transcription"?}]}.
    """
    index: dict[str, str] = {}
    for nb_id, nb in notebooks.items():
        nb_dir = data_dir / "notebooks" / nb_id
        nb_dir.mkdir(parents=True, exist_ok=True)
        (nb_dir / "meta.json").write_text(json.dumps({"id": nb_id, "title": nb["title"]}))
        for number, page in enumerate(nb["pages"], start=1):
            page_dir = nb_dir / "pages" / page["id"]
            page_dir.mkdir(parents=True, exist_ok=True)
            meta = {"id": page["id"], "notebookId": nb_id, "pageNumber": page.get("pageNumber", number)}
            (page_dir / "meta.json").write_text(json.dumps(meta))
            strokes = [s.model_dump(by_alias=True, mode="json") for s in page.get("strokes", [])]
            (page_dir / "strokes.json").write_text(json.dumps(strokes))
            if "transcription" in page:
                (page_dir / "transcription.md").write_text(page["transcription"])
            index[page["id"]] = nb_id
    (data_dir / "page-index.json").write_text(json.dumps(index))
