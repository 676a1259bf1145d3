"""Stroke data model.

Strokes are authored in a fixed logical page space of 1404×1872 units regardless of
the output target. Only ``points``, ``pen_style`` and ``width`` affect geometry.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Logical page space, matching the client's page coordinate system.
PAGE_WIDTH = 1404
PAGE_HEIGHT = 1872


class PenStyle(str, Enum):
    PRESSURE = "pressure"
    UNIFORM = "uniform"
    BALLPOINT = "ballpoint"


class StrokePoint(BaseModel):
    x: float
    y: float
    pressure: float = 0.5


class Stroke(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = ""
    points: list[StrokePoint] = Field(default_factory=list)
    color: str = ""
    width: float = Field(default=3.0, gt=0)
    pen_style: PenStyle = Field(default=PenStyle.PRESSURE, alias="penStyle")
    created_at: str = Field(default="", alias="createdAt")
