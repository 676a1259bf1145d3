"""Shared curve-fitting step for raster and vector emission.

Both emitters consume the same ``PathCommand`` sequence, so a stroke traces the same
geometry whether it is painted into pixels or written as path data:

    M p0
    Q p[i] mid(p[i], p[i+1])     for 1 <= i <= n-2
    L p[n-1]                     when n > 1
    Z
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from PIL import ImageColor

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#000000"

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class PathCommand:
    """One drawing operation. ``op`` is ``M``, ``Q``, ``L`` or ``Z``; ``args`` are scaled coordinates."""

    op: str
    args: tuple[float, ...] = ()


def trace_outline(
    outline: NDArray[np.float64],
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> list[PathCommand]:
    """Fit quadratic curves through an outline polygon at a target scale.

    Returns no commands for an empty outline.
    """
    pts = np.asarray(outline, dtype=np.float64)
    if len(pts) == 0:
        return []

    scaled = pts * np.array([scale_x, scale_y], dtype=np.float64)
    # Midpoints of p[i], p[i+1] are taken after scaling so both emitters see identical values
    mids = (scaled[1:] + scaled[:-1]) / 2

    n = len(scaled)
    commands = [PathCommand("M", (float(scaled[0, 0]), float(scaled[0, 1])))]
    for i in range(1, n - 1):
        commands.append(PathCommand(
            "Q",
            (float(scaled[i, 0]), float(scaled[i, 1]), float(mids[i, 0]), float(mids[i, 1])),
        ))
    if n > 1:
        commands.append(PathCommand("L", (float(scaled[-1, 0]), float(scaled[-1, 1]))))
    commands.append(PathCommand("Z"))
    return commands


def quadratic_to_cubic(
    x0: float, y0: float, cx: float, cy: float, x: float, y: float
) -> tuple[float, float, float, float]:
    """Cubic control points tracing the same curve as a quadratic (degree elevation)."""
    return (
        x0 + 2 / 3 * (cx - x0),
        y0 + 2 / 3 * (cy - y0),
        x + 2 / 3 * (cx - x),
        y + 2 / 3 * (cy - y),
    )


def stroke_color(color: str | None) -> str:
    """Fill color for a stroke; empty or unset means black."""
    return color or DEFAULT_COLOR


def parse_color(color: str | None) -> RGB:
    """Parse a stroke color to RGB. Unparseable colors fall back to black."""
    value = stroke_color(color)
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        logger.warning("Unparseable stroke color %r, using %s", value, DEFAULT_COLOR)
        return (0, 0, 0)
    # Alpha, when given, is dropped: strokes are painted opaque
    return (rgb[0], rgb[1], rgb[2])
