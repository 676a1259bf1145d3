"""Outline generator: stroke samples → closed variable-width boundary polygon.

Two passes:

1. ``stroke_samples``: streamline the raw samples (each one is pulled toward the
   previous smoothed sample), accumulating direction vectors and running length.
2. ``outline_points``: walk the smoothed samples, offsetting left/right by a radius
   derived from pressure, thinning and the start/end tapers, then join both sides
   (plus round caps where the end is not tapered) into one closed polygon.

The outline is a pure function of ``(points, pen_style, width)``. Every input is
accepted: empty strokes give an empty outline, coincident or near-empty strokes give
a degenerate but well-defined one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from inkrender.models.stroke import Stroke
from inkrender.render.pen import FIXED_PRESSURE, StrokeOptions, stroke_options

Vec = tuple[float, float]

# Pressure change rate when simulating pressure from sample spacing.
_RATE_OF_PRESSURE_CHANGE = 0.275

# Slightly over π so rotated cap points never land exactly on the seam.
_FIXED_PI = math.pi + 0.0001

# Samples closer than this to the end (in logical units) are folded into the end.
_END_NOISE_LENGTH = 3.0

# Cap resolution: points per half-turn for start caps/corners, per 3π for end caps.
_CAP_STEPS = 13
_END_CAP_STEPS = 29

# Smallest radius a tapered sample can shrink to.
_MIN_RADIUS = 0.01

# Number of interpolated samples a two-point stroke is expanded to.
_TWO_POINT_EXPANSION = 4


def _add(a: Vec, b: Vec) -> Vec:
    return (a[0] + b[0], a[1] + b[1])


def _sub(a: Vec, b: Vec) -> Vec:
    return (a[0] - b[0], a[1] - b[1])


def _mul(a: Vec, n: float) -> Vec:
    return (a[0] * n, a[1] * n)


def _neg(a: Vec) -> Vec:
    return (-a[0], -a[1])


def _per(a: Vec) -> Vec:
    """Perpendicular (rotated 90° clockwise in y-down space)."""
    return (a[1], -a[0])


def _dot(a: Vec, b: Vec) -> float:
    return a[0] * b[0] + a[1] * b[1]


def _lerp(a: Vec, b: Vec, t: float) -> Vec:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def _dist(a: Vec, b: Vec) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def _dist2(a: Vec, b: Vec) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def _unit(a: Vec) -> Vec:
    """Unit vector; the zero vector normalises to itself."""
    length = math.hypot(a[0], a[1])
    if length == 0.0:
        return (0.0, 0.0)
    return (a[0] / length, a[1] / length)


def _rotate_around(a: Vec, center: Vec, r: float) -> Vec:
    s = math.sin(r)
    c = math.cos(r)
    px = a[0] - center[0]
    py = a[1] - center[1]
    return (px * c - py * s + center[0], px * s + py * c + center[1])


def _stroke_radius(size: float, thinning: float, pressure: float) -> float:
    return size * (0.5 - thinning * (0.5 - pressure))


def _ease_out_quad(t: float) -> float:
    return t * (2 - t)


def _ease_out_cubic(t: float) -> float:
    t -= 1
    return t * t * t + 1


@dataclass
class StrokeSample:
    """One streamlined sample along the stroke."""

    point: Vec
    pressure: float
    vector: Vec
    distance: float
    running_length: float


def _clamp_pressure(p: float) -> float:
    if not math.isfinite(p):
        return FIXED_PRESSURE
    return min(1.0, max(0.0, p))


def input_points(stroke: Stroke, options: StrokeOptions) -> list[tuple[float, float, float]]:
    """Raw ``(x, y, pressure)`` triples; pressure is fixed unless the style records it."""
    pts = []
    for p in stroke.points:
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            continue
        pressure = _clamp_pressure(p.pressure) if options.use_recorded_pressure else FIXED_PRESSURE
        pts.append((float(p.x), float(p.y), pressure))
    return pts


def stroke_samples(
    pts: list[tuple[float, float, float]],
    size: float,
    streamline: float,
) -> list[StrokeSample]:
    """Streamline raw points into samples with direction and running length."""
    if not pts:
        return []

    t = 0.15 + (1 - streamline) * 0.85

    if len(pts) == 2:
        first, last = pts
        pts = [first]
        for i in range(1, _TWO_POINT_EXPANSION + 1):
            k = i / _TWO_POINT_EXPANSION
            x, y = _lerp(first[:2], last[:2], k)
            pts.append((x, y, first[2] + (last[2] - first[2]) * k))
    elif len(pts) == 1:
        x, y, p = pts[0]
        pts = [pts[0], (x + 1, y + 1, p)]

    samples = [
        StrokeSample(
            point=(pts[0][0], pts[0][1]),
            pressure=pts[0][2],
            vector=(1.0, 1.0),
            distance=0.0,
            running_length=0.0,
        )
    ]
    reached_min_length = False
    running_length = 0.0
    prev = samples[0]
    last_index = len(pts) - 1

    for i in range(1, len(pts)):
        point = _lerp(prev.point, pts[i][:2], t)
        if point == prev.point:
            continue

        distance = _dist(point, prev.point)
        running_length += distance

        # Hold back the first samples until the stroke is at least one pen-width long
        if i < last_index and not reached_min_length:
            if running_length < size:
                continue
            reached_min_length = True

        prev = StrokeSample(
            point=point,
            pressure=pts[i][2],
            vector=_unit(_sub(prev.point, point)),
            distance=distance,
            running_length=running_length,
        )
        samples.append(prev)

    samples[0].vector = samples[1].vector if len(samples) > 1 else (0.0, 0.0)
    return samples


def _taper_length(enabled: bool, length: float | None, size: float, total: float) -> float:
    if not enabled:
        return 0.0
    if length is None:
        return max(size, total)
    return length


def _simulated_pressure(prev_pressure: float, distance: float, size: float) -> float:
    sp = min(1.0, distance / size)
    rp = min(1.0, 1.0 - sp)
    return min(1.0, prev_pressure + (rp - prev_pressure) * (sp * _RATE_OF_PRESSURE_CHANGE))


def outline_points(samples: list[StrokeSample], options: StrokeOptions) -> list[Vec]:
    """Offset the streamlined samples into a closed outline."""
    size = options.size
    if not samples or not (size > 0) or not math.isfinite(size):
        return []

    thinning = options.thinning
    total_length = samples[-1].running_length
    taper_start = _taper_length(options.start.enabled, options.start.length, size, total_length)
    taper_end = _taper_length(options.end.enabled, options.end.length, size, total_length)
    min_distance = (size * options.smoothing) ** 2

    left: list[Vec] = []
    right: list[Vec] = []

    prev_pressure = samples[0].pressure
    for s in samples[:10]:
        pressure = s.pressure
        if options.simulate_pressure:
            pressure = _simulated_pressure(prev_pressure, s.distance, size)
        prev_pressure = (prev_pressure + pressure) / 2

    radius = _stroke_radius(size, thinning, samples[-1].pressure)
    first_radius: float | None = None
    prev_vector = samples[0].vector
    pl = samples[0].point
    pr = pl
    tl = pl
    tr = pr
    prev_sharp = False
    n = len(samples)

    for i, sample in enumerate(samples):
        point = sample.point
        vector = sample.vector
        running_length = sample.running_length
        pressure = sample.pressure

        if i < n - 1 and total_length - running_length < _END_NOISE_LENGTH:
            continue

        if thinning:
            if options.simulate_pressure:
                pressure = _simulated_pressure(prev_pressure, sample.distance, size)
            radius = _stroke_radius(size, thinning, pressure)
        else:
            radius = size / 2

        if first_radius is None:
            first_radius = radius

        ts = _ease_out_quad(running_length / taper_start) if running_length < taper_start else 1.0
        remaining = total_length - running_length
        te = _ease_out_cubic(remaining / taper_end) if remaining < taper_end else 1.0
        radius = max(_MIN_RADIUS, radius * min(ts, te))

        next_vector = samples[i + 1].vector if i < n - 1 else vector
        next_dpr = _dot(vector, next_vector) if i < n - 1 else 1.0
        prev_dpr = _dot(vector, prev_vector)

        is_sharp = prev_dpr < 0 and not prev_sharp
        is_next_sharp = next_dpr < 0

        # Sharp corner: sweep a half-circle around the sample on both sides
        if is_sharp or is_next_sharp:
            offset = _mul(_per(prev_vector), radius)
            for k in range(_CAP_STEPS + 1):
                t = k / _CAP_STEPS
                tl = _rotate_around(_sub(point, offset), point, _FIXED_PI * t)
                left.append(tl)
                tr = _rotate_around(_add(point, offset), point, _FIXED_PI * -t)
                right.append(tr)
            pl = tl
            pr = tr
            if is_next_sharp:
                prev_sharp = True
            continue

        prev_sharp = False

        if i == n - 1:
            offset = _mul(_per(vector), radius)
            left.append(_sub(point, offset))
            right.append(_add(point, offset))
            continue

        offset = _mul(_per(_lerp(next_vector, vector, next_dpr)), radius)

        tl = _sub(point, offset)
        if i <= 1 or _dist2(pl, tl) > min_distance:
            left.append(tl)
            pl = tl

        tr = _add(point, offset)
        if i <= 1 or _dist2(pr, tr) > min_distance:
            right.append(tr)
            pr = tr

        prev_pressure = pressure
        prev_vector = vector

    first_point = samples[0].point
    last_point = samples[-1].point if n > 1 else _add(samples[0].point, (1.0, 1.0))

    start_cap: list[Vec] = []
    end_cap: list[Vec] = []

    if n == 1:
        if not (taper_start or taper_end):
            r = first_radius if first_radius else radius
            start = _add(first_point, _mul(_unit(_per(_sub(first_point, last_point))), -r))
            return [
                _rotate_around(start, first_point, _FIXED_PI * 2 * k / _CAP_STEPS)
                for k in range(1, _CAP_STEPS + 1)
            ]
    else:
        if taper_start:
            # Tapered starts close on the left/right seam without a cap
            start_cap = []
        elif options.start.cap and right:
            for k in range(1, _CAP_STEPS + 1):
                start_cap.append(_rotate_around(right[0], first_point, _FIXED_PI * k / _CAP_STEPS))
        elif left and right:
            corners = _sub(left[0], right[0])
            offset_a = _mul(corners, 0.5)
            offset_b = _mul(corners, 0.51)
            start_cap.extend([
                _sub(first_point, offset_a),
                _sub(first_point, offset_b),
                _add(first_point, offset_b),
                _add(first_point, offset_a),
            ])

        direction = _per(_neg(samples[-1].vector))
        if taper_end:
            end_cap.append(last_point)
        elif options.end.cap:
            start = _add(last_point, _mul(direction, radius))
            for k in range(1, _END_CAP_STEPS):
                end_cap.append(_rotate_around(start, last_point, _FIXED_PI * 3 * k / _END_CAP_STEPS))
        else:
            end_cap.extend([
                _add(last_point, _mul(direction, radius)),
                _add(last_point, _mul(direction, radius * 0.99)),
                _sub(last_point, _mul(direction, radius * 0.99)),
                _sub(last_point, _mul(direction, radius)),
            ])

    return left + end_cap + right[::-1] + start_cap


def stroke_outline(stroke: Stroke) -> NDArray[np.float64]:
    """Outline polygon for a stroke as an Nx2 array (N may be 0).

    Identical ``(points, pen_style, width)`` always yield an identical array; id,
    color and timestamp are never read.
    """
    options = stroke_options(stroke.pen_style, stroke.width)
    pts = input_points(stroke, options)
    samples = stroke_samples(pts, options.size, options.streamline)
    outline = outline_points(samples, options)
    if not outline:
        return np.empty((0, 2), dtype=np.float64)
    return np.asarray(outline, dtype=np.float64)
