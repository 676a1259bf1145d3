"""Tests for the outline generator."""

from __future__ import annotations

import numpy as np
import pytest

from tests.conftest import DIAGONAL_POINTS, make_stroke, wavy_points

from inkrender.models.stroke import PenStyle
from inkrender.render.outline import stroke_outline, stroke_samples
from inkrender.render.pen import FIXED_PRESSURE, stroke_options


def test_diagonal_pressure_stroke_outline_is_non_empty():
    outline = stroke_outline(make_stroke(DIAGONAL_POINTS, PenStyle.PRESSURE, width=3))
    assert outline.shape[1] == 2
    assert len(outline) > 3
    assert np.all(np.isfinite(outline))


def test_outline_is_deterministic():
    a = stroke_outline(make_stroke(wavy_points(0, 0)))
    b = stroke_outline(make_stroke(wavy_points(0, 0)))
    assert a.tobytes() == b.tobytes()


def test_id_color_and_timestamp_do_not_affect_geometry():
    a = make_stroke(color="#ff0000", stroke_id="a")
    b = make_stroke(color="", stroke_id="b").model_copy(update={"created_at": "1999-12-31"})
    assert stroke_outline(a).tobytes() == stroke_outline(b).tobytes()


def test_pressure_and_uniform_styles_differ():
    pts = wavy_points(0, 0)
    pressure = stroke_outline(make_stroke(pts, PenStyle.PRESSURE, width=6))
    uniform = stroke_outline(make_stroke(pts, PenStyle.UNIFORM, width=6))
    assert pressure.shape != uniform.shape or not np.array_equal(pressure, uniform)


def test_uniform_ignores_pressure():
    light = [(x, y, 0.1) for x, y, _ in wavy_points(0, 0)]
    heavy = [(x, y, 0.9) for x, y, _ in wavy_points(0, 0)]
    a = stroke_outline(make_stroke(light, PenStyle.UNIFORM))
    b = stroke_outline(make_stroke(heavy, PenStyle.UNIFORM))
    assert np.array_equal(a, b)


def test_pressure_style_follows_recorded_pressure():
    light = [(x, y, 0.1) for x, y, _ in wavy_points(0, 0)]
    heavy = [(x, y, 0.9) for x, y, _ in wavy_points(0, 0)]
    a = stroke_outline(make_stroke(light, PenStyle.PRESSURE, width=10))
    b = stroke_outline(make_stroke(heavy, PenStyle.PRESSURE, width=10))
    assert a.shape != b.shape or not np.array_equal(a, b)


def test_ballpoint_outline_differs_from_uniform():
    pts = wavy_points(0, 0)
    ballpoint = stroke_outline(make_stroke(pts, PenStyle.BALLPOINT, width=6))
    uniform = stroke_outline(make_stroke(pts, PenStyle.UNIFORM, width=6))
    assert len(ballpoint) > 0
    assert ballpoint.shape != uniform.shape or not np.array_equal(ballpoint, uniform)


def test_uniform_outline_stays_within_half_width_plus_caps():
    pts = [(x, 500.0, 0.5) for x in range(0, 200, 5)]
    outline = stroke_outline(make_stroke(pts, PenStyle.UNIFORM, width=10))
    assert np.all(np.abs(outline[:, 1] - 500.0) <= 5.0 + 1e-6)


def test_zero_points_gives_empty_outline():
    outline = stroke_outline(make_stroke([]))
    assert outline.shape == (0, 2)


@pytest.mark.parametrize("style", list(PenStyle))
def test_single_point_gives_well_defined_outline(style):
    outline = stroke_outline(make_stroke([(10, 10, 0.5)], style, width=4))
    assert np.all(np.isfinite(outline))


@pytest.mark.parametrize("style", list(PenStyle))
def test_two_points_gives_small_shape(style):
    outline = stroke_outline(make_stroke([(10, 10, 0.5), (30, 10, 0.5)], style, width=4))
    assert len(outline) >= 2
    assert np.all(np.isfinite(outline))


def test_uniform_single_point_is_a_small_round_shape():
    outline = stroke_outline(make_stroke([(10, 10, 0.5)], PenStyle.UNIFORM, width=4))
    assert len(outline) > 3
    radii = np.hypot(outline[:, 0] - 10, outline[:, 1] - 10)
    assert np.all(radii <= 3.0)


def test_uniform_coincident_points_make_a_dot():
    outline = stroke_outline(make_stroke([(10, 10, 0.5)] * 5, PenStyle.UNIFORM, width=4))
    assert len(outline) == 13
    radii = np.hypot(outline[:, 0] - 10, outline[:, 1] - 10)
    assert np.allclose(radii, 2.0)


def test_tapered_coincident_points_collapse():
    outline = stroke_outline(make_stroke([(10, 10, 0.5)] * 5, PenStyle.PRESSURE))
    assert np.allclose(outline, [[10, 10], [10, 10]])


@pytest.mark.parametrize("style", list(PenStyle))
def test_coincident_points_do_not_raise(style):
    outline = stroke_outline(make_stroke([(5, 5, 0.5)] * 20, style))
    assert np.all(np.isfinite(outline))


@pytest.mark.parametrize("pressure", [0.0, 1.0])
def test_extreme_pressure_gives_valid_outline(pressure):
    pts = [(x, y, pressure) for x, y, _ in wavy_points(0, 0)]
    outline = stroke_outline(make_stroke(pts, PenStyle.PRESSURE))
    assert len(outline) > 3
    assert np.all(np.isfinite(outline))


@pytest.mark.parametrize("offset", [-1e6, 1e9, -1e12])
def test_large_and_negative_coordinates(offset):
    pts = [(x + offset, y + offset, p) for x, y, p in DIAGONAL_POINTS]
    outline = stroke_outline(make_stroke(pts, PenStyle.PRESSURE))
    assert len(outline) > 0
    assert np.all(np.isfinite(outline))


def test_non_finite_samples_are_dropped():
    pts = list(DIAGONAL_POINTS) + [(float("nan"), 10, 0.5)]
    assert np.array_equal(
        stroke_outline(make_stroke(pts)),
        stroke_outline(make_stroke(DIAGONAL_POINTS)),
    )


def test_two_point_stroke_is_expanded_to_five_samples():
    samples = stroke_samples([(0, 0, 0.5), (100, 0, 0.5)], size=1, streamline=0.5)
    assert len(samples) == 5
    assert samples[-1].running_length > 0


def test_streamlined_samples_have_unit_direction_vectors():
    samples = stroke_samples([(x, y, p) for x, y, p in wavy_points(0, 0)], size=3, streamline=0.5)
    for s in samples[1:]:
        assert np.isclose(np.hypot(*s.vector), 1.0)


def test_style_options():
    pressure = stroke_options(PenStyle.PRESSURE, 3)
    uniform = stroke_options("uniform", 3)
    ballpoint = stroke_options(PenStyle.BALLPOINT, 3)

    assert pressure.use_recorded_pressure and pressure.start.enabled and pressure.end.enabled
    assert uniform.thinning == 0 and not uniform.start.enabled and not uniform.end.enabled
    assert not ballpoint.start.enabled and ballpoint.end.length == 10
    assert ballpoint.simulate_pressure
    assert pressure.streamline == uniform.streamline == ballpoint.streamline
    assert FIXED_PRESSURE == 0.5
