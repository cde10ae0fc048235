"""Tests for the pure geometry helpers."""

import math

import numpy as np
import pytest

from iCrop.core.geometry import (
    about_point,
    crop_canvas_size,
    crop_size,
    map_point,
    normalised,
    rotated_bounding_size,
    rotation_matrix,
    scale_matrix,
    translation_matrix,
    vector,
    vector_from_point_to_segment,
    wrap_half_turn,
)


def test_perpendicular_vector_to_segment_interior():
    """A point beside the segment gets the perpendicular vector."""
    result = vector_from_point_to_segment(vector(5.0, 3.0), vector(0.0, 0.0), vector(10.0, 0.0))
    np.testing.assert_allclose(result, [0.0, -3.0], atol=1e-12)


def test_vector_to_segment_end_when_projection_beyond_b():
    result = vector_from_point_to_segment(vector(13.0, 4.0), vector(0.0, 0.0), vector(10.0, 0.0))
    np.testing.assert_allclose(result, [-3.0, -4.0], atol=1e-12)


def test_vector_to_segment_start_when_projection_before_a():
    result = vector_from_point_to_segment(vector(-2.0, 1.0), vector(0.0, 0.0), vector(10.0, 0.0))
    np.testing.assert_allclose(result, [2.0, -1.0], atol=1e-12)


def test_vector_to_degenerate_segment_points_at_the_segment():
    result = vector_from_point_to_segment(vector(1.0, 1.0), vector(4.0, 5.0), vector(4.0, 5.0))
    np.testing.assert_allclose(result, [3.0, 4.0], atol=1e-12)


@pytest.mark.parametrize(
    "point",
    [(5.0, 3.0), (13.0, 4.0), (-2.0, 1.0), (7.5, -6.0), (10.0, 0.0)],
)
def test_segment_vector_is_never_longer_than_vector_to_an_endpoint(point):
    """The returned vector always lands on the segment and is the shortest one."""
    a = vector(0.0, 0.0)
    b = vector(10.0, 0.0)
    p = vector(*point)
    result = vector_from_point_to_segment(p, a, b)
    landing = p + result
    assert landing[1] == pytest.approx(0.0, abs=1e-12)
    assert 0.0 - 1e-12 <= landing[0] <= 10.0 + 1e-12
    assert np.linalg.norm(result) <= min(np.linalg.norm(a - p), np.linalg.norm(b - p)) + 1e-12


def test_wrap_half_turn_stays_in_range():
    assert wrap_half_turn(0.0) == 0.0
    assert wrap_half_turn(math.pi) == pytest.approx(0.0)
    assert wrap_half_turn(-math.pi / 4) == pytest.approx(3 * math.pi / 4)
    assert 0.0 <= wrap_half_turn(-1e-18) < math.pi


def test_rotated_bounding_size_is_symmetric_around_quarter_turn():
    """Rotating by 2pi/3 yields the same extent as pi/3."""
    assert rotated_bounding_size(300.0, 100.0, 2 * math.pi / 3) == pytest.approx(
        rotated_bounding_size(300.0, 100.0, math.pi / 3)
    )


def test_rotated_bounding_size_swaps_axes_at_quarter_turn():
    width, height = rotated_bounding_size(300.0, 100.0, math.pi / 2)
    assert width == pytest.approx(100.0)
    assert height == pytest.approx(300.0)


def test_rotated_bounding_size_of_square_at_eighth_turn():
    width, height = rotated_bounding_size(100.0, 100.0, math.pi / 4)
    assert width == pytest.approx(100.0 * math.sqrt(2.0))
    assert height == pytest.approx(100.0 * math.sqrt(2.0))


def test_crop_size_uses_the_shorter_viewport_side():
    assert crop_size(400.0, 600.0, 0.8, 2.0) == pytest.approx((320.0, 160.0))


def test_crop_canvas_size_uses_the_longer_image_side():
    assert crop_canvas_size(300.0, 1200.0, 0.5) == pytest.approx((1200.0, 2400.0))


def test_about_point_keeps_the_pivot_fixed():
    pivot = vector(40.0, -12.0)
    matrix = about_point(rotation_matrix(0.7) @ scale_matrix(2.5), pivot)
    np.testing.assert_allclose(map_point(matrix, pivot), pivot, atol=1e-9)


def test_translation_is_applied_after_linear_part():
    matrix = translation_matrix(10.0, 5.0) @ scale_matrix(2.0)
    np.testing.assert_allclose(map_point(matrix, (1.0, 1.0)), [12.0, 7.0])


def test_normalised_returns_zero_for_degenerate_vector():
    np.testing.assert_array_equal(normalised(vector(0.0, 0.0)), [0.0, 0.0])
    assert np.linalg.norm(normalised(vector(3.0, 4.0))) == pytest.approx(1.0)
