"""
Pure geometry helpers shared by the transform engine and containment logic.

All matrices are 3x3 homogeneous affine matrices using the column-vector
convention (``p' = M @ p``) and all points are ``numpy`` arrays of shape
``(2,)``.  Nothing in this module depends on Qt.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

import numpy as np

from ..config import EPSILON


def vector(x: float, y: float) -> np.ndarray:
    """Return a 2D float vector."""
    return np.array([float(x), float(y)], dtype=np.float64)


def identity_matrix() -> np.ndarray:
    return np.identity(3, dtype=np.float64)


def translation_matrix(dx: float, dy: float) -> np.ndarray:
    """Return the matrix translating by ``(dx, dy)``."""
    matrix = identity_matrix()
    matrix[0, 2] = float(dx)
    matrix[1, 2] = float(dy)
    return matrix


def scale_matrix(factor: float) -> np.ndarray:
    """Return the matrix scaling uniformly about the origin."""
    matrix = identity_matrix()
    matrix[0, 0] = float(factor)
    matrix[1, 1] = float(factor)
    return matrix


def rotation_matrix(angle: float) -> np.ndarray:
    """Return the matrix rotating by *angle* radians about the origin."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return np.array(
        [
            [cos_a, -sin_a, 0.0],
            [sin_a, cos_a, 0.0],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def about_point(matrix: np.ndarray, pivot: Sequence[float]) -> np.ndarray:
    """Conjugate *matrix* so that it keeps *pivot* fixed."""
    px, py = float(pivot[0]), float(pivot[1])
    return translation_matrix(px, py) @ matrix @ translation_matrix(-px, -py)


def map_point(matrix: np.ndarray, point: Sequence[float]) -> np.ndarray:
    """Apply *matrix* to a single 2D point."""
    homogeneous = np.array([float(point[0]), float(point[1]), 1.0], dtype=np.float64)
    mapped = matrix @ homogeneous
    return mapped[:2]


def map_points(matrix: np.ndarray, points: Iterable[Sequence[float]]) -> list[np.ndarray]:
    return [map_point(matrix, point) for point in points]


def normalised(vec: np.ndarray) -> np.ndarray:
    """Return *vec* scaled to unit length, or a zero vector when degenerate."""
    length = float(np.linalg.norm(vec))
    if length < EPSILON:
        return np.zeros(2, dtype=np.float64)
    return vec / length


def length_squared(vec: np.ndarray) -> float:
    return float(np.dot(vec, vec))


def vector_from_point_to_segment(
    point: np.ndarray, segment_a: np.ndarray, segment_b: np.ndarray
) -> np.ndarray:
    """Return the shortest vector from *point* to the closed segment ``[a, b]``.

    When the projection of *point* lies beyond ``b`` the vector to ``b`` is
    returned, beyond ``a`` the vector to ``a``, otherwise the perpendicular
    vector onto the segment.
    """

    ba = segment_a - segment_b
    bp = point - segment_b
    ab = segment_b - segment_a
    ap = point - segment_a
    if float(np.dot(ba, bp)) < 0.0:
        return -bp
    if float(np.dot(ab, ap)) < 0.0:
        return -ap

    segment_length = float(np.linalg.norm(ab))
    pa = segment_a - point
    if segment_length < EPSILON:
        return pa
    direction = ab / segment_length
    return pa - direction * float(np.dot(pa, direction))


def wrap_half_turn(angle: float) -> float:
    """Return *angle* wrapped into ``[0, pi)``.

    A half turn leaves the extent of a centred rectangle unchanged, which is
    all the containment maths needs.
    """
    wrapped = float(angle) % math.pi
    # ``%`` can round up to exactly pi for tiny negative inputs.
    return 0.0 if wrapped >= math.pi else wrapped


def rotated_bounding_size(width: float, height: float, angle: float) -> tuple[float, float]:
    """Return the axis-aligned extent of a ``width`` x ``height`` box rotated by *angle*."""

    theta = wrap_half_turn(angle)
    if theta >= math.pi / 2.0:
        theta = math.pi - theta
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return (
        width * cos_t + height * sin_t,
        height * cos_t + width * sin_t,
    )


def crop_size(
    viewport_width: float,
    viewport_height: float,
    crop_percentage: float,
    aspect_ratio: float,
) -> tuple[float, float]:
    """Return the on-screen crop hole size for the given viewport."""
    crop_width = min(float(viewport_width), float(viewport_height)) * float(crop_percentage)
    return crop_width, crop_width / float(aspect_ratio)


def crop_canvas_size(image_width: float, image_height: float, aspect_ratio: float) -> tuple[float, float]:
    """Return the full resolution canvas the final crop is rendered into."""
    canvas_width = float(max(image_width, image_height))
    return canvas_width, canvas_width / float(aspect_ratio)


def image_corners(width: float, height: float) -> list[np.ndarray]:
    """Return the image corners ordered left-top, right-top, right-bottom, left-bottom."""
    return [
        vector(0.0, 0.0),
        vector(width, 0.0),
        vector(width, height),
        vector(0.0, height),
    ]


__all__ = [
    "about_point",
    "crop_canvas_size",
    "crop_size",
    "identity_matrix",
    "image_corners",
    "length_squared",
    "map_point",
    "map_points",
    "normalised",
    "rotated_bounding_size",
    "rotation_matrix",
    "scale_matrix",
    "translation_matrix",
    "vector",
    "vector_from_point_to_segment",
    "wrap_half_turn",
]
