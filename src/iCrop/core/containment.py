"""
Containment correction run once a gesture ends.

The crop hole must always be covered by the transformed image.  When a pan,
zoom or rotation leaves part of the hole uncovered the corrector first grows
the image until it is at least as large as the rotated crop bounds, then
moves it the shortest distance that brings the crop centre back inside the
"solution box": the set of image centres for which the image still covers the
crop bounds.

Everything is computed in crop canvas coordinates, i.e. the full resolution
canvas the final crop is rendered into.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from ..config import CORRECTION_TOLERANCE, EPSILON
from .geometry import (
    identity_matrix,
    image_corners,
    length_squared,
    map_point,
    map_points,
    normalised,
    rotated_bounding_size,
    scale_matrix,
    translation_matrix,
    vector,
    vector_from_point_to_segment,
    wrap_half_turn,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class CorrectionResult:
    """Adjustment produced by :class:`ContainmentCorrector`.

    ``adjustment`` acts in image space, so the corrected transform is
    ``matrix @ adjustment``.  ``offset`` is the corrective vector that was
    applied to the crop centre in canvas space, which an animation layer can
    interpolate towards.  ``scale_limited`` is set when the scale needed
    to cover the crop was capped, in which case the image is centred on the
    axis it cannot cover.
    """

    adjustment: np.ndarray = field(default_factory=identity_matrix)
    scale_factor: float = 1.0
    offset: tuple[float, float] = (0.0, 0.0)
    min_size: tuple[float, float] = (0.0, 0.0)
    scale_limited: bool = False

    @property
    def is_identity(self) -> bool:
        return bool(np.allclose(self.adjustment, identity_matrix(), atol=EPSILON))

    def apply_to(self, matrix: np.ndarray) -> np.ndarray:
        return matrix @ self.adjustment


@dataclass(frozen=True, eq=False)
class ImageFrame:
    """Transformed image edges measured along the image's own axes."""

    width: float
    height: float
    middle: np.ndarray
    left_right: np.ndarray
    top_bottom: np.ndarray

    @classmethod
    def measure(cls, matrix: np.ndarray, image_size: tuple[float, float]) -> "ImageFrame":
        left_top, right_top, right_bottom, left_bottom = map_points(
            matrix, image_corners(*image_size)
        )
        return cls(
            width=max(float(np.linalg.norm(right_top - left_top)), EPSILON),
            height=max(float(np.linalg.norm(right_top - right_bottom)), EPSILON),
            middle=(left_top + right_bottom) * 0.5,
            left_right=normalised(right_top - left_top),
            top_bottom=normalised(left_bottom - left_top),
        )


def solution_box(
    frame: ImageFrame, min_width: float, min_height: float
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Return the solution box corners (left-top, right-top, right-bottom, left-bottom)."""

    half_width = (max(frame.width, min_width) - min_width) * 0.5
    half_height = (max(frame.height, min_height) - min_height) * 0.5
    horizontal = frame.left_right * half_width
    vertical = frame.top_bottom * half_height
    return (
        frame.middle - horizontal - vertical,
        frame.middle + horizontal - vertical,
        frame.middle + horizontal + vertical,
        frame.middle - horizontal + vertical,
    )


class ContainmentCorrector:
    """Compute the minimal scale and translation that keep the crop covered."""

    def __init__(self, tolerance: float = CORRECTION_TOLERANCE) -> None:
        self._tolerance = float(tolerance)

    def minimum_size(
        self, crop_size: tuple[float, float], rotation: float
    ) -> tuple[float, float]:
        """Return the image extent needed to cover *crop_size* under *rotation*."""
        crop_width, crop_height = crop_size
        return rotated_bounding_size(crop_width, crop_height, wrap_half_turn(rotation))

    def correct(
        self,
        matrix: np.ndarray,
        image_size: tuple[float, float],
        crop_size: tuple[float, float],
        rotation: float | None = None,
        max_scale: float | None = None,
    ) -> CorrectionResult:
        """Return the correction for *matrix*.

        Parameters
        ----------
        matrix:
            Current image-to-canvas transform.
        image_size:
            Source image size in pixels.
        crop_size:
            Crop canvas size; the crop hole is centred in it.
        rotation:
            Accumulated rotation in radians.  Derived from *matrix* when omitted.
        max_scale:
            Upper bound for the uniform scale of the corrected matrix.  The
            solution box is built from the capped size, so the result is still
            a fixed point of the correction.
        """

        if rotation is None:
            rotation = math.atan2(float(matrix[1, 0]), float(matrix[0, 0]))
        min_width, min_height = self.minimum_size(crop_size, rotation)

        frame = ImageFrame.measure(matrix, image_size)
        adjustment = identity_matrix()
        scale_diff = max(min_width / frame.width, min_height / frame.height)
        scale_limited = False
        if max_scale is not None:
            current_scale = math.hypot(float(matrix[0, 0]), float(matrix[1, 0]))
            headroom = float(max_scale) / max(current_scale, EPSILON)
            if scale_diff > headroom:
                _LOGGER.debug(
                    "Covering the crop needs scale %.4f, capped at %.4f",
                    current_scale * scale_diff,
                    max_scale,
                )
                scale_diff = headroom
                scale_limited = True
        if scale_diff > 1.0 + EPSILON:
            _LOGGER.debug("Scaling image by %.6f to cover the crop", scale_diff)
            adjustment = scale_matrix(scale_diff)
            frame = ImageFrame.measure(matrix @ adjustment, image_size)
        else:
            scale_diff = 1.0

        corrected = matrix @ adjustment
        left_top, right_top, right_bottom, left_bottom = solution_box(
            frame, min_width, min_height
        )
        crop_middle = vector(crop_size[0] * 0.5, crop_size[1] * 0.5)
        to_top = vector_from_point_to_segment(crop_middle, left_top, right_top)
        to_bottom = vector_from_point_to_segment(crop_middle, left_bottom, right_bottom)
        to_left = vector_from_point_to_segment(crop_middle, left_top, left_bottom)
        to_right = vector_from_point_to_segment(crop_middle, right_top, right_bottom)

        offset = (0.0, 0.0)
        outside = float(np.dot(to_top, to_bottom)) > 0.0 or float(np.dot(to_left, to_right)) > 0.0
        if outside:
            shortest = min((to_top, to_bottom, to_left, to_right), key=length_squared)
            if length_squared(shortest) > self._tolerance * self._tolerance:
                target = crop_middle + shortest
                inverse = np.linalg.inv(corrected)
                middle_local = map_point(inverse, crop_middle)
                target_local = map_point(inverse, target)
                delta = middle_local - target_local
                adjustment = adjustment @ translation_matrix(delta[0], delta[1])
                offset = (float(-shortest[0]), float(-shortest[1]))
                _LOGGER.debug("Moving image by (%.3f, %.3f) canvas px", *offset)

        return CorrectionResult(
            adjustment=adjustment,
            scale_factor=float(scale_diff),
            offset=offset,
            min_size=(float(min_width), float(min_height)),
            scale_limited=scale_limited,
        )


def covers_crop(
    matrix: np.ndarray,
    image_size: tuple[float, float],
    crop_size: tuple[float, float],
    tolerance: float = 1e-6,
) -> bool:
    """Return True when the transformed image covers the rotated crop bounds."""

    rotation = math.atan2(float(matrix[1, 0]), float(matrix[0, 0]))
    min_width, min_height = rotated_bounding_size(crop_size[0], crop_size[1], rotation)
    frame = ImageFrame.measure(matrix, image_size)
    slack = tolerance * max(1.0, min_width, min_height)
    if frame.width + slack < min_width or frame.height + slack < min_height:
        return False
    offset = vector(crop_size[0] * 0.5, crop_size[1] * 0.5) - frame.middle
    along_width = abs(float(np.dot(offset, frame.left_right)))
    along_height = abs(float(np.dot(offset, frame.top_bottom)))
    return (
        along_width <= (frame.width - min_width) * 0.5 + slack
        and along_height <= (frame.height - min_height) * 0.5 + slack
    )


__all__ = ["ContainmentCorrector", "CorrectionResult", "ImageFrame", "covers_crop", "solution_box"]
