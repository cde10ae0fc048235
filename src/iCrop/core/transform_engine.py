"""
Gesture driven affine transform of the image inside the crop canvas.

The engine owns a single :class:`TransformState` mapping image pixels to
crop canvas pixels.  The crop canvas is the full resolution output canvas
(``max(image_w, image_h)`` wide) and the crop hole covers all of it, so the
on-screen preview is just this transform scaled down to the crop hole and
offset into the viewport.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from .containment import ContainmentCorrector, CorrectionResult
from .geometry import (
    about_point,
    crop_canvas_size,
    crop_size,
    map_point,
    rotation_matrix,
    scale_matrix,
    translation_matrix,
    vector,
)
from .gestures import GestureDelta, PanDelta, ScaleRotateDelta
from .transform_state import TransformState

if TYPE_CHECKING:
    from ..settings.options import CropOptions

_LOGGER = logging.getLogger(__name__)


class TransformEngine:
    """Apply pan, zoom and rotation gestures and keep the crop covered."""

    def __init__(
        self,
        options: "CropOptions",
        corrector: ContainmentCorrector | None = None,
    ) -> None:
        self._options = options
        self._corrector = corrector or ContainmentCorrector()
        self._state = TransformState.identity()
        self._gesture_start: TransformState | None = None
        self._image_size: tuple[int, int] | None = None
        self._viewport: tuple[float, float] | None = None
        self._initial_transform_is_set = False

    # ------------------------------------------------------------------
    # Collaborator hooks
    # ------------------------------------------------------------------
    def set_image_size(self, width: int, height: int) -> None:
        """Notify the engine that the source image changed."""

        self._image_size = (int(width), int(height))
        self._initial_transform_is_set = False
        self._gesture_start = None
        self._ensure_initial_transform()

    def clear_image(self) -> None:
        self._image_size = None
        self._initial_transform_is_set = False
        self._gesture_start = None
        self._state = TransformState.identity()

    def set_viewport(self, width: float, height: float) -> None:
        """Record the on-screen area available to the crop view."""

        self._viewport = (float(width), float(height))
        self._ensure_initial_transform()

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def options(self) -> "CropOptions":
        return self._options

    @property
    def state(self) -> TransformState:
        return self._state

    @property
    def matrix(self) -> np.ndarray:
        return self._state.to_matrix()

    @property
    def image_size(self) -> tuple[int, int] | None:
        return self._image_size

    @property
    def viewport(self) -> tuple[float, float] | None:
        return self._viewport

    def is_ready(self) -> bool:
        """Return True once both a non-empty image and viewport are known."""
        if self._image_size is None or self._viewport is None:
            return False
        return min(self._image_size) > 0 and min(self._viewport) > 0.0

    def in_gesture(self) -> bool:
        return self._gesture_start is not None

    def crop_size(self) -> tuple[float, float] | None:
        """Return the on-screen crop hole size."""
        if self._viewport is None:
            return None
        return crop_size(
            self._viewport[0],
            self._viewport[1],
            self._options.crop_percentage,
            self._options.aspect_ratio,
        )

    def canvas_size(self) -> tuple[float, float] | None:
        """Return the full resolution crop canvas size."""
        if self._image_size is None:
            return None
        return crop_canvas_size(self._image_size[0], self._image_size[1], self._options.aspect_ratio)

    def display_scale(self) -> float:
        """Return the factor from crop canvas pixels to viewport pixels."""
        crop = self.crop_size()
        canvas = self.canvas_size()
        if crop is None or canvas is None or canvas[0] <= 0.0 or crop[0] <= 0.0:
            return 1.0
        return crop[0] / canvas[0]

    def crop_offset(self) -> tuple[float, float]:
        """Return the top-left corner of the crop hole inside the viewport."""
        crop = self.crop_size()
        if crop is None or self._viewport is None:
            return (0.0, 0.0)
        return (
            (self._viewport[0] - crop[0]) * 0.5,
            (self._viewport[1] - crop[1]) * 0.5,
        )

    def display_matrix(self, crop_scale_factor: float | None = None) -> np.ndarray:
        """Return the image-to-viewport matrix used to draw the live preview."""

        factor = self.display_scale() if crop_scale_factor is None else float(crop_scale_factor)
        offset_x, offset_y = self.crop_offset()
        return translation_matrix(offset_x, offset_y) @ scale_matrix(factor) @ self.matrix

    def viewport_to_canvas(self, point: tuple[float, float]) -> np.ndarray:
        offset_x, offset_y = self.crop_offset()
        factor = self.display_scale()
        return vector((point[0] - offset_x) / factor, (point[1] - offset_y) / factor)

    # ------------------------------------------------------------------
    # Pose management
    # ------------------------------------------------------------------
    def fitted_state(self) -> TransformState:
        """Return the initial pose that centres the image in the crop hole."""

        if not self.is_ready():
            return TransformState.identity()
        image_width, image_height = self._image_size  # type: ignore[misc]
        view_width, view_height = self._viewport  # type: ignore[misc]
        crop_width, crop_height = self.crop_size()  # type: ignore[misc]
        default_scale = crop_width / max(image_width, image_height)
        preferred_scale = min(view_width / image_width, view_height / image_height)
        matrix = scale_matrix(preferred_scale / default_scale) @ translation_matrix(
            -(image_width - crop_width / preferred_scale) * 0.5,
            -(image_height - crop_height / preferred_scale) * 0.5,
        )
        fitted = TransformState.from_matrix(matrix).clamped(
            self._options.min_scale, self._options.max_scale
        )
        correction = self._corrector.correct(
            fitted.to_matrix(),
            self._image_size,  # type: ignore[arg-type]
            self.canvas_size(),  # type: ignore[arg-type]
            max_scale=self._options.max_scale,
        )
        return self._corrected_state(fitted, correction)

    def reset(self) -> None:
        """Restore the fitted initial pose."""
        self._gesture_start = None
        self._state = self.fitted_state()
        self._initial_transform_is_set = self.is_ready()

    def set_pose(self, state: TransformState) -> None:
        """Replace the pose; the scale is clamped into the configured range."""
        self._state = state.clamped(self._options.min_scale, self._options.max_scale)

    def _ensure_initial_transform(self) -> None:
        if self._initial_transform_is_set or not self.is_ready():
            return
        self._state = self.fitted_state()
        self._initial_transform_is_set = True
        _LOGGER.debug("Fitted initial pose %s", self._state)

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------
    def begin_gesture(self) -> None:
        """Snapshot the pose the current scale/rotate gesture is relative to."""
        self._gesture_start = self._state

    def apply(self, delta: GestureDelta) -> None:
        """Dispatch a decoded gesture delta."""

        if isinstance(delta, PanDelta):
            self.apply_pan(delta.dx, delta.dy)
        elif isinstance(delta, ScaleRotateDelta):
            self.apply_scale_rotate(
                delta.scale,
                delta.rotation,
                delta.focal_point,
                from_gesture=delta.from_gesture,
            )
        else:
            raise TypeError(f"Unsupported gesture delta: {delta!r}")

    def apply_pan(self, dx: float, dy: float) -> None:
        """Move the image by ``(dx, dy)`` viewport pixels."""

        factor = self.display_scale()
        self._state = self._state.left_compose(translation_matrix(dx / factor, dy / factor))

    def apply_scale_rotate(
        self,
        scale: float,
        rotation: float,
        focal_point: tuple[float, float] | None = None,
        *,
        from_gesture: bool = True,
    ) -> None:
        """Scale and rotate relative to the gesture start pose.

        The update is always recomputed from the snapshot taken in
        :meth:`begin_gesture`, so repeated updates never accumulate drift.
        """

        start = self._gesture_start
        if start is None:
            start = self._state
        if from_gesture and self._options.invert_rotation:
            rotation = -rotation

        start_matrix = start.to_matrix()
        if focal_point is None:
            pivot = self._crop_centre()
        else:
            pivot = self.viewport_to_canvas(focal_point)
        image_origin = map_point(np.linalg.inv(start_matrix), pivot)

        factor = self._options.clamp_scale(start.scale * float(scale)) / start.scale
        delta = about_point(rotation_matrix(rotation) @ scale_matrix(factor), image_origin)
        self._state = start.compose(delta).clamped(self._options.min_scale, self._options.max_scale)

    def end_gesture(self) -> CorrectionResult:
        """Finish the gesture and run the one-shot containment correction."""
        self._gesture_start = None
        return self.correct()

    def correct(self) -> CorrectionResult:
        """Grow and move the image so the crop hole is fully covered."""

        if not self.is_ready():
            return CorrectionResult()
        result = self._corrector.correct(
            self.matrix,
            self._image_size,  # type: ignore[arg-type]
            self.canvas_size(),  # type: ignore[arg-type]
            self._state.angle,
            max_scale=self._options.max_scale,
        )
        if result.is_identity:
            return result
        if result.scale_limited:
            _LOGGER.warning(
                "Scale is limited to %.4f; the crop is not fully covered",
                self._options.max_scale,
            )
        self._state = self._corrected_state(self._state, result)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _crop_centre(self) -> np.ndarray:
        canvas = self.canvas_size()
        if canvas is None:
            return vector(0.0, 0.0)
        return vector(canvas[0] * 0.5, canvas[1] * 0.5)

    def _corrected_state(self, state: TransformState, result: CorrectionResult) -> TransformState:
        # The corrector already caps the scale; clamping only absorbs rounding.
        corrected = TransformState.from_matrix(result.apply_to(state.to_matrix()))
        return corrected.clamped(self._options.min_scale, self._options.max_scale)


__all__ = ["TransformEngine"]
