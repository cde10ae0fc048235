"""Programmatic control surface for a crop session."""

from __future__ import annotations

import logging
from typing import Protocol

from .core.gestures import GestureDelta, PanDelta, ScaleRotateDelta
from .core.transform_state import TransformState

_LOGGER = logging.getLogger(__name__)


class CropListener(Protocol):
    """Contract implemented by whichever component owns the presentation."""

    def on_crop_requested(self, target_size: tuple[int, int] | None = None) -> bytes | None:
        """Return the encoded crop, or ``None`` while no image is loaded."""

    def on_data_changed(self, delta: GestureDelta) -> None:
        """Apply an incremental change to the pose."""

    def on_data_replaced(self, pose: TransformState | None) -> None:
        """Replace the pose; ``None`` restores the fitted initial pose."""


class CropController:
    """Drive a crop session from buttons, sliders or scripts.

    Every call is forwarded to the registered listeners through the same
    transform contract the gesture path uses.
    """

    def __init__(self) -> None:
        self._listeners: list[CropListener] = []

    def add_listener(self, listener: CropListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: CropListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listeners(self) -> tuple[CropListener, ...]:
        return tuple(self._listeners)

    # ------------------------------------------------------------------
    # Pose changes
    # ------------------------------------------------------------------
    def pan(self, dx: float, dy: float) -> None:
        """Move the image by ``(dx, dy)`` viewport pixels."""
        self._notify_changed(PanDelta(float(dx), float(dy)))

    def scale(self, factor: float) -> None:
        """Zoom by *factor* around the crop centre."""
        self._notify_changed(ScaleRotateDelta(scale=float(factor), from_gesture=False))

    def rotate(self, radians: float) -> None:
        """Rotate by *radians* around the crop centre."""
        self._notify_changed(ScaleRotateDelta(rotation=float(radians), from_gesture=False))

    def reset(self) -> None:
        """Restore the fitted initial pose."""
        self._notify_replaced(None)

    def set_pose(self, x: float, y: float, scale: float, rotation: float) -> None:
        """Replace the pose with an explicit translation, scale and rotation."""
        self._notify_replaced(TransformState(float(x), float(y), float(scale), float(rotation)))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def request_crop(self, target_size: tuple[int, int] | None = None) -> bytes | None:
        """Return the crop from the first listener, ``None`` if nothing is attached."""
        if not self._listeners:
            _LOGGER.debug("Crop requested without a listener")
            return None
        return self._listeners[0].on_crop_requested(target_size)

    def _notify_changed(self, delta: GestureDelta) -> None:
        for listener in list(self._listeners):
            listener.on_data_changed(delta)

    def _notify_replaced(self, pose: TransformState | None) -> None:
        for listener in list(self._listeners):
            listener.on_data_replaced(pose)


__all__ = ["CropController", "CropListener"]
