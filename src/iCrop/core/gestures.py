"""Decoded gesture deltas consumed by the transform engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PanDelta:
    """Pointer movement in viewport pixels since the previous update."""

    dx: float
    dy: float


@dataclass(frozen=True)
class ScaleRotateDelta:
    """Scale and rotation relative to the start of the current gesture.

    ``rotation`` is in radians.  ``focal_point`` is the gesture centroid in
    viewport coordinates; ``None`` pivots around the crop centre.  Deltas with
    ``from_gesture`` set follow the host's rotation convention and may be
    negated by the engine, programmatic deltas are already in canvas
    convention.
    """

    scale: float = 1.0
    rotation: float = 0.0
    focal_point: tuple[float, float] | None = None
    from_gesture: bool = True


GestureDelta = Union[PanDelta, ScaleRotateDelta]


__all__ = ["GestureDelta", "PanDelta", "ScaleRotateDelta"]
