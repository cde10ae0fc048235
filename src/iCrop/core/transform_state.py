"""Affine pose of the image inside the crop canvas."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import numpy as np

from .geometry import rotation_matrix, scale_matrix, translation_matrix, wrap_half_turn


@dataclass(frozen=True)
class TransformState:
    """Translation, uniform scale and rotation mapping image pixels to canvas pixels.

    The matrix form is ``T(x, y) @ R(angle) @ S(scale)``.  Every transform the
    engine produces is a similarity transform, so converting between the
    matrix and this decomposed form is lossless.
    """

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0
    angle: float = 0.0

    def to_matrix(self) -> np.ndarray:
        return (
            translation_matrix(self.x, self.y)
            @ rotation_matrix(self.angle)
            @ scale_matrix(self.scale)
        )

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "TransformState":
        """Decompose a similarity *matrix* into a :class:`TransformState`."""

        a = float(matrix[0, 0])
        c = float(matrix[1, 0])
        return cls(
            x=float(matrix[0, 2]),
            y=float(matrix[1, 2]),
            scale=math.hypot(a, c),
            angle=math.atan2(c, a),
        )

    @classmethod
    def identity(cls) -> "TransformState":
        return cls()

    def compose(self, matrix: np.ndarray) -> "TransformState":
        """Return the state for ``self @ matrix`` (``matrix`` acts in image space)."""
        return TransformState.from_matrix(self.to_matrix() @ matrix)

    def left_compose(self, matrix: np.ndarray) -> "TransformState":
        """Return the state for ``matrix @ self`` (``matrix`` acts in canvas space)."""
        return TransformState.from_matrix(matrix @ self.to_matrix())

    def clamped(self, minimum: float, maximum: float) -> "TransformState":
        """Return a copy whose scale lies within ``[minimum, maximum]``."""
        scale = max(float(minimum), min(float(maximum), self.scale))
        if scale == self.scale:
            return self
        return replace(self, scale=scale)

    @property
    def rotation_mod_pi(self) -> float:
        """Rotation folded into ``[0, pi)`` for bounding-box purposes."""
        return wrap_half_turn(self.angle)

    def is_close(self, other: "TransformState", tolerance: float = 1e-6) -> bool:
        """Return True when *other* describes the same pose within *tolerance*."""
        return bool(np.allclose(self.to_matrix(), other.to_matrix(), atol=tolerance))

    def as_mapping(self) -> dict[str, float]:
        return {
            "x": float(self.x),
            "y": float(self.y),
            "scale": float(self.scale),
            "angle": float(self.angle),
        }


__all__ = ["TransformState"]
