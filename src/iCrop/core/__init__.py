"""
Crop transform core.

Pure transform and containment maths plus the Qt based shape and render
primitives used to produce the final crop.
"""

from .containment import ContainmentCorrector, CorrectionResult, covers_crop
from .gestures import GestureDelta, PanDelta, ScaleRotateDelta
from .renderer import crop_to_png, render_crop
from .shapes import CropShape, crop_path, register_shape
from .transform_engine import TransformEngine
from .transform_state import TransformState

__all__ = [
    "ContainmentCorrector",
    "CorrectionResult",
    "CropShape",
    "GestureDelta",
    "PanDelta",
    "ScaleRotateDelta",
    "TransformEngine",
    "TransformState",
    "covers_crop",
    "crop_path",
    "crop_to_png",
    "register_shape",
    "render_crop",
]
