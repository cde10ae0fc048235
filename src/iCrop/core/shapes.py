"""Crop hole shapes expressed as Qt painter paths."""

from __future__ import annotations

import enum
from collections.abc import Callable

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QPainterPath


class CropShape(str, enum.Enum):
    """Built-in crop hole shapes."""

    CIRCLE = "circle"
    RECTANGLE = "rectangle"


PathBuilder = Callable[[QRectF], QPainterPath]
"""Build the hole path for the crop rectangle it receives."""


def _circle_path(rect: QRectF) -> QPainterPath:
    diameter = min(rect.width(), rect.height())
    circle = QRectF(0.0, 0.0, diameter, diameter)
    circle.moveCenter(rect.center())
    path = QPainterPath()
    path.addEllipse(circle)
    return path


def _rectangle_path(rect: QRectF) -> QPainterPath:
    path = QPainterPath()
    path.addRect(rect)
    return path


_PATH_BUILDERS: dict[str, PathBuilder] = {
    CropShape.CIRCLE.value: _circle_path,
    CropShape.RECTANGLE.value: _rectangle_path,
}


def shape_name(shape: CropShape | str) -> str:
    return shape.value if isinstance(shape, CropShape) else str(shape)


def register_shape(name: str, builder: PathBuilder) -> None:
    """Register *builder* so that ``crop_path(name, ...)`` can draw a new shape."""
    _PATH_BUILDERS[str(name)] = builder


def is_registered(shape: CropShape | str) -> bool:
    return shape_name(shape) in _PATH_BUILDERS


def registered_shapes() -> list[str]:
    return sorted(_PATH_BUILDERS)


def crop_rect(
    crop_width: float,
    crop_height: float,
    bounds_width: float | None = None,
    bounds_height: float | None = None,
) -> QRectF:
    """Return the crop rectangle centred inside the bounds."""
    width = float(crop_width if bounds_width is None else bounds_width)
    height = float(crop_height if bounds_height is None else bounds_height)
    rect = QRectF(0.0, 0.0, float(crop_width), float(crop_height))
    rect.moveCenter(QPointF(width / 2.0, height / 2.0))
    return rect


def crop_path(
    shape: CropShape | str,
    crop_width: float,
    crop_height: float,
    bounds_width: float | None = None,
    bounds_height: float | None = None,
) -> QPainterPath:
    """Return the crop hole for *shape* centred in ``bounds_width`` x ``bounds_height``.

    The bounds default to the crop size itself, which is what the final crop
    renderer uses.  The preview passes the viewport size instead.
    """

    try:
        builder = _PATH_BUILDERS[shape_name(shape)]
    except KeyError:
        raise ValueError(
            f"Unknown crop shape: {shape!r}; expected one of {', '.join(registered_shapes())}"
        ) from None
    return builder(crop_rect(crop_width, crop_height, bounds_width, bounds_height))


def overlay_path(bounds_width: float, bounds_height: float, hole: QPainterPath) -> QPainterPath:
    """Return the area of the bounds outside *hole*, used to dim the preview."""
    outer = QPainterPath()
    outer.addRect(QRectF(0.0, 0.0, float(bounds_width), float(bounds_height)))
    return outer.subtracted(hole)


__all__ = [
    "CropShape",
    "PathBuilder",
    "crop_path",
    "crop_rect",
    "is_registered",
    "overlay_path",
    "register_shape",
    "registered_shapes",
    "shape_name",
]
