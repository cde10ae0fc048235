"""Render the final crop at full resolution."""

from __future__ import annotations

import logging
import math

import numpy as np
from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QPointF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QTransform

from ..config import OUTPUT_FORMAT
from ..errors import RenderError
from .geometry import crop_canvas_size
from .shapes import CropShape, crop_path

_LOGGER = logging.getLogger(__name__)


def to_qtransform(matrix: np.ndarray) -> QTransform:
    """Convert a column-vector affine *matrix* into Qt's row-vector ``QTransform``."""
    return QTransform(
        float(matrix[0, 0]),
        float(matrix[1, 0]),
        float(matrix[0, 1]),
        float(matrix[1, 1]),
        float(matrix[0, 2]),
        float(matrix[1, 2]),
    )


def canvas_pixel_size(image_width: int, image_height: int, aspect_ratio: float) -> tuple[int, int]:
    """Return the integer crop canvas size for an image."""
    width, height = crop_canvas_size(image_width, image_height, aspect_ratio)
    return max(1, int(math.floor(width))), max(1, int(math.floor(height)))


def render_crop(
    image: QImage | None,
    matrix: np.ndarray,
    shape: CropShape | str,
    aspect_ratio: float,
    background_color: str | QColor,
    target_size: tuple[int, int] | None = None,
) -> QImage | None:
    """Return the cropped image, or ``None`` when no source image is loaded.

    The canvas is large enough to hold the full resolution image in any
    orientation.  It is filled with *background_color*, clipped to the crop
    shape and receives *image* under *matrix*.  With *target_size* the result
    is stretched to exactly that size.
    """

    if image is None or image.isNull():
        return None

    canvas_width, canvas_height = canvas_pixel_size(image.width(), image.height(), aspect_ratio)
    canvas = QImage(canvas_width, canvas_height, QImage.Format.Format_ARGB32_Premultiplied)
    if canvas.isNull():
        raise RenderError(f"Unable to allocate a {canvas_width}x{canvas_height} crop canvas")
    canvas.fill(QColor(background_color))

    painter = QPainter(canvas)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.setClipPath(crop_path(shape, canvas_width, canvas_height))
        painter.setTransform(to_qtransform(matrix))
        painter.drawImage(QPointF(0.0, 0.0), image)
    finally:
        painter.end()

    if target_size is not None:
        target_width, target_height = (int(value) for value in target_size)
        if target_width <= 0 or target_height <= 0:
            raise RenderError(f"Invalid target size {target_width}x{target_height}")
        canvas = canvas.scaled(
            target_width,
            target_height,
            Qt.AspectRatioMode.IgnoreAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
    return canvas


def encode_image(image: QImage, fmt: str = OUTPUT_FORMAT) -> bytes:
    """Encode *image* into an in-memory buffer using the lossless *fmt*."""
    payload = QByteArray()
    buffer = QBuffer(payload)
    if not buffer.open(QIODevice.OpenModeFlag.WriteOnly):
        raise RenderError("Unable to open the output buffer")
    try:
        if not image.save(buffer, fmt):
            raise RenderError(f"Unable to encode the crop as {fmt}")
    finally:
        buffer.close()
    return bytes(payload.data())


def crop_to_png(
    image: QImage | None,
    matrix: np.ndarray,
    shape: CropShape | str,
    aspect_ratio: float,
    background_color: str | QColor,
    target_size: tuple[int, int] | None = None,
) -> bytes | None:
    """Render the crop and return it as PNG bytes, ``None`` without a source image."""

    cropped = render_crop(image, matrix, shape, aspect_ratio, background_color, target_size)
    if cropped is None:
        _LOGGER.debug("Crop requested before an image was loaded")
        return None
    return encode_image(cropped)


__all__ = ["canvas_pixel_size", "crop_to_png", "encode_image", "render_crop", "to_qtransform"]
