"""Offscreen rendering of the interactive crop view."""

from __future__ import annotations

import math

from PySide6.QtCore import QPointF
from PySide6.QtGui import QColor, QImage, QPainter

from ..core.renderer import to_qtransform
from ..core.shapes import crop_path, overlay_path
from ..core.transform_engine import TransformEngine
from .painters import resolve_path_drawer


def render_preview(image: QImage | None, engine: TransformEngine) -> QImage | None:
    """Return a viewport sized frame of the crop view.

    The frame shows the background colour, the image under the engine's
    display matrix, the overlay colour outside the crop hole and the border
    from the configured path drawer.  Returns ``None`` until an image and a
    viewport are available.
    """

    if image is None or image.isNull() or not engine.is_ready():
        return None

    options = engine.options
    view_width, view_height = engine.viewport  # type: ignore[misc]
    crop_width, crop_height = engine.crop_size()  # type: ignore[misc]
    frame = QImage(
        max(1, int(math.ceil(view_width))),
        max(1, int(math.ceil(view_height))),
        QImage.Format.Format_ARGB32_Premultiplied,
    )
    frame.fill(QColor(options.background_color))

    hole = crop_path(options.shape, crop_width, crop_height, view_width, view_height)
    painter = QPainter(frame)
    try:
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.save()
        painter.setTransform(to_qtransform(engine.display_matrix()))
        painter.drawImage(QPointF(0.0, 0.0), image)
        painter.restore()

        painter.fillPath(overlay_path(view_width, view_height, hole), QColor(options.overlay_color))
        resolve_path_drawer(options.path_drawer)(painter, hole)
    finally:
        painter.end()
    return frame


__all__ = ["render_preview"]
