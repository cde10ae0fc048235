"""Border painters drawn on top of the crop hole in the live preview."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QPainter, QPainterPath, QPen

PathDrawer = Callable[[QPainter, QPainterPath], None]
"""Callable drawing a decorative border along the crop path."""


def solid_path_drawer(
    painter: QPainter,
    path: QPainterPath,
    *,
    color: QColor | None = None,
    width: float = 2.0,
) -> None:
    """Stroke *path* with a solid line."""
    pen = QPen(color or QColor(Qt.GlobalColor.white))
    pen.setWidthF(width)
    painter.save()
    painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawPath(path)
    painter.restore()


def dotted_path_drawer(
    painter: QPainter,
    path: QPainterPath,
    *,
    color: QColor | None = None,
    width: float = 2.0,
    dash: float = 5.0,
    gap: float = 5.0,
) -> None:
    """Stroke *path* with evenly spaced dashes."""
    pen = QPen(color or QColor(Qt.GlobalColor.white))
    pen.setWidthF(width)
    # Dash pattern entries are expressed in units of the pen width.
    pen.setDashPattern([dash / width, gap / width])
    pen.setCapStyle(Qt.PenCapStyle.FlatCap)
    painter.save()
    painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawPath(path)
    painter.restore()


def no_path_drawer(painter: QPainter, path: QPainterPath) -> None:
    """Draw nothing."""


PATH_DRAWERS: dict[str, PathDrawer] = {
    "dotted": dotted_path_drawer,
    "solid": solid_path_drawer,
    "none": no_path_drawer,
}


def resolve_path_drawer(drawer: str | PathDrawer) -> PathDrawer:
    """Return the drawer registered as *drawer*, or *drawer* itself when callable."""
    if callable(drawer):
        return drawer
    try:
        return PATH_DRAWERS[drawer]
    except KeyError:
        raise ValueError(f"Unknown path drawer: {drawer!r}") from None


__all__ = [
    "PATH_DRAWERS",
    "PathDrawer",
    "dotted_path_drawer",
    "no_path_drawer",
    "resolve_path_drawer",
    "solid_path_drawer",
]
