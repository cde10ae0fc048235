import os

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for preview tests", exc_type=ImportError)
pytest.importorskip("PySide6.QtWidgets", reason="Qt widgets not available", exc_type=ImportError)

from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPainterPath
from PySide6.QtWidgets import QApplication

from iCrop.core.transform_engine import TransformEngine
from iCrop.gui.painters import (
    dotted_path_drawer,
    no_path_drawer,
    resolve_path_drawer,
    solid_path_drawer,
)
from iCrop.gui.preview import render_preview
from iCrop.settings.options import CropOptions


@pytest.fixture(scope="module")
def qapp() -> QApplication:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def _solid_image(width: int, height: int, color: str) -> QImage:
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(QColor(color))
    return image


def test_resolve_path_drawer_by_name_and_callable():
    assert resolve_path_drawer("solid") is solid_path_drawer
    assert resolve_path_drawer("dotted") is dotted_path_drawer
    assert resolve_path_drawer("none") is no_path_drawer
    custom = lambda painter, path: None  # noqa: E731
    assert resolve_path_drawer(custom) is custom
    with pytest.raises(ValueError):
        resolve_path_drawer("wavy")


def test_solid_drawer_strokes_the_path(qapp):
    canvas = _solid_image(50, 50, "#000000")
    path = QPainterPath()
    path.addRect(QRectF(10.0, 10.0, 30.0, 30.0))
    painter = QPainter(canvas)
    solid_path_drawer(painter, path, color=QColor(Qt.GlobalColor.white), width=2.0)
    painter.end()
    assert canvas.pixelColor(10, 25).red() > 0
    assert canvas.pixelColor(25, 25).red() == 0


def test_preview_is_unavailable_without_viewport(qapp):
    engine = TransformEngine(CropOptions())
    engine.set_image_size(100, 100)
    assert render_preview(_solid_image(100, 100, "#cc0000"), engine) is None
    assert render_preview(None, engine) is None


def test_preview_dims_outside_the_hole(qapp):
    engine = TransformEngine(CropOptions(shape="rectangle", path_drawer="none"))
    engine.set_image_size(1000, 1000)
    engine.set_viewport(400.0, 400.0)
    frame = render_preview(_solid_image(1000, 1000, "#ff0000"), engine)

    assert frame is not None
    assert (frame.width(), frame.height()) == (400, 400)
    inside = frame.pixelColor(200, 200)
    outside = frame.pixelColor(5, 5)
    assert inside.red() == 255
    assert 0 < outside.red() < 200
