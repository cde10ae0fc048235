import os
from pathlib import Path

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for loader tests", exc_type=ImportError)
pytest.importorskip("PIL", reason="Pillow is required for loader tests", exc_type=ImportError)

from PIL import Image
from PySide6.QtGui import QColor, QImage
from PySide6.QtWidgets import QApplication

from iCrop.core.renderer import encode_image
from iCrop.utils.image_loader import load_qimage, qimage_from_bytes


@pytest.fixture(scope="module")
def qapp() -> QApplication:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def test_load_qimage_reads_png(qapp, tmp_path: Path) -> None:
    path = tmp_path / "sample.png"
    Image.new("RGB", (48, 24), (10, 200, 30)).save(path)

    image = load_qimage(path)

    assert image is not None
    assert (image.width(), image.height()) == (48, 24)
    assert image.pixelColor(5, 5).green() == 200


def test_load_qimage_returns_none_for_garbage(qapp, tmp_path: Path) -> None:
    path = tmp_path / "garbage.jpg"
    path.write_bytes(b"\x00\x01\x02 definitely not an image")
    assert load_qimage(path) is None


def test_qimage_from_bytes_decodes_encoded_png(qapp) -> None:
    source = QImage(16, 8, QImage.Format.Format_ARGB32)
    source.fill(QColor("#123456"))

    image = qimage_from_bytes(encode_image(source))

    assert image is not None
    assert (image.width(), image.height()) == (16, 8)
    assert qimage_from_bytes(b"nope") is None
