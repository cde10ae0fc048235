"""Helpers for loading source images as ``QImage`` with a Pillow fallback."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps
from PIL.ImageQt import ImageQt
from PySide6.QtGui import QImage, QImageReader

_LOGGER = logging.getLogger(__name__)


def load_qimage(source: Path) -> Optional[QImage]:
    """Return a :class:`QImage` for *source*, or ``None`` when it cannot be decoded."""

    # Hand the path to Qt first so format specific fast paths apply; Pillow is
    # only consulted for formats the installed Qt plugins cannot read.
    reader = QImageReader(str(source))
    disable_cache = getattr(reader, "setCacheEnabled", None)
    if callable(disable_cache):
        disable_cache(False)
    reader.setAutoTransform(True)
    image = reader.read()
    if not image.isNull():
        return image
    _LOGGER.debug("Qt could not decode %s (%s); trying Pillow", source, reader.errorString())
    return _load_with_pillow(source)


def qimage_from_bytes(data: bytes) -> Optional[QImage]:
    """Return a :class:`QImage` decoded from encoded image *data*."""

    image = QImage()
    if image.loadFromData(data):
        return image
    try:
        with Image.open(BytesIO(data)) as img:
            img = ImageOps.exif_transpose(img)
            qt_image = ImageQt(img.convert("RGBA"))
    except Exception:
        _LOGGER.exception("Pillow failed to decode image bytes in qimage_from_bytes")
        return None
    return QImage(qt_image).copy()


def _load_with_pillow(source: Path) -> Optional[QImage]:
    try:
        with Image.open(source) as img:
            img = ImageOps.exif_transpose(img)
            qt_image = ImageQt(img.convert("RGBA"))
    except Exception:
        _LOGGER.exception("Pillow failed to load image from %s", source)
        return None
    return QImage(qt_image).copy()


__all__ = ["load_qimage", "qimage_from_bytes"]
