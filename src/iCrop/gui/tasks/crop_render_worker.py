"""Worker that renders the final crop off the gesture thread."""

from __future__ import annotations

import logging
import threading

import numpy as np
from PySide6.QtCore import QObject, QRunnable, Signal
from PySide6.QtGui import QImage

from ...core.renderer import crop_to_png
from ...core.shapes import CropShape

_LOGGER = logging.getLogger(__name__)


class CropRenderWorkerSignals(QObject):
    """Signals exposed by :class:`CropRenderWorker`.

    The signal container is kept separate from the runnable so slots run on
    the thread that owns the container, whichever pool thread renders.
    """

    cropped = Signal(bytes)
    """Emitted with the PNG encoded crop."""

    unavailable = Signal()
    """Emitted when no source image was loaded at request time."""

    failed = Signal(str)
    """Emitted if rendering or encoding fails."""


class CropRenderWorker(QRunnable):
    """Render a crop from a snapshot of the image and transform."""

    def __init__(
        self,
        image: QImage | None,
        matrix: np.ndarray,
        shape: CropShape | str,
        aspect_ratio: float,
        background_color: str,
        target_size: tuple[int, int] | None = None,
    ) -> None:
        super().__init__()
        self._image = image
        # Snapshot so later gestures cannot affect a pending render.
        self._matrix = np.array(matrix, dtype=np.float64, copy=True)
        self._shape = shape
        self._aspect_ratio = float(aspect_ratio)
        self._background_color = background_color
        self._target_size = target_size
        self._cancelled = threading.Event()
        self.signals = CropRenderWorkerSignals()
        # Callers keep the worker around to cancel it.
        self.setAutoDelete(False)

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    def cancel(self) -> None:
        """Drop the result of this request; nothing is emitted afterwards."""
        self._cancelled.set()

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def run(self) -> None:  # type: ignore[override]
        """Render, encode and report the crop."""

        if self.is_cancelled():
            return
        try:
            payload = crop_to_png(
                self._image,
                self._matrix,
                self._shape,
                self._aspect_ratio,
                self._background_color,
                self._target_size,
            )
        except Exception as exc:
            _LOGGER.exception("Crop rendering failed")
            if not self.is_cancelled():
                self.signals.failed.emit(str(exc))
            return

        if self.is_cancelled():
            return
        if payload is None:
            self.signals.unavailable.emit()
            return
        self.signals.cropped.emit(payload)


__all__ = ["CropRenderWorker", "CropRenderWorkerSignals"]
