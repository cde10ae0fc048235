"""Crop session tying the engine, source image and renderer together."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from PySide6.QtCore import QThreadPool
from PySide6.QtGui import QImage

from .controller import CropController
from .core.containment import CorrectionResult
from .core.gestures import GestureDelta
from .core.renderer import crop_to_png, render_crop
from .core.transform_engine import TransformEngine
from .core.transform_state import TransformState
from .errors import ImageLoadError
from .gui.preview import render_preview
from .gui.tasks.crop_render_worker import CropRenderWorker
from .settings.options import CropOptions
from .utils import image_loader

_LOGGER = logging.getLogger(__name__)


class CropSession:
    """Own the crop state for one image and serve gesture and controller calls.

    The session implements the :class:`~iCrop.controller.CropListener`
    contract, so attaching it to a :class:`CropController` lets buttons and
    scripts drive the same engine as the gesture stream.
    """

    def __init__(
        self,
        options: CropOptions | None = None,
        controller: CropController | None = None,
    ) -> None:
        self._options = options or CropOptions()
        self._engine = TransformEngine(self._options)
        self._image: QImage | None = None
        self._controller = controller
        if controller is not None:
            controller.add_listener(self)

    @property
    def options(self) -> CropOptions:
        return self._options

    @property
    def engine(self) -> TransformEngine:
        return self._engine

    @property
    def image(self) -> QImage | None:
        return self._image

    @property
    def state(self) -> TransformState:
        return self._engine.state

    def close(self) -> None:
        """Detach from the controller."""
        if self._controller is not None:
            self._controller.remove_listener(self)
            self._controller = None

    # ------------------------------------------------------------------
    # Source image and layout
    # ------------------------------------------------------------------
    def set_image(self, image: QImage | None) -> None:
        """Replace the source image and refit the pose."""

        if image is None or image.isNull():
            self._image = None
            self._engine.clear_image()
            return
        self._image = image
        self._engine.set_image_size(image.width(), image.height())

    def load_image(self, path: Path) -> QImage:
        """Decode *path* and make it the source image."""

        image = image_loader.load_qimage(path)
        if image is None or image.isNull():
            raise ImageLoadError(f"Unable to decode image {path}")
        _LOGGER.debug("Loaded %s (%dx%d)", path, image.width(), image.height())
        self.set_image(image)
        return image

    def set_image_bytes(self, data: bytes) -> QImage:
        """Decode an in-memory image, such as a clipboard or upload payload."""

        image = image_loader.qimage_from_bytes(data)
        if image is None or image.isNull():
            raise ImageLoadError("Unable to decode image data")
        _LOGGER.debug("Decoded %d bytes (%dx%d)", len(data), image.width(), image.height())
        self.set_image(image)
        return image

    def set_viewport(self, width: float, height: float) -> None:
        self._engine.set_viewport(width, height)

    # ------------------------------------------------------------------
    # Gesture stream
    # ------------------------------------------------------------------
    def begin_gesture(self) -> None:
        self._engine.begin_gesture()

    def apply(self, delta: GestureDelta) -> None:
        self._engine.apply(delta)

    def end_gesture(self) -> CorrectionResult:
        return self._engine.end_gesture()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def preview(self) -> QImage | None:
        """Return the current viewport frame, ``None`` until it can be drawn."""
        return render_preview(self._image, self._engine)

    def render(self, target_size: tuple[int, int] | None = None) -> QImage | None:
        """Return the cropped image without encoding it."""
        return render_crop(
            self._image,
            self._engine.matrix,
            self._options.shape,
            self._options.aspect_ratio,
            self._options.background_color,
            self._resolve_target(target_size),
        )

    def crop(self, target_size: tuple[int, int] | None = None) -> bytes | None:
        """Return the PNG encoded crop, ``None`` while no image is loaded."""
        return crop_to_png(
            self._image,
            self._engine.matrix,
            self._options.shape,
            self._options.aspect_ratio,
            self._options.background_color,
            self._resolve_target(target_size),
        )

    def create_crop_worker(self, target_size: tuple[int, int] | None = None) -> CropRenderWorker:
        """Return a worker rendering a snapshot of the current crop."""
        return CropRenderWorker(
            self._image,
            self._engine.matrix,
            self._options.shape,
            self._options.aspect_ratio,
            self._options.background_color,
            self._resolve_target(target_size),
        )

    def crop_async(
        self,
        target_size: tuple[int, int] | None = None,
        pool: QThreadPool | None = None,
        *,
        on_cropped: Callable[[bytes], None] | None = None,
        on_unavailable: Callable[[], None] | None = None,
        on_failed: Callable[[str], None] | None = None,
    ) -> CropRenderWorker:
        """Start rendering the crop on *pool* and return the running worker.

        The callbacks are connected to ``worker.signals`` before the worker is
        queued, so a render that finishes immediately still reaches them.
        ``worker.cancel()`` discards the result.  The engine stays available
        for gestures meanwhile.
        """
        worker = self.create_crop_worker(target_size)
        if on_cropped is not None:
            worker.signals.cropped.connect(on_cropped)
        if on_unavailable is not None:
            worker.signals.unavailable.connect(on_unavailable)
        if on_failed is not None:
            worker.signals.failed.connect(on_failed)
        (pool or QThreadPool.globalInstance()).start(worker)
        return worker

    def _resolve_target(self, target_size: tuple[int, int] | None) -> tuple[int, int] | None:
        return target_size if target_size is not None else self._options.target_size

    # ------------------------------------------------------------------
    # CropListener contract
    # ------------------------------------------------------------------
    def on_crop_requested(self, target_size: tuple[int, int] | None = None) -> bytes | None:
        return self.crop(target_size)

    def on_data_changed(self, delta: GestureDelta) -> None:
        self._engine.begin_gesture()
        self._engine.apply(delta)
        self._engine.end_gesture()

    def on_data_replaced(self, pose: TransformState | None) -> None:
        if pose is None:
            self._engine.reset()
        else:
            self._engine.set_pose(pose)


__all__ = ["CropSession"]
