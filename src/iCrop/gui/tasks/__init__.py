"""Background tasks and workers."""

from __future__ import annotations

from .crop_render_worker import CropRenderWorker, CropRenderWorkerSignals

__all__ = ["CropRenderWorker", "CropRenderWorkerSignals"]
