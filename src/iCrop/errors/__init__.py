"""Custom exception hierarchy for iCrop."""

from __future__ import annotations


class ICropError(Exception):
    """Base class for all custom errors raised by iCrop."""


class InvalidConfigurationError(ICropError):
    """Raised when crop options fail validation.

    Options are validated eagerly when they are built so a bad aspect ratio or
    crop percentage never reaches the transform engine.
    """


class RenderError(ICropError):
    """Raised when the raster primitives fail to produce the cropped image."""


class ImageLoadError(ICropError):
    """Raised when a source image cannot be decoded."""


__all__ = [
    "ICropError",
    "ImageLoadError",
    "InvalidConfigurationError",
    "RenderError",
]
