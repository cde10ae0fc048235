"""Default configuration values for iCrop."""

from __future__ import annotations

from typing import Final

DEFAULT_CROP_PERCENTAGE: Final[float] = 0.8
DEFAULT_ASPECT_RATIO: Final[float] = 1.0
DEFAULT_SCALE_RANGE: Final[tuple[float, float]] = (0.1, 10.0)

# Colours use Qt's ``#RRGGBB`` / ``#AARRGGBB`` notation so they can be fed to
# ``QColor`` directly.  The overlay default mirrors a half transparent black.
DEFAULT_BACKGROUND_COLOR: Final[str] = "#ffffff"
DEFAULT_OVERLAY_COLOR: Final[str] = "#80000000"
DEFAULT_PATH_DRAWER: Final[str] = "dotted"

# Gesture hosts report rotation counter-clockwise while the canvas rotates
# clockwise for positive angles, so gesture rotation is negated by default.
DEFAULT_INVERT_ROTATION: Final[bool] = True

# Lower bound used whenever a length ends up in a denominator.
EPSILON: Final[float] = 1e-9

# Corrections shorter than this (in crop canvas pixels) are treated as no-ops
# so that an already corrected transform is a fixed point.
CORRECTION_TOLERANCE: Final[float] = 1e-6

# Fallback viewport used by the CLI when the caller does not provide one.
DEFAULT_VIEWPORT: Final[tuple[int, int]] = (400, 400)

OUTPUT_FORMAT: Final[str] = "PNG"
