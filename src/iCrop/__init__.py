"""Interactive image cropping with gesture driven affine transforms."""

from __future__ import annotations

__version__ = "0.1.0"
