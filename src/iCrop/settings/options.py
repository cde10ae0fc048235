"""Validated crop configuration."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import ValidationError

from ..config import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_CROP_PERCENTAGE,
    DEFAULT_INVERT_ROTATION,
    DEFAULT_OVERLAY_COLOR,
    DEFAULT_PATH_DRAWER,
    DEFAULT_SCALE_RANGE,
)
from ..core.shapes import CropShape, is_registered, registered_shapes, shape_name
from ..errors import InvalidConfigurationError
from ..utils.jsonio import read_json, write_json
from .schema import merge_with_defaults, validate_options


@dataclass(frozen=True)
class CropOptions:
    """Options describing the crop hole and its presentation.

    ``path_drawer`` is either the name of a built-in border painter
    (``"dotted"``, ``"solid"`` or ``"none"``) or a callable receiving a
    ``QPainter`` and the crop ``QPainterPath``.
    """

    shape: CropShape | str = CropShape.CIRCLE
    crop_percentage: float = DEFAULT_CROP_PERCENTAGE
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    background_color: str = DEFAULT_BACKGROUND_COLOR
    overlay_color: str = DEFAULT_OVERLAY_COLOR
    path_drawer: str | Callable[..., None] = DEFAULT_PATH_DRAWER
    scale_range: tuple[float, float] = DEFAULT_SCALE_RANGE
    target_size: tuple[int, int] | None = None
    invert_rotation: bool = DEFAULT_INVERT_ROTATION

    def __post_init__(self) -> None:
        payload = self._schema_payload()
        try:
            validate_options(payload)
        except ValidationError as exc:
            raise InvalidConfigurationError(exc.message) from exc
        if not is_registered(self.shape):
            raise InvalidConfigurationError(
                f"Unknown crop shape: {shape_name(self.shape)!r}; "
                f"expected one of {', '.join(registered_shapes())}"
            )
        minimum, maximum = self.scale_range
        if minimum > maximum:
            raise InvalidConfigurationError(
                f"Scale range minimum {minimum} exceeds maximum {maximum}"
            )
        if isinstance(self.shape, str) and not isinstance(self.shape, CropShape):
            try:
                object.__setattr__(self, "shape", CropShape(self.shape))
            except ValueError:
                pass
        object.__setattr__(self, "scale_range", (float(minimum), float(maximum)))
        if self.target_size is not None:
            width, height = self.target_size
            object.__setattr__(self, "target_size", (int(width), int(height)))

    def _schema_payload(self) -> dict[str, Any]:
        payload = self.as_mapping()
        if callable(self.path_drawer):
            payload.pop("path_drawer")
        return payload

    @property
    def min_scale(self) -> float:
        return self.scale_range[0]

    @property
    def max_scale(self) -> float:
        return self.scale_range[1]

    def clamp_scale(self, value: float) -> float:
        return max(self.min_scale, min(self.max_scale, float(value)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "CropOptions":
        """Build options from a JSON style mapping, filling in defaults."""

        try:
            merged = merge_with_defaults(dict(data) if data else None)
        except ValidationError as exc:
            raise InvalidConfigurationError(exc.message) from exc
        target = merged["target_size"]
        return cls(
            shape=merged["shape"],
            crop_percentage=float(merged["crop_percentage"]),
            aspect_ratio=float(merged["aspect_ratio"]),
            background_color=merged["background_color"],
            overlay_color=merged["overlay_color"],
            path_drawer=merged["path_drawer"],
            scale_range=tuple(merged["scale_range"]),
            target_size=None if target is None else tuple(target),
            invert_rotation=bool(merged["invert_rotation"]),
        )

    def as_mapping(self) -> dict[str, Any]:
        return {
            "shape": shape_name(self.shape),
            "crop_percentage": self.crop_percentage,
            "aspect_ratio": self.aspect_ratio,
            "background_color": self.background_color,
            "overlay_color": self.overlay_color,
            "path_drawer": self.path_drawer,
            "scale_range": list(self.scale_range),
            "target_size": None if self.target_size is None else list(self.target_size),
            "invert_rotation": self.invert_rotation,
        }


def load_options(path: Path, overrides: Mapping[str, Any] | None = None) -> CropOptions:
    """Load options from the JSON file at *path*, applying *overrides* on top."""

    try:
        payload = read_json(path)
    except (OSError, ValueError) as exc:
        raise InvalidConfigurationError(f"Unable to read options from {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidConfigurationError(f"Options file {path} must contain a JSON object")
    if overrides:
        payload.update(overrides)
    return CropOptions.from_mapping(payload)


def save_options(path: Path, options: CropOptions) -> None:
    """Write *options* to *path* in the format accepted by :func:`load_options`."""

    if callable(options.path_drawer):
        raise InvalidConfigurationError("Options with a custom path drawer cannot be saved")
    write_json(path, options.as_mapping())


__all__ = ["CropOptions", "load_options", "save_options"]
