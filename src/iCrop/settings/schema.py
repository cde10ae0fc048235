"""Schema helpers for crop option mappings."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_CROP_PERCENTAGE,
    DEFAULT_INVERT_ROTATION,
    DEFAULT_OVERLAY_COLOR,
    DEFAULT_PATH_DRAWER,
    DEFAULT_SCALE_RANGE,
)

_COLOR_PATTERN = "^#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"

OPTIONS_SCHEMA: dict[str, Any] = {
    "$id": "iCrop/options.schema.json",
    "type": "object",
    "properties": {
        "shape": {"type": "string", "minLength": 1},
        "crop_percentage": {
            "type": "number",
            "exclusiveMinimum": 0,
            "maximum": 1,
        },
        "aspect_ratio": {"type": "number", "exclusiveMinimum": 0},
        "background_color": {"type": "string", "pattern": _COLOR_PATTERN},
        "overlay_color": {"type": "string", "pattern": _COLOR_PATTERN},
        "path_drawer": {"type": "string", "enum": ["dotted", "solid", "none"]},
        "scale_range": {
            "type": "array",
            "items": {"type": "number", "exclusiveMinimum": 0},
            "minItems": 2,
            "maxItems": 2,
        },
        "target_size": {
            "oneOf": [
                {"type": "null"},
                {
                    "type": "array",
                    "items": {"type": "integer", "minimum": 1},
                    "minItems": 2,
                    "maxItems": 2,
                },
            ]
        },
        "invert_rotation": {"type": "boolean"},
    },
    "additionalProperties": False,
}

DEFAULT_OPTIONS: dict[str, Any] = {
    "shape": "circle",
    "crop_percentage": DEFAULT_CROP_PERCENTAGE,
    "aspect_ratio": DEFAULT_ASPECT_RATIO,
    "background_color": DEFAULT_BACKGROUND_COLOR,
    "overlay_color": DEFAULT_OVERLAY_COLOR,
    "path_drawer": DEFAULT_PATH_DRAWER,
    "scale_range": list(DEFAULT_SCALE_RANGE),
    "target_size": None,
    "invert_rotation": DEFAULT_INVERT_ROTATION,
}

_validator = Draft202012Validator(OPTIONS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_OPTIONS` and validate the result."""

    merged = deepcopy(DEFAULT_OPTIONS)
    if data:
        for key, value in data.items():
            if isinstance(value, tuple):
                value = list(value)
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_options(data: dict[str, Any]) -> None:
    """Validate *data* against the options schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_OPTIONS", "OPTIONS_SCHEMA", "merge_with_defaults", "validate_options"]
