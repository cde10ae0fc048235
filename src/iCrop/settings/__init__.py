from .options import CropOptions, load_options, save_options
from .schema import DEFAULT_OPTIONS, OPTIONS_SCHEMA

__all__ = ["CropOptions", "DEFAULT_OPTIONS", "OPTIONS_SCHEMA", "load_options", "save_options"]
