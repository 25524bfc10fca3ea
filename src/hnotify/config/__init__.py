"""Configuration schema, loading and error formatting."""

from hnotify.config.error_hints import format_validation_error, get_error_hint
from hnotify.config.loader import ConfigLoader, ConfigValidationError
from hnotify.config.schemas import NotifierConfig


__all__ = [
    "ConfigLoader",
    "ConfigValidationError",
    "NotifierConfig",
    "format_validation_error",
    "get_error_hint",
]
