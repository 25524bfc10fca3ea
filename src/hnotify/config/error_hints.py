"""Error hints for configuration validation errors."""

from typing import Final


ERROR_HINTS: Final[dict[str, str]] = {
    "missing": "This field is required. Please add it to your configuration.",
    "extra_forbidden": "Unknown key. Check spelling against the documented keys.",
    "enum": "Check the allowed values in the documentation.",
    "int_type": "This field must be an integer (whole number).",
    "int_parsing": "This field must be an integer (whole number).",
    "float_type": "This field must be a number.",
    "time_delta_type": "Use seconds (e.g. 172800) or ISO 8601 (e.g. 'P2D', 'PT10S').",
    "time_delta_parsing": "Use seconds (e.g. 172800) or ISO 8601 (e.g. 'P2D', 'PT10S').",
    "greater_than_equal": "The value is too small. Check the minimum allowed.",
    "greater_than": "The value is too small. Check the minimum allowed.",
    "less_than_equal": "The value is too large. Check the maximum allowed.",
    "dict_type": "This field must be a mapping.",
    "value_error": "Check the value against the other policy settings.",
    "file_not_found": "The file does not exist. Check the file path.",
    "yaml_parse_error": "Invalid YAML syntax. Check for proper indentation and formatting.",
}

FIELD_HINTS: Final[dict[str, str]] = {
    "score_threshold": "Minimum story score that triggers a notification (e.g. 100).",
    "stale_age": "Age after which a low-scoring story stops being re-checked (e.g. 'P2D').",
    "retention": "Must be longer than stale_age (e.g. 'P5D').",
    "fetch_failure_policy": "Must be 'skip' or 'abort'.",
    "base_url": "Must be an http(s) URL (e.g. 'https://hacker-news.firebaseio.com/v0').",
}


def get_error_hint(error_type: str, field_name: str | None = None) -> str:
    """Get a user-friendly hint for a validation error.

    Args:
        error_type: The Pydantic error type (e.g., 'missing', 'enum').
        field_name: Optional field name for field-specific hints.

    Returns:
        A user-friendly hint string.
    """
    if field_name:
        simple_field = field_name.split(".")[-1]
        if simple_field in FIELD_HINTS:
            return FIELD_HINTS[simple_field]

    return ERROR_HINTS.get(
        error_type, "Check the configuration documentation for valid values."
    )


def format_validation_error(
    location: str,
    message: str,
    error_type: str,
    *,
    include_hint: bool = True,
) -> str:
    """Format a validation error with optional hint.

    Args:
        location: The error location (e.g., 'fetch.base_url').
        message: The original error message.
        error_type: The error type.
        include_hint: Whether to include a hint.

    Returns:
        Formatted error string.
    """
    base = f"{location}: {message}"
    if include_hint:
        hint = get_error_hint(error_type, location)
        return f"{base}\n    Hint: {hint}"
    return base
