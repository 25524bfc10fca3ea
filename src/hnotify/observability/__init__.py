"""Observability module for logging and metrics."""

from hnotify.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    parse_level,
)
from hnotify.observability.metrics import NotifierMetrics


__all__ = [
    "NotifierMetrics",
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "parse_level",
]
