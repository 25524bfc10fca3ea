"""Default policy values for the notifier."""

from datetime import timedelta
from typing import Final


DEFAULT_SCORE_THRESHOLD: Final = 100
DEFAULT_STALE_AGE: Final = timedelta(hours=48)
DEFAULT_RETENTION: Final = timedelta(days=5)
DEFAULT_EVALUATION_INTERVAL: Final = timedelta(seconds=10)
DEFAULT_EVICTION_INTERVAL: Final = timedelta(hours=8)
DEFAULT_DEGRADED_AFTER_FAILURES: Final = 3

COMPONENT_CONFIG: Final = "config"
COMPONENT_CLI: Final = "cli"
