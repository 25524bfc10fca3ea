"""Health tracking across evaluation ticks."""

import threading
from enum import Enum

import structlog


logger = structlog.get_logger()


class HealthState(str, Enum):
    """Health of the evaluation loop.

    - HEALTHY: The last tick succeeded, or failures are below the threshold
    - DEGRADED: ``degraded_after`` consecutive ticks failed
    """

    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"


class HealthTracker:
    """Counts consecutive failed ticks and flips between health states.

    Transitions are logged once, when they happen, not on every tick.
    """

    def __init__(self, degraded_after: int, run_id: str) -> None:
        """Initialize the tracker.

        Args:
            degraded_after: Consecutive failures that mark the loop degraded.
            run_id: Unique run identifier for logging.
        """
        if degraded_after < 1:
            msg = f"degraded_after must be at least 1, got {degraded_after}"
            raise ValueError(msg)
        self._degraded_after = degraded_after
        self._consecutive_failures = 0
        self._state = HealthState.HEALTHY
        self._lock = threading.Lock()
        self._log = logger.bind(component="scheduler", run_id=run_id)

    @property
    def state(self) -> HealthState:
        """Get the current health state."""
        with self._lock:
            return self._state

    @property
    def consecutive_failures(self) -> int:
        """Get the current run of failed ticks."""
        with self._lock:
            return self._consecutive_failures

    def record_success(self) -> None:
        """Record a successful tick, restoring HEALTHY."""
        with self._lock:
            previous = self._state
            self._consecutive_failures = 0
            self._state = HealthState.HEALTHY

        if previous == HealthState.DEGRADED:
            self._log.info("health_recovered", state=HealthState.HEALTHY.value)

    def record_failure(self, reason: str) -> None:
        """Record a failed tick.

        Args:
            reason: Short machine-readable reason for logging.
        """
        with self._lock:
            self._consecutive_failures += 1
            failures = self._consecutive_failures
            became_degraded = (
                self._state == HealthState.HEALTHY
                and failures >= self._degraded_after
            )
            if became_degraded:
                self._state = HealthState.DEGRADED

        if became_degraded:
            self._log.error(
                "health_degraded",
                state=HealthState.DEGRADED.value,
                consecutive_failures=failures,
                reason=reason,
            )
