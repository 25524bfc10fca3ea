"""Background eviction of expired cache entries."""

from datetime import UTC, datetime, timedelta

import structlog

from hnotify.cache.store import FreshnessCache
from hnotify.observability.metrics import NotifierMetrics


logger = structlog.get_logger()


class BackgroundEvictor:
    """Removes cache entries whose posted-at age reached the retention horizon.

    The evictor holds no schedule of its own; the scheduler calls ``tick`` on
    the eviction interval from a dedicated thread.
    """

    def __init__(
        self,
        cache: FreshnessCache,
        retention: timedelta,
        run_id: str,
    ) -> None:
        """Initialize the evictor.

        Args:
            cache: Shared freshness cache.
            retention: Age at which an entry is forgotten.
            run_id: Unique run identifier for logging.

        Raises:
            ValueError: If ``retention`` is not positive.
        """
        if retention <= timedelta(0):
            msg = f"retention must be positive, got {retention}"
            raise ValueError(msg)
        self._cache = cache
        self._retention = retention
        self._metrics = NotifierMetrics.get_instance()
        self._log = logger.bind(component="evictor", run_id=run_id)

    @property
    def retention(self) -> timedelta:
        """Get the retention horizon."""
        return self._retention

    def tick(self, now: datetime | None = None) -> int:
        """Run one eviction pass.

        Args:
            now: Reference time (defaults to now, UTC).

        Returns:
            Number of entries removed.
        """
        now = now or datetime.now(UTC)
        removed = self._cache.evict_older_than(self._retention, now)
        remaining = len(self._cache)
        self._metrics.record_eviction(removed, remaining)

        self._log.info(
            "cache_evicted",
            removed=removed,
            remaining=remaining,
            retention_hours=self._retention.total_seconds() / 3600,
        )
        return removed
