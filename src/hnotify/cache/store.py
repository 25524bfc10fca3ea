"""In-memory freshness cache of resolved item IDs."""

import threading
from datetime import datetime, timedelta

import structlog


logger = structlog.get_logger()


class FreshnessCache:
    """Record of items that reached a terminal decision.

    Maps item ID to the item's posted-at time as observed when it was cached.
    Presence of an ID means the item must never be evaluated or notified
    again. Entries never expire on access; only ``evict_older_than`` removes
    them.

    Every operation holds a single lock, so the evaluation thread and the
    eviction thread may call into the cache concurrently.
    """

    def __init__(self, run_id: str = "") -> None:
        """Initialize an empty cache.

        Args:
            run_id: Unique run identifier for logging.
        """
        self._entries: dict[int, datetime] = {}
        self._lock = threading.Lock()
        self._log = logger.bind(component="cache", run_id=run_id)

    def contains(self, item_id: int) -> bool:
        """Check whether an item has been resolved.

        Args:
            item_id: Item identifier.

        Returns:
            True iff an entry exists for ``item_id``.
        """
        with self._lock:
            return item_id in self._entries

    def put(self, item_id: int, posted_at: datetime) -> None:
        """Mark an item resolved, overwriting any existing entry.

        Args:
            item_id: Item identifier.
            posted_at: The item's posted-at time.
        """
        with self._lock:
            self._entries[item_id] = posted_at

    def get(self, item_id: int) -> datetime | None:
        """Get the cached posted-at time for an item, if resolved."""
        with self._lock:
            return self._entries.get(item_id)

    def evict_older_than(self, max_age: timedelta, now: datetime) -> int:
        """Remove every entry whose age has reached ``max_age``.

        An entry is removed when ``now - posted_at >= max_age``.

        Args:
            max_age: Retention horizon.
            now: Reference time.

        Returns:
            Number of entries removed.

        Raises:
            ValueError: If ``max_age`` is not positive.
        """
        if max_age <= timedelta(0):
            msg = f"max_age must be positive, got {max_age}"
            raise ValueError(msg)

        cutoff = now - max_age
        with self._lock:
            expired = [
                item_id
                for item_id, posted_at in self._entries.items()
                if posted_at <= cutoff
            ]
            for item_id in expired:
                del self._entries[item_id]
            remaining = len(self._entries)

        if expired:
            self._log.debug(
                "cache_entries_evicted",
                removed=len(expired),
                remaining=remaining,
                cutoff=cutoff.isoformat(),
            )
        return len(expired)

    def snapshot(self) -> dict[int, datetime]:
        """Return a point-in-time copy of all entries."""
        with self._lock:
            return dict(self._entries)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return item_id in self._entries
