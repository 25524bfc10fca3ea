"""Metrics collection for the evaluation and eviction loops."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock


# Module-level singleton state (proper pattern for thread-safe singleton)
_metrics_instance: "NotifierMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class NotifierMetrics:
    """Thread-safe metrics for the notifier.

    The evaluation loop and the eviction loop run on separate threads and
    both record here, so every mutation happens under the instance lock.
    Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    # Per-decision item counts (decision value -> count)
    decisions_total: Counter[str] = field(default_factory=Counter)

    passes_total: int = 0
    passes_aborted_total: int = 0
    item_fetch_failures_total: int = 0
    ranked_fetch_failures_total: int = 0
    notifications_total: int = 0
    sink_failures_total: int = 0

    evictions_total: int = 0
    eviction_runs_total: int = 0

    cache_size: int = 0
    last_pass_duration_ms: float = 0.0

    @classmethod
    def get_instance(cls) -> "NotifierMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared NotifierMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_pass(
        self,
        decisions: Counter[str],
        duration_ms: float,
        aborted: bool,
        cache_size: int,
    ) -> None:
        """Record a completed evaluation pass.

        Args:
            decisions: Count of items per decision in this pass.
            duration_ms: Pass duration in milliseconds.
            aborted: Whether the pass stopped early.
            cache_size: Cache size after the pass.
        """
        with self._lock:
            self.passes_total += 1
            if aborted:
                self.passes_aborted_total += 1
            self.decisions_total.update(decisions)
            self.last_pass_duration_ms = duration_ms
            self.cache_size = cache_size

    def record_item_fetch_failure(self) -> None:
        """Record a failed item detail fetch."""
        with self._lock:
            self.item_fetch_failures_total += 1

    def record_ranked_fetch_failure(self) -> None:
        """Record a failed ranked list fetch."""
        with self._lock:
            self.ranked_fetch_failures_total += 1

    def record_notifications(self, count: int) -> None:
        """Record items handed to the sink.

        Args:
            count: Number of items delivered.
        """
        with self._lock:
            self.notifications_total += count

    def record_sink_failure(self) -> None:
        """Record a sink that raised during delivery."""
        with self._lock:
            self.sink_failures_total += 1

    def record_eviction(self, removed: int, cache_size: int) -> None:
        """Record an eviction run.

        Args:
            removed: Entries removed in this run.
            cache_size: Cache size after the run.
        """
        with self._lock:
            self.eviction_runs_total += 1
            self.evictions_total += removed
            self.cache_size = cache_size

    def to_prometheus_format(self) -> str:
        """Export metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string.
        """
        lines: list[str] = []
        with self._lock:
            lines.append("# HELP hnotify_decisions_total Items evaluated by decision")
            lines.append("# TYPE hnotify_decisions_total counter")
            for decision, count in sorted(self.decisions_total.items()):
                lines.append(f'hnotify_decisions_total{{decision="{decision}"}} {count}')

            counters = {
                "hnotify_passes_total": self.passes_total,
                "hnotify_passes_aborted_total": self.passes_aborted_total,
                "hnotify_item_fetch_failures_total": self.item_fetch_failures_total,
                "hnotify_ranked_fetch_failures_total": self.ranked_fetch_failures_total,
                "hnotify_notifications_total": self.notifications_total,
                "hnotify_sink_failures_total": self.sink_failures_total,
                "hnotify_evictions_total": self.evictions_total,
                "hnotify_eviction_runs_total": self.eviction_runs_total,
            }
            for name, value in counters.items():
                lines.append(f"# TYPE {name} counter")
                lines.append(f"{name} {value}")

            lines.append("# TYPE hnotify_cache_size gauge")
            lines.append(f"hnotify_cache_size {self.cache_size}")
            lines.append("# TYPE hnotify_last_pass_duration_ms gauge")
            lines.append(f"hnotify_last_pass_duration_ms {self.last_pass_duration_ms:.2f}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Export metrics as dictionary.

        Returns:
            Dictionary representation of all metrics.
        """
        with self._lock:
            return {
                "decisions_total": dict(self.decisions_total),
                "passes_total": self.passes_total,
                "passes_aborted_total": self.passes_aborted_total,
                "item_fetch_failures_total": self.item_fetch_failures_total,
                "ranked_fetch_failures_total": self.ranked_fetch_failures_total,
                "notifications_total": self.notifications_total,
                "sink_failures_total": self.sink_failures_total,
                "evictions_total": self.evictions_total,
                "eviction_runs_total": self.eviction_runs_total,
                "cache_size": self.cache_size,
                "last_pass_duration_ms": self.last_pass_duration_ms,
            }
