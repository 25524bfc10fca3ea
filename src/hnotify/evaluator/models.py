"""Result and policy types for the story evaluator."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from hnotify.feed.errors import ErrorRecord
from hnotify.feed.models import Item


class ItemDecision(str, Enum):
    """Outcome for one ranked ID in one pass.

    - ALREADY_RESOLVED: In the cache; not fetched
    - NOTIFIED: Score reached the threshold; notified and cached
    - STALE: Below threshold but old enough; cached without notifying
    - PENDING: Below threshold and still fresh; left for the next pass
    - FETCH_FAILED: Details could not be fetched; left for the next pass
    """

    ALREADY_RESOLVED = "already_resolved"
    NOTIFIED = "notified"
    STALE = "stale"
    PENDING = "pending"
    FETCH_FAILED = "fetch_failed"


class FetchFailurePolicy(str, Enum):
    """What a pass does when an item fetch fails.

    - ABORT: Stop the pass; remaining IDs are not evaluated
    - SKIP: Record the failure and continue with the next ID
    """

    ABORT = "abort"
    SKIP = "skip"


@dataclass
class EvaluationResult:
    """Result of one evaluation pass.

    ``notify`` keeps ranked-list order. ``decisions`` has one entry per
    distinct ID that was reached before the pass ended.
    """

    started_at: datetime
    finished_at: datetime
    notify: list[Item] = field(default_factory=list)
    decisions: dict[int, ItemDecision] = field(default_factory=dict)
    errors: list[ErrorRecord] = field(default_factory=list)
    aborted: bool = False
    ranked_count: int = 0

    @property
    def duration_ms(self) -> float:
        """Get pass duration in milliseconds."""
        return (self.finished_at - self.started_at).total_seconds() * 1000

    @property
    def success(self) -> bool:
        """A pass succeeds when it ran to completion without fetch errors."""
        return not self.aborted and not self.errors

    def decision_counts(self) -> Counter[str]:
        """Count decisions by value."""
        return Counter(decision.value for decision in self.decisions.values())

    def ids_with(self, decision: ItemDecision) -> list[int]:
        """IDs that received ``decision``, in ranked order."""
        return [i for i, d in self.decisions.items() if d == decision]
