"""Story evaluator: decides which ranked items to notify."""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import structlog

from hnotify.cache.store import FreshnessCache
from hnotify.evaluator.models import (
    EvaluationResult,
    FetchFailurePolicy,
    ItemDecision,
)
from hnotify.feed.client import ItemFetcher
from hnotify.feed.errors import ErrorRecord, FeedError
from hnotify.feed.models import Item
from hnotify.observability.metrics import NotifierMetrics


logger = structlog.get_logger()


class StoryEvaluator:
    """Applies the notify/cache policy to a ranked list of item IDs.

    For each ID in ranked order:

    1. Cached IDs are skipped without a fetch.
    2. Uncached IDs are fetched. A failure either aborts the pass or is
       recorded and skipped, depending on the fetch-failure policy.
    3. ``score >= score_threshold``: notify and cache.
    4. Otherwise, ``now - posted_at >= stale_age``: cache without notifying.
       Anything else stays unresolved so a later pass can re-check its score.
    """

    def __init__(
        self,
        cache: FreshnessCache,
        fetcher: ItemFetcher,
        run_id: str,
        failure_policy: FetchFailurePolicy = FetchFailurePolicy.ABORT,
    ) -> None:
        """Initialize the evaluator.

        Args:
            cache: Shared freshness cache.
            fetcher: Source of item details.
            run_id: Unique run identifier for logging.
            failure_policy: Behaviour when an item fetch fails.
        """
        self._cache = cache
        self._fetcher = fetcher
        self._failure_policy = failure_policy
        self._metrics = NotifierMetrics.get_instance()
        self._log = logger.bind(component="evaluator", run_id=run_id)

    @property
    def failure_policy(self) -> FetchFailurePolicy:
        """Get the fetch-failure policy."""
        return self._failure_policy

    def evaluate(
        self,
        score_threshold: int,
        stale_age: timedelta,
        ranked_ids: Sequence[int],
        now: datetime | None = None,
    ) -> EvaluationResult:
        """Run one evaluation pass.

        Args:
            score_threshold: Minimum score that triggers a notification.
            stale_age: Age after which a below-threshold item is resolved.
            ranked_ids: Item IDs in rank order.
            now: Reference time (defaults to now, UTC).

        Returns:
            EvaluationResult with the ordered notify list and per-ID decisions.

        Raises:
            ValueError: If ``stale_age`` is not positive or ``now`` is naive.
        """
        if stale_age <= timedelta(0):
            msg = f"stale_age must be positive, got {stale_age}"
            raise ValueError(msg)
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            msg = "now must be timezone-aware"
            raise ValueError(msg)

        result = EvaluationResult(
            started_at=datetime.now(UTC),
            finished_at=datetime.now(UTC),
            ranked_count=len(ranked_ids),
        )

        for item_id in ranked_ids:
            if item_id in result.decisions:
                continue

            if self._cache.contains(item_id):
                result.decisions[item_id] = ItemDecision.ALREADY_RESOLVED
                continue

            try:
                item = self._fetcher.fetch_item(item_id)
            except FeedError as e:
                self._metrics.record_item_fetch_failure()
                result.errors.append(ErrorRecord.from_exception(e))
                self._log.warning(
                    "item_fetch_failed",
                    policy=self._failure_policy.value,
                    **e.to_dict(),
                )
                if self._failure_policy == FetchFailurePolicy.ABORT:
                    result.aborted = True
                    break
                result.decisions[item_id] = ItemDecision.FETCH_FAILED
                continue

            decision = self._decide(item, score_threshold, stale_age, now)
            result.decisions[item_id] = decision
            if decision == ItemDecision.NOTIFIED:
                result.notify.append(item)

        result.finished_at = datetime.now(UTC)
        self._metrics.record_pass(
            decisions=result.decision_counts(),
            duration_ms=result.duration_ms,
            aborted=result.aborted,
            cache_size=len(self._cache),
        )

        self._log.info(
            "evaluation_pass_complete",
            ranked_count=result.ranked_count,
            notified=len(result.notify),
            errors=len(result.errors),
            aborted=result.aborted,
            duration_ms=round(result.duration_ms, 2),
            decisions=dict(result.decision_counts()),
        )
        return result

    def _decide(
        self,
        item: Item,
        score_threshold: int,
        stale_age: timedelta,
        now: datetime,
    ) -> ItemDecision:
        """Apply the policy to one freshly fetched item, caching terminal ones."""
        if item.score >= score_threshold:
            self._cache.put(item.id, item.posted_at)
            self._log.debug(
                "item_notified", item_id=item.id, score=item.score, title=item.title
            )
            return ItemDecision.NOTIFIED

        if now - item.posted_at >= stale_age:
            self._cache.put(item.id, item.posted_at)
            self._log.debug(
                "item_stale",
                item_id=item.id,
                score=item.score,
                posted_at=item.posted_at.isoformat(),
            )
            return ItemDecision.STALE

        self._log.debug("item_pending", item_id=item.id, score=item.score)
        return ItemDecision.PENDING
