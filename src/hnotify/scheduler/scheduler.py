"""Scheduler running the evaluation and eviction loops concurrently."""

import signal
import threading
from datetime import UTC, datetime
from types import FrameType

import structlog

from hnotify.config.schemas import NotifierConfig
from hnotify.evaluator.evaluator import StoryEvaluator
from hnotify.evaluator.models import EvaluationResult, ItemDecision
from hnotify.evictor.evictor import BackgroundEvictor
from hnotify.feed.client import ItemFetcher
from hnotify.feed.errors import FeedError, SchemaError
from hnotify.notify.sinks import NotificationSink
from hnotify.observability.metrics import NotifierMetrics
from hnotify.scheduler.health import HealthState, HealthTracker
from hnotify.scheduler.loop import PeriodicTask
from hnotify.scheduler.state_machine import SchedulerState, SchedulerStateMachine


logger = structlog.get_logger()

# Decisions that prove at least one item fetch worked in a pass
_FETCHED_DECISIONS = frozenset(
    {ItemDecision.NOTIFIED, ItemDecision.STALE, ItemDecision.PENDING}
)


class NotifierScheduler:
    """Drives the evaluator and the evictor on independent intervals.

    Each evaluation tick re-fetches the ranked list, runs one pass and hands
    the notify list to the sink. Errors never escape a tick: they are logged,
    counted, and fed into the health tracker.
    """

    def __init__(  # noqa: PLR0913
        self,
        config: NotifierConfig,
        fetcher: ItemFetcher,
        evaluator: StoryEvaluator,
        evictor: BackgroundEvictor,
        sink: NotificationSink,
        run_id: str,
    ) -> None:
        """Initialize the scheduler.

        Args:
            config: Policy and interval configuration.
            fetcher: Source of the ranked list.
            evaluator: Story evaluator bound to the shared cache.
            evictor: Evictor bound to the same cache.
            sink: Destination for notify lists.
            run_id: Unique run identifier for logging.
        """
        self._config = config
        self._fetcher = fetcher
        self._evaluator = evaluator
        self._evictor = evictor
        self._sink = sink
        self._run_id = run_id
        self._stop_event = threading.Event()
        self._state_machine = SchedulerStateMachine(run_id)
        self._health = HealthTracker(config.degraded_after_failures, run_id)
        self._metrics = NotifierMetrics.get_instance()
        self._log = logger.bind(component="scheduler", run_id=run_id)

        self._tasks = [
            PeriodicTask(
                name="evaluation",
                tick=self.run_once,
                interval=config.evaluation_interval,
                stop_event=self._stop_event,
                run_id=run_id,
            ),
            PeriodicTask(
                name="eviction",
                tick=self._evictor.tick,
                interval=config.eviction_interval,
                stop_event=self._stop_event,
                run_id=run_id,
            ),
        ]

    @property
    def state(self) -> SchedulerState:
        """Get the lifecycle state."""
        return self._state_machine.state

    @property
    def health(self) -> HealthState:
        """Get the evaluation loop health."""
        return self._health.state

    @property
    def tasks(self) -> list[PeriodicTask]:
        """Get the periodic tasks (evaluation first)."""
        return list(self._tasks)

    def run_once(self, now: datetime | None = None) -> EvaluationResult | None:
        """Run a single evaluation tick.

        Args:
            now: Reference time (defaults to now, UTC).

        Returns:
            The pass result, or None if the ranked list was unavailable.
        """
        ranked_ids = self._fetch_ranked_ids()
        if ranked_ids is None:
            return None

        result = self._evaluator.evaluate(
            score_threshold=self._config.score_threshold,
            stale_age=self._config.stale_age,
            ranked_ids=ranked_ids,
            now=now or datetime.now(UTC),
        )

        # Items notified before an abort are already cached; deliver them.
        if result.notify:
            self._deliver(result)

        if self._pass_failed(result):
            self._health.record_failure(
                "pass_aborted" if result.aborted else "item_fetches_failed"
            )
        else:
            self._health.record_success()
        return result

    def start(self) -> None:
        """Start both loop threads.

        Raises:
            SchedulerStateError: If already started or stopped.
        """
        self._state_machine.transition(SchedulerState.RUNNING)
        self._log.info("scheduler_started", **self._config.summary())
        for task in self._tasks:
            task.start()

    def request_stop(self) -> None:
        """Ask both loops to exit after their current tick. Safe from signal handlers."""
        self._stop_event.set()

    def stop(self, timeout: float | None = None) -> bool:
        """Stop both loops and wait for them.

        Idempotent: a stopped scheduler returns at once, and a stop that
        timed out can be retried.

        Args:
            timeout: Seconds to wait for each thread, None for no limit.

        Returns:
            True if every thread exited.
        """
        self._stop_event.set()

        state = self._state_machine.state
        if state == SchedulerState.CREATED:
            self._state_machine.transition(SchedulerState.STOPPED)
            return True
        if state == SchedulerState.STOPPED:
            return True
        if state == SchedulerState.RUNNING:
            self._state_machine.transition(SchedulerState.STOPPING)

        joined = all([task.join(timeout) for task in self._tasks])
        if not joined:
            self._log.warning(
                "scheduler_stop_timeout",
                alive=[t.name for t in self._tasks if t.is_alive()],
            )
            return False

        self._state_machine.transition(SchedulerState.STOPPED)
        self._log.info(
            "scheduler_stopped",
            evaluation_ticks=self._tasks[0].ticks,
            eviction_ticks=self._tasks[1].ticks,
            metrics=self._metrics.to_dict(),
        )
        return True

    def run_forever(self, install_signal_handlers: bool = True) -> None:
        """Run until SIGINT/SIGTERM or ``request_stop``, then shut down cleanly.

        Args:
            install_signal_handlers: Route SIGINT/SIGTERM to ``request_stop``.
                Only possible from the main thread.
        """
        if install_signal_handlers:
            self._install_signal_handlers()

        self.start()
        try:
            # Poll so signal handlers get a chance to run on every platform
            while not self._stop_event.wait(0.5):
                pass
        finally:
            self.stop()

    def _install_signal_handlers(self) -> None:
        def _handle(signum: int, _frame: FrameType | None) -> None:
            self._log.info("shutdown_signal_received", signal=signal.Signals(signum).name)
            self.request_stop()

        signal.signal(signal.SIGINT, _handle)
        signal.signal(signal.SIGTERM, _handle)

    def _fetch_ranked_ids(self) -> list[int] | None:
        """Fetch and sanity-check the ranked list.

        Returns:
            Ranked IDs, or None when the tick cannot proceed.
        """
        try:
            ranked_ids = self._fetcher.fetch_ranked_ids()
            if len(ranked_ids) < self._config.min_ranked_ids:
                msg = (
                    f"Expected at least {self._config.min_ranked_ids} ranked IDs "
                    f"but got {len(ranked_ids)}"
                )
                raise SchemaError(msg)
        except FeedError as e:
            self._metrics.record_ranked_fetch_failure()
            self._log.warning("ranked_fetch_failed", **e.to_dict())
            self._health.record_failure("ranked_fetch_failed")
            return None

        if self._config.max_ranked_ids:
            ranked_ids = ranked_ids[: self._config.max_ranked_ids]
        return ranked_ids

    def _deliver(self, result: EvaluationResult) -> None:
        """Hand the notify list to the sink; sink errors are logged only."""
        try:
            self._sink.notify(result.notify)
        except Exception as e:  # noqa: BLE001
            self._metrics.record_sink_failure()
            self._log.error(
                "sink_failed",
                sink=getattr(self._sink, "name", type(self._sink).__name__),
                items=len(result.notify),
                error=str(e),
            )
            return

        self._metrics.record_notifications(len(result.notify))
        self._log.info(
            "notifications_delivered",
            count=len(result.notify),
            item_ids=[item.id for item in result.notify],
        )

    @staticmethod
    def _pass_failed(result: EvaluationResult) -> bool:
        """A pass fails if it aborted or every item fetch it attempted failed."""
        if result.aborted:
            return True
        if not result.errors:
            return False
        return not any(d in _FETCHED_DECISIONS for d in result.decisions.values())
