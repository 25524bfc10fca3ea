"""Composition root: builds the notifier from configuration."""

from dataclasses import dataclass
from types import TracebackType

import httpx

from hnotify.cache.store import FreshnessCache
from hnotify.config.schemas import NotifierConfig
from hnotify.evaluator.evaluator import StoryEvaluator
from hnotify.evictor.evictor import BackgroundEvictor
from hnotify.feed.client import HackerNewsClient
from hnotify.fetch.client import HttpFetcher
from hnotify.notify.sinks import NotificationSink
from hnotify.scheduler.scheduler import NotifierScheduler


@dataclass
class Notifier:
    """All components of one notifier process.

    The cache is created here and shared by reference with the evaluator and
    the evictor; it lives exactly as long as this object.
    """

    config: NotifierConfig
    http: HttpFetcher
    client: HackerNewsClient
    cache: FreshnessCache
    evaluator: StoryEvaluator
    evictor: BackgroundEvictor
    scheduler: NotifierScheduler

    def close(self) -> None:
        """Stop the loops if running and release the HTTP pool."""
        self.scheduler.stop()
        self.http.close()

    def __enter__(self) -> "Notifier":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def build_notifier(
    config: NotifierConfig,
    sink: NotificationSink,
    run_id: str,
    transport: httpx.BaseTransport | None = None,
) -> Notifier:
    """Wire up a notifier.

    Args:
        config: Validated configuration.
        sink: Destination for notify lists.
        run_id: Unique run identifier.
        transport: Optional HTTP transport override.

    Returns:
        A Notifier whose scheduler has not been started.
    """
    http = HttpFetcher(config.fetch, run_id, transport=transport)
    client = HackerNewsClient(http, run_id)
    cache = FreshnessCache(run_id)
    evaluator = StoryEvaluator(
        cache, client, run_id, failure_policy=config.fetch_failure_policy
    )
    evictor = BackgroundEvictor(cache, config.retention, run_id)
    scheduler = NotifierScheduler(
        config=config,
        fetcher=client,
        evaluator=evaluator,
        evictor=evictor,
        sink=sink,
        run_id=run_id,
    )
    return Notifier(
        config=config,
        http=http,
        client=client,
        cache=cache,
        evaluator=evaluator,
        evictor=evictor,
        scheduler=scheduler,
    )
