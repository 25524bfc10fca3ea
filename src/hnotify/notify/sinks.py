"""Notification sinks for qualifying items."""

import json
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, TextIO

import click
import structlog

from hnotify.feed.models import Item


logger = structlog.get_logger()


class NotificationSink(Protocol):
    """Receives the ordered list of items to notify after each pass.

    Delivery failures are the sink's own concern; the scheduler only logs
    exceptions that escape ``notify``.
    """

    name: str

    def notify(self, items: Sequence[Item]) -> None:
        """Deliver items."""
        ...


class ConsoleSink:
    """Prints one line per item to a terminal stream."""

    name = "console"

    def __init__(self, output: TextIO | None = None, verbose: bool = False) -> None:
        """Initialize the console sink.

        Args:
            output: Stream to write to (default: stdout).
            verbose: Also print score and link for each item.
        """
        self._output = output
        self._verbose = verbose

    def notify(self, items: Sequence[Item]) -> None:
        """Print ``[idx] You have mail! --- <title>`` for each item."""
        for idx, item in enumerate(items):
            line = f"[{idx}] You have mail! --- {item.title}"
            if self._verbose:
                line += f" ({item.score} points) {item.url or item.discussion_url}"
            click.echo(line, file=self._output)


class JsonLinesSink:
    """Appends one JSON object per item to a file."""

    name = "jsonl"

    def __init__(self, path: Path) -> None:
        """Initialize the sink, creating parent directories.

        Args:
            path: Output file path.
        """
        self._path = path
        self._lock = threading.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Get the output path."""
        return self._path

    def notify(self, items: Sequence[Item]) -> None:
        """Append items to the file."""
        if not items:
            return
        lines = [
            json.dumps(item.to_notification(), ensure_ascii=False, sort_keys=True)
            for item in items
        ]
        with self._lock, self._path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")


class LogSink:
    """Emits a structured ``item_notified`` event per item."""

    name = "log"

    def __init__(self, run_id: str = "") -> None:
        self._log = logger.bind(component="sink", run_id=run_id)

    def notify(self, items: Sequence[Item]) -> None:
        """Log each item."""
        for item in items:
            self._log.info(
                "item_notified",
                item_id=item.id,
                title=item.title,
                score=item.score,
                url=item.url or item.discussion_url,
            )


class MultiSink:
    """Fans out to several sinks; one failing child does not stop the rest."""

    name = "multi"

    def __init__(self, sinks: Sequence[NotificationSink], run_id: str = "") -> None:
        """Initialize the fan-out sink.

        Args:
            sinks: Child sinks, called in order.
            run_id: Unique run identifier for logging.
        """
        self._sinks = list(sinks)
        self._log = logger.bind(component="sink", run_id=run_id)

    @property
    def sinks(self) -> list[NotificationSink]:
        """Get the child sinks."""
        return list(self._sinks)

    def notify(self, items: Sequence[Item]) -> None:
        """Deliver to each child sink."""
        for sink in self._sinks:
            try:
                sink.notify(items)
            except Exception as e:  # noqa: BLE001
                self._log.error(
                    "sink_failed",
                    sink=sink.name,
                    items=len(items),
                    error=str(e),
                )


SINK_NAMES = ("console", "jsonl", "log")


def build_sink(
    names: Sequence[str],
    run_id: str,
    jsonl_path: Path | None = None,
    verbose: bool = False,
) -> NotificationSink:
    """Build the sink stack from CLI names.

    Args:
        names: Sink names from ``SINK_NAMES``.
        run_id: Unique run identifier for logging.
        jsonl_path: Output file, required for ``jsonl``.
        verbose: Verbose console output.

    Returns:
        A single sink, or a MultiSink when several names are given.

    Raises:
        ValueError: For unknown names or a missing ``jsonl_path``.
    """
    sinks: list[NotificationSink] = []
    for name in dict.fromkeys(names or ("console",)):
        if name == "console":
            sinks.append(ConsoleSink(verbose=verbose))
        elif name == "jsonl":
            if jsonl_path is None:
                msg = "The jsonl sink requires an output path"
                raise ValueError(msg)
            sinks.append(JsonLinesSink(jsonl_path))
        elif name == "log":
            sinks.append(LogSink(run_id))
        else:
            msg = f"Unknown sink {name!r}; expected one of {', '.join(SINK_NAMES)}"
            raise ValueError(msg)

    if len(sinks) == 1:
        return sinks[0]
    return MultiSink(sinks, run_id)
