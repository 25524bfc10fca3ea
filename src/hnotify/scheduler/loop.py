"""Periodic background task driven by a shared stop event."""

import threading
from collections.abc import Callable
from datetime import timedelta

import structlog


logger = structlog.get_logger()


class PeriodicTask:
    """Runs ``tick`` on a fixed interval in its own thread.

    The first tick runs immediately. Between ticks the thread blocks on the
    stop event, so a stop request wakes it at once; a tick that is already
    running is never interrupted. An exception escaping ``tick`` is logged
    and the loop continues with the next interval.
    """

    def __init__(
        self,
        name: str,
        tick: Callable[[], object],
        interval: timedelta,
        stop_event: threading.Event,
        run_id: str,
    ) -> None:
        """Initialize the task.

        Args:
            name: Thread and log name.
            tick: Work to perform each interval.
            interval: Delay between the end of one tick and the next.
            stop_event: Event that ends the loop when set.
            run_id: Unique run identifier for logging.

        Raises:
            ValueError: If ``interval`` is not positive.
        """
        if interval <= timedelta(0):
            msg = f"interval must be positive, got {interval}"
            raise ValueError(msg)
        self._name = name
        self._tick = tick
        self._interval_s = interval.total_seconds()
        self._stop_event = stop_event
        self._ticks = 0
        self._failures = 0
        self._thread = threading.Thread(target=self._run, name=name, daemon=False)
        self._log = logger.bind(component="scheduler", task=name, run_id=run_id)

    @property
    def name(self) -> str:
        """Get the task name."""
        return self._name

    @property
    def ticks(self) -> int:
        """Number of ticks completed (including failed ones)."""
        return self._ticks

    @property
    def failures(self) -> int:
        """Number of ticks that raised."""
        return self._failures

    def start(self) -> None:
        """Start the background thread."""
        self._thread.start()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the thread to exit.

        Args:
            timeout: Seconds to wait, None for no limit.

        Returns:
            True if the thread has exited.
        """
        if self._thread.ident is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def is_alive(self) -> bool:
        """Check whether the thread is running."""
        return self._thread.is_alive()

    def _run(self) -> None:
        self._log.info("task_started", interval_seconds=self._interval_s)

        while not self._stop_event.is_set():
            try:
                self._tick()
            except Exception as e:  # noqa: BLE001
                self._failures += 1
                self._log.exception("task_tick_failed", error=str(e))
            self._ticks += 1

            if self._stop_event.wait(self._interval_s):
                break

        self._log.info("task_stopped", ticks=self._ticks, failures=self._failures)
