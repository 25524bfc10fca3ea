"""Unit tests for notifier metrics and logging setup."""

import io
import json
import logging
import threading
from collections import Counter
from collections.abc import Generator

import pytest
import structlog

from hnotify.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    parse_level,
)
from hnotify.observability.metrics import NotifierMetrics


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Reset singleton before and after each test."""
    NotifierMetrics.reset()
    yield
    NotifierMetrics.reset()


class TestNotifierMetrics:
    """Tests for NotifierMetrics."""

    def test_singleton_pattern(self) -> None:
        """get_instance should return same instance."""
        assert NotifierMetrics.get_instance() is NotifierMetrics.get_instance()

    def test_reset_creates_new_instance(self) -> None:
        """Reset drops the previous instance."""
        first = NotifierMetrics.get_instance()
        NotifierMetrics.reset()

        assert NotifierMetrics.get_instance() is not first

    def test_record_pass(self) -> None:
        """Passes accumulate decision counts."""
        metrics = NotifierMetrics.get_instance()

        metrics.record_pass(Counter({"notified": 2, "pending": 1}), 12.5, False, 2)
        metrics.record_pass(Counter({"notified": 1}), 3.0, True, 3)

        assert metrics.passes_total == 2
        assert metrics.passes_aborted_total == 1
        assert metrics.decisions_total == Counter({"notified": 3, "pending": 1})
        assert metrics.last_pass_duration_ms == 3.0
        assert metrics.cache_size == 3

    def test_record_eviction(self) -> None:
        """Eviction runs and removed entries are counted separately."""
        metrics = NotifierMetrics.get_instance()

        metrics.record_eviction(removed=4, cache_size=10)
        metrics.record_eviction(removed=0, cache_size=10)

        assert metrics.eviction_runs_total == 2
        assert metrics.evictions_total == 4

    def test_concurrent_recording(self) -> None:
        """Counts are exact under concurrent updates from several threads."""
        metrics = NotifierMetrics.get_instance()

        def work() -> None:
            for _ in range(1000):
                metrics.record_notifications(1)
                metrics.record_eviction(1, 0)

        threads = [threading.Thread(target=work) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert metrics.notifications_total == 4000
        assert metrics.evictions_total == 4000

    def test_prometheus_format(self) -> None:
        """Prometheus output carries the hnotify_ prefix and decision labels."""
        metrics = NotifierMetrics.get_instance()
        metrics.record_pass(Counter({"stale": 2}), 1.0, False, 2)
        metrics.record_notifications(5)

        output = metrics.to_prometheus_format()

        assert 'hnotify_decisions_total{decision="stale"} 2' in output
        assert "hnotify_notifications_total 5" in output
        assert "hnotify_cache_size 2" in output

    def test_to_dict(self) -> None:
        """Dictionary export contains every counter."""
        metrics = NotifierMetrics.get_instance()
        metrics.record_sink_failure()
        metrics.record_item_fetch_failure()
        metrics.record_ranked_fetch_failure()

        data = metrics.to_dict()

        assert data["sink_failures_total"] == 1
        assert data["item_fetch_failures_total"] == 1
        assert data["ranked_fetch_failures_total"] == 1
        assert data["decisions_total"] == {}


class TestLogging:
    """Tests for logging configuration."""

    @pytest.fixture(autouse=True)
    def restore_structlog(self) -> Generator[None]:
        """Restore structlog defaults after each test."""
        yield
        structlog.reset_defaults()
        clear_run_context()

    def test_json_output(self) -> None:
        """JSON logging renders one sorted object per event."""
        output = io.StringIO()
        configure_logging(level=logging.INFO, output=output, json_format=True)

        structlog.get_logger().bind(component="test").info("hello", answer=42)

        record = json.loads(output.getvalue().strip())
        assert record["event"] == "hello"
        assert record["answer"] == 42
        assert record["component"] == "test"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filtering(self) -> None:
        """Events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output, json_format=True)

        structlog.get_logger().info("quiet")

        assert output.getvalue() == ""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("debug", logging.DEBUG), ("INFO", logging.INFO), (" Warning ", 30)],
    )
    def test_parse_level(self, name: str, expected: int) -> None:
        """Level names are case-insensitive."""
        assert parse_level(name) == expected

    def test_parse_unknown_level(self) -> None:
        """Unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown log level"):
            parse_level("chatty")

    def test_run_context_is_merged(self) -> None:
        """A bound run ID appears on every event until cleared."""
        output = io.StringIO()
        configure_logging(level=logging.INFO, output=output, json_format=True)

        bind_run_context("run-123")
        structlog.get_logger().info("first")
        clear_run_context()
        structlog.get_logger().info("second")

        first, second = (json.loads(line) for line in output.getvalue().splitlines())
        assert first["run_id"] == "run-123"
        assert "run_id" not in second
