"""Unit tests for PeriodicTask, HealthTracker and the scheduler state machine."""

import threading
from datetime import timedelta

import pytest

from hnotify.scheduler.health import HealthState, HealthTracker
from hnotify.scheduler.loop import PeriodicTask
from hnotify.scheduler.state_machine import (
    SchedulerState,
    SchedulerStateError,
    SchedulerStateMachine,
)


class TestPeriodicTask:
    """Tests for the periodic background task."""

    def test_ticks_until_stopped(self) -> None:
        """The task ticks repeatedly on a short interval and stops on request."""
        stop = threading.Event()
        enough = threading.Event()
        calls: list[int] = []

        def tick() -> None:
            calls.append(1)
            if len(calls) >= 3:
                enough.set()

        task = PeriodicTask("test", tick, timedelta(milliseconds=10), stop, "run")
        task.start()

        assert enough.wait(timeout=5)
        stop.set()
        assert task.join(timeout=5) is True
        assert task.ticks >= 3
        assert task.failures == 0

    def test_failing_tick_does_not_stop_loop(self) -> None:
        """An exception in one tick is counted and the loop continues."""
        stop = threading.Event()
        second = threading.Event()
        calls: list[int] = []

        def tick() -> None:
            calls.append(1)
            if len(calls) == 1:
                msg = "boom"
                raise RuntimeError(msg)
            second.set()

        task = PeriodicTask("test", tick, timedelta(milliseconds=10), stop, "run")
        task.start()

        assert second.wait(timeout=5)
        stop.set()
        task.join(timeout=5)
        assert task.failures == 1

    def test_stop_interrupts_wait(self) -> None:
        """A long interval does not delay shutdown."""
        stop = threading.Event()
        ticked = threading.Event()
        task = PeriodicTask("test", ticked.set, timedelta(hours=1), stop, "run")
        task.start()
        assert ticked.wait(timeout=5)

        stop.set()

        assert task.join(timeout=5) is True
        assert task.ticks == 1

    def test_join_unstarted_task(self) -> None:
        """Joining a task that never started returns immediately."""
        task = PeriodicTask(
            "test", lambda: None, timedelta(seconds=1), threading.Event(), "run"
        )

        assert task.join(timeout=0.1) is True
        assert task.is_alive() is False

    def test_rejects_non_positive_interval(self) -> None:
        """Interval must be positive."""
        with pytest.raises(ValueError, match="interval must be positive"):
            PeriodicTask("test", lambda: None, timedelta(0), threading.Event(), "run")


class TestHealthTracker:
    """Tests for consecutive-failure health tracking."""

    def test_initially_healthy(self) -> None:
        """A new tracker is HEALTHY."""
        tracker = HealthTracker(degraded_after=3, run_id="run")

        assert tracker.state == HealthState.HEALTHY
        assert tracker.consecutive_failures == 0

    def test_degrades_at_threshold(self) -> None:
        """DEGRADED only once the failure count reaches the threshold."""
        tracker = HealthTracker(degraded_after=3, run_id="run")

        tracker.record_failure("x")
        tracker.record_failure("x")
        assert tracker.state == HealthState.HEALTHY

        tracker.record_failure("x")
        assert tracker.state == HealthState.DEGRADED
        assert tracker.consecutive_failures == 3

    def test_success_resets(self) -> None:
        """A success clears the failure run and restores HEALTHY."""
        tracker = HealthTracker(degraded_after=1, run_id="run")
        tracker.record_failure("x")

        tracker.record_success()

        assert tracker.state == HealthState.HEALTHY
        assert tracker.consecutive_failures == 0

    def test_interleaved_success_prevents_degradation(self) -> None:
        """Failures must be consecutive."""
        tracker = HealthTracker(degraded_after=2, run_id="run")

        tracker.record_failure("x")
        tracker.record_success()
        tracker.record_failure("x")

        assert tracker.state == HealthState.HEALTHY

    def test_rejects_zero_threshold(self) -> None:
        """degraded_after must be at least 1."""
        with pytest.raises(ValueError, match="at least 1"):
            HealthTracker(degraded_after=0, run_id="run")


class TestSchedulerStateMachine:
    """Tests for SchedulerStateMachine."""

    @pytest.mark.unit
    def test_initial_state(self) -> None:
        """Test that initial state is CREATED."""
        machine = SchedulerStateMachine(run_id="run")

        assert machine.state == SchedulerState.CREATED
        assert machine.is_running() is False
        assert machine.is_terminal() is False

    @pytest.mark.unit
    def test_full_lifecycle(self) -> None:
        """Test CREATED -> RUNNING -> STOPPING -> STOPPED."""
        machine = SchedulerStateMachine(run_id="run")

        machine.transition(SchedulerState.RUNNING)
        assert machine.is_running() is True
        machine.transition(SchedulerState.STOPPING)
        machine.transition(SchedulerState.STOPPED)

        assert machine.is_terminal() is True

    @pytest.mark.unit
    def test_stop_without_start(self) -> None:
        """Test CREATED -> STOPPED is allowed."""
        machine = SchedulerStateMachine(run_id="run")

        machine.transition(SchedulerState.STOPPED)

        assert machine.state == SchedulerState.STOPPED

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("path", "target"),
        [
            ([], SchedulerState.STOPPING),
            ([SchedulerState.RUNNING], SchedulerState.STOPPED),
            ([SchedulerState.RUNNING], SchedulerState.RUNNING),
            ([SchedulerState.STOPPED], SchedulerState.RUNNING),
        ],
    )
    def test_invalid_transitions(
        self, path: list[SchedulerState], target: SchedulerState
    ) -> None:
        """Test that illegal transitions raise and leave state unchanged."""
        machine = SchedulerStateMachine(run_id="run")
        for state in path:
            machine.transition(state)
        before = machine.state

        with pytest.raises(SchedulerStateError) as exc_info:
            machine.transition(target)

        assert exc_info.value.from_state == before
        assert exc_info.value.to_state == target
        assert machine.state == before
