"""Scheduling of the evaluation and eviction loops."""

from hnotify.scheduler.health import HealthState, HealthTracker
from hnotify.scheduler.loop import PeriodicTask
from hnotify.scheduler.scheduler import NotifierScheduler
from hnotify.scheduler.state_machine import (
    SchedulerState,
    SchedulerStateError,
    SchedulerStateMachine,
)


__all__ = [
    "HealthState",
    "HealthTracker",
    "NotifierScheduler",
    "PeriodicTask",
    "SchedulerState",
    "SchedulerStateError",
    "SchedulerStateMachine",
]
