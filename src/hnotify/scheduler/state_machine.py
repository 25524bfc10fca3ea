"""Scheduler lifecycle state machine."""

import threading
from enum import Enum, auto
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class SchedulerState(Enum):
    """Scheduler lifecycle states.

    State transitions:
        CREATED -> RUNNING: Both loop threads started
        RUNNING -> STOPPING: Stop requested; loops finish their current tick
        STOPPING -> STOPPED: Both threads joined
        CREATED -> STOPPED: Stopped before ever starting
    """

    CREATED = auto()
    RUNNING = auto()
    STOPPING = auto()
    STOPPED = auto()


class SchedulerStateError(Exception):
    """Raised when an invalid scheduler state transition is attempted."""

    def __init__(self, from_state: SchedulerState, to_state: SchedulerState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid scheduler state transition: {from_state.name} -> {to_state.name}"
        )


class SchedulerStateMachine:
    """Enforces valid scheduler lifecycle transitions.

    Transitions may be requested from a signal handler while the main
    thread is inside ``stop``, so they are serialized by a lock.
    """

    VALID_TRANSITIONS: ClassVar[dict[SchedulerState, set[SchedulerState]]] = {
        SchedulerState.CREATED: {SchedulerState.RUNNING, SchedulerState.STOPPED},
        SchedulerState.RUNNING: {SchedulerState.STOPPING},
        SchedulerState.STOPPING: {SchedulerState.STOPPED},
        SchedulerState.STOPPED: set(),  # Terminal state
    }

    def __init__(self, run_id: str) -> None:
        """Initialize the state machine in CREATED state.

        Args:
            run_id: Unique run identifier for logging.
        """
        self._state = SchedulerState.CREATED
        self._lock = threading.RLock()
        self._log = logger.bind(run_id=run_id, component="scheduler")

    @property
    def state(self) -> SchedulerState:
        """Get the current state."""
        with self._lock:
            return self._state

    def can_transition(self, to_state: SchedulerState) -> bool:
        """Check if a transition to the given state is valid."""
        with self._lock:
            return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: SchedulerState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            SchedulerStateError: If the transition is invalid.
        """
        with self._lock:
            if not self.can_transition(to_state):
                self._log.error(
                    "invariant_violation",
                    error_type="illegal_state_transition",
                    from_state=self._state.name,
                    to_state=to_state.name,
                )
                raise SchedulerStateError(self._state, to_state)

            old_state = self._state
            self._state = to_state

        self._log.info(
            "scheduler_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def is_running(self) -> bool:
        """Check if the loops are running."""
        return self.state == SchedulerState.RUNNING

    def is_terminal(self) -> bool:
        """Check if the scheduler has fully stopped."""
        return self.state == SchedulerState.STOPPED
