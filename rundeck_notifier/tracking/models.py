"""States and results of tracking one Rundeck execution."""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional

from rundeck_notifier.domain.models import Execution, ExecutionStatus


class TrackerState(str, Enum):
    """Lifecycle of a tracked execution.

    NOT_TRIGGERED -> TRIGGERED -> POLLING* -> SUCCEEDED | FAILED | ABORTED | UNKNOWN
    """

    NOT_TRIGGERED = "not_triggered"
    TRIGGERED = "triggered"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES

    @classmethod
    def for_terminal(cls, execution: Execution) -> "TrackerState":
        """Terminal state matching a terminal execution."""
        return _STATUS_TO_STATE.get(execution.status, cls.UNKNOWN)


_TERMINAL_STATES = frozenset({
    TrackerState.SUCCEEDED,
    TrackerState.FAILED,
    TrackerState.ABORTED,
    TrackerState.UNKNOWN,
})

_STATUS_TO_STATE = {
    ExecutionStatus.SUCCEEDED: TrackerState.SUCCEEDED,
    ExecutionStatus.FAILED: TrackerState.FAILED,
    ExecutionStatus.ABORTED: TrackerState.ABORTED,
}


@dataclass
class TrackingResult:
    """Outcome of triggering, and optionally waiting for, an execution.

    Attributes:
        state: Final tracker state (TRIGGERED when not waiting)
        execution: Last execution observed
        polls: Number of status requests made after the trigger
    """

    state: TrackerState
    execution: Execution
    polls: int = 0

    @property
    def duration(self) -> Optional[timedelta]:
        """Execution run time, known once the execution has ended."""
        return self.execution.duration

    @property
    def succeeded(self) -> bool:
        """False only for executions observed to fail or be aborted.

        An execution that was triggered but not waited for, or that ended
        with an unrecognized status, counts as a success.
        """
        return self.state not in (TrackerState.FAILED, TrackerState.ABORTED)
