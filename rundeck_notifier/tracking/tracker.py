"""Trigger a Rundeck job and follow its execution to a terminal status."""

import time
from typing import Callable, Mapping, Optional

from rundeck_notifier.client.client import RundeckClient
from rundeck_notifier.domain.models import Execution
from rundeck_notifier.logging import get_logger
from rundeck_notifier.logging.context import log_context

from .models import TrackerState, TrackingResult

logger = get_logger(__name__, component="tracker")

DEFAULT_POLL_INTERVAL = 5.0


class ExecutionTracker:
    """State machine around one execution.

    ``trigger()`` moves NOT_TRIGGERED to TRIGGERED. ``wait_for_completion()``
    then polls the execution at a fixed interval, replacing the tracked
    Execution with each fresh copy, until it reaches a terminal status.
    There is no poll limit and no backoff; the caller bounds the wait.

    Client errors (ApiError, TransportError, MalformedResponseError) are
    never caught here. A failed trigger leaves the tracker NOT_TRIGGERED;
    a failed poll leaves it POLLING with the last good execution.

    Attributes:
        state: Current TrackerState
        execution: Last execution observed (None before the trigger)
        polls: Number of status requests made so far
    """

    def __init__(
        self,
        client: RundeckClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize tracker.

        Args:
            client: Client used to trigger and poll
            poll_interval: Seconds to wait before each status request
            sleep: Sleep function, replaced in tests to avoid real delays
        """
        if poll_interval < 0:
            raise ValueError(f"poll_interval cannot be negative, got: {poll_interval}")

        self.client = client
        self.poll_interval = poll_interval
        self._sleep = sleep

        self.state = TrackerState.NOT_TRIGGERED
        self.execution: Optional[Execution] = None
        self.polls = 0

    def trigger(
        self,
        job_id: str,
        options: Optional[Mapping[str, str]] = None,
        node_filters: Optional[Mapping[str, str]] = None,
    ) -> Execution:
        """Run the job and start tracking the execution it created.

        Raises:
            RuntimeError: If this tracker already triggered an execution
            RundeckError: Any client error, unchanged
        """
        if self.state is not TrackerState.NOT_TRIGGERED:
            raise RuntimeError(f"Execution already triggered (state: {self.state.value})")

        execution = self.client.trigger_job(job_id, options=options, node_filters=node_filters)

        self.execution = execution
        self.state = TrackerState.TRIGGERED
        logger.info(
            f"Tracking Rundeck execution #{execution.id}",
            extra={
                "event": "tracker.triggered",
                "execution_id": execution.id,
                "status": execution.status.name,
            },
        )
        return execution

    def poll(self) -> Execution:
        """Sleep for the poll interval, then refresh the execution once.

        Returns:
            The freshly fetched execution

        Raises:
            RuntimeError: If nothing was triggered yet
            RundeckError: Any client error, unchanged
        """
        if self.execution is None:
            raise RuntimeError("Cannot poll before an execution was triggered")

        self._sleep(self.poll_interval)
        self.state = TrackerState.POLLING
        self.polls += 1

        execution = self.client.get_execution(self.execution.id)
        self.execution = execution

        logger.debug(
            f"Rundeck execution #{execution.id} is {execution.status.name}",
            extra={
                "event": "tracker.polled",
                "poll": self.polls,
                "status": execution.status.name,
                "status_text": execution.status_text,
            },
        )

        if execution.is_terminal:
            self.state = TrackerState.for_terminal(execution)
        return execution

    def wait_for_completion(self) -> TrackingResult:
        """Poll until the execution reaches a terminal status.

        An execution that is already terminal is not polled again.

        Raises:
            RuntimeError: If nothing was triggered yet
            RundeckError: Any client error from a poll, unchanged
        """
        if self.execution is None:
            raise RuntimeError("Cannot wait before an execution was triggered")

        with log_context(execution_id=self.execution.id):
            if self.execution.is_terminal:
                self.state = TrackerState.for_terminal(self.execution)

            while not self.state.is_terminal:
                self.poll()

            logger.info(
                f"Rundeck execution #{self.execution.id} finished with status {self.execution.status.name}",
                extra={
                    "event": "tracker.finished",
                    "state": self.state.value,
                    "polls": self.polls,
                    "duration_seconds": (
                        self.execution.duration.total_seconds()
                        if self.execution.duration is not None
                        else None
                    ),
                },
            )

        return self.result()

    def result(self) -> TrackingResult:
        """Snapshot of the current tracking state.

        Raises:
            RuntimeError: If nothing was triggered yet
        """
        if self.execution is None:
            raise RuntimeError("No execution is being tracked")
        return TrackingResult(state=self.state, execution=self.execution, polls=self.polls)

    def run(
        self,
        job_id: str,
        options: Optional[Mapping[str, str]] = None,
        node_filters: Optional[Mapping[str, str]] = None,
        wait: bool = False,
    ) -> TrackingResult:
        """Trigger the job and, when ``wait`` is set, follow it to the end."""
        self.trigger(job_id, options=options, node_filters=node_filters)
        if wait:
            return self.wait_for_completion()
        return self.result()
