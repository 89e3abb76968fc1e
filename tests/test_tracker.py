"""Tests for the execution tracker state machine."""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from rundeck_notifier.client import ApiError, RundeckClient, TransportError
from rundeck_notifier.client.parser import parse_execution
from rundeck_notifier.tracking import ExecutionTracker, TrackerState
from tests.helpers import read_response


def execution(name):
    """Parsed execution from a recorded response."""
    return parse_execution(read_response(name))


@pytest.fixture
def mock_client():
    """Client double that starts a running execution."""
    client = Mock(spec=RundeckClient)
    client.trigger_job.return_value = execution("job-run-success.xml")
    return client


@pytest.fixture
def sleep():
    return Mock()


class TestTrigger:
    """Test the NOT_TRIGGERED -> TRIGGERED transition."""

    def test_initial_state(self, mock_client):
        tracker = ExecutionTracker(mock_client)

        assert tracker.state is TrackerState.NOT_TRIGGERED
        assert tracker.execution is None

    def test_trigger(self, mock_client):
        tracker = ExecutionTracker(mock_client)

        result = tracker.trigger("1", {"dir": "/tmp"}, {"tags": "web"})

        assert tracker.state is TrackerState.TRIGGERED
        assert tracker.execution is result
        mock_client.trigger_job.assert_called_once_with(
            "1", options={"dir": "/tmp"}, node_filters={"tags": "web"}
        )

    @pytest.mark.parametrize("error", [ApiError("Option 'dir' is required. "), TransportError("refused")])
    def test_trigger_error_propagates(self, mock_client, error):
        """Test that a failed trigger leaves the tracker untouched."""
        mock_client.trigger_job.side_effect = error
        tracker = ExecutionTracker(mock_client)

        with pytest.raises(type(error)) as exc_info:
            tracker.trigger("1")

        assert exc_info.value is error
        assert tracker.state is TrackerState.NOT_TRIGGERED
        assert tracker.execution is None

    def test_trigger_error_message_unchanged(self, mock_client):
        mock_client.trigger_job.side_effect = ApiError("Option 'dir' is required. ")

        with pytest.raises(ApiError) as exc_info:
            ExecutionTracker(mock_client).trigger("1")

        assert exc_info.value.message == "Option 'dir' is required. "
        assert str(exc_info.value) == "Option 'dir' is required. "

    def test_trigger_twice(self, mock_client):
        tracker = ExecutionTracker(mock_client)
        tracker.trigger("1")

        with pytest.raises(RuntimeError):
            tracker.trigger("1")

    def test_negative_interval(self, mock_client):
        with pytest.raises(ValueError):
            ExecutionTracker(mock_client, poll_interval=-1)


class TestWaitForCompletion:
    """Test polling until a terminal status."""

    def test_polls_until_succeeded(self, mock_client, sleep):
        mock_client.get_execution.side_effect = [
            execution("execution-running.xml"),
            execution("execution-running.xml"),
            execution("execution-succeeded.xml"),
        ]
        tracker = ExecutionTracker(mock_client, poll_interval=2, sleep=sleep)
        tracker.trigger("1")

        result = tracker.wait_for_completion()

        assert result.state is TrackerState.SUCCEEDED
        assert result.succeeded
        assert result.polls == 3
        assert result.duration == timedelta(minutes=3, seconds=27)
        assert sleep.call_count == 3
        sleep.assert_called_with(2)
        mock_client.get_execution.assert_called_with(1)

    @pytest.mark.parametrize(
        "fixture, state",
        [
            ("execution-failed.xml", TrackerState.FAILED),
            ("execution-aborted.xml", TrackerState.ABORTED),
        ],
    )
    def test_unsuccessful_end_does_not_raise(self, mock_client, sleep, fixture, state):
        mock_client.get_execution.return_value = execution(fixture)
        tracker = ExecutionTracker(mock_client, sleep=sleep)
        tracker.trigger("1")

        result = tracker.wait_for_completion()

        assert result.state is state
        assert not result.succeeded

    def test_terminal_variant_is_unknown(self, mock_client, sleep):
        mock_client.get_execution.return_value = parse_execution(
            "<execution id='1' status='timedout'/>"
        )
        tracker = ExecutionTracker(mock_client, sleep=sleep)
        tracker.trigger("1")

        result = tracker.wait_for_completion()

        assert result.state is TrackerState.UNKNOWN
        assert result.succeeded

    def test_unrecognized_status_keeps_polling(self, mock_client, sleep):
        mock_client.get_execution.side_effect = [
            parse_execution("<execution id='1' status='scheduled'/>"),
            execution("execution-succeeded.xml"),
        ]
        tracker = ExecutionTracker(mock_client, sleep=sleep)
        tracker.trigger("1")

        assert tracker.wait_for_completion().polls == 2

    def test_already_terminal(self, mock_client, sleep):
        """Test that an execution finished at trigger time is not polled."""
        mock_client.trigger_job.return_value = execution("execution-succeeded.xml")
        tracker = ExecutionTracker(mock_client, sleep=sleep)
        tracker.trigger("1")

        result = tracker.wait_for_completion()

        assert result.state is TrackerState.SUCCEEDED
        assert result.polls == 0
        sleep.assert_not_called()
        mock_client.get_execution.assert_not_called()

    def test_poll_error_propagates(self, mock_client, sleep):
        running = execution("execution-running.xml")
        mock_client.get_execution.side_effect = [running, TransportError("connection reset")]
        tracker = ExecutionTracker(mock_client, sleep=sleep)
        tracker.trigger("1")

        with pytest.raises(TransportError):
            tracker.wait_for_completion()

        assert tracker.state is TrackerState.POLLING
        assert tracker.execution is running
        assert tracker.polls == 2

    def test_wait_before_trigger(self, mock_client):
        with pytest.raises(RuntimeError):
            ExecutionTracker(mock_client).wait_for_completion()


class TestRun:
    """Test the trigger-and-wait shortcut."""

    def test_without_wait(self, mock_client, sleep):
        result = ExecutionTracker(mock_client, sleep=sleep).run("1", {"dir": "/tmp"})

        assert result.state is TrackerState.TRIGGERED
        assert result.polls == 0
        assert result.duration is None
        mock_client.get_execution.assert_not_called()

    def test_with_wait(self, mock_client, sleep):
        mock_client.get_execution.return_value = execution("execution-succeeded.xml")

        result = ExecutionTracker(mock_client, sleep=sleep).run("1", wait=True)

        assert result.state is TrackerState.SUCCEEDED
        assert result.polls == 1
