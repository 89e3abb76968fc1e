"""Notify Rundeck at the end of a CI build.

RundeckNotifier ties the other components together for one configured
trigger:

1. Skip builds that did not succeed
2. Apply the tag gate on the build's (or its upstream's) change log
3. Expand job options and node filters from the build context
4. Run the job, and optionally wait for the execution to finish
5. Apply the fail-the-build policy

Progress is written to the build log as plain lines.
"""

import logging
import sys
import time
from typing import Callable, List, Optional, TextIO

from rundeck_notifier.client.exceptions import ApiError, ApiLoginError, RundeckError
from rundeck_notifier.client.registry import RundeckRegistry
from rundeck_notifier.config.models import TriggerConfig
from rundeck_notifier.domain.build import Build, BuildResult
from rundeck_notifier.domain.models import Execution, ExecutionStatus
from rundeck_notifier.logging import get_logger
from rundeck_notifier.logging.context import log_context
from rundeck_notifier.matching.tags import TagMatcher
from rundeck_notifier.options.parser import parse_options
from rundeck_notifier.tracking.tracker import DEFAULT_POLL_INTERVAL, ExecutionTracker
from rundeck_notifier.utils.timestamps import format_duration_words

from .models import NotificationOutcome

logger = get_logger(__name__, component="notifier")


class BuildLog:
    """Line-oriented build log.

    Lines go to ``stream`` (stdout by default) and to the logger, and are
    kept in ``lines`` for callers that need to inspect them.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.lines: List[str] = []

    def println(self, line: str) -> None:
        self.lines.append(line)
        self.stream.write(line + "\n")
        self.stream.flush()
        logger.debug(line, extra={"event": "notifier.build_log"})


def status_label(execution: Execution) -> str:
    """Upper-case status for the build log, e.g. ``SUCCEEDED``.

    Unrecognized statuses are shown as received.
    """
    if execution.status is ExecutionStatus.OTHER and execution.status_text:
        return execution.status_text.upper()
    return execution.status.name


class RundeckNotifier:
    """Runs one trigger's Rundeck job for a finished build."""

    def __init__(
        self,
        trigger: TriggerConfig,
        registry: RundeckRegistry,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize notifier.

        Args:
            trigger: Trigger settings (instance, job, options, tags, policies)
            registry: Registry used to build the client for the trigger's instance
            poll_interval: Seconds between status requests while waiting
            sleep: Sleep function handed to the tracker
            logger_instance: Logger instance (uses module logger if None)
        """
        self.trigger = trigger
        self.registry = registry
        self.poll_interval = poll_interval
        self._sleep = sleep
        self.logger = logger_instance or logger
        self.matcher = TagMatcher.from_text(trigger.tags)

    def perform(self, build: Build, stream: Optional[TextIO] = None) -> NotificationOutcome:
        """Notify Rundeck about ``build``.

        Rundeck errors never escape: they are written to the build log and
        turned into an unsuccessful outcome. With ``fail_on_error`` set, an
        unsuccessful outcome also marks the build as FAILURE.

        Args:
            build: The finished build
            stream: Build log stream (stdout if None)

        Returns:
            NotificationOutcome

        Raises:
            ClientConfigurationError: If the trigger's instance is not registered
        """
        build_log = BuildLog(stream)

        with log_context(build=build.full_display_name, trigger=self.trigger.name):
            if build.result is not BuildResult.SUCCESS:
                self.logger.info(
                    "Build did not succeed, skipping notification",
                    extra={"event": "notifier.skipped.build_result", "build_result": build.result.value},
                )
                return NotificationOutcome(notified=False, success=True, build_result=build.result)

            if self.matcher.unconditional:
                build_log.println("Notifying Rundeck...")
            else:
                match = self.matcher.find_match(build)
                if match is None:
                    self.logger.info(
                        "No tagged commit, skipping notification",
                        extra={"event": "notifier.skipped.no_tag", "tags": self.matcher.tags},
                    )
                    return NotificationOutcome(notified=False, success=True, build_result=build.result)
                build_log.println(f"{match.describe()} - Notifying Rundeck...")

            outcome = self._notify(build, build_log)

            if not outcome.success and self.trigger.fail_on_error:
                build.result = BuildResult.FAILURE
                outcome.build_result = BuildResult.FAILURE
                self.logger.warning(
                    "Marking build as failed",
                    extra={"event": "notifier.build_failed", "error": outcome.error_message},
                )

            return outcome

    def _notify(self, build: Build, build_log: BuildLog) -> NotificationOutcome:
        context = build.placeholder_context()
        options = parse_options(self.trigger.options, context)
        node_filters = parse_options(self.trigger.node_filters, context)

        client = self.registry.get_client(
            self.trigger.instance, self.trigger.username, self.trigger.password
        )
        tracker = ExecutionTracker(client, poll_interval=self.poll_interval, sleep=self._sleep)

        try:
            execution = tracker.trigger(self.trigger.job_id, options=options, node_filters=node_filters)
            build_log.println(
                f"Notification succeeded ! Execution #{execution.id}, at {execution.url} "
                f"(status : {status_label(execution)})"
            )
            self.logger.info(
                "Rundeck notified",
                extra={
                    "event": "notifier.notified",
                    "job_id": self.trigger.job_id,
                    "execution_id": execution.id,
                    "option_count": len(options),
                },
            )

            if not self.trigger.wait_for_completion:
                return NotificationOutcome(
                    notified=True,
                    success=True,
                    build_result=build.result,
                    execution=execution,
                    badge_url=execution.url,
                    tracking=tracker.result(),
                )

            build_log.println("Waiting for Rundeck execution to finish...")
            result = tracker.wait_for_completion()
            build_log.println(
                f"Rundeck execution #{result.execution.id} finished in "
                f"{format_duration_words(result.duration)}, with status : {status_label(result.execution)}"
            )
            return NotificationOutcome(
                notified=True,
                success=result.succeeded,
                build_result=build.result,
                execution=result.execution,
                badge_url=result.execution.url or execution.url,
                tracking=result,
            )

        except ApiLoginError as e:
            message = f"Login failed on {client.url} : {e.message}"
        except ApiError as e:
            message = f"Error while talking to Rundeck's API at {client.url} : {e.message}"
        except RundeckError as e:
            message = f"Error while talking to Rundeck's API at {client.url} : {e}"

        build_log.println(message)
        self.logger.error(
            message,
            extra={"event": "notifier.failed", "state": tracker.state.value, "polls": tracker.polls},
        )
        return NotificationOutcome(
            notified=True,
            success=False,
            build_result=build.result,
            execution=tracker.execution,
            badge_url=tracker.execution.url if tracker.execution is not None else None,
            tracking=tracker.result() if tracker.execution is not None else None,
            error_message=message,
        )
