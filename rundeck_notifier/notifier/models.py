"""Result objects returned by the notifier and its validation checks."""

from dataclasses import dataclass
from typing import Optional

from rundeck_notifier.domain.build import BuildResult
from rundeck_notifier.domain.models import Execution
from rundeck_notifier.tracking.models import TrackingResult


@dataclass
class NotificationOutcome:
    """What happened when a build was offered to a trigger.

    Attributes:
        notified: True when a job run was attempted
        success: False when the run could not be started, or ended FAILED/ABORTED
        build_result: Build result after the fail policy was applied
        execution: Last execution observed, if one was started
        badge_url: Execution URL to link from the build page
        tracking: Tracker result, if one was started
        error_message: Build log line describing the error, if any
    """

    notified: bool
    success: bool
    build_result: BuildResult
    execution: Optional[Execution] = None
    badge_url: Optional[str] = None
    tracking: Optional[TrackingResult] = None
    error_message: Optional[str] = None

    @property
    def failed_build(self) -> bool:
        return self.build_result is BuildResult.FAILURE


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a connection or job check, worded for the user."""

    ok: bool
    message: str

    def __str__(self) -> str:
        return self.message
