"""Build notification: run a Rundeck job when a build finishes."""

from .models import NotificationOutcome, ValidationResult
from .service import BuildLog, RundeckNotifier, status_label
from .validation import check_connection, check_job

__all__ = [
    "BuildLog",
    "NotificationOutcome",
    "RundeckNotifier",
    "ValidationResult",
    "check_connection",
    "check_job",
    "status_label",
]
