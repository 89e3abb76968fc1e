"""Domain models for the Rundeck notifier."""

from .build import Build, BuildResult, ChangeLogEntry
from .models import Execution, ExecutionStatus, Job, JobOption

__all__ = [
    "Build",
    "BuildResult",
    "ChangeLogEntry",
    "Execution",
    "ExecutionStatus",
    "Job",
    "JobOption",
]
