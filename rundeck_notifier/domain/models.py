"""Domain models for Rundeck jobs and executions.

Both models are built exclusively by the response parser and are frozen:
tracking an execution means replacing the instance with a freshly parsed
one, never mutating it.
- Job: a job definition with its declared options
- Execution: one run of a job, from trigger to terminal status
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from rundeck_notifier.utils.timestamps import ensure_utc


class ExecutionStatus(str, Enum):
    """Execution status as reported by Rundeck (wire values are lowercase)."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"
    OTHER = "other"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "ExecutionStatus":
        """Map a raw status string to a member, case-sensitively.

        The exact wire value ("succeeded") or the exact member name
        ("SUCCEEDED") are recognized. Anything else is OTHER.
        """
        if value is None:
            return cls.OTHER
        for member in cls:
            if value == member.value or value == member.name:
                return member
        return cls.OTHER


TERMINAL_STATUSES = frozenset({
    ExecutionStatus.SUCCEEDED,
    ExecutionStatus.FAILED,
    ExecutionStatus.ABORTED,
})

# Raw statuses outside the enum after which an execution never changes again
TERMINAL_STATUS_VARIANTS = frozenset({"timedout", "incomplete"})


class JobOption(BaseModel):
    """An option declared by a job definition."""

    name: str = Field(..., min_length=1, description="Option name")
    required: bool = Field(False, description="Whether the option must be supplied")
    default_value: Optional[str] = Field(None, description="Default value, if any")

    model_config = {"frozen": True}


class Job(BaseModel):
    """A Rundeck job definition."""

    id: str = Field(..., description="Job identifier")
    name: Optional[str] = Field(None, description="Job name")
    group: Optional[str] = Field(None, description="Job group path")
    project: Optional[str] = Field(None, description="Project the job belongs to")
    description: Optional[str] = Field(None, description="Job description")
    options: Tuple[JobOption, ...] = Field(default_factory=tuple, description="Declared options")

    model_config = {"frozen": True}

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v: str) -> str:
        """Reject blank identifiers."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Job id cannot be empty")
        return stripped

    @property
    def full_name(self) -> str:
        """Group-qualified name, e.g. ``deploy/webapp``."""
        if self.group:
            return f"{self.group}/{self.name or ''}"
        return self.name or ""

    def __str__(self) -> str:
        suffix = f" ({self.project})" if self.project else ""
        return f"[{self.id}] {self.full_name}{suffix}"


class Execution(BaseModel):
    """One run of a Rundeck job.

    ``status_text`` keeps the raw status string so statuses that map to
    OTHER can still be told apart.
    """

    id: int = Field(..., description="Service-assigned execution id")
    status: ExecutionStatus = Field(..., description="Mapped execution status")
    status_text: Optional[str] = Field(None, description="Raw status reported by the service")
    url: Optional[str] = Field(None, description="Follow URL of the execution")
    started_at: Optional[datetime] = Field(None, description="When the execution started (UTC)")
    ended_at: Optional[datetime] = Field(None, description="When the execution ended (UTC)")
    started_by: Optional[str] = Field(None, description="User who started the execution")
    aborted_by: Optional[str] = Field(None, description="User who aborted the execution")
    description: Optional[str] = Field(None, description="Execution description")
    job: Optional[Job] = Field(None, description="Job this execution belongs to")

    model_config = {"frozen": True}

    @field_validator("started_at", "ended_at")
    @classmethod
    def normalize_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store timestamps as UTC-aware datetimes."""
        return ensure_utc(v)

    @property
    def duration(self) -> Optional[timedelta]:
        """Elapsed time between start and end, None while running."""
        if self.started_at is None or self.ended_at is None:
            return None
        return self.ended_at - self.started_at

    @property
    def is_terminal(self) -> bool:
        """True when no further status transition can happen."""
        return (
            self.status in TERMINAL_STATUSES
            or self.status_text in TERMINAL_STATUS_VARIANTS
        )

    def __str__(self) -> str:
        return f"Execution #{self.id} ({self.status.name})"
