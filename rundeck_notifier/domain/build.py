"""CI build as seen by the notifier.

The CI server owns builds; the notifier only needs the pieces below to
decide whether to notify and to fill in job options.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class BuildResult(str, Enum):
    """Result of a CI build, ordered from best to worst."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class ChangeLogEntry:
    """One source-control change (commit) included in a build.

    Attributes:
        message: Commit message
        author: Display name of the author, when known
    """

    message: str
    author: Optional[str] = None


@dataclass
class Build:
    """A CI build and, through ``upstream``, the chain of builds that caused it.

    Attributes:
        job_name: Name of the CI job
        number: Build number
        result: Build result so far
        workspace: Workspace path, when the build has one
        change_set: Source-control changes of this build
        upstream: Build that triggered this one, if any
        environment: Extra variables available for option placeholders
    """

    job_name: str
    number: int
    result: BuildResult = BuildResult.SUCCESS
    workspace: Optional[str] = None
    change_set: List[ChangeLogEntry] = field(default_factory=list)
    upstream: Optional["Build"] = None
    environment: Dict[str, str] = field(default_factory=dict)

    @property
    def full_display_name(self) -> str:
        """Display name in the CI server's format, e.g. ``deploy #12``."""
        return f"{self.job_name} #{self.number}"

    def placeholder_context(self) -> Dict[str, str]:
        """Values available to ``$NAME`` placeholders in job options.

        The build environment, overridden by JOB_NAME, BUILD_NUMBER,
        WORKSPACE and, for builds caused by another build, UPSTREAM_BUILD.
        """
        context = dict(self.environment)
        context["JOB_NAME"] = self.job_name
        context["BUILD_NUMBER"] = str(self.number)
        if self.workspace:
            context["WORKSPACE"] = self.workspace
        if self.upstream is not None:
            context["UPSTREAM_BUILD"] = self.upstream.full_display_name
        return context
