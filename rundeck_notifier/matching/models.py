"""Result of looking for a notification tag in a build's change log."""

from dataclasses import dataclass

from rundeck_notifier.domain.build import Build, ChangeLogEntry


@dataclass(frozen=True)
class TagMatch:
    """A configured tag found in a commit message.

    Attributes:
        tag: The configured tag that matched
        entry: Change log entry whose message contains the tag
        build: Build whose change set holds the entry
        upstream: True when ``build`` is an upstream build, not the one notifying
    """

    tag: str
    entry: ChangeLogEntry
    build: Build
    upstream: bool = False

    def describe(self) -> str:
        """Build log wording, e.g. ``Found #deploy in changelog (from jdoe)``."""
        text = f"Found {self.tag} in changelog (from {self.entry.author or 'unknown'})"
        if self.upstream:
            text += f" in upstream build ({self.build.full_display_name})"
        return text
