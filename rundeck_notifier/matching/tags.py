"""Decide whether a build's commits ask for a Rundeck notification.

With no tags configured every build notifies. Otherwise a build notifies
only when a commit message contains one of the tags, e.g. ``#deploy``.
Builds without changes of their own (typically builds started by another
build) are judged on the nearest upstream build that has changes.
"""

import logging
from typing import Iterable, List, Optional

from rundeck_notifier.domain.build import Build

from .models import TagMatch

logger = logging.getLogger(__name__)


def parse_tags(tags_text: Optional[str]) -> List[str]:
    """Split a comma-separated tag list.

    Example:
        >>> parse_tags("#tag1, #tag2")
        ['#tag1', '#tag2']
        >>> parse_tags("  ")
        []
    """
    if not tags_text:
        return []
    return [tag.strip() for tag in tags_text.split(",") if tag.strip()]


def should_notify(tags: Iterable[str], change_descriptions: Iterable[str]) -> bool:
    """True when no tags are configured or a description contains a tag.

    Matching is a case-sensitive substring test on the literal tag text.
    """
    tags = list(tags)
    if not tags:
        return True
    return any(tag in description for description in change_descriptions for tag in tags)


class TagMatcher:
    """Looks for configured tags in a build's change log and upstream chain."""

    def __init__(self, tags: Iterable[str], logger_instance: Optional[logging.Logger] = None):
        """Initialize TagMatcher.

        Args:
            tags: Tags to look for; empty means every build notifies
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.tags = list(tags)
        self.logger = logger_instance or logger

    @classmethod
    def from_text(cls, tags_text: Optional[str]) -> "TagMatcher":
        """Build a matcher from the comma-separated configuration value."""
        return cls(parse_tags(tags_text))

    @property
    def unconditional(self) -> bool:
        """True when no tags are configured."""
        return not self.tags

    def find_match(self, build: Build) -> Optional[TagMatch]:
        """Find the first tagged commit that applies to ``build``.

        Walks from ``build`` up its upstream chain until a build with a
        non-empty change set is found, and only looks at that build.

        Returns:
            The match, or None when no tag applies (always None when the
            matcher is unconditional)
        """
        current: Optional[Build] = build
        while current is not None:
            if current.change_set:
                for entry in current.change_set:
                    for tag in self.tags:
                        if tag in entry.message:
                            return TagMatch(
                                tag=tag,
                                entry=entry,
                                build=current,
                                upstream=current is not build,
                            )

                self.logger.debug(
                    "No tag found in change set",
                    extra={
                        "event": "matching.tags.not_found",
                        "build": current.full_display_name,
                        "tags": self.tags,
                        "changes": len(current.change_set),
                    },
                )
                return None

            current = current.upstream

        self.logger.debug(
            "No change set in build or upstream chain",
            extra={"event": "matching.tags.no_changes", "build": build.full_display_name},
        )
        return None

    def should_notify(self, build: Build) -> bool:
        """True when the build qualifies for a notification."""
        return self.unconditional or self.find_match(build) is not None
