"""Tag matching against build change logs.

This module provides:
- parse_tags: split the configured tag list
- should_notify: tag test over plain commit messages
- TagMatcher: tag lookup over a build and its upstream chain
- TagMatch: where a tag was found
"""

from .models import TagMatch
from .tags import TagMatcher, parse_tags, should_notify

__all__ = ["TagMatch", "TagMatcher", "parse_tags", "should_notify"]
