"""Parse ``key=value`` option blocks into job options.

One option per line, the way CI users paste them into their job
configuration::

    # deployment options
    artifact=$JOB_NAME-${BUILD_NUMBER}.war
    nodes=web1,web2

Only ``=`` separates a name from its value. Backslash escapes and line
continuations are kept as literal text, not decoded.

Values may reference build context as ``$NAME`` or ``${NAME}``.
"""

import re
from typing import Dict, Mapping, Optional

from rundeck_notifier.logging import get_logger

logger = get_logger(__name__, component="options")

PLACEHOLDER_PATTERN = re.compile(r"\$\{(\w+)\}|\$(\w+)")

COMMENT_MARKERS = ("#", "!")


def expand_placeholders(value: str, context: Optional[Mapping[str, str]]) -> str:
    """Replace ``$NAME`` / ``${NAME}`` references with context values.

    A single left-to-right pass: substituted text is never rescanned, and
    references to names missing from the context are kept literally.

    Example:
        >>> expand_placeholders("build-${BUILD_NUMBER}-$OTHER", {"BUILD_NUMBER": "12"})
        'build-12-$OTHER'
    """
    if not context or "$" not in value:
        return value

    def _substitute(match: re.Match) -> str:
        name = match.group(1) or match.group(2)
        replacement = context.get(name)
        return match.group(0) if replacement is None else str(replacement)

    return PLACEHOLDER_PATTERN.sub(_substitute, value)


def parse_options(
    raw_text: Optional[str],
    context: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Parse an option block into a name to value mapping.

    Rules:
    - blank lines and lines starting with ``#`` or ``!`` are comments
    - lines without ``=`` are ignored
    - the first ``=`` splits name and value, so values may contain ``=``
    - names are trimmed; values lose their leading whitespace only
    - placeholders in values are expanded from ``context``
    - entries with an empty name or value are dropped
    - a repeated name keeps its last value

    Never raises: malformed lines are skipped.

    Args:
        raw_text: Option block, may be None or empty
        context: Values for placeholder expansion

    Returns:
        Mapping of option name to value, in first-declaration order
    """
    options: Dict[str, str] = {}
    if not raw_text:
        return options

    for line_number, line in enumerate(raw_text.splitlines(), 1):
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_MARKERS):
            continue

        name, separator, value = line.partition("=")
        name = name.strip()
        if not separator or not name:
            logger.debug(
                "Skipping malformed option line",
                extra={"event": "options.line.skipped", "line_number": line_number},
            )
            continue

        value = expand_placeholders(value.lstrip(), context)
        if not value:
            logger.debug(
                f"Skipping option '{name}' with an empty value",
                extra={"event": "options.line.skipped", "line_number": line_number},
            )
            continue

        options[name] = value

    return options
