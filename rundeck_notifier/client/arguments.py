"""Build the ``argString`` query parameter for job runs."""

from typing import Mapping, Optional


def _quote(value: str) -> str:
    if any(char.isspace() for char in value):
        return f"'{value}'"
    return value


def generate_arg_string(options: Optional[Mapping[str, str]]) -> Optional[str]:
    """Render options as a Rundeck argument string.

    Each option becomes ``-name value``; values containing whitespace are
    wrapped in single quotes. Pairs follow the mapping's iteration order,
    which callers must not rely on across calls.

    Args:
        options: Option name to value mapping

    Returns:
        The argument string, ``""`` for an empty mapping, None for None

    Example:
        >>> generate_arg_string({"key1": "value1", "key2": "value 2"})
        "-key1 value1 -key2 'value 2'"
    """
    if options is None:
        return None

    return " ".join(f"-{name} {_quote(str(value))}" for name, value in options.items())
