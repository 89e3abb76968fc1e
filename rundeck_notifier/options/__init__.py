"""Option block parsing for job triggers."""

from .parser import expand_placeholders, parse_options

__all__ = ["expand_placeholders", "parse_options"]
