"""Test helper utilities for Rundeck Notifier tests."""

from .responses import FIXTURES_DIR, RESPONSES_DIR, make_response, read_response

__all__ = ["FIXTURES_DIR", "RESPONSES_DIR", "make_response", "read_response"]
