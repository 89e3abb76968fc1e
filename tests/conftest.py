"""Shared fixtures for the notifier test suite."""

from unittest.mock import MagicMock

import pytest
import requests

from rundeck_notifier.client.client import RundeckClient
from rundeck_notifier.logging.context import clear_log_context
from tests.helpers import make_response, read_response


@pytest.fixture(autouse=True)
def clean_log_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def responses():
    """Loader for recorded XML responses."""
    return read_response


@pytest.fixture
def mock_session():
    """requests.Session double; set ``request.return_value`` or ``side_effect``."""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    session.auth = None
    session.request.return_value = make_response()
    return session


@pytest.fixture
def client(mock_session):
    """Client bound to a fake instance with a mocked session."""
    return RundeckClient(
        url="http://localhost:4440/",
        username="admin",
        password="admin",
        timeout=30,
        session=mock_session,
    )


@pytest.fixture
def build_env_vars(monkeypatch):
    """CI variables describing a successful build."""
    monkeypatch.setenv("JOB_NAME", "my-app")
    monkeypatch.setenv("BUILD_NUMBER", "42")
    monkeypatch.setenv("WORKSPACE", "/var/lib/ci/workspace/my-app")
    monkeypatch.delenv("BUILD_RESULT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
