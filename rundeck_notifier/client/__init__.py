"""Rundeck API client.

Build clients through the registry:
    from rundeck_notifier.client import RundeckRegistry
    registry = RundeckRegistry.from_config(app_config)
    execution = registry.get_client("Default").trigger_job("1", {"version": "1.2"})

Exception handling:
    from rundeck_notifier.client import RundeckError, ApiError, TransportError, MalformedResponseError
"""

from .arguments import generate_arg_string
from .cache import JobDetailsCache
from .client import RundeckClient
from .exceptions import (
    ApiError,
    ApiLoginError,
    ClientConfigurationError,
    MalformedResponseError,
    RequestTimeoutError,
    RundeckError,
    TransportError,
)
from .parser import parse_error, parse_execution, parse_job
from .registry import RundeckRegistry

__all__ = [
    # Client and registry
    "RundeckClient",
    "RundeckRegistry",
    "JobDetailsCache",
    # Parsing helpers
    "generate_arg_string",
    "parse_error",
    "parse_execution",
    "parse_job",
    # Exceptions
    "RundeckError",
    "TransportError",
    "RequestTimeoutError",
    "ApiError",
    "ApiLoginError",
    "MalformedResponseError",
    "ClientConfigurationError",
]
