"""Exceptions raised while talking to a Rundeck instance."""

from typing import Optional


class RundeckError(Exception):
    """Base exception for all Rundeck client errors.

    The notifier catches this to apply its fail-the-build policy; anything
    more specific is only needed to word the build log message.
    """

    pass


class TransportError(RundeckError):
    """No valid answer was obtained from the service.

    Covers refused connections, DNS failures and HTTP error statuses whose
    body is not a Rundeck error document.
    """

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        """Initialize transport error.

        Args:
            message: Human-readable error message
            url: URL that failed
            status_code: HTTP status code, if a response was received
        """
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RequestTimeoutError(TransportError):
    """The request did not complete within the configured timeout."""

    pass


class ApiError(RundeckError):
    """The service answered but refused the operation.

    ``str(error)`` is the service message verbatim, including any trailing
    whitespace the service emitted.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ApiLoginError(ApiError):
    """The service rejected the supplied credentials."""

    pass


class MalformedResponseError(RundeckError):
    """The response could not be turned into a domain object.

    Raised when the body is not XML or lacks a required element or field
    (an execution id, a job id, a status...).
    """

    pass


class ClientConfigurationError(RundeckError):
    """Invalid client configuration (unknown instance name, bad timeout...)."""

    pass
