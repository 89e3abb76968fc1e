"""HTTP client for the Rundeck API (version 1).

Wraps the three remote operations the notifier needs (run a job, read an
execution, read a job definition) plus the liveness and credential checks
used when validating configuration. Every call blocks until a response or a
transport failure; nothing is retried.
"""

import logging
from typing import Dict, Mapping, Optional

import requests
from requests.auth import HTTPBasicAuth

from rundeck_notifier.domain.models import Execution, Job
from rundeck_notifier.logging import get_logger

from .arguments import generate_arg_string
from .exceptions import (
    ApiError,
    ApiLoginError,
    ClientConfigurationError,
    RequestTimeoutError,
    TransportError,
)
from .parser import parse_error, parse_execution, parse_job

logger = get_logger(__name__, component="client")

API_VERSION = 1


class RundeckClient:
    """Client bound to one Rundeck instance and one set of credentials.

    Attributes:
        url: Base URL of the instance, without trailing slash
        username: Login sent with HTTP basic auth (None for anonymous)
        timeout: HTTP request timeout in seconds
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: int = 30,
        user_agent: str = "RundeckNotifier/0.1",
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize client.

        Args:
            url: Base URL of the Rundeck instance (http or https)
            username: Login for HTTP basic auth
            password: Password for HTTP basic auth
            timeout: Request timeout in seconds (5-300)
            user_agent: User-Agent header sent with every request
            session: Pre-built session, mostly for tests

        Raises:
            ClientConfigurationError: If url or timeout is invalid
        """
        if not url or not url.strip():
            raise ClientConfigurationError("Rundeck url cannot be empty")
        if not 5 <= timeout <= 300:
            raise ClientConfigurationError(
                f"Timeout must be between 5 and 300 seconds, got: {timeout}"
            )

        self.url = url.strip().rstrip("/")
        self.username = username
        self.timeout = timeout

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent, "Accept": "application/xml"})
        if username is not None:
            self._session.auth = HTTPBasicAuth(username, password or "")

    def __repr__(self) -> str:
        return f"RundeckClient(url={self.url!r}, username={self.username!r})"

    def __str__(self) -> str:
        return f"Rundeck at {self.url} (user: {self.username})"

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    def ping(self) -> None:
        """Check that the instance answers at all.

        Raises:
            TransportError: If the instance is unreachable or answers >= 400
        """
        response = self._send(f"{self.url}/")
        if response.status_code >= 400:
            raise TransportError(
                f"Rundeck is not alive: HTTP {response.status_code} {response.reason}",
                url=self.url,
                status_code=response.status_code,
            )

    def test_credentials(self) -> None:
        """Check that the configured credentials are accepted.

        Raises:
            ApiLoginError: If the service rejects the credentials
            TransportError: If no valid answer was obtained
        """
        self._get(f"/api/{API_VERSION}/system/info")

    def trigger_job(
        self,
        job_id: str,
        options: Optional[Mapping[str, str]] = None,
        node_filters: Optional[Mapping[str, str]] = None,
    ) -> Execution:
        """Run a job and return the execution it started.

        Args:
            job_id: Identifier of the job to run
            options: Job options, sent as a single ``argString``
            node_filters: Node filter parameters, sent as-is

        Returns:
            The new Execution (usually RUNNING)

        Raises:
            ApiError: If the service refuses to run the job
            TransportError: If no valid answer was obtained
            MalformedResponseError: If the answer has no usable execution
        """
        params: Dict[str, str] = dict(node_filters or {})
        arg_string = generate_arg_string(options)
        if arg_string:
            params["argString"] = arg_string

        logger.info(
            f"Triggering Rundeck job {job_id}",
            extra={
                "event": "client.job.trigger",
                "job_id": job_id,
                "option_names": sorted(options or {}),
                "node_filters": sorted(node_filters or {}),
            },
        )

        body = self._get(f"/api/{API_VERSION}/job/{job_id}/run", params=params)
        execution = parse_execution(body)

        logger.info(
            f"Rundeck job {job_id} triggered as execution #{execution.id}",
            extra={
                "event": "client.job.triggered",
                "job_id": job_id,
                "execution_id": execution.id,
                "status": execution.status.name,
            },
        )
        return execution

    def get_execution(self, execution_id: int) -> Execution:
        """Fetch the current state of an execution (fresh parse every call)."""
        body = self._get(f"/api/{API_VERSION}/execution/{execution_id}")
        return parse_execution(body)

    def get_job(self, job_id: str) -> Job:
        """Fetch a job definition."""
        body = self._get(f"/api/{API_VERSION}/job/{job_id}")
        return parse_job(body)

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _send(self, url: str, params: Optional[Dict[str, str]] = None) -> requests.Response:
        """Send a GET request, translating requests failures.

        Raises:
            RequestTimeoutError: On timeout
            TransportError: On any other requests failure
        """
        logger.debug(
            f"HTTP GET {url}",
            extra={"event": "client.request", "url": url, "timeout": self.timeout},
        )

        try:
            return self._session.request(
                method="GET",
                url=url,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={"event": "client.request.timeout", "url": url},
            )
            raise RequestTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Request to {url} failed: {e}",
                extra={
                    "event": "client.request.error",
                    "error_type": type(e).__name__,
                    "url": url,
                },
            )
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> str:
        """GET an API path and return the body of a successful response.

        Raises:
            ApiLoginError: On HTTP 401/403
            ApiError: On HTTP >= 400 with a Rundeck error document
            TransportError: On any other failure
        """
        url = f"{self.url}{path}"
        response = self._send(url, params=params)

        if response.status_code < 400:
            logger.debug(
                "HTTP request succeeded",
                extra={
                    "event": "client.request.succeeded",
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            return response.text

        message = parse_error(response.text)
        log_level = logging.ERROR if response.status_code >= 500 else logging.WARNING
        logger.log(
            log_level,
            f"HTTP {response.status_code} error from {url}",
            extra={
                "event": "client.request.error",
                "status_code": response.status_code,
                "url": url,
                "error_message": message,
            },
        )

        if response.status_code in (401, 403):
            raise ApiLoginError(
                message or f"HTTP {response.status_code}: {response.reason} (user: {self.username})"
            )
        if message is not None:
            raise ApiError(message)
        raise TransportError(
            f"HTTP {response.status_code}: {response.reason}",
            url=url,
            status_code=response.status_code,
        )
