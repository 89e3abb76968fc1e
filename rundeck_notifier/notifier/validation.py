"""Checks run from the command line before a trigger is used for real."""

from typing import Optional

from rundeck_notifier.client.cache import JobDetailsCache
from rundeck_notifier.client.exceptions import ApiError, ApiLoginError, RundeckError
from rundeck_notifier.client.registry import RundeckRegistry
from rundeck_notifier.logging import get_logger

from .models import ValidationResult

logger = get_logger(__name__, component="validation")


def check_connection(
    registry: RundeckRegistry,
    instance: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> ValidationResult:
    """Check that an instance is reachable and accepts the credentials.

    Raises:
        ClientConfigurationError: If the instance is not registered
    """
    client = registry.get_client(instance, username, password)

    try:
        client.ping()
    except RundeckError as e:
        logger.warning(
            "Rundeck ping failed",
            extra={"event": "validation.ping.failed", "instance": instance, "error": str(e)},
        )
        return ValidationResult(False, f"We couldn't find a live Rundeck instance at {client.url}")

    try:
        client.test_credentials()
    except ApiLoginError:
        return ValidationResult(False, f"Your credentials for the user {client.username} are not valid !")
    except RundeckError as e:
        return ValidationResult(False, f"Error while talking to Rundeck's API at {client.url} : {e}")

    logger.info(
        "Rundeck connection validated",
        extra={"event": "validation.connection.ok", "instance": instance},
    )
    return ValidationResult(True, "Your Rundeck instance is alive, and your credentials are valid !")


def check_job(
    registry: RundeckRegistry,
    instance: str,
    job_id: str,
    cache: Optional[JobDetailsCache] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> ValidationResult:
    """Look a job up and describe it, e.g. ``Your Rundeck job is : [1] group/name (project)``.

    Raises:
        ClientConfigurationError: If the instance is not registered
    """
    if not job_id or not job_id.strip():
        return ValidationResult(False, "The job identifier is mandatory !")

    job_id = job_id.strip()
    client = registry.get_client(instance, username, password)
    if cache is None:
        cache = JobDetailsCache()

    try:
        job = cache.get_or_load(instance, job_id, lambda: client.get_job(job_id))
    except ApiLoginError as e:
        return ValidationResult(False, f"Login failed on {client.url} : {e.message}")
    except ApiError as e:
        return ValidationResult(False, f"Could not find a job with the identifier : {job_id} ({e.message})")
    except RundeckError as e:
        return ValidationResult(False, f"Error while talking to Rundeck's API at {client.url} : {e}")

    return ValidationResult(True, f"Your Rundeck job is : {job}")
