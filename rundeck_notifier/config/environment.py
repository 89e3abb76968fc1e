"""Environment variable loading and validation.

The notifier runs as a post-build step, so the build it reports on is
described by the variables the CI server exports (Jenkins naming).
"""

import os
from typing import Dict, Mapping, Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_BUILD_RESULTS = ("SUCCESS", "UNSTABLE", "FAILURE", "NOT_BUILT", "ABORTED")


class EnvironmentConfig:
    """Build context and overrides read from the environment."""

    def __init__(
        self,
        job_name: Optional[str] = None,
        build_number: Optional[int] = None,
        workspace: Optional[str] = None,
        build_result: str = "SUCCESS",
        log_level: Optional[str] = None,
        variables: Optional[Mapping[str, str]] = None,
    ):
        self.job_name = job_name
        self.build_number = build_number
        self.workspace = workspace
        self.build_result = build_result
        self.log_level = log_level
        self.variables: Dict[str, str] = dict(variables or {})


def load_environment_config(
    environ: Optional[Mapping[str, str]] = None,
    require_build: bool = False,
) -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Build variables (required when require_build is True):
    - JOB_NAME: Name of the CI job
    - BUILD_NUMBER: Build number (positive integer)

    Optional variables:
    - WORKSPACE: Workspace path of the build
    - BUILD_RESULT: Result of the build so far (default SUCCESS)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Args:
        environ: Variables to read (defaults to os.environ)
        require_build: Fail when the build variables are missing

    Returns:
        EnvironmentConfig with validated values; ``variables`` holds a copy
        of the whole environment for option placeholder expansion

    Raises:
        ConfigurationError: If variables are missing or invalid
    """
    env = dict(os.environ if environ is None else environ)
    errors = []

    job_name = env.get("JOB_NAME") or None
    build_number_str = env.get("BUILD_NUMBER")
    build_result = (env.get("BUILD_RESULT") or "SUCCESS").upper()
    log_level = env.get("LOG_LEVEL") or None

    if require_build and not job_name:
        errors.append("Missing required environment variable: JOB_NAME")
    if require_build and not build_number_str:
        errors.append("Missing required environment variable: BUILD_NUMBER")

    build_number = None
    if build_number_str:
        try:
            build_number = int(build_number_str)
            if build_number < 1:
                errors.append(f"Invalid BUILD_NUMBER: {build_number}. Must be positive.")
        except ValueError:
            errors.append(f"Invalid BUILD_NUMBER: '{build_number_str}'. Must be a valid integer.")

    if build_result not in VALID_BUILD_RESULTS:
        errors.append(
            f"Invalid BUILD_RESULT: '{build_result}'. Must be one of: {', '.join(VALID_BUILD_RESULTS)}"
        )

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Run the notifier as a post-build step so the CI server exports JOB_NAME and BUILD_NUMBER",
                "Copy .env.example to .env to simulate a build locally",
            ],
        )

    return EnvironmentConfig(
        job_name=job_name,
        build_number=build_number,
        workspace=env.get("WORKSPACE") or None,
        build_result=build_result,
        log_level=log_level.upper() if log_level else None,
        variables=env,
    )
