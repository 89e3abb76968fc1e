"""Command line entry point for the Rundeck notifier."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import re
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from rundeck_notifier.client.cache import JobDetailsCache
from rundeck_notifier.client.exceptions import ClientConfigurationError
from rundeck_notifier.client.registry import RundeckRegistry
from rundeck_notifier.config.environment import EnvironmentConfig, load_environment_config
from rundeck_notifier.config.exceptions import ConfigurationError
from rundeck_notifier.config.loader import load_config, validate_config_file
from rundeck_notifier.config.models import AppConfig
from rundeck_notifier.domain.build import Build, BuildResult, ChangeLogEntry
from rundeck_notifier.logging import get_logger
from rundeck_notifier.logging.config import configure_logging
from rundeck_notifier.notifier.service import RundeckNotifier
from rundeck_notifier.notifier.validation import check_connection, check_job

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

_DISPLAY_NAME_PATTERN = re.compile(r"^(?P<job>.+?)\s*#(?P<number>\d+)$")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rundeck-notifier",
        description="Rundeck Notifier - Trigger Rundeck jobs at the end of CI builds",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    notify = subparsers.add_parser("notify", help="Run a trigger for the current build")
    notify.add_argument("--trigger", required=True, help="Name of the trigger to run")
    notify.add_argument("--config", type=Path, default=None, help="Path to configuration file")
    notify.add_argument(
        "--message",
        action="append",
        default=[],
        help="Commit message of the build (repeatable)",
    )
    notify.add_argument("--author", default=None, help="Author of the commit messages")
    notify.add_argument(
        "--upstream",
        default=None,
        help="Upstream build that caused this one, as 'job-name #number'",
    )
    notify.add_argument(
        "--upstream-message",
        action="append",
        default=[],
        help="Commit message of the upstream build (repeatable)",
    )

    check = subparsers.add_parser("check", help="Check an instance and, optionally, a job")
    check.add_argument("--instance", required=True, help="Name of the Rundeck instance")
    check.add_argument("--job", default=None, help="Job identifier to look up")
    check.add_argument("--config", type=Path, default=None, help="Path to configuration file")

    validate = subparsers.add_parser("validate", help="Validate a configuration file")
    validate.add_argument("--config", type=Path, required=True, help="Path to configuration file")

    return parser


def parse_display_name(display_name: str) -> Tuple[str, int]:
    """Split ``'deploy #12'`` into ``('deploy', 12)``.

    Raises:
        ConfigurationError: If the name does not end with ``#<number>``
    """
    match = _DISPLAY_NAME_PATTERN.match(display_name.strip())
    if not match:
        raise ConfigurationError(
            f"Invalid upstream build: '{display_name}'",
            suggestions=["Use the 'job-name #number' format, e.g. 'compile #42'"],
        )
    return match.group("job"), int(match.group("number"))


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """Load configuration and configure logging.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config = load_config(config_path)
    env_config = load_environment_config()

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    configure_logging(
        level=env_config.log_level,
        format_type=app_config.logging.format,
        environment=os.environ.get("ENVIRONMENT", "local"),
    )

    logger.debug(
        "Configuration loaded",
        extra={
            "event": "config.loaded",
            "instance_count": len(app_config.instances),
            "trigger_count": len(app_config.triggers),
            "poll_interval_seconds": app_config.polling.interval_seconds,
        },
    )
    return app_config, env_config


def build_from_environment(
    env_config: EnvironmentConfig,
    messages: Sequence[str],
    author: Optional[str] = None,
    upstream: Optional[str] = None,
    upstream_messages: Sequence[str] = (),
) -> Build:
    """Describe the current build from CI variables and command line arguments.

    Raises:
        ConfigurationError: If JOB_NAME or BUILD_NUMBER is missing
    """
    if not env_config.job_name or env_config.build_number is None:
        raise ConfigurationError(
            "Build context is incomplete",
            errors=["JOB_NAME and BUILD_NUMBER must both be set"],
            suggestions=["Run the notifier as a post-build step, or set them in .env"],
        )

    upstream_build = None
    if upstream:
        upstream_job, upstream_number = parse_display_name(upstream)
        upstream_build = Build(
            job_name=upstream_job,
            number=upstream_number,
            change_set=[ChangeLogEntry(message, author) for message in upstream_messages],
        )

    return Build(
        job_name=env_config.job_name,
        number=env_config.build_number,
        result=BuildResult(env_config.build_result),
        workspace=env_config.workspace,
        change_set=[ChangeLogEntry(message, author) for message in messages],
        upstream=upstream_build,
        environment=env_config.variables,
    )


def run_notify(args: argparse.Namespace) -> int:
    app_config, env_config = load_runtime_config(args.config, args.log_level)

    trigger = app_config.get_trigger(args.trigger)
    if trigger is None:
        known = ", ".join(t.name for t in app_config.triggers) or "none"
        raise ConfigurationError(
            f"Unknown trigger: '{args.trigger}'",
            suggestions=[f"Known triggers: {known}"],
        )

    build = build_from_environment(
        env_config,
        args.message,
        author=args.author,
        upstream=args.upstream,
        upstream_messages=args.upstream_message,
    )

    notifier = RundeckNotifier(
        trigger,
        RundeckRegistry.from_config(app_config),
        poll_interval=app_config.polling.interval_seconds,
    )
    outcome = notifier.perform(build)

    logger.info(
        "Notification finished",
        extra={
            "event": "cli.notify.completed",
            "notified": outcome.notified,
            "success": outcome.success,
            "build_result": outcome.build_result.value,
            "badge_url": outcome.badge_url,
        },
    )
    return EXIT_FAILURE if outcome.notified and outcome.failed_build else EXIT_OK


def run_check(args: argparse.Namespace) -> int:
    app_config, _ = load_runtime_config(args.config, args.log_level)
    registry = RundeckRegistry.from_config(app_config)

    results: List = [check_connection(registry, args.instance)]
    if args.job and results[0].ok:
        cache = JobDetailsCache.from_config(app_config.job_cache)
        results.append(check_job(registry, args.instance, args.job, cache))

    for result in results:
        print(result.message)
    return EXIT_OK if all(result.ok for result in results) else EXIT_FAILURE


def run_validate(args: argparse.Namespace) -> int:
    return EXIT_OK if validate_config_file(args.config) else EXIT_CONFIG_ERROR


COMMANDS = {
    "notify": run_notify,
    "check": run_check,
    "validate": run_validate,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the Rundeck notifier.

    Returns:
        Exit code (0 for success, 1 for failure, 2 for configuration errors).
    """
    args = build_parser().parse_args(argv)

    try:
        return COMMANDS[args.command](args)
    except (ConfigurationError, ClientConfigurationError) as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": type(e).__name__},
        )
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "cli.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
