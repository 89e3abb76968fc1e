"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check a raw configuration for likely mistakes that are still valid.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    instances = config_dict.get("instances", [])
    if isinstance(instances, list):
        for instance in instances:
            if not isinstance(instance, dict):
                continue
            name = instance.get("name", "Unknown")
            url = str(instance.get("url", ""))
            if not instance.get("username"):
                warning_messages.append(
                    f"Instance '{name}' has no credentials; triggers must supply their own"
                )
            elif url.startswith("http://"):
                warning_messages.append(
                    f"Instance '{name}' uses plain http; credentials are sent unencrypted"
                )

    triggers = config_dict.get("triggers", [])
    if isinstance(triggers, list):
        for trigger in triggers:
            if not isinstance(trigger, dict):
                continue
            name = trigger.get("name", "Unknown")

            tags = trigger.get("tags")
            if isinstance(tags, str):
                for tag in (t.strip() for t in tags.split(",")):
                    if tag and tag[0].isalnum():
                        warning_messages.append(
                            f"Tag '{tag}' of trigger '{name}' has no marker character "
                            f"(e.g. '#{tag}') and may match ordinary commit messages"
                        )

            if trigger.get("fail_on_error") and not trigger.get("wait_for_completion"):
                warning_messages.append(
                    f"Trigger '{name}' fails the build on error but does not wait; "
                    "only trigger errors will fail the build"
                )

    polling = config_dict.get("polling", {})
    if isinstance(polling, dict):
        interval = polling.get("interval")
        if isinstance(interval, str) and interval.strip().lower() in ("1s", "pt1s"):
            warning_messages.append(
                f"Short polling interval ({interval}) sends a request every second"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
