"""Registry of named Rundeck instances and the clients built from them."""

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from rundeck_notifier.config.models import AdvancedConfig, AppConfig, RundeckInstanceConfig
from rundeck_notifier.logging import get_logger

from .client import RundeckClient
from .exceptions import ClientConfigurationError

logger = get_logger(__name__, component="client")


class RundeckRegistry:
    """Read-only mapping of instance name to instance configuration.

    The mapping is frozen at construction, so builds running on different
    threads can share one registry without locking.

    Example:
        >>> registry = RundeckRegistry.from_config(app_config)
        >>> client = registry.get_client("Default")
        >>> client.trigger_job("1", {"version": "1.2"})
    """

    def __init__(
        self,
        instances: Iterable[RundeckInstanceConfig],
        advanced: Optional[AdvancedConfig] = None,
    ) -> None:
        by_name = {}
        for instance in instances:
            if instance.name in by_name:
                raise ClientConfigurationError(f"Duplicate Rundeck instance: '{instance.name}'")
            by_name[instance.name] = instance

        self._instances: Mapping[str, RundeckInstanceConfig] = MappingProxyType(by_name)
        self.advanced = advanced or AdvancedConfig()

    @classmethod
    def from_config(cls, app_config: AppConfig) -> "RundeckRegistry":
        """Build a registry from the loaded application configuration."""
        return cls(app_config.instances, app_config.advanced)

    @property
    def instances(self) -> Mapping[str, RundeckInstanceConfig]:
        """Read-only view of the registered instances."""
        return self._instances

    def names(self) -> List[str]:
        """Registered instance names, sorted."""
        return sorted(self._instances)

    def get_instance(self, name: str) -> RundeckInstanceConfig:
        """Look up an instance by name.

        Raises:
            ClientConfigurationError: If no instance has that name
        """
        try:
            return self._instances[name]
        except KeyError:
            known = ", ".join(self.names()) or "none"
            raise ClientConfigurationError(
                f"Unknown Rundeck instance: '{name}'. Known instances: {known}"
            ) from None

    def get_client(
        self,
        name: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> RundeckClient:
        """Create a client for a named instance.

        Explicit credentials replace the instance defaults; without them the
        instance's own login is used.

        Args:
            name: Instance name
            username: Login overriding the instance default
            password: Password overriding the instance default

        Returns:
            A new RundeckClient

        Raises:
            ClientConfigurationError: If the instance is unknown
        """
        instance = self.get_instance(name)

        if username:
            login, secret = username, password
        else:
            login, secret = instance.username, instance.password

        logger.debug(
            "Creating Rundeck client",
            extra={
                "event": "client.created",
                "instance": name,
                "url": instance.url,
                "username": login,
                "credential_override": bool(username),
            },
        )

        return RundeckClient(
            url=instance.url,
            username=login,
            password=secret,
            timeout=self.advanced.http_request_timeout,
            user_agent=self.advanced.user_agent,
        )
