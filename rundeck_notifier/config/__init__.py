"""Configuration management for the Rundeck notifier."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    AdvancedConfig,
    AppConfig,
    JobCacheConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PollingConfig,
    RundeckInstanceConfig,
    TriggerConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "RundeckInstanceConfig",
    "TriggerConfig",
    "PollingConfig",
    "JobCacheConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
