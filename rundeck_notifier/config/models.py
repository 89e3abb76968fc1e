"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


def _strip_required(v: str) -> str:
    stripped = v.strip()
    if not stripped:
        raise ValueError("Field cannot be empty or whitespace-only")
    return stripped


def _check_credential_pair(username: Optional[str], password: Optional[str], owner: str) -> None:
    if username and password is None:
        raise ValueError(f"{owner}: username is set but password is not")
    if password is not None and not username:
        raise ValueError(f"{owner}: password is set but username is not")


class RundeckInstanceConfig(BaseModel):
    """A named Rundeck instance and its default credentials."""

    name: str = Field(..., min_length=1, description="Name triggers use to reference this instance")
    url: str = Field(..., min_length=1, description="Base URL, e.g. http://rundeck:4440")
    username: Optional[str] = Field(None, description="Default login")
    password: Optional[str] = Field(None, description="Default password")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Strip whitespace from the instance name."""
        return _strip_required(v)

    @field_validator("url")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        """Require an http(s) URL and drop the trailing slash."""
        stripped = _strip_required(v)
        if not stripped.startswith(("http://", "https://")):
            raise ValueError(f"url must start with http:// or https://, got: {stripped}")
        return stripped.rstrip("/")

    @model_validator(mode="after")
    def validate_credentials(self):
        """Username and password are configured together."""
        _check_credential_pair(self.username, self.password, f"Instance '{self.name}'")
        return self


class TriggerConfig(BaseModel):
    """Per-build notification settings: which job to run, and how."""

    name: str = Field(..., min_length=1, description="Trigger name, used on the command line")
    instance: str = Field(..., min_length=1, description="Name of the Rundeck instance")
    job_id: str = Field(..., min_length=1, description="Identifier of the job to run")
    options: Optional[str] = Field(None, description="key=value lines passed as job options")
    node_filters: Optional[str] = Field(None, description="key=value lines passed as node filters")
    tags: Optional[str] = Field(
        None, description="Comma-separated tags; when set, only tagged commits notify"
    )
    wait_for_completion: bool = Field(False, description="Block until the execution finishes")
    fail_on_error: bool = Field(False, description="Fail the build when Rundeck fails")
    username: Optional[str] = Field(None, description="Login overriding the instance default")
    password: Optional[str] = Field(None, description="Password overriding the instance default")

    @field_validator("name", "instance", "job_id")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from string fields."""
        return _strip_required(v)

    @model_validator(mode="after")
    def validate_credentials(self):
        """Username and password are overridden together."""
        _check_credential_pair(self.username, self.password, f"Trigger '{self.name}'")
        return self


class PollingConfig(BaseModel):
    """Settings for waiting on an execution."""

    interval: str = Field("5s", description="Delay between two status requests")

    # Computed field
    interval_seconds: Optional[int] = None

    @model_validator(mode="after")
    def compute_interval(self):
        """Parse the interval and check it lies between 1 second and 1 hour."""
        try:
            seconds = parse_duration(self.interval)
            validate_duration_range(seconds, min_seconds=1, max_seconds=3600, label="Poll interval")
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        self.interval_seconds = seconds
        return self


class JobCacheConfig(BaseModel):
    """Cache of job definitions looked up while validating triggers."""

    enabled: bool = Field(False, description="Cache job definitions")
    expiration: str = Field("30m", description="How long a cached definition stays valid")

    # Computed field
    expiration_seconds: Optional[int] = None

    @model_validator(mode="after")
    def compute_expiration(self):
        """Parse the expiration duration."""
        try:
            self.expiration_seconds = parse_duration(self.expiration)
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class AdvancedConfig(BaseModel):
    """Advanced runtime settings."""

    http_request_timeout: int = Field(
        30, ge=5, le=300, description="Request timeout for Rundeck API calls (seconds)"
    )
    user_agent: str = Field(
        "RundeckNotifier/0.1",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        """Strip whitespace from user agent."""
        return _strip_required(v)


class AppConfig(BaseModel):
    """Root configuration object."""

    instances: List[RundeckInstanceConfig] = Field(
        ..., min_length=1, description="Rundeck instances triggers can target"
    )
    triggers: List[TriggerConfig] = Field(default_factory=list, description="Configured triggers")
    polling: PollingConfig = Field(default_factory=PollingConfig, description="Polling settings")
    job_cache: JobCacheConfig = Field(default_factory=JobCacheConfig, description="Job cache")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    advanced: AdvancedConfig = Field(
        default_factory=AdvancedConfig, description="Advanced runtime settings"
    )

    @model_validator(mode="after")
    def validate_references(self):
        """Instance names are unique and every trigger targets a known instance."""
        seen = set()
        for instance in self.instances:
            if instance.name in seen:
                raise ValueError(f"Duplicate instance: '{instance.name}' appears multiple times")
            seen.add(instance.name)

        trigger_names = set()
        for trigger in self.triggers:
            if trigger.instance not in seen:
                raise ValueError(
                    f"Trigger '{trigger.name}' references unknown instance '{trigger.instance}'. "
                    f"Known instances: {', '.join(sorted(seen))}"
                )
            if trigger.name in trigger_names:
                raise ValueError(f"Duplicate trigger: '{trigger.name}' appears multiple times")
            trigger_names.add(trigger.name)

        return self

    def instances_by_name(self) -> Dict[str, RundeckInstanceConfig]:
        """Map instance name to its configuration."""
        return {instance.name: instance for instance in self.instances}

    def get_trigger(self, name: str) -> Optional[TriggerConfig]:
        """Get a trigger by its name."""
        for trigger in self.triggers:
            if trigger.name == name:
                return trigger
        return None
