"""Load generator configuration using Pydantic Settings.

Every knob is read from a ``LOADGEN_``-prefixed environment variable (or a
``.env`` file) and validated once at startup, so a misconfigured run fails
before any traffic is sent.
"""

import json
from enum import Enum
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from tsdb_loadgen.core.exceptions import ConfigurationError

ENV_PREFIX = "LOADGEN_"

# Hints shown when a required variable is missing.
_REQUIRED_HINTS = {
    "write_hostname": (
        "set it to the ingress hostname on the write path "
        "(eg. distributor hostname)"
    ),
    "read_hostname": (
        "set it to the ingress hostname on the read path "
        "(eg. query-frontend hostname)"
    ),
}


class Scheme(str, Enum):
    """Protocol scheme used for both write and read requests."""

    HTTP = "http"
    HTTPS = "https"


class Settings(BaseSettings):
    """Load test settings with validation.

    The total series cardinality is derived from the write request rate and
    the series per request, so the write path always tiles the series space
    in whole batches.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Endpoints
    write_hostname: str = Field(
        min_length=1,
        description="Hostname on the write path (eg. distributor)",
    )
    read_hostname: str = Field(
        min_length=1,
        description="Hostname on the read path (eg. query-frontend)",
    )
    scheme: Scheme = Field(
        default=Scheme.HTTP,
        description="Protocol scheme used for requests",
    )

    # Authentication
    username: str = Field(
        default="",
        description="Username for HTTP basic authentication",
    )
    write_token: str = Field(
        default="",
        description="Token for basic authentication on the write path",
    )
    read_token: str = Field(
        default="",
        description="Token for basic authentication on the read path",
    )
    tenant_id: str = Field(
        default="",
        description="Tenant ID to read from and write to (empty disables multi-tenancy)",
    )

    # Write path
    write_request_rate: int = Field(
        default=1,
        ge=1,
        description="Remote write requests sent every scrape interval (before HA fan-out)",
    )
    write_series_per_request: int = Field(
        default=1000,
        ge=1,
        description="Number of series per remote write request",
    )
    ha_replicas: int = Field(
        default=1,
        ge=1,
        description="Number of HA replicas to simulate (1 disables HA)",
    )
    scrape_interval_seconds: int = Field(
        default=15,
        ge=1,
        description="Simulated Prometheus scrape interval in seconds",
    )
    metric_names: Annotated[list[str], NoDecode] = Field(
        default=["windows_system_system_up_time"],
        min_length=1,
        description="Metric names bound to write slots and sampled by queries",
    )
    remote_write_client: str | None = Field(
        default=None,
        description="Remote write client factory as 'package.module:callable'",
    )
    write_timeout_s: float = Field(
        default=32.0,
        gt=0,
        description="Timeout for a single remote write request",
    )

    # Read path
    read_request_rate: int = Field(
        default=1,
        ge=0,
        description="Number of query requests per second",
    )
    read_series_per_request: int = Field(
        default=1000,
        ge=1,
        description="Size of the host range a single query selects from",
    )
    read_timeout_s: float = Field(
        default=1200.0,
        gt=0,
        description="Timeout for a single query request",
    )
    query_lookback_s: int = Field(
        default=60,
        ge=0,
        description="Seconds subtracted from now for the query evaluation time",
    )

    # Load shape
    duration_min: int = Field(
        default=12 * 60,
        ge=1,
        description="Duration of the load test in minutes, including ramps",
    )
    ramp_up_min: int = Field(
        default=0,
        ge=0,
        description="Duration of the ramp up period in minutes",
    )
    ramp_down_min: int = Field(
        default=0,
        ge=0,
        description="Duration of the ramp down period in minutes",
    )

    # Observability
    metrics_port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="Port for the Prometheus metrics exporter (disabled when unset)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Log output format",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str) -> str:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("metric_names", mode="before")
    @classmethod
    def split_metric_names(cls, v: object) -> object:
        """Accept a comma separated string as well as a JSON list."""
        if isinstance(v, str):
            if v.lstrip().startswith("["):
                return json.loads(v)
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @model_validator(mode="after")
    def check_ramps_fit_duration(self) -> "Settings":
        """Ramp up and ramp down must fit inside the test duration."""
        if self.ramp_up_min + self.ramp_down_min > self.duration_min:
            raise ValueError(
                "ramp_up_min + ramp_down_min must not exceed duration_min"
            )
        return self

    @property
    def total_series(self) -> int:
        """Total number of unique series generated and written."""
        return self.write_request_rate * self.write_series_per_request

    @property
    def has_read_auth(self) -> bool:
        """Check if basic authentication is configured for the read path."""
        return self.username != "" or self.read_token != ""

    @property
    def has_write_auth(self) -> bool:
        """Check if basic authentication is configured for the write path."""
        return self.username != "" or self.write_token != ""


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else ""
        env_var = f"{ENV_PREFIX}{field.upper()}" if field else "settings"
        if error["type"] == "missing":
            hint = _REQUIRED_HINTS.get(field, "set it to a valid value")
            problems.append(f"{env_var} environment variable missing: {hint}")
        else:
            problems.append(f"{env_var}: {error['msg']}")
    return "; ".join(problems)


def load_settings(**overrides: object) -> Settings:
    """Load and validate settings, failing fast on misconfiguration.

    Args:
        **overrides: Field values that take precedence over the environment.

    Returns:
        Settings: Validated settings instance.

    Raises:
        ConfigurationError: If a required value is missing or invalid.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(
            _describe(e),
            details=[{"loc": list(err["loc"]), "type": err["type"]} for err in e.errors()],
        ) from e


@lru_cache
def get_settings() -> Settings:
    """Get cached load test settings.

    Uses lru_cache so the environment is only read once per process.

    Returns:
        Settings: Load test settings instance.
    """
    return load_settings()
