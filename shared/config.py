"""
Shared configuration management for the starfetch services.
"""

from typing import Any, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BASE_URL = "https://swapi.dev/api/"
DEFAULT_TIMEOUT_MS = 5000
DEFAULT_PORT = 3000
DEFAULT_MAX_ID = 4


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_prefix="SWAPI_",
        frozen=True,
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int = Field(default=DEFAULT_PORT, validation_alias=AliasChoices("port", "SWAPI_PORT", "PORT"))
    host: str = Field(default="0.0.0.0")

    # Remote API
    base_url: str = Field(default=DEFAULT_BASE_URL)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    # Certificate checks are off to match the upstream deployment; this is a
    # known security defect and is reported at startup.
    verify_tls: bool = Field(default=False)

    # Verbose console logging
    debug: bool = Field(default=True)

    # Upper bound for the rotating character/vehicle id
    max_id: int = Field(default=DEFAULT_MAX_ID, ge=1)

    @property
    def effective_log_level(self) -> str:
        """Verbose mode always logs at debug level."""
        return "debug" if self.debug else self.log_level


def get_config(service_name: str, port: Optional[int] = None, **overrides: Any) -> ServiceConfig:
    """Get configuration for a specific service.

    Explicit overrides (e.g. parsed CLI flags) win over environment values;
    ``None`` overrides are ignored so unset flags fall back to the environment.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    if port is not None:
        values["port"] = port
    return ServiceConfig(service_name=service_name, **values)
