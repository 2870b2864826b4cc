"""
Shared configuration management for the Cart Conditions service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings.

    Every field can be overridden through a ``CONDITIONS_``-prefixed
    environment variable (``CONDITIONS_LOG_LEVEL=debug``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONDITIONS_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    json_logs: bool = Field(default=True)

    # Observability
    metrics_enabled: bool = Field(default=True)

    # Site used when the host does not supply a site provider
    default_site: Optional[str] = Field(default=None)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str = "cart_conditions"


def get_config(**overrides) -> ServiceConfig:
    """Get configuration for the service."""
    return ServiceConfig(**overrides)
