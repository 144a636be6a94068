"""
Shared configuration management for the trace throttle mock.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


STRATEGY_PROBABILISTIC = "probabilistic"
STRATEGY_TOKEN_BUCKET = "token_bucket"
STRATEGIES = (STRATEGY_PROBABILISTIC, STRATEGY_TOKEN_BUCKET)
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_prefix="THROTTLE_",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8443)

    # Admission
    strategy: str = Field(default=STRATEGY_PROBABILISTIC)
    bucket_rate: float = Field(default=10.0)
    bucket_burst: int = Field(default=20)

    # TLS
    tls_cert: Optional[str] = Field(default=None)
    tls_key: Optional[str] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value

    @field_validator("strategy")
    @classmethod
    def _check_strategy(cls, value: str) -> str:
        value = value.lower()
        if value not in STRATEGIES:
            raise ValueError(f"strategy must be one of {', '.join(STRATEGIES)}")
        return value

    @field_validator("bucket_rate")
    @classmethod
    def _check_rate(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("bucket_rate must be positive")
        return value

    @field_validator("bucket_burst")
    @classmethod
    def _check_burst(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("bucket_burst must be positive")
        return value

    @property
    def tls_enabled(self) -> bool:
        return bool(self.tls_cert and self.tls_key)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str = "throttle"


def get_config(service_name: str = "throttle", **overrides) -> ServiceConfig:
    """Get configuration for a service, with explicit overrides winning over the environment."""
    return ServiceConfig(service_name=service_name, **overrides)
