"""Configuration management for the user store."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Relational store connection configuration."""

    url: str = Field(
        default="mysql+pymysql://root@localhost:3306/user_store",
        description="SQLAlchemy database URL",
    )
    pool_size: int = Field(default=5, ge=1, le=100, description="Fixed connection pool capacity")
    pool_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Max wait for a pooled connection"
    )
    pool_recycle_seconds: int = Field(
        default=3600, ge=-1, description="Recycle connections older than this (-1 disables)"
    )
    echo: bool = Field(default=False, description="Log every SQL statement")
    insecure_fallback_params: dict[str, str] = Field(
        default_factory=lambda: {"ssl_disabled": "true"},
        description="URL query parameters appended for the TLS-disabled reconnect attempt",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="user_store", description="Service name for tracing")
    metrics_enabled: bool = Field(default=False, description="Expose Prometheus metrics")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")


class Config(BaseSettings):
    """Main configuration for the user store."""

    model_config = SettingsConfigDict(
        env_prefix="USER_STORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the process configuration, read once from the environment."""
    return Config()
