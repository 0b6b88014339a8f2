"""Unit tests for configuration module."""

from __future__ import annotations

import pytest

from user_store.infrastructure.config import (
    Config,
    DatabaseConfig,
    ObservabilityConfig,
    get_config,
)


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.database.url.startswith("mysql+pymysql://")
        assert config.database.pool_size == 5
        assert config.database.insecure_fallback_params == {"ssl_disabled": "true"}
        assert config.observability.log_level == "INFO"
        assert config.observability.metrics_enabled is False

    def test_custom_database_config(self) -> None:
        """Test custom database configuration."""
        database = DatabaseConfig(
            url="sqlite:///demo.db",
            pool_size=2,
            pool_timeout_seconds=1.5,
        )

        assert database.url == "sqlite:///demo.db"
        assert database.pool_size == 2
        assert database.pool_timeout_seconds == 1.5

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings are read from USER_STORE_<SECTION>__<FIELD>."""
        monkeypatch.setenv("USER_STORE_DATABASE__URL", "sqlite:///from_env.db")
        monkeypatch.setenv("USER_STORE_DATABASE__POOL_SIZE", "3")
        monkeypatch.setenv("USER_STORE_OBSERVABILITY__LOG_FORMAT", "json")

        config = Config()

        assert config.database.url == "sqlite:///from_env.db"
        assert config.database.pool_size == 3
        assert config.observability.log_format == "json"

    def test_invalid_pool_size(self) -> None:
        """Test that an empty pool raises validation error."""
        with pytest.raises(ValueError):
            DatabaseConfig(pool_size=0)

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError):
            ObservabilityConfig(log_level="VERBOSE")  # type: ignore


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self) -> None:
        """Test that get_config returns the same instance."""
        config1 = get_config()
        config2 = get_config()
        assert config1 is config2
