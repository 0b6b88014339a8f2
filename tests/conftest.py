"""Pytest configuration and fixtures for user_store tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry
from sqlalchemy.engine import Engine

from user_store.adapters.outbound import (
    SQLAlchemyConnectionProvider,
    SQLProfileRepository,
    SQLUserRepository,
    create_schema,
    drop_schema,
)
from user_store.application.transaction_executor import SQLTransactionExecutor
from user_store.infrastructure.config import DatabaseConfig
from user_store.infrastructure.metrics import MetricsRegistry


class SequentialIdentityGenerator:
    """Deterministic identities: user0001, user0002, ..."""

    def __init__(self, prefix: str = "user", domain: str = "example.com") -> None:
        self._prefix = prefix
        self._domain = domain
        self._counter = 0

    def _next(self) -> str:
        self._counter += 1
        return f"{self._prefix}{self._counter:04d}"

    def username(self) -> str:
        return self._next()

    def email(self) -> str:
        return f"{self._next()}@{self._domain}"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    """Use a separate registry to avoid conflicts between tests."""
    return CollectorRegistry(auto_describe=True)


@pytest.fixture
def metrics_registry(collector_registry: CollectorRegistry) -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    return MetricsRegistry(registry=collector_registry)


@pytest.fixture
def database_config(temp_dir: Path) -> DatabaseConfig:
    """File-backed SQLite so pooled connections share one database."""
    return DatabaseConfig(url=f"sqlite:///{temp_dir / 'user_store.db'}")


@pytest.fixture
def engine(
    database_config: DatabaseConfig, metrics_registry: MetricsRegistry
) -> Generator[Engine, None, None]:
    """Provide a pooled engine with the schema created."""
    provider = SQLAlchemyConnectionProvider(metrics=metrics_registry)
    eng = provider.acquire(database_config)
    create_schema(eng)
    yield eng
    drop_schema(eng)
    eng.dispose()


@pytest.fixture
def users(engine: Engine, metrics_registry: MetricsRegistry) -> SQLUserRepository:
    return SQLUserRepository(engine, metrics_registry)


@pytest.fixture
def profiles(engine: Engine, metrics_registry: MetricsRegistry) -> SQLProfileRepository:
    return SQLProfileRepository(engine, metrics_registry)


@pytest.fixture
def executor(engine: Engine, metrics_registry: MetricsRegistry) -> SQLTransactionExecutor:
    return SQLTransactionExecutor(engine, metrics_registry)


@pytest.fixture
def identities() -> SequentialIdentityGenerator:
    """Provide a deterministic identity generator."""
    return SequentialIdentityGenerator()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests against SQLite")
