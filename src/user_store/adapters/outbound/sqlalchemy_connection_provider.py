"""SQLAlchemy implementation of the Connection Provider port.

Builds a bounded ``QueuePool`` engine and verifies it with a round-trip
before handing it out. A failed first attempt is followed by exactly one
attempt with transport security disabled; there is no further retry.
"""

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from user_store.infrastructure.config import DatabaseConfig
from user_store.infrastructure.logging import get_logger
from user_store.infrastructure.metrics import MetricsRegistry
from user_store.ports.outbound.connection_provider import StoreConnectionError

logger = get_logger(__name__)

EngineFactory = Callable[..., Engine]

CONNECTION_HINT = (
    "check that the database server is running, the database exists "
    "and the username/password are correct"
)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite ignores REFERENCES ... ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SQLAlchemyConnectionProvider:
    """Connection provider backed by a SQLAlchemy engine.

    Usage:
        provider = SQLAlchemyConnectionProvider(metrics=metrics)
        engine = provider.acquire(config.database)
    """

    def __init__(
        self,
        engine_factory: EngineFactory = create_engine,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            engine_factory: Callable with the ``create_engine`` signature.
            metrics: Optional metrics registry for connection attempts.
        """
        self._engine_factory = engine_factory
        self._metrics = metrics

    def acquire(self, config: DatabaseConfig) -> Engine:
        """Connect to the store, falling back once to a TLS-disabled connection.

        Args:
            config: Database configuration.

        Returns:
            A verified engine with a pool of ``config.pool_size`` connections.

        Raises:
            StoreConnectionError: If both attempts fail.
        """
        url = make_url(config.url)
        logger.info("store_connecting", url=url.render_as_string(hide_password=True))

        try:
            engine = self._connect(url, config, mode="default")
        except SQLAlchemyError as first_error:
            logger.error("store_connect_failed", error=str(first_error))
            logger.warning("store_connect_retrying_without_tls")
        else:
            logger.info("store_connected", pool_size=config.pool_size)
            return engine

        fallback_url = url.update_query_dict(config.insecure_fallback_params)
        try:
            engine = self._connect(fallback_url, config, mode="insecure_fallback")
        except SQLAlchemyError as second_error:
            logger.error(
                "store_connect_failed_without_tls",
                error=str(second_error),
                hint=CONNECTION_HINT,
            )
            raise StoreConnectionError(
                f"could not connect to {url.render_as_string(hide_password=True)}: "
                f"{second_error}; {CONNECTION_HINT}"
            ) from second_error

        logger.info("store_connected", pool_size=config.pool_size, tls="disabled")
        return engine

    def _connect(self, url: URL, config: DatabaseConfig, mode: str) -> Engine:
        """Build one engine and prove it can reach the store."""
        engine: Engine | None = None
        try:
            engine = self._engine_factory(url, **self._engine_options(url, config))
            if url.get_backend_name() == "sqlite":
                event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            if engine is not None:
                engine.dispose()
            self._record_attempt(mode, "failure")
            raise

        self._record_attempt(mode, "success")
        if self._metrics is not None:
            self._metrics.pool_size.set(config.pool_size)
        return engine

    @staticmethod
    def _engine_options(url: URL, config: DatabaseConfig) -> dict[str, Any]:
        if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
            # Each pooled connection would otherwise see its own empty database
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
                "echo": config.echo,
            }
        return {
            "pool_size": config.pool_size,
            "max_overflow": 0,
            "pool_timeout": config.pool_timeout_seconds,
            "pool_recycle": config.pool_recycle_seconds,
            "pool_pre_ping": True,
            "echo": config.echo,
        }

    def _record_attempt(self, mode: str, status: str) -> None:
        if self._metrics is not None:
            self._metrics.connection_attempts_total.labels(mode=mode, status=status).inc()
