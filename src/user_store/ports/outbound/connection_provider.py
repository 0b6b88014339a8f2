"""Connection Provider port for acquiring a pooled store connection.

This outbound port defines how the application obtains its bounded pool of
connections to the relational store. The pool is constructed once at startup
and passed down explicitly; there is no process-wide pool.

Connection policy:
    1. Connect with the configured parameters.
    2. On failure, reconnect exactly once with transport security disabled.
    3. If that fails too, startup is aborted.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from sqlalchemy.engine import Engine

from user_store.infrastructure.config import DatabaseConfig


class ConnectionProvider(Protocol):
    """Protocol for establishing the connection pool.

    Thread Safety:
        The returned pool is shared by concurrent transactions; each
        transaction borrows one connection for its duration.
    """

    @abstractmethod
    def acquire(self, config: DatabaseConfig) -> Engine:
        """Return a verified, bounded connection pool.

        Args:
            config: Target URL and pool sizing.

        Returns:
            An engine whose pool holds at most ``config.pool_size`` connections.

        Raises:
            StoreConnectionError: If both connection attempts fail.
        """
        ...


class StoreConnectionError(ConnectionError):
    """Raised when the store is unreachable with and without TLS.

    This is fatal: the caller must abort startup.
    """

    def __init__(self, message: str, attempts: int = 2) -> None:
        super().__init__(message)
        self.attempts = attempts
