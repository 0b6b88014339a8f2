"""Transaction Executor - all-or-nothing execution of repository writes.

Each transaction borrows one connection from the pool for its whole
duration, runs its writes strictly in order, and either commits all of them
or rolls all of them back.

Failure handling:
    - A failing write is followed immediately by rollback; no later write
      runs and the failure is raised as TransactionError.
    - A failing rollback is logged; the original failure is still raised.
    - A failing commit is fatal and is not retried.
    - Failing to borrow a connection is reported the same way, with nothing
      to roll back.

Isolation between concurrent transactions is the store's responsibility;
no in-process lock is taken.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator, Sequence

import structlog
from sqlalchemy.engine import Connection, Engine, RootTransaction
from sqlalchemy.exc import SQLAlchemyError

from user_store.infrastructure.logging import get_logger
from user_store.infrastructure.metrics import MetricsRegistry
from user_store.infrastructure.tracing import trace_span
from user_store.ports.inbound.transaction_executor import (
    TransactionError,
    TransactionStep,
)

logger = get_logger(__name__)


@dataclass
class _Progress:
    """Index of the step currently running, None outside run()."""

    step: int | None = None


class SQLTransactionExecutor:
    """Transaction executor over a pooled SQLAlchemy engine.

    Usage:
        executor = SQLTransactionExecutor(engine)
        user_id, profile_id = executor.run(
            [
                lambda txn, _: users.create(new_user, txn),
                lambda txn, prior: profiles.create(NewProfile(prior[0], "Alice A."), txn),
            ],
            operation="create_user_with_profile",
        )

    Thread Safety:
        Safe to share between threads; every transaction uses its own
        pooled connection.
    """

    def __init__(self, engine: Engine, metrics: MetricsRegistry | None = None) -> None:
        """Initialize the executor.

        Args:
            engine: Pooled engine to borrow connections from.
            metrics: Optional metrics registry.
        """
        self._engine = engine
        self._metrics = metrics

    def run(
        self, steps: Sequence[TransactionStep], operation: str = "transaction"
    ) -> tuple[Any, ...]:
        """Run steps in one transaction and return their results in order.

        Each step receives the transaction handle and the results of the
        steps before it.

        Args:
            steps: Ordered writes.
            operation: Name used in logs, traces and metrics.

        Returns:
            One result per step.

        Raises:
            TransactionError: If a step or the commit fails; the transaction
                has been rolled back.
        """
        progress = _Progress()
        results: list[Any] = []
        with self._scope(operation, progress) as conn:
            for index, step in enumerate(steps):
                progress.step = index
                results.append(step(conn, tuple(results)))
        return tuple(results)

    @contextmanager
    def transaction(self, operation: str = "transaction") -> Generator[Connection, None, None]:
        """Open a transaction for an ad-hoc block.

        Raises:
            TransactionError: If the block or the commit fails.
        """
        with self._scope(operation, _Progress()) as conn:
            yield conn

    @contextmanager
    def _scope(self, operation: str, progress: _Progress) -> Generator[Connection, None, None]:
        log = logger.bind(operation=operation)
        started = time.perf_counter()

        with trace_span(f"transaction.{operation}", {"transaction.operation": operation}) as span:
            try:
                conn = self._engine.connect()
            except SQLAlchemyError as exc:
                log.error("transaction_connection_unavailable", error=str(exc))
                self._finish(operation, "connection_failed", started)
                raise TransactionError(operation, exc) from exc

            try:
                try:
                    trans = conn.begin()
                except SQLAlchemyError as exc:
                    log.error("transaction_begin_failed", error=str(exc))
                    self._finish(operation, "connection_failed", started)
                    raise TransactionError(operation, exc) from exc
                log.info("transaction_started")

                try:
                    yield conn
                except Exception as exc:
                    self._rollback(trans, log, exc, progress.step)
                    self._finish(operation, "rolled_back", started)
                    span.set_attribute("transaction.status", "rolled_back")
                    raise TransactionError(operation, exc, failed_step=progress.step) from exc

                try:
                    trans.commit()
                except SQLAlchemyError as exc:
                    log.error("transaction_commit_failed", error=str(exc))
                    self._finish(operation, "commit_failed", started)
                    span.set_attribute("transaction.status", "commit_failed")
                    raise TransactionError(operation, exc, during_commit=True) from exc

                elapsed_ms = (time.perf_counter() - started) * 1000
                log.info("transaction_committed", duration_ms=round(elapsed_ms, 3))
                self._finish(operation, "committed", started)
                span.set_attribute("transaction.status", "committed")
            finally:
                # Returns the connection to the pool
                conn.close()

    @staticmethod
    def _rollback(
        trans: RootTransaction,
        log: structlog.BoundLogger,
        cause: Exception,
        step: int | None,
    ) -> None:
        log.error(
            "transaction_step_failed",
            step=step,
            error_type=type(cause).__name__,
            error=str(cause),
        )
        try:
            trans.rollback()
        except SQLAlchemyError as rollback_error:
            log.error("transaction_rollback_failed", error=str(rollback_error))
            return
        log.info("transaction_rolled_back", step=step)

    def _finish(self, operation: str, status: str, started: float) -> None:
        if self._metrics is None:
            return
        self._metrics.transactions_total.labels(operation=operation, status=status).inc()
        self._metrics.transaction_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - started
        )
