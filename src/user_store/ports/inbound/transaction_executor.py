"""Transaction Executor port for all-or-nothing write sequences.

Contract:
    - Steps run in order on one dedicated pooled connection.
    - The first failing step triggers rollback; later steps never run.
    - Commit happens only after every step succeeded; a failed commit is
      fatal and not retried.
    - Every failure surfaces as TransactionError, raised after rollback.
"""

from __future__ import annotations

from abc import abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Callable, Protocol, Sequence

from sqlalchemy.engine import Connection

from user_store.ports.inbound.repository import ConstraintViolation

TransactionStep = Callable[[Connection, Sequence[Any]], Any]
"""A write bound to the transaction; receives the results of earlier steps."""


class TransactionExecutor(Protocol):
    """Protocol for atomic execution of repository writes."""

    @abstractmethod
    def run(
        self, steps: Sequence[TransactionStep], operation: str = "transaction"
    ) -> tuple[Any, ...]:
        """Run steps atomically and return their results in order.

        Args:
            steps: The ordered writes.
            operation: Name used in logs, traces and metrics.

        Raises:
            TransactionError: If any step or the commit fails.
        """
        ...

    @abstractmethod
    def transaction(self, operation: str = "transaction") -> AbstractContextManager[Connection]:
        """Open a transaction for an ad-hoc block.

        Commits when the block exits normally; rolls back and raises
        TransactionError when it raises.
        """
        ...


class TransactionError(Exception):
    """Raised when a transactional sequence failed and was rolled back.

    Attributes:
        operation: Name of the transactional operation.
        cause: The underlying exception.
        failed_step: Index of the failing step when run() was used.
        during_commit: True when every step succeeded but the commit failed.
    """

    def __init__(
        self,
        operation: str,
        cause: BaseException,
        failed_step: int | None = None,
        during_commit: bool = False,
    ) -> None:
        if during_commit:
            where = " at commit"
        elif failed_step is not None:
            where = f" at step {failed_step}"
        else:
            where = ""
        super().__init__(f"{operation} failed{where}: {cause}")
        self.operation = operation
        self.cause = cause
        self.failed_step = failed_step
        self.during_commit = during_commit

    @property
    def is_constraint_violation(self) -> bool:
        """True when the store rejected a write on a constraint."""
        return isinstance(self.cause, ConstraintViolation)
