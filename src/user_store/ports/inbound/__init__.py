"""Inbound ports - API contracts offered to the application layer."""

from user_store.ports.inbound.repository import (
    ConstraintViolation,
    ProfileRepository,
    UserRepository,
)
from user_store.ports.inbound.transaction_executor import (
    TransactionError,
    TransactionExecutor,
    TransactionStep,
)

__all__ = [
    # Repositories
    "ConstraintViolation",
    "ProfileRepository",
    "UserRepository",
    # Transactions
    "TransactionError",
    "TransactionExecutor",
    "TransactionStep",
]
