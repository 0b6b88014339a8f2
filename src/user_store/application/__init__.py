"""Application layer for the user store.

The application layer orchestrates repositories and transactions to fulfill
use cases.

Exports:
    Transactions:
        - SQLTransactionExecutor: All-or-nothing execution of repository writes
    Services:
        - UserService: Single-table transactional user writes
        - UserProfileService: Atomic user + profile writes
    Demonstration:
        - ConsistencyDemo: CRUD cycle and rollback proofs
        - AppContext / build_context: Explicit wiring used by the entry point
"""

from user_store.application.bootstrap import AppContext, build_context
from user_store.application.demo import (
    ConsistencyDemo,
    ConsistencyError,
    DemoReport,
    RollbackReport,
)
from user_store.application.services import (
    UserNotFoundError,
    UserProfileService,
    UserService,
)
from user_store.application.transaction_executor import SQLTransactionExecutor

__all__ = [
    "AppContext",
    "build_context",
    "ConsistencyDemo",
    "ConsistencyError",
    "DemoReport",
    "RollbackReport",
    "SQLTransactionExecutor",
    "UserNotFoundError",
    "UserProfileService",
    "UserService",
]
