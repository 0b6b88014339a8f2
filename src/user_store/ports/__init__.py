"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to the application (repositories, transactions)
- Outbound ports: Dependencies on external systems (connection pool, identity source)

Adapters implement these ports with concrete functionality.
"""

from user_store.ports.inbound import (
    ConstraintViolation,
    ProfileRepository,
    TransactionError,
    TransactionExecutor,
    TransactionStep,
    UserRepository,
)
from user_store.ports.outbound import (
    ConnectionProvider,
    IdentityGenerator,
    StoreConnectionError,
)

__all__ = [
    # Inbound ports
    "ConstraintViolation",
    "ProfileRepository",
    "TransactionError",
    "TransactionExecutor",
    "TransactionStep",
    "UserRepository",
    # Outbound ports
    "ConnectionProvider",
    "IdentityGenerator",
    "StoreConnectionError",
]
