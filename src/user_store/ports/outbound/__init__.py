"""Outbound ports - dependencies on external systems."""

from user_store.ports.outbound.connection_provider import (
    ConnectionProvider,
    StoreConnectionError,
)
from user_store.ports.outbound.identity_generator import IdentityGenerator

__all__ = [
    "ConnectionProvider",
    "IdentityGenerator",
    "StoreConnectionError",
]
