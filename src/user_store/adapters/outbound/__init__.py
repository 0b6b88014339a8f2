"""Outbound adapters - relational store and identity source implementations."""

from user_store.adapters.outbound.random_identity_generator import RandomIdentityGenerator
from user_store.adapters.outbound.schema import (
    create_schema,
    drop_schema,
    metadata,
    profiles_table,
    users_table,
)
from user_store.adapters.outbound.sqlalchemy_connection_provider import (
    SQLAlchemyConnectionProvider,
)
from user_store.adapters.outbound.sqlalchemy_repositories import (
    SQLProfileRepository,
    SQLUserRepository,
)

__all__ = [
    "RandomIdentityGenerator",
    "SQLAlchemyConnectionProvider",
    "SQLProfileRepository",
    "SQLUserRepository",
    "create_schema",
    "drop_schema",
    "metadata",
    "profiles_table",
    "users_table",
]
