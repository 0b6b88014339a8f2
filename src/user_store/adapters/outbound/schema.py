"""Table definitions for the ``users`` and ``profiles`` tables.

Column types carry dialect variants so the same metadata renders the MySQL
production schema (unsigned BIGINT keys, TIMESTAMP columns, InnoDB/utf8mb4)
and a SQLite schema where integer primary keys auto-increment.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects import mysql
from sqlalchemy.engine import Engine

from user_store.domain.entities.profile import AVATAR_URL_MAX_LENGTH, FULL_NAME_MAX_LENGTH
from user_store.domain.entities.user import EMAIL_MAX_LENGTH, USERNAME_MAX_LENGTH
from user_store.infrastructure.logging import get_logger

logger = get_logger(__name__)

RowId = (
    BigInteger()
    .with_variant(mysql.BIGINT(unsigned=True), "mysql")
    .with_variant(Integer(), "sqlite")
)
Timestamp = DateTime().with_variant(mysql.TIMESTAMP(), "mysql")

_MYSQL_TABLE_OPTIONS = {
    "mysql_engine": "InnoDB",
    "mysql_charset": "utf8mb4",
    "mysql_collate": "utf8mb4_unicode_ci",
}

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", RowId, primary_key=True, autoincrement=True),
    Column("username", String(USERNAME_MAX_LENGTH), nullable=False),
    Column("email", String(EMAIL_MAX_LENGTH), nullable=False),
    Column("created_at", Timestamp, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column(
        "updated_at",
        Timestamp,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    ),
    UniqueConstraint("username", name="uq_users_username"),
    UniqueConstraint("email", name="uq_users_email"),
    **_MYSQL_TABLE_OPTIONS,
)

profiles_table = Table(
    "profiles",
    metadata,
    Column("id", RowId, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        RowId,
        ForeignKey("users.id", ondelete="CASCADE", name="fk_profiles_user_id"),
        nullable=False,
    ),
    Column("full_name", String(FULL_NAME_MAX_LENGTH), nullable=False),
    Column("bio", Text, nullable=True),
    Column("avatar_url", String(AVATAR_URL_MAX_LENGTH), nullable=True),
    Column("created_at", Timestamp, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column(
        "updated_at",
        Timestamp,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    ),
    UniqueConstraint("user_id", name="uq_profiles_user_id"),
    **_MYSQL_TABLE_OPTIONS,
)


def create_schema(engine: Engine) -> None:
    """Create both tables if they do not exist yet.

    ``users`` is created before ``profiles`` because of the foreign key.
    """
    logger.info("schema_create_started", tables=[t.name for t in metadata.sorted_tables])
    metadata.create_all(engine, checkfirst=True)
    logger.info("schema_create_completed")


def drop_schema(engine: Engine) -> None:
    """Drop both tables (profiles first)."""
    metadata.drop_all(engine, checkfirst=True)
    logger.info("schema_dropped")
