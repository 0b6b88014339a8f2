"""SQLAlchemy Core implementations of the User and Profile repositories.

Statements are built with Core constructs, so every value reaches the
driver as a bound parameter. Uniqueness and foreign-key failures reported by
the store are translated to ConstraintViolation; any other store error is
propagated unchanged.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Generator, TypeVar

from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import Executable

from user_store.adapters.outbound.schema import profiles_table, users_table
from user_store.domain.entities import (
    NewProfile,
    NewUser,
    Profile,
    ProfileChanges,
    User,
    UserChanges,
)
from user_store.domain.value_objects import ProfileId, UserId
from user_store.infrastructure.logging import get_logger
from user_store.infrastructure.metrics import MetricsRegistry
from user_store.ports.inbound.repository import ConstraintViolation

logger = get_logger(__name__)

T = TypeVar("T")


class _SQLRepository:
    """Shared statement execution for a single table."""

    entity: str
    table: Table

    def __init__(self, engine: Engine, metrics: MetricsRegistry | None = None) -> None:
        """Initialize the repository.

        Args:
            engine: Pooled engine used when no transaction handle is supplied.
            metrics: Optional metrics registry.
        """
        self._engine = engine
        self._metrics = metrics

    @contextmanager
    def _scope(self, txn: Connection | None, write: bool) -> Generator[Connection, None, None]:
        if txn is not None:
            yield txn
        elif write:
            with self._engine.begin() as conn:
                yield conn
        else:
            with self._engine.connect() as conn:
                yield conn

    def _run(
        self,
        statement: str,
        stmt: Executable,
        txn: Connection | None,
        consume: Callable[[CursorResult[Any]], T],
        write: bool = False,
    ) -> T:
        """Execute one statement and consume its result inside the connection scope."""
        try:
            with self._scope(txn, write) as conn:
                value = consume(conn.execute(stmt))
        except IntegrityError as exc:
            self._record(statement, "constraint_violation")
            detail = str(exc.orig)
            logger.warning(
                "constraint_violation",
                entity=self.entity,
                statement=statement,
                detail=detail,
                in_transaction=txn is not None,
            )
            raise ConstraintViolation(self.entity, detail) from exc
        except SQLAlchemyError as exc:
            self._record(statement, "error")
            logger.error("statement_failed", entity=self.entity, statement=statement, error=str(exc))
            raise

        self._record(statement, "success")
        logger.debug(
            "statement_executed",
            entity=self.entity,
            statement=statement,
            in_transaction=txn is not None,
        )
        return value

    def _record(self, statement: str, status: str) -> None:
        if self._metrics is not None:
            self._metrics.statements_total.labels(
                entity=self.entity, statement=statement, status=status
            ).inc()

    def _insert(self, values: dict[str, Any], txn: Connection | None) -> int:
        return self._run(
            "insert",
            insert(self.table).values(**values),
            txn,
            lambda result: int(result.inserted_primary_key[0]),
            write=True,
        )

    def _count(self, txn: Connection | None) -> int:
        return self._run(
            "count",
            select(func.count()).select_from(self.table),
            txn,
            lambda result: int(result.scalar_one()),
        )

    def _oldest_stmt(self) -> Executable:
        return (
            select(self.table)
            .order_by(self.table.c.created_at.asc(), self.table.c.id.asc())
            .limit(1)
        )


def _first_mapping(result: CursorResult[Any]) -> Any:
    return result.mappings().first()


def _all_mappings(result: CursorResult[Any]) -> list[Any]:
    return list(result.mappings().all())


class SQLUserRepository(_SQLRepository):
    """User repository over the ``users`` table."""

    entity = "user"
    table = users_table

    def create(self, fields: NewUser, txn: Connection | None = None) -> UserId:
        user_id = UserId(self._insert({"username": fields.username, "email": fields.email}, txn))
        logger.debug("user_created", user_id=user_id, username=fields.username)
        return user_id

    def get_by_id(self, user_id: UserId, txn: Connection | None = None) -> User | None:
        row = self._run(
            "select_by_id",
            select(users_table).where(users_table.c.id == user_id),
            txn,
            _first_mapping,
        )
        return User.from_row(row) if row is not None else None

    def get_oldest(self, txn: Connection | None = None) -> User | None:
        row = self._run("select_oldest", self._oldest_stmt(), txn, _first_mapping)
        return User.from_row(row) if row is not None else None

    def list_all(self, txn: Connection | None = None) -> list[User]:
        rows = self._run(
            "select_all",
            select(users_table).order_by(users_table.c.id),
            txn,
            _all_mappings,
        )
        return [User.from_row(row) for row in rows]

    def count(self, txn: Connection | None = None) -> int:
        return self._count(txn)

    def update(
        self, user_id: UserId, changes: UserChanges, txn: Connection | None = None
    ) -> None:
        matched = self._run(
            "update",
            update(users_table)
            .where(users_table.c.id == user_id)
            .values(**changes.as_values()),
            txn,
            lambda result: result.rowcount,
            write=True,
        )
        logger.debug("user_updated", user_id=user_id, matched=matched)

    def delete(self, user_id: UserId, txn: Connection | None = None) -> None:
        matched = self._run(
            "delete",
            delete(users_table).where(users_table.c.id == user_id),
            txn,
            lambda result: result.rowcount,
            write=True,
        )
        logger.debug("user_deleted", user_id=user_id, matched=matched)


class SQLProfileRepository(_SQLRepository):
    """Profile repository over the ``profiles`` table."""

    entity = "profile"
    table = profiles_table

    def create(self, fields: NewProfile, txn: Connection | None = None) -> ProfileId:
        profile_id = ProfileId(
            self._insert(
                {
                    "user_id": fields.user_id,
                    "full_name": fields.full_name,
                    "bio": fields.bio,
                    "avatar_url": fields.avatar_url,
                },
                txn,
            )
        )
        logger.debug("profile_created", profile_id=profile_id, user_id=fields.user_id)
        return profile_id

    def get_by_id(
        self, profile_id: ProfileId, txn: Connection | None = None
    ) -> Profile | None:
        row = self._run(
            "select_by_id",
            select(profiles_table).where(profiles_table.c.id == profile_id),
            txn,
            _first_mapping,
        )
        return Profile.from_row(row) if row is not None else None

    def get_by_user_id(
        self, user_id: UserId, txn: Connection | None = None
    ) -> Profile | None:
        row = self._run(
            "select_by_user_id",
            select(profiles_table).where(profiles_table.c.user_id == user_id),
            txn,
            _first_mapping,
        )
        return Profile.from_row(row) if row is not None else None

    def get_oldest(self, txn: Connection | None = None) -> Profile | None:
        row = self._run("select_oldest", self._oldest_stmt(), txn, _first_mapping)
        return Profile.from_row(row) if row is not None else None

    def list_all(self, txn: Connection | None = None) -> list[Profile]:
        rows = self._run(
            "select_all",
            select(profiles_table).order_by(profiles_table.c.id),
            txn,
            _all_mappings,
        )
        return [Profile.from_row(row) for row in rows]

    def count(self, txn: Connection | None = None) -> int:
        return self._count(txn)

    def update(
        self, profile_id: ProfileId, changes: ProfileChanges, txn: Connection | None = None
    ) -> None:
        self._run(
            "update",
            update(profiles_table)
            .where(profiles_table.c.id == profile_id)
            .values(**changes.as_values()),
            txn,
            lambda result: result.rowcount,
            write=True,
        )

    def update_by_user_id(
        self, user_id: UserId, changes: ProfileChanges, txn: Connection | None = None
    ) -> None:
        matched = self._run(
            "update_by_user_id",
            update(profiles_table)
            .where(profiles_table.c.user_id == user_id)
            .values(**changes.as_values()),
            txn,
            lambda result: result.rowcount,
            write=True,
        )
        logger.debug("profile_updated", user_id=user_id, matched=matched)

    def delete(self, profile_id: ProfileId, txn: Connection | None = None) -> None:
        self._run(
            "delete",
            delete(profiles_table).where(profiles_table.c.id == profile_id),
            txn,
            lambda result: result.rowcount,
            write=True,
        )

    def delete_by_user_id(self, user_id: UserId, txn: Connection | None = None) -> None:
        matched = self._run(
            "delete_by_user_id",
            delete(profiles_table).where(profiles_table.c.user_id == user_id),
            txn,
            lambda result: result.rowcount,
            write=True,
        )
        logger.debug("profile_deleted", user_id=user_id, matched=matched)
