"""Repository ports for User and Profile rows.

Every operation takes an optional transaction handle. With a handle the
statement joins that transaction and is committed or rolled back with it;
without one the statement runs in its own short transaction (autocommit).

Getters return ``None`` when no row matches; absence is never an error.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from sqlalchemy.engine import Connection

from user_store.domain.entities import (
    NewProfile,
    NewUser,
    Profile,
    ProfileChanges,
    User,
    UserChanges,
)
from user_store.domain.value_objects import ProfileId, UserId


class UserRepository(Protocol):
    """Protocol for ``users`` table access."""

    @abstractmethod
    def create(self, fields: NewUser, txn: Connection | None = None) -> UserId:
        """Insert a user and return its generated id.

        Raises:
            ConstraintViolation: If the username or email is already taken.
        """
        ...

    @abstractmethod
    def get_by_id(self, user_id: UserId, txn: Connection | None = None) -> User | None:
        """Return the user with this id, or None."""
        ...

    @abstractmethod
    def get_oldest(self, txn: Connection | None = None) -> User | None:
        """Return the earliest-created user, or None if the table is empty."""
        ...

    @abstractmethod
    def list_all(self, txn: Connection | None = None) -> list[User]:
        """Return every user ordered by id."""
        ...

    @abstractmethod
    def count(self, txn: Connection | None = None) -> int:
        """Return the number of users."""
        ...

    @abstractmethod
    def update(
        self, user_id: UserId, changes: UserChanges, txn: Connection | None = None
    ) -> None:
        """Apply changes to a user. Updating a missing id is a no-op.

        Raises:
            ConstraintViolation: If the new username or email is already taken.
        """
        ...

    @abstractmethod
    def delete(self, user_id: UserId, txn: Connection | None = None) -> None:
        """Delete a user; its profile is removed by the cascade."""
        ...


class ProfileRepository(Protocol):
    """Protocol for ``profiles`` table access."""

    @abstractmethod
    def create(self, fields: NewProfile, txn: Connection | None = None) -> ProfileId:
        """Insert a profile and return its generated id.

        Raises:
            ConstraintViolation: If the user already has a profile or does not exist.
        """
        ...

    @abstractmethod
    def get_by_id(
        self, profile_id: ProfileId, txn: Connection | None = None
    ) -> Profile | None:
        ...

    @abstractmethod
    def get_by_user_id(
        self, user_id: UserId, txn: Connection | None = None
    ) -> Profile | None:
        ...

    @abstractmethod
    def get_oldest(self, txn: Connection | None = None) -> Profile | None:
        ...

    @abstractmethod
    def list_all(self, txn: Connection | None = None) -> list[Profile]:
        ...

    @abstractmethod
    def count(self, txn: Connection | None = None) -> int:
        ...

    @abstractmethod
    def update(
        self, profile_id: ProfileId, changes: ProfileChanges, txn: Connection | None = None
    ) -> None:
        ...

    @abstractmethod
    def update_by_user_id(
        self, user_id: UserId, changes: ProfileChanges, txn: Connection | None = None
    ) -> None:
        ...

    @abstractmethod
    def delete(self, profile_id: ProfileId, txn: Connection | None = None) -> None:
        ...

    @abstractmethod
    def delete_by_user_id(self, user_id: UserId, txn: Connection | None = None) -> None:
        ...


class ConstraintViolation(Exception):
    """Raised when the store rejects a write on a uniqueness or foreign-key rule.

    This is an expected failure: inside a transaction it triggers rollback
    and is reported to the caller, never treated as a crash.
    """

    def __init__(self, entity: str, detail: str) -> None:
        super().__init__(f"{entity}: {detail}")
        self.entity = entity
        self.detail = detail
