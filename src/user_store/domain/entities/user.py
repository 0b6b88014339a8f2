"""User entity and its write-side value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from user_store.domain.value_objects import UserId

USERNAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 100


def _check_text(field_name: str, value: str, max_length: int) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string")
    if len(value) > max_length:
        raise ValueError(f"{field_name} exceeds {max_length} characters")


@dataclass(frozen=True, slots=True)
class User:
    """A stored ``users`` row.

    ``username`` and ``email`` are globally unique; ``created_at`` and
    ``updated_at`` are maintained by the store.
    """

    id: UserId
    username: str
    email: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> User:
        """Build a User from a result row mapping."""
        return cls(
            id=UserId(row["id"]),
            username=row["username"],
            email=row["email"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass(frozen=True, slots=True)
class NewUser:
    """Fields for inserting a user."""

    username: str
    email: str

    def __post_init__(self) -> None:
        _check_text("username", self.username, USERNAME_MAX_LENGTH)
        _check_text("email", self.email, EMAIL_MAX_LENGTH)


@dataclass(frozen=True, slots=True)
class UserChanges:
    """Mutable user fields; ``None`` leaves a column untouched."""

    username: str | None = None
    email: str | None = None

    def __post_init__(self) -> None:
        if self.username is None and self.email is None:
            raise ValueError("UserChanges requires at least one field")
        if self.username is not None:
            _check_text("username", self.username, USERNAME_MAX_LENGTH)
        if self.email is not None:
            _check_text("email", self.email, EMAIL_MAX_LENGTH)

    def as_values(self) -> dict[str, str]:
        """Return only the columns being changed."""
        values: dict[str, str] = {}
        if self.username is not None:
            values["username"] = self.username
        if self.email is not None:
            values["email"] = self.email
        return values
