"""Profile entity and its write-side value objects.

A profile belongs to exactly one user (``user_id`` is unique) and is removed
together with it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from user_store.domain.value_objects import ProfileId, UserId, validate_row_id

FULL_NAME_MAX_LENGTH = 100
AVATAR_URL_MAX_LENGTH = 255


class _Unset:
    def __repr__(self) -> str:
        return "<unset>"


_UNSET: Any = _Unset()


@dataclass(frozen=True, slots=True)
class Profile:
    """A stored ``profiles`` row."""

    id: ProfileId
    user_id: UserId
    full_name: str
    bio: str | None
    avatar_url: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Profile:
        """Build a Profile from a result row mapping."""
        return cls(
            id=ProfileId(row["id"]),
            user_id=UserId(row["user_id"]),
            full_name=row["full_name"],
            bio=row["bio"],
            avatar_url=row["avatar_url"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _check_full_name(value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("full_name must be a non-empty string")
    if len(value) > FULL_NAME_MAX_LENGTH:
        raise ValueError(f"full_name exceeds {FULL_NAME_MAX_LENGTH} characters")


def _check_avatar_url(value: str | None) -> None:
    if value is not None and len(value) > AVATAR_URL_MAX_LENGTH:
        raise ValueError(f"avatar_url exceeds {AVATAR_URL_MAX_LENGTH} characters")


@dataclass(frozen=True, slots=True)
class NewProfile:
    """Fields for inserting a profile bound to an existing user."""

    user_id: UserId
    full_name: str
    bio: str | None = None
    avatar_url: str | None = None

    def __post_init__(self) -> None:
        validate_row_id(self.user_id, "user_id")
        _check_full_name(self.full_name)
        _check_avatar_url(self.avatar_url)


@dataclass(frozen=True, slots=True)
class ProfileChanges:
    """Mutable profile fields.

    Unlike ``full_name``, the optional columns can be cleared, so an omitted
    ``bio``/``avatar_url`` is distinguished from an explicit ``None``.
    """

    full_name: str | None = None
    bio: str | None = field(default=_UNSET)
    avatar_url: str | None = field(default=_UNSET)

    def __post_init__(self) -> None:
        if self.full_name is None and self.bio is _UNSET and self.avatar_url is _UNSET:
            raise ValueError("ProfileChanges requires at least one field")
        if self.full_name is not None:
            _check_full_name(self.full_name)
        if self.avatar_url is not _UNSET:
            _check_avatar_url(self.avatar_url)

    def as_values(self) -> dict[str, str | None]:
        """Return only the columns being changed."""
        values: dict[str, str | None] = {}
        if self.full_name is not None:
            values["full_name"] = self.full_name
        if self.bio is not _UNSET:
            values["bio"] = self.bio
        if self.avatar_url is not _UNSET:
            values["avatar_url"] = self.avatar_url
        return values
