"""Identity Generator port for demo usernames and emails."""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol


class IdentityGenerator(Protocol):
    """Source of fresh usernames and emails.

    Implementations should make collisions with existing rows unlikely;
    tests inject deterministic implementations.
    """

    @abstractmethod
    def username(self) -> str:
        """Return a new username (at most 50 characters)."""
        ...

    @abstractmethod
    def email(self) -> str:
        """Return a new email address (at most 100 characters)."""
        ...
