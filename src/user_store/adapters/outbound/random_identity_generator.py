"""Random usernames and emails for demonstration rows."""

from __future__ import annotations

import random
import string
from typing import Sequence

DEFAULT_DOMAINS = ("example.com", "test.com", "mail.com", "demo.org")


class RandomIdentityGenerator:
    """Generates ten-letter usernames and matching lowercase emails.

    Args:
        length: Number of letters in a username.
        domains: Email domains to pick from.
        rng: Random source; pass a seeded ``random.Random`` for repeatable output.
    """

    def __init__(
        self,
        length: int = 10,
        domains: Sequence[str] = DEFAULT_DOMAINS,
        rng: random.Random | None = None,
    ) -> None:
        if length < 1:
            raise ValueError("length must be positive")
        if not domains:
            raise ValueError("at least one email domain is required")
        self._length = length
        self._domains = tuple(domains)
        self._rng = rng or random.Random()

    def username(self) -> str:
        return "".join(self._rng.choices(string.ascii_letters, k=self._length))

    def email(self) -> str:
        local = self.username().lower()
        return f"{local}@{self._rng.choice(self._domains)}"
