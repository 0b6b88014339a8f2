"""Type-safe identifiers for stored rows.

Both identifiers are unsigned integers assigned by the store on insert.
"""

from __future__ import annotations

from typing import NewType


UserId = NewType("UserId", int)
"""Primary key of a ``users`` row. Server-assigned, auto-increment."""

ProfileId = NewType("ProfileId", int)
"""Primary key of a ``profiles`` row. Server-assigned, auto-increment."""


def validate_row_id(value: int, kind: str = "id") -> int:
    """Reject identifiers that can never name a stored row.

    Args:
        value: The identifier to check.
        kind: Name used in the error message.

    Returns:
        The identifier unchanged.

    Raises:
        ValueError: If the value is not a positive integer.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{kind} must be a positive integer, got {value!r}")
    return value
