"""Value objects for the user store domain."""

from user_store.domain.value_objects.identifiers import (
    ProfileId,
    UserId,
    validate_row_id,
)

__all__ = [
    "ProfileId",
    "UserId",
    "validate_row_id",
]
