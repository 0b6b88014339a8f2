"""Domain entities for the user store."""

from user_store.domain.entities.profile import NewProfile, Profile, ProfileChanges
from user_store.domain.entities.user import NewUser, User, UserChanges

__all__ = [
    "NewProfile",
    "NewUser",
    "Profile",
    "ProfileChanges",
    "User",
    "UserChanges",
]
