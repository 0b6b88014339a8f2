"""Application services built on the transaction executor.

UserService covers single-table writes; UserProfileService keeps a user and
its profile consistent by writing both inside one transaction.
"""

from __future__ import annotations

from user_store.domain.entities import (
    NewProfile,
    NewUser,
    ProfileChanges,
    User,
    UserChanges,
)
from user_store.domain.value_objects import ProfileId, UserId
from user_store.infrastructure.logging import get_logger
from user_store.ports.inbound.repository import ProfileRepository, UserRepository
from user_store.ports.inbound.transaction_executor import TransactionExecutor
from user_store.ports.outbound.identity_generator import IdentityGenerator

logger = get_logger(__name__)

DEFAULT_BIO = "This is a sample profile bio."
DEFAULT_AVATAR_URL = "https://example.com/avatar.png"
UPDATED_BIO = "This is an updated profile bio."
UPDATED_AVATAR_URL = "https://example.com/updated-avatar.png"


def generated_user(identities: IdentityGenerator) -> NewUser:
    """Build user insert fields from an identity generator."""
    return NewUser(username=identities.username(), email=identities.email())


class UserNotFoundError(Exception):
    """Raised when an operation needs a user row that does not exist."""

    def __init__(self, user_id: UserId | None = None) -> None:
        message = "no users found" if user_id is None else f"user {user_id} not found"
        super().__init__(message)
        self.user_id = user_id


class UserService:
    """Single-table user writes, each in its own transaction."""

    def __init__(
        self,
        users: UserRepository,
        executor: TransactionExecutor,
        identities: IdentityGenerator,
    ) -> None:
        self._users = users
        self._executor = executor
        self._identities = identities

    def insert_user(self, new_user: NewUser | None = None) -> UserId:
        """Insert one user and return its id.

        Raises:
            TransactionError: If the insert fails (e.g. duplicate username or email).
        """
        fields = new_user or generated_user(self._identities)
        (user_id,) = self._executor.run(
            [lambda txn, _: self._users.create(fields, txn)],
            operation="insert_user",
        )
        logger.info("user_inserted", user_id=user_id, username=fields.username)
        return user_id

    def update_user_email(self, user_id: UserId, new_email: str | None = None) -> User:
        """Change a user's email and return the refreshed row.

        The default new email is the current one prefixed with ``updated_``.

        Raises:
            UserNotFoundError: If the user does not exist.
            TransactionError: If the update fails.
        """
        user = self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        changes = UserChanges(email=new_email or f"updated_{user.email}")
        self._executor.run(
            [lambda txn, _: self._users.update(user_id, changes, txn)],
            operation="update_user_email",
        )

        updated = self._users.get_by_id(user_id)
        if updated is None:
            raise UserNotFoundError(user_id)
        logger.info("user_email_updated", user_id=user_id, email=updated.email)
        return updated

    def delete_oldest_user(self) -> User:
        """Delete the earliest-created user and return it.

        Raises:
            UserNotFoundError: If there are no users.
            TransactionError: If the delete fails.
        """
        oldest = self._users.get_oldest()
        if oldest is None:
            raise UserNotFoundError()

        logger.info("oldest_user_found", user_id=oldest.id, username=oldest.username)
        self._executor.run(
            [lambda txn, _: self._users.delete(oldest.id, txn)],
            operation="delete_oldest_user",
        )
        logger.info("oldest_user_deleted", user_id=oldest.id)
        return oldest


class UserProfileService:
    """Atomic writes spanning a user and its profile."""

    def __init__(
        self,
        users: UserRepository,
        profiles: ProfileRepository,
        executor: TransactionExecutor,
        identities: IdentityGenerator,
    ) -> None:
        self._users = users
        self._profiles = profiles
        self._executor = executor
        self._identities = identities

    def create_user_with_profile(
        self,
        new_user: NewUser | None = None,
        full_name: str | None = None,
        bio: str | None = DEFAULT_BIO,
        avatar_url: str | None = DEFAULT_AVATAR_URL,
    ) -> tuple[UserId, ProfileId]:
        """Create a user and its profile; neither exists unless both do.

        Args:
            new_user: User fields; generated when omitted.
            full_name: Profile name; defaults to ``"<username> Smith"``.
            bio: Optional profile bio.
            avatar_url: Optional avatar URL.

        Returns:
            The new user id and profile id.

        Raises:
            TransactionError: If either insert fails; nothing is persisted.
        """
        fields = new_user or generated_user(self._identities)
        name = full_name or f"{fields.username} Smith"

        def create_profile(txn, prior):
            return self._profiles.create(
                NewProfile(user_id=prior[0], full_name=name, bio=bio, avatar_url=avatar_url),
                txn,
            )

        user_id, profile_id = self._executor.run(
            [lambda txn, _: self._users.create(fields, txn), create_profile],
            operation="create_user_with_profile",
        )
        logger.info("user_with_profile_created", user_id=user_id, profile_id=profile_id)
        return user_id, profile_id

    def update_user_and_profile(
        self,
        user_id: UserId,
        user_changes: UserChanges | None = None,
        profile_changes: ProfileChanges | None = None,
    ) -> None:
        """Update a user and its profile together.

        Omitted changes are generated: a fresh ``updated_...@example.com``
        email and an ``Updated ...`` full name with the updated bio and avatar.

        Raises:
            TransactionError: If either update fails; neither is applied.
        """
        user_changes = user_changes or UserChanges(
            email=f"updated_{self._identities.username()}@example.com"
        )
        profile_changes = profile_changes or ProfileChanges(
            full_name=f"Updated {self._identities.username()}",
            bio=UPDATED_BIO,
            avatar_url=UPDATED_AVATAR_URL,
        )

        self._executor.run(
            [
                lambda txn, _: self._users.update(user_id, user_changes, txn),
                lambda txn, _: self._profiles.update_by_user_id(user_id, profile_changes, txn),
            ],
            operation="update_user_and_profile",
        )
        logger.info("user_and_profile_updated", user_id=user_id)

    def delete_user_and_profile(self, user_id: UserId) -> None:
        """Delete the profile, then the user, in one transaction.

        The explicit profile delete keeps the pair consistent on stores
        without ON DELETE CASCADE.

        Raises:
            TransactionError: If either delete fails; both rows remain.
        """
        self._executor.run(
            [
                lambda txn, _: self._profiles.delete_by_user_id(user_id, txn),
                lambda txn, _: self._users.delete(user_id, txn),
            ],
            operation="delete_user_and_profile",
        )
        logger.info("user_and_profile_deleted", user_id=user_id)
