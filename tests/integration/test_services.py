"""Integration tests for UserService and UserProfileService."""

from __future__ import annotations

import pytest

from user_store.adapters.outbound import SQLProfileRepository, SQLUserRepository
from user_store.application.services import (
    DEFAULT_AVATAR_URL,
    DEFAULT_BIO,
    UPDATED_AVATAR_URL,
    UPDATED_BIO,
    UserNotFoundError,
    UserProfileService,
    UserService,
)
from user_store.application.transaction_executor import SQLTransactionExecutor
from user_store.domain.entities import NewUser, ProfileChanges, UserChanges
from user_store.domain.value_objects import UserId
from user_store.ports.inbound.repository import ConstraintViolation
from user_store.ports.inbound.transaction_executor import TransactionError
from user_store.ports.outbound.identity_generator import IdentityGenerator


@pytest.fixture
def user_service(
    users: SQLUserRepository,
    executor: SQLTransactionExecutor,
    identities: IdentityGenerator,
) -> UserService:
    return UserService(users, executor, identities)


@pytest.fixture
def pair_service(
    users: SQLUserRepository,
    profiles: SQLProfileRepository,
    executor: SQLTransactionExecutor,
    identities: IdentityGenerator,
) -> UserProfileService:
    return UserProfileService(users, profiles, executor, identities)


@pytest.mark.integration
class TestUserService:
    """Single-table writes."""

    def test_insert_generated_user(
        self, user_service: UserService, users: SQLUserRepository
    ) -> None:
        user_id = user_service.insert_user()

        user = users.get_by_id(user_id)
        assert user is not None
        assert user.username == "user0001"
        assert user.email == "user0002@example.com"

    def test_insert_duplicate_fails(self, user_service: UserService, users: SQLUserRepository) -> None:
        fields = NewUser(username="alice", email="alice@example.com")
        user_service.insert_user(fields)

        with pytest.raises(TransactionError) as exc_info:
            user_service.insert_user(fields)

        assert exc_info.value.is_constraint_violation
        assert users.count() == 1

    def test_update_email_default_prefix(self, user_service: UserService) -> None:
        user_id = user_service.insert_user(NewUser(username="alice", email="alice@example.com"))

        updated = user_service.update_user_email(user_id)

        assert updated.email == "updated_alice@example.com"

    def test_update_email_explicit(self, user_service: UserService) -> None:
        user_id = user_service.insert_user(NewUser(username="alice", email="alice@example.com"))

        updated = user_service.update_user_email(user_id, "alice2@example.com")

        assert updated.email == "alice2@example.com"

    def test_update_missing_user(self, user_service: UserService) -> None:
        with pytest.raises(UserNotFoundError) as exc_info:
            user_service.update_user_email(UserId(7))

        assert exc_info.value.user_id == 7

    def test_delete_oldest(self, user_service: UserService, users: SQLUserRepository) -> None:
        first = user_service.insert_user()
        second = user_service.insert_user()

        deleted = user_service.delete_oldest_user()

        assert deleted.id == first
        assert [u.id for u in users.list_all()] == [second]

    def test_delete_oldest_empty(self, user_service: UserService) -> None:
        with pytest.raises(UserNotFoundError):
            user_service.delete_oldest_user()


@pytest.mark.integration
class TestUserProfileService:
    """Writes spanning both tables."""

    def test_create_with_defaults(
        self, pair_service: UserProfileService, profiles: SQLProfileRepository
    ) -> None:
        user_id, profile_id = pair_service.create_user_with_profile(
            NewUser(username="alice", email="alice@example.com")
        )

        profile = profiles.get_by_id(profile_id)
        assert profile is not None
        assert profile.user_id == user_id
        assert profile.full_name == "alice Smith"
        assert profile.bio == DEFAULT_BIO
        assert profile.avatar_url == DEFAULT_AVATAR_URL

    def test_failed_profile_insert_leaves_no_user(
        self,
        pair_service: UserProfileService,
        users: SQLUserRepository,
        profiles: SQLProfileRepository,
    ) -> None:
        # Over-long full name is rejected after the user insert already ran
        with pytest.raises(TransactionError) as exc_info:
            pair_service.create_user_with_profile(full_name="x" * 101)

        assert exc_info.value.failed_step == 1
        assert users.count() == 0
        assert profiles.count() == 0

    def test_failed_user_insert_leaves_no_profile(
        self,
        pair_service: UserProfileService,
        users: SQLUserRepository,
        profiles: SQLProfileRepository,
    ) -> None:
        fields = NewUser(username="alice", email="alice@example.com")
        pair_service.create_user_with_profile(fields)

        with pytest.raises(TransactionError) as exc_info:
            pair_service.create_user_with_profile(fields)

        assert exc_info.value.failed_step == 0
        assert users.count() == 1
        assert profiles.count() == 1

    def test_update_pair_defaults(
        self,
        pair_service: UserProfileService,
        users: SQLUserRepository,
        profiles: SQLProfileRepository,
    ) -> None:
        user_id, _ = pair_service.create_user_with_profile(
            NewUser(username="alice", email="alice@example.com")
        )

        pair_service.update_user_and_profile(user_id)

        user = users.get_by_id(user_id)
        profile = profiles.get_by_user_id(user_id)
        assert user is not None and profile is not None
        assert user.email.startswith("updated_")
        assert user.email.endswith("@example.com")
        assert profile.full_name.startswith("Updated ")
        assert profile.bio == UPDATED_BIO
        assert profile.avatar_url == UPDATED_AVATAR_URL

    def test_update_pair_is_atomic(
        self,
        pair_service: UserProfileService,
        users: SQLUserRepository,
        profiles: SQLProfileRepository,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        user_id, _ = pair_service.create_user_with_profile(
            NewUser(username="alice", email="alice@example.com")
        )

        def reject(user_id, changes, txn=None):
            raise ConstraintViolation("profile", "rejected")

        monkeypatch.setattr(profiles, "update_by_user_id", reject)

        with pytest.raises(TransactionError) as exc_info:
            pair_service.update_user_and_profile(
                user_id,
                UserChanges(email="alice2@example.com"),
                ProfileChanges(full_name="Alice B."),
            )

        assert exc_info.value.failed_step == 1
        user = users.get_by_id(user_id)
        assert user is not None
        assert user.email == "alice@example.com"

    def test_update_pair_rejected_email(
        self,
        pair_service: UserProfileService,
        profiles: SQLProfileRepository,
    ) -> None:
        pair_service.create_user_with_profile(NewUser(username="bob", email="bob@example.com"))
        alice_id, _ = pair_service.create_user_with_profile(
            NewUser(username="alice", email="alice@example.com"), full_name="Alice A."
        )

        with pytest.raises(TransactionError):
            pair_service.update_user_and_profile(
                alice_id,
                UserChanges(email="bob@example.com"),
                ProfileChanges(full_name="Alice B."),
            )

        profile = profiles.get_by_user_id(alice_id)
        assert profile is not None
        assert profile.full_name == "Alice A."

    def test_delete_pair(
        self,
        pair_service: UserProfileService,
        users: SQLUserRepository,
        profiles: SQLProfileRepository,
    ) -> None:
        user_id, _ = pair_service.create_user_with_profile()

        pair_service.delete_user_and_profile(user_id)

        assert users.get_by_id(user_id) is None
        assert profiles.get_by_user_id(user_id) is None

    def test_delete_pair_is_atomic(
        self,
        pair_service: UserProfileService,
        users: SQLUserRepository,
        profiles: SQLProfileRepository,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        user_id, _ = pair_service.create_user_with_profile()

        def refuse(user_id, txn=None):
            raise RuntimeError("lock wait timeout")

        monkeypatch.setattr(users, "delete", refuse)

        with pytest.raises(TransactionError):
            pair_service.delete_user_and_profile(user_id)

        assert profiles.get_by_user_id(user_id) is not None
        assert users.get_by_id(user_id) is not None
