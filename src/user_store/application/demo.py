"""Consistency demonstration driver.

Runs a full CRUD cycle over users and profiles, then proves the rollback
guarantee by deliberately violating a uniqueness constraint and checking
that no partial state was left behind.

The rollback proofs are strict: a duplicate insert that succeeds, fails for
a reason other than a constraint violation, or changes a row count is a
ConsistencyError, never a log line.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from user_store.application.services import (
    UserNotFoundError,
    UserProfileService,
    UserService,
)
from user_store.domain.entities import NewProfile, NewUser, User
from user_store.domain.value_objects import ProfileId, UserId
from user_store.infrastructure.logging import get_logger
from user_store.ports.inbound.repository import ProfileRepository, UserRepository
from user_store.ports.inbound.transaction_executor import (
    TransactionError,
    TransactionExecutor,
)
from user_store.ports.outbound.identity_generator import IdentityGenerator

logger = get_logger(__name__)


class ConsistencyError(Exception):
    """Raised when a rollback proof observes partial or unexpected state."""


@dataclass(frozen=True)
class RollbackReport:
    """Row counts around a deliberately failing transaction."""

    scenario: str
    users_before: int
    users_after: int
    profiles_before: int
    profiles_after: int
    cause: str

    @property
    def consistent(self) -> bool:
        return (
            self.users_before == self.users_after
            and self.profiles_before == self.profiles_after
        )


@dataclass
class DemoReport:
    """Outcome of a full demonstration run."""

    inserted_user_id: UserId | None = None
    paired_user_id: UserId | None = None
    profile_id: ProfileId | None = None
    rollbacks: list[RollbackReport] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    final_users: int = 0
    final_profiles: int = 0


class ConsistencyDemo:
    """Orchestrates the CRUD cycle and the rollback proofs."""

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
        self._user_service = UserService(users, executor, identities)
        self._pair_service = UserProfileService(users, profiles, executor, identities)

    def run(self) -> DemoReport:
        """Run every demonstration step in order.

        Returns:
            A report of ids created, rollback proofs and skipped steps.

        Raises:
            TransactionError: If a create or update step fails.
            ConsistencyError: If a rollback proof fails.
        """
        report = DemoReport()
        logger.info("demo_started")

        # Single-table CRUD
        user_id = self._user_service.insert_user()
        report.inserted_user_id = user_id

        users = self._users.list_all()
        logger.info("users_listed", count=len(users))
        for user in users:
            logger.debug(
                "user_row",
                user_id=user.id,
                username=user.username,
                email=user.email,
                created_at=str(user.created_at),
                updated_at=str(user.updated_at),
            )

        found = self._users.get_by_id(user_id)
        if found is None:
            logger.warning("user_not_found", user_id=user_id)
        else:
            logger.info("user_found", user_id=found.id, username=found.username, email=found.email)

        self._user_service.update_user_email(user_id)

        # Two-table consistency
        paired_user_id, profile_id = self._pair_service.create_user_with_profile()
        report.paired_user_id = paired_user_id
        report.profile_id = profile_id

        profiles = self._profiles.list_all()
        logger.info("profiles_listed", count=len(profiles))

        profile = self._profiles.get_by_user_id(paired_user_id)
        if profile is None:
            logger.warning("profile_not_found", user_id=paired_user_id)
        else:
            logger.info(
                "profile_found",
                user_id=paired_user_id,
                profile_id=profile.id,
                full_name=profile.full_name,
            )

        self._pair_service.update_user_and_profile(paired_user_id)

        # Rollback proofs
        report.rollbacks.append(self.prove_duplicate_email_rollback())
        report.rollbacks.append(self.prove_multi_table_rollback())

        # Cleanup; failures here are reported, not fatal
        try:
            self._pair_service.delete_user_and_profile(paired_user_id)
        except TransactionError as exc:
            logger.warning("demo_step_failed", step="delete_user_and_profile", error=str(exc))
            report.skipped.append("delete_user_and_profile")

        try:
            self._user_service.delete_oldest_user()
        except (TransactionError, UserNotFoundError) as exc:
            logger.warning("demo_step_failed", step="delete_oldest_user", error=str(exc))
            report.skipped.append("delete_oldest_user")

        report.final_users = self._users.count()
        report.final_profiles = self._profiles.count()
        logger.info(
            "demo_completed",
            users=report.final_users,
            profiles=report.final_profiles,
            skipped=report.skipped,
        )
        return report

    def prove_duplicate_email_rollback(self) -> RollbackReport:
        """Insert a user reusing an existing email and prove nothing changed.

        Raises:
            UserNotFoundError: If there is no user whose email can be reused.
            ConsistencyError: If the insert succeeds or leaves partial state.
        """
        existing = self._first_user()
        attempt = NewUser(username=self._identities.username(), email=existing.email)
        logger.info("duplicate_email_attempt", email=existing.email)

        return self._prove_rollback(
            "duplicate_email",
            [lambda txn, _: self._users.create(attempt, txn)],
        )

    def prove_multi_table_rollback(self) -> RollbackReport:
        """Insert a user reusing an existing username, then its profile.

        The user insert must fail, so the profile insert never runs and
        neither table changes.

        Raises:
            UserNotFoundError: If there is no user whose username can be reused.
            ConsistencyError: If the insert succeeds or leaves partial state.
        """
        existing = self._first_user()
        attempt = NewUser(username=existing.username, email=self._identities.email())
        logger.info("duplicate_username_attempt", username=existing.username)

        return self._prove_rollback(
            "duplicate_username_with_profile",
            [
                lambda txn, _: self._users.create(attempt, txn),
                lambda txn, prior: self._profiles.create(
                    NewProfile(
                        user_id=prior[0],
                        full_name="Test User",
                        bio="Test bio",
                        avatar_url="https://example.com/test.png",
                    ),
                    txn,
                ),
            ],
        )

    def _first_user(self) -> User:
        users = self._users.list_all()
        if not users:
            raise UserNotFoundError()
        return users[0]

    def _prove_rollback(self, scenario, steps) -> RollbackReport:
        users_before = self._users.count()
        profiles_before = self._profiles.count()

        try:
            self._executor.run(steps, operation=scenario)
        except TransactionError as exc:
            if not exc.is_constraint_violation:
                raise ConsistencyError(
                    f"{scenario}: expected a constraint violation, got {exc.cause!r}"
                ) from exc
            cause = str(exc.cause)
            logger.info("expected_constraint_violation", scenario=scenario, cause=cause)
        else:
            raise ConsistencyError(f"{scenario}: duplicate insert unexpectedly succeeded")

        report = RollbackReport(
            scenario=scenario,
            users_before=users_before,
            users_after=self._users.count(),
            profiles_before=profiles_before,
            profiles_after=self._profiles.count(),
            cause=cause,
        )
        if not report.consistent:
            raise ConsistencyError(f"{scenario}: row counts changed after rollback: {report}")

        logger.info(
            "rollback_verified",
            scenario=scenario,
            users=report.users_after,
            profiles=report.profiles_after,
        )
        return report
