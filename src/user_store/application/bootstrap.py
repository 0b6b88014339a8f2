"""Program entry point and explicit application wiring.

The pooled engine, repositories and executor live in an AppContext that is
built once here and passed down; nothing holds them in module globals.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import Engine

from user_store.adapters.outbound import (
    RandomIdentityGenerator,
    SQLAlchemyConnectionProvider,
    SQLProfileRepository,
    SQLUserRepository,
    create_schema,
)
from user_store.application.demo import ConsistencyDemo, ConsistencyError
from user_store.application.services import UserProfileService, UserService
from user_store.application.transaction_executor import SQLTransactionExecutor
from user_store.infrastructure.config import Config, get_config
from user_store.infrastructure.logging import get_logger, setup_logging
from user_store.infrastructure.metrics import MetricsRegistry, setup_metrics
from user_store.infrastructure.tracing import setup_tracing
from user_store.ports.inbound.transaction_executor import TransactionError
from user_store.ports.outbound.connection_provider import (
    ConnectionProvider,
    StoreConnectionError,
)
from user_store.ports.outbound.identity_generator import IdentityGenerator

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Everything an operation needs, built once at startup."""

    config: Config
    engine: Engine
    users: SQLUserRepository
    profiles: SQLProfileRepository
    executor: SQLTransactionExecutor
    identities: IdentityGenerator
    metrics: MetricsRegistry | None = None

    def user_service(self) -> UserService:
        return UserService(self.users, self.executor, self.identities)

    def user_profile_service(self) -> UserProfileService:
        return UserProfileService(self.users, self.profiles, self.executor, self.identities)

    def demo(self) -> ConsistencyDemo:
        return ConsistencyDemo(self.users, self.profiles, self.executor, self.identities)

    def close(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


def build_context(
    config: Config,
    provider: ConnectionProvider | None = None,
    identities: IdentityGenerator | None = None,
    metrics: MetricsRegistry | None = None,
) -> AppContext:
    """Connect to the store, create the schema and wire the components.

    Raises:
        StoreConnectionError: If the store is unreachable.
    """
    provider = provider or SQLAlchemyConnectionProvider(metrics=metrics)
    engine = provider.acquire(config.database)
    create_schema(engine)

    return AppContext(
        config=config,
        engine=engine,
        users=SQLUserRepository(engine, metrics),
        profiles=SQLProfileRepository(engine, metrics),
        executor=SQLTransactionExecutor(engine, metrics),
        identities=identities or RandomIdentityGenerator(),
        metrics=metrics,
    )


def main() -> int:
    """Run the consistency demonstration; returns the process exit code."""
    config = get_config()
    observability = config.observability
    setup_logging(observability.log_level, observability.log_format)
    if observability.otel_endpoint:
        setup_tracing(observability.otel_service_name, observability.otel_endpoint)
    metrics = setup_metrics(observability.metrics_port) if observability.metrics_enabled else None

    logger.info("user_store_starting")

    try:
        context = build_context(config, metrics=metrics)
    except StoreConnectionError as exc:
        logger.error("user_store_startup_aborted", error=str(exc))
        return 1

    try:
        report = context.demo().run()
    except (TransactionError, ConsistencyError) as exc:
        logger.error("demo_failed", error=str(exc))
        return 1
    finally:
        context.close()

    logger.info(
        "user_store_finished",
        rollbacks_verified=len(report.rollbacks),
        users=report.final_users,
        profiles=report.final_profiles,
    )
    return 0
