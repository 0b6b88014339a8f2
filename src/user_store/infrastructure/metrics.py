"""Prometheus metrics for the user store."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all user store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Transaction metrics
        self.transactions_total = Counter(
            "user_store_transactions_total",
            "Total number of transactions",
            ["operation", "status"],  # status: committed, rolled_back, commit_failed
            registry=self._registry,
        )

        self.transaction_duration_seconds = Histogram(
            "user_store_transaction_duration_seconds",
            "Transaction duration in seconds, begin to commit or rollback",
            ["operation"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self._registry,
        )

        # Statement metrics
        self.statements_total = Counter(
            "user_store_statements_total",
            "Total number of repository statements executed",
            ["entity", "statement", "status"],  # status: success, constraint_violation, error
            registry=self._registry,
        )

        # Connection metrics
        self.connection_attempts_total = Counter(
            "user_store_connection_attempts_total",
            "Connection attempts to the relational store",
            ["mode", "status"],  # mode: default, insecure_fallback
            registry=self._registry,
        )

        self.pool_size = Gauge(
            "user_store_pool_size",
            "Configured connection pool capacity",
            registry=self._registry,
        )

        self.info = Info(
            "user_store",
            "User store build information",
            registry=self._registry,
        )


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    metrics = MetricsRegistry(registry)

    from user_store import __version__
    metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return metrics
