"""Infrastructure layer - cross-cutting concerns."""

from user_store.infrastructure.config import (
    Config,
    DatabaseConfig,
    ObservabilityConfig,
    get_config,
)
from user_store.infrastructure.logging import setup_logging, get_logger
from user_store.infrastructure.metrics import setup_metrics, MetricsRegistry
from user_store.infrastructure.tracing import setup_tracing, get_tracer, trace_span

__all__ = [
    "Config",
    "DatabaseConfig",
    "ObservabilityConfig",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
