"""
Observability components.

Provides contextual logging, operation metrics and health checks.
"""

from .health import (
    HealthCheckResult,
    HealthStatus,
    check_datastore_health,
    check_manager_health,
)
from .logging import (
    ContextualLoggerAdapter,
    clear_correlation_id,
    clear_datastore_context,
    datastore_context,
    get_correlation_id,
    get_logger,
    get_logging_context,
    log_operation,
    reset_datastore_context,
    set_correlation_id,
    set_datastore_context,
)
from .metrics import (
    MetricsCollector,
    OperationMetrics,
    get_metrics_collector,
    record_operation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "OperationMetrics",
    "get_metrics_collector",
    "record_operation",
    # Logging
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "set_datastore_context",
    "clear_datastore_context",
    "reset_datastore_context",
    "datastore_context",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "get_logger",
    "log_operation",
    # Health
    "HealthStatus",
    "HealthCheckResult",
    "check_datastore_health",
    "check_manager_health",
]
