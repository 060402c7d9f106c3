"""
Contextual logging for MONGO_DATASTORE.

Log records carry a correlation ID and the datastore context (database,
collection) of the current task, taken from context variables.
"""

import contextvars
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

_datastore_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "datastore_context", default=None
)


def get_correlation_id() -> str | None:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Set a correlation ID in the current context.

    Args:
        correlation_id: Optional correlation ID (generates new one if None)

    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def set_datastore_context(
    database: str | None = None, **kwargs: Any
) -> contextvars.Token[dict[str, Any] | None]:
    """
    Set datastore context for logging.

    Args:
        database: Database name
        **kwargs: Additional context (collection, etc.)

    Returns:
        Token that restores the previous context when passed to
        reset_datastore_context()
    """
    return _datastore_context.set({"database": database, **kwargs})


def reset_datastore_context(token: contextvars.Token[dict[str, Any] | None]) -> None:
    _datastore_context.reset(token)


def clear_datastore_context() -> None:
    _datastore_context.set(None)


@contextmanager
def datastore_context(database: str | None = None, **kwargs: Any) -> Iterator[None]:
    """
    Scope the datastore context to a block, restoring the outer one on exit.

    Example:
        with datastore_context("variants_db", collection="variants"):
            logger.info("counting")   # record carries database and collection
    """
    token = set_datastore_context(database, **kwargs)
    try:
        yield
    finally:
        reset_datastore_context(token)


def get_logging_context() -> dict[str, Any]:
    """Return the correlation ID and datastore context of the current task."""
    context: dict[str, Any] = {"timestamp": datetime.now().isoformat()}

    correlation_id = get_correlation_id()
    if correlation_id:
        context["correlation_id"] = correlation_id

    current = _datastore_context.get()
    if current:
        context.update(current)

    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds the logging context to every record."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = get_logging_context()
        extra = kwargs.get("extra", {})
        if extra:
            context.update(extra)
        kwargs["extra"] = context
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    """
    Get a contextual logger.

    Args:
        name: Logger name (typically __name__)
    """
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_operation(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    level: int = logging.DEBUG,
    success: bool = True,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    """
    Log an operation with structured context.

    Args:
        logger: Logger instance
        operation: Operation name (e.g. "collection.find")
        level: Log level
        success: Whether operation succeeded
        duration_ms: Operation duration in milliseconds
        **context: Additional context (collection, num_results, ...)
    """
    log_context = get_logging_context()
    log_context.update({"operation": operation, "success": success})
    if duration_ms is not None:
        log_context["duration_ms"] = round(duration_ms, 2)
    if context:
        log_context.update(context)

    message = f"Operation: {operation}" if success else f"Operation failed: {operation}"
    if duration_ms is not None:
        message += f" (duration: {duration_ms:.2f}ms)"

    logger.log(level, message, extra=log_context)
