"""
Custom exceptions for MONGO_DATASTORE.

Driver errors raised by collection operations are never wrapped; these
exceptions cover the data store's own failure modes (connection set-up and
configuration).
"""

from typing import Any


class DataStoreError(RuntimeError):
    """
    Base exception for data store errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (database,
                 collection_name, etc.)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class InitializationError(DataStoreError):
    """
    Raised when a data store cannot be opened.

    Attributes:
        message: Error message
        mongo_uri: MongoDB connection URI (if available)
        database: Database name (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        mongo_uri: str | None = None,
        database: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        context = context or {}
        if mongo_uri:
            context["mongo_uri"] = mongo_uri
        if database:
            context["database"] = database
        super().__init__(message, context=context)
        self.mongo_uri = mongo_uri
        self.database = database


class ConfigurationError(DataStoreError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        config_value: Any | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
