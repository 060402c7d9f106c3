"""
Configuration management for MONGO_DATASTORE.

A MongoDBConfiguration describes how the client of a single database is
built. Every database opened through MongoDataStoreManager gets its own
client, so different databases of the same server can use different pool
sizes, credentials or read preferences.
"""

import os
from typing import Any

from .constants import (
    DEFAULT_APP_NAME,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_MAX_IDLE_TIME_MS,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_READ_PREFERENCE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    VALID_READ_PREFERENCES,
)
from .exceptions import ConfigurationError


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"Environment variable {name} must be an integer", config_key=name, config_value=raw
        ) from e


class MongoDBConfiguration:
    """
    Client configuration for one database.

    Values passed directly win over environment variables, which win over
    the defaults in ``constants``.

    Example:
        # Using environment variables
        config = MongoDBConfiguration()

        # Or using direct parameters
        config = MongoDBConfiguration(max_pool_size=5, read_preference="secondaryPreferred")
        datastore = await manager.get("my_db", config)
    """

    def __init__(
        self,
        mongo_uri: str | None = None,
        max_pool_size: int | None = None,
        min_pool_size: int | None = None,
        server_selection_timeout_ms: int | None = None,
        connect_timeout_ms: int | None = None,
        max_idle_time_ms: int | None = None,
        replica_set: str | None = None,
        read_preference: str | None = None,
        username: str | None = None,
        password: str | None = None,
        auth_source: str | None = None,
        app_name: str | None = None,
        retry_writes: bool = True,
        retry_reads: bool = True,
    ):
        """
        Initialize configuration.

        Args:
            mongo_uri: MongoDB connection URI (defaults to MONGO_URI env var)
            max_pool_size: Maximum connection pool size (defaults to 50 or MONGO_MAX_POOL_SIZE)
            min_pool_size: Minimum connection pool size (defaults to 10 or MONGO_MIN_POOL_SIZE)
            server_selection_timeout_ms: Server selection timeout in ms (defaults to 5000)
            connect_timeout_ms: Socket connect timeout in ms (defaults to 20000)
            max_idle_time_ms: Idle time before pooled connections are closed
            replica_set: Replica set name (defaults to MONGO_REPLICA_SET)
            read_preference: Read preference mode (defaults to "primary")
            username: User name (defaults to MONGO_USERNAME)
            password: Password (defaults to MONGO_PASSWORD)
            auth_source: Authentication database (defaults to MONGO_AUTH_SOURCE)
            app_name: Application name reported to the server
            retry_writes: Enable driver retryable writes
            retry_reads: Enable driver retryable reads
        """
        self.mongo_uri = mongo_uri or os.getenv("MONGO_URI", "")
        self.max_pool_size = (
            max_pool_size
            if max_pool_size is not None
            else _env_int("MONGO_MAX_POOL_SIZE", DEFAULT_MAX_POOL_SIZE)
        )
        if min_pool_size is not None:
            self.min_pool_size = min_pool_size
        elif os.getenv("MONGO_MIN_POOL_SIZE"):
            self.min_pool_size = _env_int("MONGO_MIN_POOL_SIZE", DEFAULT_MIN_POOL_SIZE)
        else:
            # Default minimum never exceeds an explicitly small maximum
            self.min_pool_size = min(DEFAULT_MIN_POOL_SIZE, self.max_pool_size)
        self.server_selection_timeout_ms = (
            server_selection_timeout_ms
            if server_selection_timeout_ms is not None
            else _env_int("MONGO_SERVER_SELECTION_TIMEOUT_MS", DEFAULT_SERVER_SELECTION_TIMEOUT_MS)
        )
        self.connect_timeout_ms = (
            connect_timeout_ms
            if connect_timeout_ms is not None
            else _env_int("MONGO_CONNECT_TIMEOUT_MS", DEFAULT_CONNECT_TIMEOUT_MS)
        )
        self.max_idle_time_ms = (
            max_idle_time_ms if max_idle_time_ms is not None else DEFAULT_MAX_IDLE_TIME_MS
        )
        self.replica_set = replica_set or os.getenv("MONGO_REPLICA_SET") or None
        self.read_preference = read_preference or os.getenv(
            "MONGO_READ_PREFERENCE", DEFAULT_READ_PREFERENCE
        )
        self.username = username or os.getenv("MONGO_USERNAME") or None
        self.password = password or os.getenv("MONGO_PASSWORD") or None
        self.auth_source = auth_source or os.getenv("MONGO_AUTH_SOURCE") or None
        self.app_name = app_name or os.getenv("MONGO_APP_NAME", DEFAULT_APP_NAME)
        self.retry_writes = retry_writes
        self.retry_reads = retry_reads

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If a value is missing or out of range
        """
        if self.max_pool_size < 1:
            raise ConfigurationError(
                f"max_pool_size must be >= 1, got {self.max_pool_size}",
                config_key="max_pool_size",
                config_value=self.max_pool_size,
            )

        if self.min_pool_size < 0:
            raise ConfigurationError(
                f"min_pool_size must be >= 0, got {self.min_pool_size}",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.min_pool_size > self.max_pool_size:
            raise ConfigurationError(
                f"min_pool_size ({self.min_pool_size}) cannot be greater than "
                f"max_pool_size ({self.max_pool_size})",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.server_selection_timeout_ms < 1:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= 1, got "
                f"{self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )

        # 0 means "no timeout" for both
        for key in ("connect_timeout_ms", "max_idle_time_ms"):
            value = getattr(self, key)
            if value < 0:
                raise ConfigurationError(
                    f"{key} must be >= 0, got {value}", config_key=key, config_value=value
                )

        if self.read_preference not in VALID_READ_PREFERENCES:
            raise ConfigurationError(
                f"read_preference must be one of {', '.join(VALID_READ_PREFERENCES)}",
                config_key="read_preference",
                config_value=self.read_preference,
            )

        if bool(self.username) != bool(self.password):
            raise ConfigurationError(
                "username and password must be given together",
                config_key="username" if not self.username else "password",
            )

    def to_client_kwargs(self) -> dict[str, Any]:
        """Build the keyword arguments passed to AsyncIOMotorClient."""
        kwargs: dict[str, Any] = {
            "maxPoolSize": self.max_pool_size,
            "minPoolSize": self.min_pool_size,
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
            "connectTimeoutMS": self.connect_timeout_ms,
            "maxIdleTimeMS": self.max_idle_time_ms,
            "readPreference": self.read_preference,
            "appname": self.app_name,
            "retryWrites": self.retry_writes,
            "retryReads": self.retry_reads,
        }
        if self.replica_set:
            kwargs["replicaSet"] = self.replica_set
        if self.username:
            kwargs["username"] = self.username
            kwargs["password"] = self.password
            if self.auth_source:
                kwargs["authSource"] = self.auth_source
        return kwargs

    def __repr__(self) -> str:
        # Password stays out of logs
        return (
            f"MongoDBConfiguration(max_pool_size={self.max_pool_size}, "
            f"min_pool_size={self.min_pool_size}, read_preference={self.read_preference!r}, "
            f"replica_set={self.replica_set!r}, username={self.username!r})"
        )
