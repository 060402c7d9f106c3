"""
Constants for MONGO_DATASTORE.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# CONNECTION CONSTANTS
# ============================================================================

DEFAULT_HOST: Final[str] = "localhost"
"""Default MongoDB host used by MongoDataStoreManager."""

DEFAULT_PORT: Final[int] = 27017
"""Default MongoDB port used by MongoDataStoreManager."""

DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 10
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_CONNECT_TIMEOUT_MS: Final[int] = 20000
"""Default socket connect timeout in milliseconds."""

DEFAULT_MAX_IDLE_TIME_MS: Final[int] = 45000
"""Default maximum idle time before closing connections (milliseconds)."""

DEFAULT_READ_PREFERENCE: Final[str] = "primary"
"""Default read preference mode."""

DEFAULT_APP_NAME: Final[str] = "MONGO_DATASTORE"
"""Application name reported to the server."""

VALID_READ_PREFERENCES: Final[tuple[str, ...]] = (
    "primary",
    "primaryPreferred",
    "secondary",
    "secondaryPreferred",
    "nearest",
)
"""Read preference modes accepted by the driver."""

# ============================================================================
# QUERY CONSTANTS
# ============================================================================

DEFAULT_BATCH_SIZE: Final[int] = 20
"""Cursor batch size used by find() when 'batchSize' is not given."""

DEFAULT_WRITE_CONCERN_W: Final[int] = 1
"""Write concern 'w' used when only 'wtimeout' is given."""

DEFAULT_WRITE_CONCERN_WTIMEOUT: Final[int] = 0
"""Write concern 'wtimeout' used when only 'w' is given."""

DEFAULT_LIST_SEPARATOR: Final[str] = ","
"""Separator used to split string-valued list options."""

# Option keys read from QueryOptions
OPTION_LIMIT: Final[str] = "limit"
OPTION_SKIP: Final[str] = "skip"
OPTION_SORT: Final[str] = "sort"
OPTION_BATCH_SIZE: Final[str] = "batchSize"
OPTION_INCLUDE: Final[str] = "include"
OPTION_EXCLUDE: Final[str] = "exclude"
OPTION_W: Final[str] = "w"
OPTION_WTIMEOUT: Final[str] = "wtimeout"
OPTION_UPSERT: Final[str] = "upsert"
OPTION_MULTI: Final[str] = "multi"
OPTION_REMOVE: Final[str] = "remove"
OPTION_RETURN_NEW: Final[str] = "returnNew"

# ============================================================================
# INDEX CONSTANTS
# ============================================================================

INDEX_OPTION_MAPPING: Final[dict[str, str]] = {
    "name": "name",
    "unique": "unique",
    "background": "background",
    "version": "v",
    "partialFilterExpression": "partialFilterExpression",
    "sparse": "sparse",
    "expireAfterSeconds": "expireAfterSeconds",
}
"""Index options accepted by create_index, mapped to driver keyword names."""

# ============================================================================
# METRICS CONSTANTS
# ============================================================================

MAX_METRICS: Final[int] = 10000
"""Maximum number of metric keys kept by the metrics collector (LRU)."""
