"""
MONGO_DATASTORE - MongoDB Data Store

Collection-level CRUD, aggregation, distinct and index operations over the
Motor driver, each returning a timed QueryResult envelope.
"""

from .config import MongoDBConfiguration
from .core import (
    ComplexTypeConverter,
    JsonLinesResultWriter,
    QueryOptions,
    QueryResult,
    QueryResultWriter,
)
from .database import MongoDataStore, MongoDataStoreManager, MongoDBCollection, MongoDBNativeQuery
from .exceptions import ConfigurationError, DataStoreError, InitializationError

__version__ = "0.1.0"

__all__ = [
    # Database
    "MongoDataStoreManager",
    "MongoDataStore",
    "MongoDBCollection",
    "MongoDBNativeQuery",
    # Core
    "QueryOptions",
    "QueryResult",
    "QueryResultWriter",
    "JsonLinesResultWriter",
    "ComplexTypeConverter",
    "MongoDBConfiguration",
    # Errors
    "DataStoreError",
    "InitializationError",
    "ConfigurationError",
]
