"""
Database layer.

MongoDataStoreManager -> MongoDataStore -> MongoDBCollection -> MongoDBNativeQuery,
each a thin delegation step over the Motor driver.
"""

from .collection import MongoDBCollection
from .datastore import MongoDataStore
from .manager import MongoDataStoreManager
from .native_query import MongoDBNativeQuery, build_projection, build_write_concern

__all__ = [
    "MongoDataStoreManager",
    "MongoDataStore",
    "MongoDBCollection",
    "MongoDBNativeQuery",
    "build_projection",
    "build_write_concern",
]
