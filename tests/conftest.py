"""
Pytest configuration and shared fixtures for MONGO_DATASTORE tests.

This module provides:
- A fake Motor cursor usable with ``async for`` and ``to_list``
- Mock Motor collection, database and client fixtures
- Test data factories
- Testcontainers fixtures for integration tests
"""

import os
from collections.abc import Iterable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from mongo_datastore.database.collection import MongoDBCollection
from mongo_datastore.database.datastore import MongoDataStore
from mongo_datastore.observability.metrics import get_metrics_collector


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: tests that need a real MongoDB server")


# ============================================================================
# FAKE CURSOR
# ============================================================================


class FakeCursor:
    """
    Stand-in for AsyncIOMotorCursor / AsyncIOMotorCommandCursor.

    Cursor modifiers are recorded in ``calls`` and return the cursor itself,
    like Motor does. Documents are served as given.
    """

    def __init__(self, documents: Iterable[dict[str, Any]] = ()):
        self.documents = list(documents)
        self.calls: dict[str, Any] = {}

    def limit(self, value):
        self.calls["limit"] = value
        return self

    def skip(self, value):
        self.calls["skip"] = value
        return self

    def sort(self, value):
        self.calls["sort"] = value
        return self

    def batch_size(self, value):
        self.calls["batch_size"] = value
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for document in self.documents:
            yield document

    async def to_list(self, length=None):
        return list(self.documents)


# ============================================================================
# MOCK MONGODB FIXTURES
# ============================================================================


def make_mock_collection(name: str = "test_collection", documents=()) -> MagicMock:
    """Create a mock Motor collection whose cursors serve ``documents``."""
    collection = MagicMock()
    collection.name = name
    collection.database.name = "test_db"
    collection.with_options = MagicMock(return_value=collection)

    collection.find = MagicMock(return_value=FakeCursor(documents))
    collection.aggregate = MagicMock(return_value=FakeCursor(documents))
    collection.list_indexes = MagicMock(
        return_value=FakeCursor([{"v": 2, "key": {"_id": 1}, "name": "_id_"}])
    )
    collection.count_documents = AsyncMock(return_value=len(list(documents)))
    collection.distinct = AsyncMock(return_value=[])

    collection.insert_one = AsyncMock(
        return_value=InsertOneResult(inserted_id="test_id", acknowledged=True)
    )
    collection.update_one = AsyncMock(
        return_value=UpdateResult({"n": 1, "nModified": 1}, acknowledged=True)
    )
    collection.update_many = AsyncMock(
        return_value=UpdateResult({"n": 2, "nModified": 2}, acknowledged=True)
    )
    collection.delete_many = AsyncMock(return_value=DeleteResult({"n": 2}, acknowledged=True))
    collection.bulk_write = AsyncMock(return_value=MagicMock(name="BulkWriteResult"))
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)

    collection.create_index = AsyncMock(return_value="test_index")
    collection.drop_index = AsyncMock()
    return collection


@pytest.fixture
def sample_documents() -> list[dict[str, Any]]:
    """Documents in the shape used across collection tests."""
    return [
        {"id": 1, "name": "John", "surname": "Doe", "age": 30},
        {"id": 2, "name": "Jane", "surname": "Doe", "age": 28},
        {"id": 3, "name": "Pepe", "surname": "Perez", "age": 45},
    ]


@pytest.fixture
def mock_mongo_collection(sample_documents) -> MagicMock:
    """Mock Motor collection serving ``sample_documents``."""
    return make_mock_collection("test_collection", sample_documents)


@pytest.fixture
def collection(mock_mongo_collection) -> MongoDBCollection:
    """MongoDBCollection wrapping the mock Motor collection."""
    return MongoDBCollection(mock_mongo_collection)


@pytest.fixture
def mock_mongo_database() -> MagicMock:
    """Create a mock Motor database."""
    db = MagicMock()
    db.name = "test_db"
    db.command = AsyncMock(return_value={"ok": 1.0})
    db.list_collection_names = AsyncMock(return_value=[])
    db.create_collection = AsyncMock()
    db.drop_collection = AsyncMock()
    db.__getitem__ = MagicMock(side_effect=lambda name: make_mock_collection(name))
    return db


@pytest.fixture
def mock_mongo_client(mock_mongo_database) -> MagicMock:
    """Create a mock Motor client whose databases are ``mock_mongo_database``."""
    client = MagicMock()
    client.admin = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.__getitem__ = MagicMock(return_value=mock_mongo_database)
    client.drop_database = AsyncMock()
    return client


@pytest.fixture
def datastore(mock_mongo_client, mock_mongo_database) -> MongoDataStore:
    return MongoDataStore(mock_mongo_client, mock_mongo_database)


# ============================================================================
# ENVIRONMENT
# ============================================================================


@pytest.fixture(autouse=True)
def reset_environment():
    """Keep MONGO_* variables and global metrics from leaking between tests."""
    saved = {k: v for k, v in os.environ.items() if k.startswith("MONGO_")}
    for key in saved:
        del os.environ[key]
    get_metrics_collector().reset()

    yield

    for key in [k for k in os.environ if k.startswith("MONGO_")]:
        del os.environ[key]
    os.environ.update(saved)
    get_metrics_collector().reset()


# ============================================================================
# TESTCONTAINERS FIXTURES (Real MongoDB for Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def mongodb_container():
    """
    Start a MongoDB container for integration tests.

    Session-scoped: container starts once and is reused for all integration tests.
    """
    try:
        from testcontainers.mongodb import MongoDbContainer
    except ImportError:
        pytest.skip("testcontainers not installed. Install with: pip install -e '.[test]'")

    with MongoDbContainer(image="mongo:7.0") as container:
        yield container


@pytest.fixture
def mongodb_connection_string(mongodb_container):
    """Connection string for the test container, with credentials."""
    return mongodb_container.get_connection_url()


@pytest_asyncio.fixture
async def real_datastore(mongodb_connection_string):
    """
    Open a data store on a fresh database of the test container.

    The database is dropped after the test.
    """
    from mongo_datastore import MongoDataStoreManager

    manager = MongoDataStoreManager(mongo_uri=mongodb_connection_string)
    database = f"datastore_test_{os.getpid()}"
    datastore = await manager.get(database)

    yield datastore

    await manager.drop(database)
    manager.close_all()


@pytest.fixture
def make_cursor():
    """Factory for FakeCursor instances, for tests that swap cursor contents."""
    return FakeCursor
