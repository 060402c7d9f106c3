"""
MongoDataStore models one database of a MongoDB server together with the
client and configuration it was opened with. Unlike the driver, where every
database of a server shares one client, each data store owns its client so
different databases can be configured independently.
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..config import MongoDBConfiguration
from .collection import MongoDBCollection

logger = logging.getLogger(__name__)


class MongoDataStore:
    """
    Database handle plus a cache of MongoDBCollection wrappers keyed by name.

    Obtain instances from MongoDataStoreManager.get(); the manager closes them.
    """

    def __init__(
        self,
        client: AsyncIOMotorClient,
        db: AsyncIOMotorDatabase,
        configuration: MongoDBConfiguration | None = None,
    ):
        self._client = client
        self._db = db
        self._configuration = configuration or MongoDBConfiguration()
        self._collections: dict[str, MongoDBCollection] = {}

    async def test(self) -> bool:
        """Return True when the server answers ``dbStats`` with ok == 1."""
        command_result = await self._db.command("dbStats")
        return command_result is not None and float(command_result.get("ok", 0)) == 1.0

    def get_collection(self, name: str) -> MongoDBCollection:
        """Return the cached wrapper for ``name``, creating it on first use."""
        collection = self._collections.get(name)
        if collection is None:
            collection = MongoDBCollection(self._db[name])
            self._collections[name] = collection
            logger.debug(f"MongoDataStore: new MongoDB collection '{name}' created")
        return collection

    async def create_collection(self, name: str) -> MongoDBCollection:
        """Create ``name`` on the server when it does not exist yet and return its wrapper."""
        if name not in await self.get_collection_names():
            await self._db.create_collection(name)
            logger.info(f"MongoDataStore: collection '{name}' created in '{self.database_name}'")
        return self.get_collection(name)

    async def drop_collection(self, name: str) -> None:
        """Drop ``name`` if it exists and forget its cached wrapper."""
        if name in await self.get_collection_names():
            await self._db.drop_collection(name)
            self._collections.pop(name, None)
            logger.info(f"MongoDataStore: collection '{name}' dropped from '{self.database_name}'")

    async def get_collection_names(self) -> list[str]:
        return await self._db.list_collection_names()

    async def get_stats(self, name: str) -> dict[str, Any]:
        """Storage statistics of collection ``name`` (``collStats``)."""
        return await self._db.command("collStats", name)

    def close(self) -> None:
        self._client.close()
        self._collections.clear()
        logger.info(f"MongoDataStore: connection to '{self.database_name}' closed")

    @property
    def collections(self) -> dict[str, MongoDBCollection]:
        """Wrappers created so far, keyed by collection name."""
        return self._collections

    @property
    def db(self) -> AsyncIOMotorDatabase:
        return self._db

    @property
    def client(self) -> AsyncIOMotorClient:
        return self._client

    @property
    def database_name(self) -> str:
        return self._db.name

    @property
    def configuration(self) -> MongoDBConfiguration:
        return self._configuration

    def __repr__(self) -> str:
        return f"MongoDataStore(database={self.database_name!r}, collections={len(self._collections)})"
