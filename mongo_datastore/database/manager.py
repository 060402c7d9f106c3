"""
MongoDataStoreManager opens and caches one MongoDataStore per database name.

Usage:
    manager = MongoDataStoreManager("localhost", 27017)
    datastore = await manager.get("variants_db")
    result = await datastore.get_collection("variants").count()
    manager.close("variants_db")
"""

import logging

from ..config import MongoDBConfiguration
from ..constants import DEFAULT_HOST, DEFAULT_PORT
from ..core.connection import connect
from .datastore import MongoDataStore

logger = logging.getLogger(__name__)


class MongoDataStoreManager:
    """
    Registry of open data stores for one MongoDB deployment.

    The URI used for a database is, in order: the configuration's
    ``mongo_uri``, the manager's ``mongo_uri``, then ``mongodb://host:port``.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        mongo_uri: str | None = None,
        configuration: MongoDBConfiguration | None = None,
    ):
        """
        Args:
            host: Server host, used when no URI is given
            port: Server port, used when no URI is given
            mongo_uri: Full connection URI
            configuration: Default configuration for databases opened without one
        """
        self.host = host
        self.port = port
        self.mongo_uri = mongo_uri or f"mongodb://{host}:{port}"
        self._default_configuration = configuration
        self._datastores: dict[str, MongoDataStore] = {}

    @property
    def datastores(self) -> dict[str, MongoDataStore]:
        """Open data stores keyed by database name."""
        return self._datastores

    def _resolve_uri(self, configuration: MongoDBConfiguration) -> str:
        return configuration.mongo_uri or self.mongo_uri

    async def get(
        self, database: str, configuration: MongoDBConfiguration | None = None
    ) -> MongoDataStore:
        """
        Return the data store for ``database``, opening it on first use.

        ``configuration`` only applies when the data store is opened; an
        already open store keeps the configuration it was created with.

        Raises:
            InitializationError: If the server cannot be reached
            ConfigurationError: If the configuration is invalid
        """
        datastore = self._datastores.get(database)
        if datastore is not None:
            return datastore

        configuration = configuration or self._default_configuration or MongoDBConfiguration()
        client, db = await connect(self._resolve_uri(configuration), database, configuration)
        datastore = MongoDataStore(client, db, configuration)
        self._datastores[database] = datastore
        logger.debug(f"MongoDataStoreManager: data store for '{database}' opened")
        return datastore

    def close(self, database: str) -> None:
        """Close the data store of ``database``; no-op when it is not open."""
        datastore = self._datastores.pop(database, None)
        if datastore is not None:
            datastore.close()

    async def drop(self, database: str) -> None:
        """Drop ``database`` on the server and close its data store."""
        datastore = await self.get(database)
        await datastore.client.drop_database(database)
        logger.info(f"MongoDataStoreManager: database '{database}' dropped")
        self.close(database)

    def close_all(self) -> None:
        for database in list(self._datastores):
            self.close(database)

    def __contains__(self, database: str) -> bool:
        return database in self._datastores
