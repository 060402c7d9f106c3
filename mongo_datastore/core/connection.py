"""
Connection set-up for MONGO_DATASTORE.

Opens a Motor client for one database, verifies it with ``ping`` and
reports failures as InitializationError.

This module is part of MONGO_DATASTORE.
"""

import logging
import time

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import ConnectionFailure, OperationFailure, ServerSelectionTimeoutError

from ..config import MongoDBConfiguration
from ..exceptions import ConfigurationError, InitializationError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


async def connect(
    mongo_uri: str,
    database: str,
    configuration: MongoDBConfiguration,
) -> tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    """
    Create a client for ``database`` and verify the connection.

    Args:
        mongo_uri: MongoDB connection URI
        database: Database name
        configuration: Client configuration (pool sizes, credentials, ...)

    Returns:
        Tuple of (client, database handle)

    Raises:
        ConfigurationError: If the configuration is invalid
        InitializationError: If the server cannot be reached
    """
    start_time = time.time()
    configuration.validate()

    contextual_logger.info(
        "Opening MongoDB data store",
        extra={
            "database": database,
            "max_pool_size": configuration.max_pool_size,
            "min_pool_size": configuration.min_pool_size,
        },
    )

    client: AsyncIOMotorClient | None = None
    try:
        client = AsyncIOMotorClient(mongo_uri, **configuration.to_client_kwargs())
        await client.admin.command("ping")
    except PyMongoConfigurationError as e:
        if client is not None:
            client.close()
        record_operation("connection.open", (time.time() - start_time) * 1000, success=False)
        raise ConfigurationError(
            f"Invalid MongoDB client configuration: {e}",
            context={"database": database, "error_type": type(e).__name__},
        ) from e
    except (ConnectionFailure, ServerSelectionTimeoutError, OperationFailure) as e:
        if client is not None:
            client.close()
        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.open", duration_ms, success=False)
        contextual_logger.critical(
            "MongoDB connection failed",
            extra={
                "database": database,
                "error_type": type(e).__name__,
                "error": str(e),
                "duration_ms": round(duration_ms, 2),
            },
            exc_info=True,
        )
        raise InitializationError(
            f"Failed to connect to MongoDB: {e}",
            mongo_uri=mongo_uri,
            database=database,
            context={"error_type": type(e).__name__},
        ) from e

    duration_ms = (time.time() - start_time) * 1000
    record_operation("connection.open", duration_ms, success=True)
    contextual_logger.info(
        "MongoDB data store opened",
        extra={
            "database": database,
            "pool_size": f"{configuration.min_pool_size}-{configuration.max_pool_size}",
            "duration_ms": round(duration_ms, 2),
        },
    )
    return client, client[database]
