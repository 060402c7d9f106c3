"""
Health checks for MONGO_DATASTORE.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from pymongo.errors import ConnectionFailure, OperationFailure, ServerSelectionTimeoutError

if TYPE_CHECKING:
    from ..database.datastore import MongoDataStore
    from ..database.manager import MongoDataStoreManager

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    name: str
    status: HealthStatus
    message: str
    details: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


async def check_datastore_health(datastore: "MongoDataStore") -> HealthCheckResult:
    """
    Check that a data store answers ``dbStats``.

    Args:
        datastore: Open MongoDataStore

    Returns:
        HEALTHY when the command reports ok, UNHEALTHY otherwise
    """
    name = f"datastore:{datastore.database_name}"
    start_time = time.time()
    try:
        ok = await datastore.test()
    except (ConnectionFailure, ServerSelectionTimeoutError, OperationFailure) as e:
        logger.warning(f"Health check for '{datastore.database_name}' failed: {e}")
        return HealthCheckResult(
            name=name,
            status=HealthStatus.UNHEALTHY,
            message=f"Database unreachable: {e}",
            details={"error_type": type(e).__name__},
        )

    latency_ms = round((time.time() - start_time) * 1000, 2)
    if ok:
        return HealthCheckResult(
            name=name,
            status=HealthStatus.HEALTHY,
            message="Database is responsive",
            details={"latency_ms": latency_ms, "collections": len(datastore.collections)},
        )
    return HealthCheckResult(
        name=name,
        status=HealthStatus.UNHEALTHY,
        message="dbStats did not report ok",
        details={"latency_ms": latency_ms},
    )


async def check_manager_health(manager: "MongoDataStoreManager") -> dict[str, Any]:
    """
    Run check_datastore_health for every open data store.

    Returns:
        Dictionary with overall status and individual check results
    """
    results = [await check_datastore_health(ds) for ds in manager.datastores.values()]

    statuses = [r.status for r in results]
    if not statuses:
        overall = HealthStatus.UNKNOWN
    elif all(s == HealthStatus.HEALTHY for s in statuses):
        overall = HealthStatus.HEALTHY
    elif HealthStatus.HEALTHY in statuses:
        overall = HealthStatus.DEGRADED
    else:
        overall = HealthStatus.UNHEALTHY

    return {
        "status": overall.value,
        "timestamp": datetime.now().isoformat(),
        "checks": [r.to_dict() for r in results],
    }
