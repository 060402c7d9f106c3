"""
Unit tests for data store health checks.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from mongo_datastore.observability.health import (
    HealthStatus,
    check_datastore_health,
    check_manager_health,
)


def make_datastore(name: str, ok=True, error=None) -> MagicMock:
    datastore = MagicMock()
    datastore.database_name = name
    datastore.collections = {}
    datastore.test = AsyncMock(return_value=ok, side_effect=error)
    return datastore


@pytest.mark.asyncio
class TestDatastoreHealth:
    async def test_healthy(self):
        result = await check_datastore_health(make_datastore("db1"))

        assert result.status == HealthStatus.HEALTHY
        assert result.name == "datastore:db1"
        assert "latency_ms" in result.details

    async def test_not_ok(self):
        result = await check_datastore_health(make_datastore("db1", ok=False))
        assert result.status == HealthStatus.UNHEALTHY

    async def test_unreachable(self):
        datastore = make_datastore("db1", error=ServerSelectionTimeoutError("timed out"))

        result = await check_datastore_health(datastore)

        assert result.status == HealthStatus.UNHEALTHY
        assert result.details["error_type"] == "ServerSelectionTimeoutError"
        assert result.to_dict()["status"] == "unhealthy"


@pytest.mark.asyncio
class TestManagerHealth:
    @staticmethod
    def make_manager(*datastores):
        manager = MagicMock()
        manager.datastores = {ds.database_name: ds for ds in datastores}
        return manager

    async def test_no_datastores(self):
        report = await check_manager_health(self.make_manager())
        assert report["status"] == "unknown"
        assert report["checks"] == []

    async def test_all_healthy(self):
        report = await check_manager_health(
            self.make_manager(make_datastore("db1"), make_datastore("db2"))
        )
        assert report["status"] == "healthy"
        assert len(report["checks"]) == 2

    async def test_degraded(self):
        report = await check_manager_health(
            self.make_manager(make_datastore("db1"), make_datastore("db2", ok=False))
        )
        assert report["status"] == "degraded"

    async def test_unhealthy(self):
        report = await check_manager_health(self.make_manager(make_datastore("db1", ok=False)))
        assert report["status"] == "unhealthy"
