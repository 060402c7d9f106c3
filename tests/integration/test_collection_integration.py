"""
Integration tests for MongoDBCollection and MongoDataStore.

These tests require a running MongoDB instance (via Docker/testcontainers).
"""

import pytest
from pydantic import BaseModel

from mongo_datastore import QueryOptions
from mongo_datastore.core.types import JsonLinesResultWriter

NUM_DOCUMENTS = 50


class Person(BaseModel):
    id: int
    name: str
    surname: str
    age: int


async def fill_collection(datastore, name: str, size: int = NUM_DOCUMENTS):
    collection = datastore.get_collection(name)
    await collection.bulk_insert(
        [{"id": i, "name": "John", "surname": "Doe", "age": i % 5} for i in range(size)]
    )
    return collection


@pytest.mark.integration
@pytest.mark.asyncio
class TestReads:
    async def test_count(self, real_datastore):
        collection = await fill_collection(real_datastore, "count_test")

        result = await collection.count()

        assert result.first() == NUM_DOCUMENTS
        assert (await collection.count({"age": 0})).first() == NUM_DOCUMENTS // 5

    async def test_distinct(self, real_datastore):
        collection = await fill_collection(real_datastore, "distinct_test")

        ages = await collection.distinct("age")
        names = await collection.distinct("name", {"age": {"$gt": 2}})

        assert sorted(ages.result) == [0, 1, 2, 3, 4]
        assert ages.result_type == "builtins.int"
        assert names.result == ["John"]
        assert names.result_type == "builtins.str"

    async def test_find_include(self, real_datastore):
        collection = await fill_collection(real_datastore, "find_include_test")

        result = await collection.find({"id": 4}, options=QueryOptions("include", ["id"]))

        assert result.first() == {"id": 4}

    async def test_find_exclude(self, real_datastore):
        collection = await fill_collection(real_datastore, "find_exclude_test")

        result = await collection.find({"id": 4}, options={"exclude": "name"})

        assert "name" not in result.first()
        assert "_id" not in result.first()
        assert result.first()["surname"] == "Doe"

    async def test_find_limit_skip_sort(self, real_datastore):
        collection = await fill_collection(real_datastore, "find_modifiers_test")

        result = await collection.find(
            options={"sort": {"id": -1}, "skip": 2, "limit": 3, "include": "id"}
        )

        assert [doc["id"] for doc in result] == [47, 46, 45]

    async def test_find_with_model(self, real_datastore):
        collection = await fill_collection(real_datastore, "find_model_test")

        result = await collection.find({"id": {"$lt": 3}}, model=Person)

        assert result.num_results == 3
        assert all(isinstance(person, Person) for person in result)

    async def test_find_batch(self, real_datastore):
        collection = await fill_collection(real_datastore, "find_batch_test")

        results = await collection.find_batch(
            [{"id": i} for i in range(10)], options={"include": "id"}
        )

        assert len(results) == 10
        assert results[9].first()["id"] == 9

    async def test_aggregate(self, real_datastore):
        collection = await fill_collection(real_datastore, "aggregate_test")

        result = await collection.aggregate(
            [{"$match": {"age": {"$gt": 2}}}, {"$group": {"_id": "$age"}}]
        )

        assert result.num_results == 2


@pytest.mark.integration
@pytest.mark.asyncio
class TestQueryResultWriter:
    async def test_find_streams_to_file(self, real_datastore, tmp_path):
        collection = await real_datastore.create_collection("writer_test")
        for i in range(100):
            await collection.insert({"id": i}, {"w": 1})

        path = tmp_path / "found.jsonl"
        collection.query_result_writer = JsonLinesResultWriter(path)
        result = await collection.find({"id": {"$gt": 50}})

        assert result.result == []
        assert result.num_total_results == 49
        assert len(path.read_text(encoding="utf-8").splitlines()) == 49

        collection.query_result_writer = None
        result = await collection.find({"id": {"$gt": 50}})
        assert result.num_results == 49


@pytest.mark.integration
@pytest.mark.asyncio
class TestWrites:
    async def test_insert(self, real_datastore):
        collection = real_datastore.get_collection("insert_test")

        for i in range(5):
            await collection.insert({"id": i})
            assert (await collection.count()).first() == i + 1

    async def test_bulk_insert(self, real_datastore):
        collection = await fill_collection(real_datastore, "bulk_insert_test", 10)

        result = await collection.bulk_insert([{"id": 100 + i} for i in range(5)])

        assert result.first().inserted_count == 5
        assert (await collection.count()).first() == 15

    async def test_update_multi(self, real_datastore):
        collection = await fill_collection(real_datastore, "update_multi_test")

        result = await collection.update(
            {"name": "John"}, {"$set": {"surname": "Smith"}}, QueryOptions("multi", True)
        )

        assert result.first().modified_count == NUM_DOCUMENTS

    async def test_update_no_match(self, real_datastore):
        collection = await fill_collection(real_datastore, "update_nomatch_test")

        result = await collection.update(
            {"surname": "Johnson"}, {"$set": {"age": 1}}, QueryOptions("multi", True)
        )

        assert result.first().modified_count == 0

    async def test_update_upsert(self, real_datastore):
        collection = await fill_collection(real_datastore, "update_upsert_test")

        result = await collection.update(
            {"surname": "Johnson"}, {"$set": {"age": 1}}, QueryOptions("upsert", True)
        )

        assert result.first().upserted_id is not None

    async def test_bulk_update(self, real_datastore):
        collection = await fill_collection(real_datastore, "bulk_update_test")

        result = await collection.bulk_update(
            [{"id": i} for i in range(10)],
            [{"$set": {"name": f"Name {i}"}} for i in range(10)],
            QueryOptions("multi", False),
        )

        assert result.first().modified_count == 10

    async def test_bulk_update_length_mismatch(self, real_datastore):
        collection = await fill_collection(real_datastore, "bulk_update_mismatch_test")

        with pytest.raises(ValueError):
            await collection.bulk_update([{"id": 1}, {"id": 2}], [{"$set": {"name": "x"}}])

    async def test_remove(self, real_datastore):
        collection = await fill_collection(real_datastore, "remove_test")

        result = await collection.remove({"age": 0})

        assert result.first().deleted_count == NUM_DOCUMENTS // 5
        assert (await collection.count()).first() == NUM_DOCUMENTS - NUM_DOCUMENTS // 5

    async def test_bulk_remove(self, real_datastore):
        collection = await fill_collection(real_datastore, "bulk_remove_test")

        result = await collection.bulk_remove([{"id": i} for i in range(5)])

        assert result.first().deleted_count == 5

    async def test_find_and_modify(self, real_datastore):
        collection = await fill_collection(real_datastore, "find_and_modify_test")

        result = await collection.find_and_modify(
            {"id": 1}, update={"$set": {"age": 99}}, options={"returnNew": True}
        )
        assert result.first()["age"] == 99

        result = await collection.find_and_modify({"id": 1}, options={"remove": True})
        assert result.first()["id"] == 1
        assert (await collection.count({"id": 1})).first() == 0


@pytest.mark.integration
@pytest.mark.asyncio
class TestIndexes:
    async def test_create_and_drop_index(self, real_datastore):
        collection = await fill_collection(real_datastore, "index_test")

        await collection.create_index(
            {"surname": 1},
            {
                "name": "surnameIndex",
                "unique": False,
                "version": 2,
                "partialFilterExpression": {"age": {"$gte": 3}},
            },
        )

        indexes = {index["name"]: index for index in (await collection.get_index()).result}
        assert indexes["surnameIndex"]["v"] == 2
        assert "age" in indexes["surnameIndex"]["partialFilterExpression"]

        await collection.drop_index({"surname": 1})
        names = [index["name"] for index in (await collection.get_index()).result]
        assert names == ["_id_"]

    async def test_id_index_is_skipped(self, real_datastore):
        collection = await fill_collection(real_datastore, "id_index_test", 1)

        await collection.create_index({"_id": 1})

        assert (await collection.get_index()).num_results == 1


@pytest.mark.integration
@pytest.mark.asyncio
class TestDataStore:
    async def test_test(self, real_datastore):
        assert await real_datastore.test() is True

    async def test_create_collection(self, real_datastore):
        collection = await real_datastore.create_collection("created")

        assert (await collection.count()).first() == 0
        assert "created" in await real_datastore.get_collection_names()

    async def test_drop_collection(self, real_datastore):
        await real_datastore.create_collection("temp")

        await real_datastore.drop_collection("temp")

        assert "temp" not in await real_datastore.get_collection_names()

    async def test_get_stats(self, real_datastore):
        await fill_collection(real_datastore, "stats_test", 5)

        stats = await real_datastore.get_stats("stats_test")

        assert stats["ok"] == 1.0
        assert stats["count"] == 5
