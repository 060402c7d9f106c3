"""
Native Query Layer

Translates QueryOptions into Motor/PyMongo call parameters (projections,
cursor modifiers, write concern, index options) and issues exactly one
driver call per method. No timing and no result envelopes here; see
MongoDBCollection for that.

This module is part of MONGO_DATASTORE.
"""

import logging
from collections.abc import Mapping
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorCollection,
    AsyncIOMotorCommandCursor,
    AsyncIOMotorCursor,
)
from pymongo import DeleteMany, DeleteOne, InsertOne, ReturnDocument, UpdateMany, UpdateOne
from pymongo.results import BulkWriteResult, DeleteResult, InsertOneResult, UpdateResult
from pymongo.write_concern import WriteConcern

from ..constants import (
    DEFAULT_WRITE_CONCERN_W,
    DEFAULT_WRITE_CONCERN_WTIMEOUT,
    OPTION_EXCLUDE,
    OPTION_INCLUDE,
    OPTION_LIMIT,
    OPTION_REMOVE,
    OPTION_RETURN_NEW,
    OPTION_SKIP,
    OPTION_SORT,
    OPTION_UPSERT,
    OPTION_W,
    OPTION_WTIMEOUT,
)
from ..core.query_options import QueryOptions
from ..indexes.helpers import build_index_options, is_id_index, normalize_keys

logger = logging.getLogger(__name__)

Document = dict[str, Any]


def build_projection(
    projection: Document | None, options: Mapping[str, Any] | None
) -> Document:
    """
    Build a projection from the "include"/"exclude" options.

    ``_id`` is always excluded. "include" wins; "exclude" is only read
    when "include" is empty.
    """
    projection = dict(projection) if projection else {}
    projection["_id"] = 0

    opts = QueryOptions.of(options)
    include = opts.get_as_string_list(OPTION_INCLUDE)
    if include:
        for field in include:
            projection[field] = 1
    else:
        for field in opts.get_as_string_list(OPTION_EXCLUDE):
            projection[field] = 0
    return projection


def build_write_concern(options: Mapping[str, Any] | None) -> WriteConcern:
    """
    Write concern from the "w"/"wtimeout" options, or majority when neither is set.

    A numeric "w" (int or digit string) is sent as a node count; any other
    string ("majority", a tag set name) is passed through unchanged.
    """
    opts = QueryOptions.of(options)
    if OPTION_W in opts or OPTION_WTIMEOUT in opts:
        w = opts.get(OPTION_W)
        if not (isinstance(w, str) and not w.strip().isdigit()):
            w = opts.get_int(OPTION_W, DEFAULT_WRITE_CONCERN_W)
        return WriteConcern(
            w=w,
            wtimeout=opts.get_int(OPTION_WTIMEOUT, DEFAULT_WRITE_CONCERN_WTIMEOUT),
        )
    return WriteConcern(w="majority")


def _sort_spec(sort: Any) -> list[tuple[str, Any]] | None:
    if not sort:
        return None
    return normalize_keys(sort)


class MongoDBNativeQuery:
    """
    Option-aware front end over an AsyncIOMotorCollection.

    Example:
        native = MongoDBNativeQuery(db["variants"])
        cursor = native.find({"chr": "1"}, options={"limit": 10, "include": "id,pos"})
        docs = await cursor.to_list(length=None)
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._collection

    async def count(self, query: Document | None = None) -> int:
        return await self._collection.count_documents(query or {})

    async def distinct(self, key: str, query: Document | None = None) -> list[Any]:
        if query:
            return await self._collection.distinct(key, query)
        return await self._collection.distinct(key)

    def find(
        self,
        query: Document | None,
        projection: Document | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> AsyncIOMotorCursor:
        """
        Open a cursor. Batch size is left to the caller.

        When ``projection`` is None it is derived from the options.
        """
        opts = QueryOptions.of(options)
        if projection is None:
            projection = build_projection(None, opts)

        cursor = self._collection.find(query or {}, projection)

        limit = opts.get_int(OPTION_LIMIT, 0)
        if limit > 0:
            cursor = cursor.limit(limit)

        skip = opts.get_int(OPTION_SKIP, 0)
        if skip > 0:
            cursor = cursor.skip(skip)

        sort = _sort_spec(opts.get(OPTION_SORT))
        if sort:
            cursor = cursor.sort(sort)

        return cursor

    def aggregate(
        self, pipeline: list[Document], options: Mapping[str, Any] | None = None
    ) -> AsyncIOMotorCommandCursor | None:
        """Run a pipeline; returns None for an empty pipeline without calling the server."""
        if not pipeline:
            return None
        opts = QueryOptions.of(options)
        kwargs: dict[str, Any] = {}
        if "allowDiskUse" in opts:
            kwargs["allowDiskUse"] = opts.get_bool("allowDiskUse")
        return self._collection.aggregate(pipeline, **kwargs)

    async def insert(
        self, document: Document, options: Mapping[str, Any] | None = None
    ) -> InsertOneResult:
        """Insert one document with the write concern read from "w"/"wtimeout"."""
        collection = self._collection.with_options(write_concern=build_write_concern(options))
        return await collection.insert_one(document)

    async def bulk_insert(
        self, documents: list[Document], options: Mapping[str, Any] | None = None
    ) -> BulkWriteResult:
        """Insert documents in one bulk write with the write concern read from options."""
        requests = [InsertOne(document) for document in documents]
        collection = self._collection.with_options(write_concern=build_write_concern(options))
        return await collection.bulk_write(requests)

    async def update(
        self, query: Document, update: Document, upsert: bool = False, multi: bool = False
    ) -> UpdateResult:
        if multi:
            return await self._collection.update_many(query, update, upsert=upsert)
        return await self._collection.update_one(query, update, upsert=upsert)

    async def bulk_update(
        self,
        queries: list[Document],
        updates: list[Document],
        upsert: bool = False,
        multi: bool = False,
    ) -> BulkWriteResult:
        """
        Pair queries with updates in one bulk write.

        Raises:
            ValueError: If the lists differ in length
        """
        if len(queries) != len(updates):
            raise ValueError(
                f"queries and updates must be the same size "
                f"({len(queries)} != {len(updates)})"
            )
        model = UpdateMany if multi else UpdateOne
        requests = [model(query, update, upsert=upsert) for query, update in zip(queries, updates)]
        return await self._collection.bulk_write(requests)

    async def remove(self, query: Document) -> DeleteResult:
        return await self._collection.delete_many(query)

    async def bulk_remove(self, queries: list[Document], multi: bool = False) -> BulkWriteResult:
        model = DeleteMany if multi else DeleteOne
        return await self._collection.bulk_write([model(query) for query in queries])

    async def find_and_modify(
        self,
        query: Document,
        projection: Document | None = None,
        sort: Any = None,
        update: Document | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Document | None:
        """
        Atomically update or delete one document and return it.

        Options: "remove" deletes instead of updating, "returnNew" returns the
        post-update document, "upsert" inserts when nothing matches. When
        options are given and ``projection`` is None, the projection is built
        from "include"/"exclude".
        """
        remove = False
        return_new = False
        upsert = False
        if options is not None:
            opts = QueryOptions.of(options)
            if projection is None:
                projection = build_projection(None, opts)
            remove = opts.get_bool(OPTION_REMOVE)
            return_new = opts.get_bool(OPTION_RETURN_NEW)
            upsert = opts.get_bool(OPTION_UPSERT)

        sort_spec = _sort_spec(sort)
        if remove:
            return await self._collection.find_one_and_delete(
                query, projection=projection, sort=sort_spec
            )
        if update is None:
            raise ValueError("find_and_modify requires an update document unless 'remove' is set")
        return await self._collection.find_one_and_update(
            query,
            update,
            projection=projection,
            sort=sort_spec,
            upsert=upsert,
            return_document=ReturnDocument.AFTER if return_new else ReturnDocument.BEFORE,
        )

    async def create_index(
        self, keys: Mapping[str, Any] | list[tuple[str, Any]], options: Mapping[str, Any] | None
    ) -> str | None:
        """
        Create an index and return its name.

        ``_id`` indexes exist on every collection and are skipped.
        """
        if is_id_index(keys):
            logger.info(
                f"Skipping '_id' index on '{self._collection.name}': "
                f"MongoDB creates it automatically"
            )
            return None
        return await self._collection.create_index(
            normalize_keys(keys), **build_index_options(options)
        )

    async def drop_index(self, keys: Mapping[str, Any] | list[tuple[str, Any]] | str) -> None:
        """Drop an index given its key specification or its name."""
        if isinstance(keys, str):
            await self._collection.drop_index(keys)
        else:
            await self._collection.drop_index(normalize_keys(keys))

    async def get_index(self) -> list[Document]:
        return await self._collection.list_indexes().to_list(None)
