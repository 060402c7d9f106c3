"""
Timed Collection Wrapper

MongoDBCollection exposes the collection API (find, insert, update, remove,
aggregate, distinct, indexes) on top of MongoDBNativeQuery. Each operation
awaits the driver, measures elapsed time and returns a QueryResult.

Driver errors are logged, recorded as failed operations and re-raised
unchanged. The only failure folded into the envelope is an OSError from a
QueryResultWriter.

This module is part of MONGO_DATASTORE.

Usage:
    collection = datastore.get_collection("variants")

    result = await collection.find({"chr": "1"}, options={"limit": 10})
    print(result.db_time, result.num_results, result.first())

    await collection.insert({"id": 1, "name": "John"})
    await collection.update({"name": "John"}, {"$set": {"seen": True}}, {"multi": True})
"""

import logging
import time
from functools import wraps
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import BaseModel, ValidationError
from pymongo.errors import PyMongoError
from pymongo.results import BulkWriteResult, DeleteResult, InsertOneResult, UpdateResult

from ..constants import DEFAULT_BATCH_SIZE, OPTION_BATCH_SIZE, OPTION_MULTI, OPTION_UPSERT
from ..core.query_options import QueryOptions
from ..core.query_result import QueryResult
from ..core.types import ComplexTypeConverter, QueryResultWriter
from ..observability import get_logger as get_contextual_logger
from ..observability import datastore_context, log_operation, record_operation
from ..utils.mongo import document_to_model, is_model_type
from .native_query import Document, MongoDBNativeQuery

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

T = TypeVar("T")


def _elapsed_ms(start_time: float) -> float:
    return (time.time() - start_time) * 1000


def _in_datastore_context(method):
    """Run a collection operation with its database and collection in the logging context."""

    @wraps(method)
    async def wrapper(self: "MongoDBCollection", *args: Any, **kwargs: Any) -> Any:
        with datastore_context(self.database_name, collection=self.name):
            return await method(self, *args, **kwargs)

    return wrapper


class MongoDBCollection:
    """
    Collection wrapper returning QueryResult envelopes.

    Instances are created and cached by MongoDataStore.get_collection().
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        query_result_writer: QueryResultWriter | None = None,
    ):
        """
        Args:
            collection: Motor collection to wrap
            query_result_writer: Optional sink for find()/aggregate() documents
        """
        self._collection = collection
        self._native_query = MongoDBNativeQuery(collection)
        self._query_result_writer = query_result_writer

    @property
    def name(self) -> str:
        return self._collection.name

    @property
    def database_name(self) -> str:
        return self._collection.database.name

    @property
    def query_result_writer(self) -> QueryResultWriter | None:
        return self._query_result_writer

    @query_result_writer.setter
    def query_result_writer(self, writer: QueryResultWriter | None) -> None:
        self._query_result_writer = writer

    def native_query(self) -> MongoDBNativeQuery:
        """Access the option-translating layer directly, without timing."""
        return self._native_query

    # ------------------------------------------------------------------
    # Timing and envelope helpers
    # ------------------------------------------------------------------

    def _end_query(
        self,
        operation: str,
        start_time: float,
        result: list[Any] | None,
        num_total_results: int | None = None,
        error_msg: str | None = None,
    ) -> QueryResult:
        duration_ms = _elapsed_ms(start_time)
        query_result = QueryResult.of(result, int(duration_ms), num_total_results)
        query_result.error_msg = error_msg

        success = error_msg is None
        record_operation(f"collection.{operation}", duration_ms, success, collection=self.name)
        log_operation(
            contextual_logger,
            f"collection.{operation}",
            level=logging.DEBUG if success else logging.WARNING,
            success=success,
            duration_ms=duration_ms,
            collection=self.name,
            num_results=query_result.num_results,
            num_total_results=query_result.num_total_results,
        )
        return query_result

    def _fail_query(self, operation: str, start_time: float, error: Exception) -> None:
        duration_ms = _elapsed_ms(start_time)
        record_operation(f"collection.{operation}", duration_ms, False, collection=self.name)
        contextual_logger.error(
            f"Operation failed: collection.{operation}",
            extra={
                "collection": self.name,
                "error_type": type(error).__name__,
                "error": str(error),
                "duration_ms": round(duration_ms, 2),
            },
        )

    async def _stream_to_writer(
        self, operation: str, start_time: float, documents: AsyncIterator[Document]
    ) -> QueryResult:
        writer = self._query_result_writer
        num_documents = 0
        try:
            writer.open()
            async for document in documents:
                num_documents += 1
                writer.write(document)
            writer.close()
        except PyMongoError:
            writer.close()
            raise
        except OSError as e:
            contextual_logger.exception(f"Query result writer failed during collection.{operation}")
            return self._end_query(operation, start_time, [], num_documents, error_msg=str(e))
        return self._end_query(operation, start_time, [], num_documents)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    @_in_datastore_context
    async def count(self, query: Document | None = None) -> QueryResult[int]:
        """Count documents matching ``query`` (all documents when None)."""
        start_time = time.time()
        try:
            count = await self._native_query.count(query)
        except PyMongoError as e:
            self._fail_query("count", start_time, e)
            raise
        return self._end_query("count", start_time, [count])

    @_in_datastore_context
    async def distinct(
        self,
        key: str,
        query: Document | None = None,
        converter: ComplexTypeConverter | None = None,
    ) -> QueryResult:
        """
        Distinct values of ``key``.

        Args:
            key: Field name
            query: Optional filter
            converter: Optional converter applied to every value
        """
        start_time = time.time()
        try:
            values = await self._native_query.distinct(key, query)
        except PyMongoError as e:
            self._fail_query("distinct", start_time, e)
            raise
        if converter is not None:
            values = [converter.to_data_model(value) for value in values]
        return self._end_query("distinct", start_time, values)

    @_in_datastore_context
    async def find(
        self,
        query: Document | None = None,
        projection: Document | None = None,
        options: Mapping[str, Any] | None = None,
        *,
        model: type[BaseModel] | None = None,
        converter: ComplexTypeConverter | None = None,
    ) -> QueryResult:
        """
        Find documents.

        Args:
            query: Filter document
            projection: Explicit projection; when None it is built from the
                "include"/"exclude" options and always drops ``_id``
            options: "limit", "skip", "sort", "batchSize", "include", "exclude"
            model: Optional pydantic model each document is validated into
            converter: Optional converter applied to each document (wins over model)

        Returns:
            QueryResult with the documents, or an empty result with
            ``num_total_results`` set when a QueryResultWriter is installed
        """
        start_time = time.time()
        opts = QueryOptions.of(options)
        try:
            cursor = self._native_query.find(query, projection, opts)
            cursor = cursor.batch_size(opts.get_int(OPTION_BATCH_SIZE, DEFAULT_BATCH_SIZE))

            if self._query_result_writer is not None:
                return await self._stream_to_writer("find", start_time, cursor)

            items, num_documents = await self._collect(cursor, model, converter)
        except PyMongoError as e:
            self._fail_query("find", start_time, e)
            raise
        return self._end_query("find", start_time, items, num_documents)

    @_in_datastore_context
    async def find_batch(
        self,
        queries: list[Document],
        projection: Document | None = None,
        options: Mapping[str, Any] | None = None,
        *,
        model: type[BaseModel] | None = None,
        converter: ComplexTypeConverter | None = None,
    ) -> list[QueryResult]:
        """Run find() once per query, returning one QueryResult per query in order."""
        return [
            await self.find(query, projection, options, model=model, converter=converter)
            for query in queries
        ]

    async def _collect(
        self,
        documents: AsyncIterator[Document],
        model: type[BaseModel] | None,
        converter: ComplexTypeConverter | None,
    ) -> tuple[list[Any], int]:
        convert = self._document_mapper(model, converter)
        items: list[Any] = []
        num_documents = 0
        async for document in documents:
            num_documents += 1
            items.extend(self._convert(convert, document))
        return items, num_documents

    def _convert(
        self, convert: Callable[[Document], Any] | None, document: Document
    ) -> list[Any]:
        """Mapped document as a one-item list; empty when it does not fit the model."""
        if convert is None:
            return [document]
        try:
            return [convert(document)]
        except ValidationError as e:
            contextual_logger.warning(
                f"Skipping document in '{self.name}' that does not fit "
                f"{e.title}: {e.error_count()} validation error(s)"
            )
            return []

    @staticmethod
    def _document_mapper(
        model: type[BaseModel] | None, converter: ComplexTypeConverter | None
    ) -> Callable[[Document], Any] | None:
        if converter is not None:
            return converter.to_data_model
        if model is not None and model is not dict:
            if not is_model_type(model):
                raise TypeError(f"model must be a pydantic BaseModel subclass, got {model!r}")
            return lambda document: document_to_model(document, model)
        return None

    @_in_datastore_context
    async def aggregate(
        self, pipeline: list[Document], options: Mapping[str, Any] | None = None
    ) -> QueryResult[Document]:
        """
        Run an aggregation pipeline.

        An empty pipeline returns an empty result without contacting the server.
        """
        start_time = time.time()
        try:
            cursor = self._native_query.aggregate(pipeline, options)
            if cursor is None:
                return self._end_query("aggregate", start_time, [])

            if self._query_result_writer is not None:
                return await self._stream_to_writer("aggregate", start_time, cursor)

            documents = [document async for document in cursor]
        except PyMongoError as e:
            self._fail_query("aggregate", start_time, e)
            raise
        return self._end_query("aggregate", start_time, documents)

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    @_in_datastore_context
    async def insert(
        self, document: Document, options: Mapping[str, Any] | None = None
    ) -> QueryResult[InsertOneResult]:
        """Insert one document; "w"/"wtimeout" options set the write concern."""
        start_time = time.time()
        try:
            write_result = await self._native_query.insert(document, options)
        except PyMongoError as e:
            self._fail_query("insert", start_time, e)
            raise
        return self._end_query("insert", start_time, [write_result])

    @_in_datastore_context
    async def bulk_insert(
        self, documents: list[Document], options: Mapping[str, Any] | None = None
    ) -> QueryResult[BulkWriteResult]:
        """Insert many documents in one bulk write."""
        start_time = time.time()
        try:
            write_result = await self._native_query.bulk_insert(documents, options)
        except PyMongoError as e:
            self._fail_query("bulk_insert", start_time, e)
            raise
        return self._end_query("bulk_insert", start_time, [write_result])

    @_in_datastore_context
    async def update(
        self, query: Document, update: Document, options: Mapping[str, Any] | None = None
    ) -> QueryResult[UpdateResult]:
        """Update matching documents; reads "upsert" and "multi" from options."""
        opts = QueryOptions.of(options)
        start_time = time.time()
        try:
            write_result = await self._native_query.update(
                query,
                update,
                upsert=opts.get_bool(OPTION_UPSERT),
                multi=opts.get_bool(OPTION_MULTI),
            )
        except PyMongoError as e:
            self._fail_query("update", start_time, e)
            raise
        return self._end_query("update", start_time, [write_result])

    @_in_datastore_context
    async def bulk_update(
        self,
        queries: list[Document],
        updates: list[Document],
        options: Mapping[str, Any] | None = None,
    ) -> QueryResult[BulkWriteResult]:
        """
        Apply ``updates[i]`` to ``queries[i]`` in one bulk write.

        Raises:
            ValueError: If the lists differ in length
        """
        opts = QueryOptions.of(options)
        start_time = time.time()
        try:
            write_result = await self._native_query.bulk_update(
                queries,
                updates,
                upsert=opts.get_bool(OPTION_UPSERT),
                multi=opts.get_bool(OPTION_MULTI),
            )
        except PyMongoError as e:
            self._fail_query("bulk_update", start_time, e)
            raise
        return self._end_query("bulk_update", start_time, [write_result])

    @_in_datastore_context
    async def remove(
        self, query: Document, options: Mapping[str, Any] | None = None
    ) -> QueryResult[DeleteResult]:
        """Delete every document matching ``query``."""
        start_time = time.time()
        try:
            write_result = await self._native_query.remove(query)
        except PyMongoError as e:
            self._fail_query("remove", start_time, e)
            raise
        return self._end_query("remove", start_time, [write_result])

    @_in_datastore_context
    async def bulk_remove(
        self, queries: list[Document], options: Mapping[str, Any] | None = None
    ) -> QueryResult[BulkWriteResult]:
        """Delete per query in one bulk write: one document each, or all matches with "multi"."""
        opts = QueryOptions.of(options)
        start_time = time.time()
        try:
            write_result = await self._native_query.bulk_remove(
                queries, multi=opts.get_bool(OPTION_MULTI)
            )
        except PyMongoError as e:
            self._fail_query("bulk_remove", start_time, e)
            raise
        return self._end_query("bulk_remove", start_time, [write_result])

    @_in_datastore_context
    async def find_and_modify(
        self,
        query: Document,
        projection: Document | None = None,
        sort: Any = None,
        update: Document | None = None,
        options: Mapping[str, Any] | None = None,
        *,
        model: type[BaseModel] | None = None,
        converter: ComplexTypeConverter | None = None,
    ) -> QueryResult:
        """
        Update (or with "remove", delete) one document and return it.

        The result holds the matched document. It is empty when nothing matched
        or when the document does not fit ``model``; the write has happened
        either way.
        """
        convert = self._document_mapper(model, converter)
        start_time = time.time()
        try:
            document = await self._native_query.find_and_modify(
                query, projection, sort, update, options
            )
        except PyMongoError as e:
            self._fail_query("find_and_modify", start_time, e)
            raise

        if document is None:
            return self._end_query("find_and_modify", start_time, [])
        return self._end_query(
            "find_and_modify", start_time, self._convert(convert, document), num_total_results=1
        )

    # ------------------------------------------------------------------
    # Index operations
    # ------------------------------------------------------------------

    @_in_datastore_context
    async def create_index(
        self,
        keys: Mapping[str, Any] | list[tuple[str, Any]],
        options: Mapping[str, Any] | None = None,
    ) -> QueryResult:
        """
        Create an index.

        Args:
            keys: Index keys, e.g. ``{"surname": 1}``
            options: "name", "unique", "background", "version",
                "partialFilterExpression", "sparse", "expireAfterSeconds"
        """
        start_time = time.time()
        try:
            index_name = await self._native_query.create_index(keys, options)
        except PyMongoError as e:
            self._fail_query("create_index", start_time, e)
            raise
        if index_name:
            logger.info(f"Created index '{index_name}' on '{self.name}'")
        return self._end_query("create_index", start_time, [])

    @_in_datastore_context
    async def drop_index(self, keys: Mapping[str, Any] | list[tuple[str, Any]] | str) -> QueryResult:
        """Drop an index by key specification or name."""
        start_time = time.time()
        try:
            await self._native_query.drop_index(keys)
        except PyMongoError as e:
            self._fail_query("drop_index", start_time, e)
            raise
        return self._end_query("drop_index", start_time, [])

    @_in_datastore_context
    async def get_index(self) -> QueryResult[Document]:
        """List the collection's index documents."""
        start_time = time.time()
        try:
            indexes = await self._native_query.get_index()
        except PyMongoError as e:
            self._fail_query("get_index", start_time, e)
            raise
        return self._end_query("get_index", start_time, indexes)

    def __repr__(self) -> str:
        return f"MongoDBCollection(name={self.name!r})"
