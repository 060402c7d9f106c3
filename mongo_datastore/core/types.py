"""
Pluggable hooks used by MongoDBCollection.

- QueryResultWriter: a sink that receives documents one by one instead of
  collecting them into the result envelope.
- ComplexTypeConverter: converts between stored documents and application
  objects.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any, Generic, TypeVar

from bson import json_util

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")


class QueryResultWriter(ABC, Generic[T]):
    """
    Streaming sink for find() and aggregate() results.

    Implementations signal failures by raising OSError; the collection
    catches it and reports the message in the result envelope.
    """

    @abstractmethod
    def open(self) -> None:
        """Prepare the sink. Called once before the first write."""

    @abstractmethod
    def write(self, item: T) -> None:
        """Write a single item."""

    @abstractmethod
    def close(self) -> None:
        """Release the sink. Called once after the last write."""


class JsonLinesResultWriter(QueryResultWriter[dict[str, Any]]):
    """
    Writes every document as one MongoDB Extended JSON line.

    Example:
        collection.query_result_writer = JsonLinesResultWriter("/tmp/out.jsonl")
        result = await collection.find({"status": "active"})
        # result.result is empty, result.num_total_results holds the count
    """

    def __init__(self, path: str | Path, append: bool = False):
        self.path = Path(path)
        self.append = append
        self.written = 0
        self._handle: IO[str] | None = None

    def open(self) -> None:
        # A failed run may have left the previous handle open
        self.close()
        self._handle = open(self.path, "a" if self.append else "w", encoding="utf-8")
        self.written = 0
        logger.debug(f"Opened result writer on '{self.path}'")

    def write(self, item: dict[str, Any]) -> None:
        if self._handle is None:
            raise OSError(f"Result writer on '{self.path}' is not open")
        self._handle.write(json_util.dumps(item))
        self._handle.write("\n")
        self.written += 1

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.debug(f"Closed result writer on '{self.path}' after {self.written} documents")


class ComplexTypeConverter(ABC, Generic[T, S]):
    """
    Two-way conversion between a data model type ``T`` and a storage type ``S``.
    """

    @abstractmethod
    def to_data_model(self, obj: S) -> T:
        """Convert a stored value into the application type."""

    @abstractmethod
    def to_storage(self, obj: T) -> S:
        """Convert an application value into its stored form."""
