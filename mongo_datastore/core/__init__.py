"""
Core types shared by every operation: the options bag, the result envelope,
writer/converter hooks and connection set-up.
"""

from .connection import connect
from .query_options import QueryOptions
from .query_result import QueryResult
from .types import ComplexTypeConverter, JsonLinesResultWriter, QueryResultWriter

__all__ = [
    "QueryOptions",
    "QueryResult",
    "QueryResultWriter",
    "JsonLinesResultWriter",
    "ComplexTypeConverter",
    "connect",
]
