"""
Result envelope returned by every collection operation.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def _type_name(item: Any) -> str:
    cls = type(item)
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass
class QueryResult(Generic[T]):
    """
    Timing, counts and items of one operation.

    ``num_results`` always equals ``len(result)``; ``num_total_results`` is the
    number of documents the driver produced, which differs from
    ``num_results`` when documents were streamed to a QueryResultWriter.
    """

    db_time: int = 0
    num_results: int = 0
    num_total_results: int = 0
    error_msg: str | None = None
    result: list[T] = field(default_factory=list)
    result_type: str | None = None

    def __post_init__(self) -> None:
        if self.result is None:
            self.result = []
        if self.num_results != len(self.result):
            raise ValueError(
                f"num_results ({self.num_results}) does not match "
                f"result length ({len(self.result)})"
            )
        if self.result_type is None and self.result:
            self.result_type = _type_name(self.result[0])

    @classmethod
    def of(
        cls,
        result: list[T] | None,
        db_time: int,
        num_total_results: int | None = None,
    ) -> "QueryResult[T]":
        items = list(result) if result is not None else []
        return cls(
            db_time=db_time,
            num_results=len(items),
            num_total_results=len(items) if num_total_results is None else num_total_results,
            result=items,
        )

    def set_result(self, result: list[T]) -> None:
        """Replace the items, keeping ``num_results`` and ``result_type`` in step."""
        self.result = list(result)
        self.num_results = len(self.result)
        self.result_type = _type_name(self.result[0]) if self.result else None

    def first(self) -> T | None:
        """Return the first item, or None when the result is empty."""
        return self.result[0] if self.result else None

    def __len__(self) -> int:
        return self.num_results

    def __iter__(self):
        return iter(self.result)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "db_time": self.db_time,
            "num_results": self.num_results,
            "num_total_results": self.num_total_results,
            "error_msg": self.error_msg,
            "result_type": self.result_type,
            "result": self.result,
        }
