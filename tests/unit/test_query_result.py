"""
Unit tests for the QueryResult envelope.
"""

import pytest

from mongo_datastore.core.query_result import QueryResult


def test_of_counts_items():
    result = QueryResult.of([{"a": 1}, {"a": 2}], db_time=5)

    assert result.db_time == 5
    assert result.num_results == 2
    assert result.num_total_results == 2
    assert result.error_msg is None
    assert result.result_type == "builtins.dict"


def test_of_with_explicit_total():
    result = QueryResult.of([], db_time=1, num_total_results=42)

    assert result.num_results == 0
    assert result.num_total_results == 42
    assert result.result_type is None


def test_of_none_gives_empty_result():
    result = QueryResult.of(None, db_time=0)
    assert result.result == []
    assert len(result) == 0


def test_mismatched_count_is_rejected():
    with pytest.raises(ValueError, match="num_results"):
        QueryResult(num_results=3, result=[1])


def test_set_result_keeps_counts_in_step():
    result = QueryResult.of([1, 2], db_time=0)
    result.set_result(["x"])

    assert result.num_results == 1
    assert result.result_type == "builtins.str"

    result.set_result([])
    assert result.num_results == 0
    assert result.result_type is None


def test_first_and_iteration():
    result = QueryResult.of([10, 20], db_time=0)
    assert result.first() == 10
    assert list(result) == [10, 20]
    assert QueryResult.of([], db_time=0).first() is None


def test_to_dict():
    result = QueryResult.of([1], db_time=3)
    result.error_msg = "boom"

    assert result.to_dict() == {
        "db_time": 3,
        "num_results": 1,
        "num_total_results": 1,
        "error_msg": "boom",
        "result_type": "builtins.int",
        "result": [1],
    }
