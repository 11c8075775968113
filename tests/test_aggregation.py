"""Tests for bucket aggregation."""

from datetime import datetime, timezone

import pytest

from queststats.domain.aggregation import aggregate, numeric_value
from queststats.domain.entities import AggregationFunction


RECORDS = [{"v": 4}, {"v": None}, {"v": 1}, {"v": "7"}, {"v": 10}]


def _value(record):
    return record.get("v")


@pytest.mark.parametrize(
    "function, expected",
    [
        (AggregationFunction.COUNT, 5.0),
        (AggregationFunction.SUM, 15.0),
        (AggregationFunction.AVERAGE, 5.0),
        (AggregationFunction.MIN, 1.0),
        (AggregationFunction.MAX, 10.0),
        (AggregationFunction.FIRST, 4.0),
        (AggregationFunction.LAST, 10.0),
    ],
)
def test_aggregate(function, expected):
    assert aggregate(RECORDS, function=function, value_of=_value) == expected


def test_count_does_not_need_values():
    assert aggregate([{}, {}], function=AggregationFunction.COUNT) == 2.0


@pytest.mark.parametrize("function", [f for f in AggregationFunction if f != AggregationFunction.COUNT])
def test_empty_reduction_is_zero(function):
    assert aggregate([], function=function, value_of=_value) == 0.0
    assert aggregate([{"v": None}], function=function, value_of=_value) == 0.0


def test_numeric_value():
    assert numeric_value(True) == 1.0
    assert numeric_value(False) == 0.0
    assert numeric_value("12") is None
    assert numeric_value(datetime(1970, 1, 2)) == 86400.0
    assert numeric_value(datetime(1970, 1, 2, tzinfo=timezone.utc)) == 86400.0
    assert numeric_value(3) == 3.0


def test_boolean_average_is_ratio():
    records = [{"v": True}, {"v": False}, {"v": True}, {"v": True}]

    assert aggregate(records, function=AggregationFunction.AVERAGE, value_of=_value) == 0.75
