"""Aggregation of bucket records into a single chart value.

Contract: every aggregation returns a float. An empty reduction set yields
0.0 for SUM, AVERAGE, MIN, MAX, FIRST and LAST so the render layer never has
to handle a missing value.
"""

from datetime import UTC, datetime
from typing import Any, Callable, Iterable, Optional, Sequence

from queststats.domain.entities import AggregationFunction, Record
from queststats.domain.field_catalog import to_number

ValueOf = Callable[[Record], Any]


def numeric_value(value: Any) -> Optional[float]:
    """Numeric form of an extracted value.

    Booleans count as 1/0 and dates as POSIX seconds; text has no numeric form.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.timestamp()
    if isinstance(value, str):
        return None
    return to_number(value)


def _numbers(records: Iterable[Record], value_of: Optional[ValueOf]) -> list[float]:
    if value_of is None:
        return []
    numbers = []
    for record in records:
        number = numeric_value(value_of(record))
        if number is not None:
            numbers.append(number)
    return numbers


def aggregate(
    records: Sequence[Record],
    *,
    function: AggregationFunction,
    value_of: Optional[ValueOf] = None,
) -> float:
    """Reduce the records of one bucket to a number.

    Args:
        records: Bucket records in natural order
        function: Aggregation function
        value_of: Extracts the Y-axis value of a record (None without Y field)

    Returns:
        Aggregated value
    """
    if function == AggregationFunction.COUNT:
        return float(len(records))

    numbers = _numbers(records, value_of)
    if not numbers:
        return 0.0

    if function == AggregationFunction.SUM:
        return sum_values(numbers)
    if function == AggregationFunction.AVERAGE:
        return sum_values(numbers) / len(numbers)
    if function == AggregationFunction.MIN:
        return min(numbers)
    if function == AggregationFunction.MAX:
        return max(numbers)
    if function == AggregationFunction.FIRST:
        return numbers[0]
    if function == AggregationFunction.LAST:
        return numbers[-1]
    raise ValueError(f"Unsupported aggregation function: {function!r}")


def sum_values(numbers: Iterable[float]) -> float:
    """Left-to-right float sum."""
    total = 0.0
    for number in numbers:
        total += number
    return total
