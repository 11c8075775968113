"""Record-level data filters applied before time filtering and grouping."""

from typing import Any, Iterable, Sequence

from queststats.domain.aggregation import numeric_value
from queststats.domain.entities import DataFilter, DataSource, FilterOperator, Record
from queststats.domain.field_catalog import DEFAULT_CATALOG, FieldCatalog, to_number
from queststats.domain.grouping import category_label


def _text(value: Any) -> str:
    return category_label(value) if value is not None else ""


def matches(value: Any, data_filter: DataFilter) -> bool:
    """Return True if an extracted value satisfies a filter."""
    operator = data_filter.operator
    expected = data_filter.value

    if operator == FilterOperator.EQUALS:
        return value is not None and _text(value) == expected
    if operator == FilterOperator.NOT_EQUALS:
        return value is None or _text(value) != expected
    if operator in (FilterOperator.GREATER_THAN, FilterOperator.LESS_THAN):
        number = numeric_value(value)
        threshold = to_number(expected)
        if number is None or threshold is None:
            return False
        if operator == FilterOperator.GREATER_THAN:
            return number > threshold
        return number < threshold
    if operator == FilterOperator.CONTAINS:
        return value is not None and expected.casefold() in _text(value).casefold()
    if operator == FilterOperator.IN_LIST:
        options = {option.strip() for option in expected.split(",")}
        return value is not None and _text(value) in options
    raise ValueError(f"Unsupported filter operator: {operator!r}")


def apply_filters(
    records: Iterable[Record],
    filters: Sequence[DataFilter],
    *,
    data_source: DataSource,
    catalog: FieldCatalog = DEFAULT_CATALOG,
) -> list[Record]:
    """Keep the records matching every filter, preserving order."""
    records = list(records)
    for data_filter in filters:
        field = catalog.resolve(data_source, data_filter.field_id)
        extract = catalog.extractor(field)
        records = [record for record in records if matches(extract(record), data_filter)]
    return records
