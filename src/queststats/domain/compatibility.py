"""Chart compatibility rules.

Each chart type owns one ``ChartRules`` value describing the field types it
accepts per axis and how its buckets are materialized. Validation of a chart
configuration happens here, before any record is fetched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from queststats.domain.entities import (
    AggregationFunction,
    AxisRole,
    ChartType,
    DataField,
    DynamicChartConfig,
    FieldDataType,
    GroupingType,
)
from queststats.domain.errors import ConfigValidationError
from queststats.domain.field_catalog import DEFAULT_CATALOG, FieldCatalog
from queststats.domain.time_range import time_range_problems


class BucketDensity(Enum):
    """Whether empty date buckets are materialized."""

    DENSE = "dense"
    SPARSE = "sparse"


class CategoryOrder(Enum):
    """Order of category buckets."""

    FIRST_APPEARANCE = "first_appearance"
    LABEL = "label"
    KEY = "key"


_ALL_TYPES = frozenset(FieldDataType)
_CATEGORICAL = frozenset(
    {FieldDataType.ENUM, FieldDataType.STRING, FieldDataType.BOOLEAN, FieldDataType.DATE}
)
_NUMERIC = frozenset({FieldDataType.NUMBER})
_DATES = frozenset({FieldDataType.DATE})


@dataclass(frozen=True)
class ChartRules:
    """Legal axis field types and bucketing policy of one chart type."""

    x_types: frozenset[FieldDataType]
    y_types: frozenset[FieldDataType]
    requires_y: bool
    density: BucketDensity
    category_order: CategoryOrder

    def accepts(self, axis_role: AxisRole, data_type: FieldDataType) -> bool:
        allowed = self.x_types if axis_role == AxisRole.X else self.y_types
        return data_type in allowed


CHART_RULES: dict[ChartType, ChartRules] = {
    ChartType.BAR_CHART: ChartRules(
        _CATEGORICAL, _NUMERIC, False, BucketDensity.DENSE, CategoryOrder.FIRST_APPEARANCE
    ),
    ChartType.LINE_CHART: ChartRules(
        _DATES, _NUMERIC, False, BucketDensity.DENSE, CategoryOrder.FIRST_APPEARANCE
    ),
    ChartType.AREA_CHART: ChartRules(
        _DATES, _NUMERIC, False, BucketDensity.DENSE, CategoryOrder.FIRST_APPEARANCE
    ),
    ChartType.PIE_CHART: ChartRules(
        _CATEGORICAL, _NUMERIC, False, BucketDensity.SPARSE, CategoryOrder.FIRST_APPEARANCE
    ),
    ChartType.TABLE: ChartRules(
        _ALL_TYPES, _ALL_TYPES, False, BucketDensity.SPARSE, CategoryOrder.LABEL
    ),
    ChartType.SCATTER_PLOT: ChartRules(
        _NUMERIC, _NUMERIC, True, BucketDensity.SPARSE, CategoryOrder.KEY
    ),
}

_missing_rules = set(ChartType) - set(CHART_RULES)
if _missing_rules:
    raise RuntimeError(f"Chart types without rules: {sorted(t.name for t in _missing_rules)}")

_NON_NUMERIC_AGGREGATIONS = frozenset(
    {AggregationFunction.COUNT, AggregationFunction.FIRST, AggregationFunction.LAST}
)


def rules_for(chart_type: ChartType) -> ChartRules:
    """Return the rules of a chart type."""
    try:
        return CHART_RULES[chart_type]
    except KeyError:
        raise ValueError(f"Unsupported chart type: {chart_type!r}")


def is_valid_axis_field(chart_type: ChartType, axis_role: AxisRole, field: DataField) -> bool:
    """Return True if a field may be bound to an axis of a chart type."""
    return rules_for(chart_type).accepts(axis_role, field.data_type)


def available_aggregations(field: Optional[DataField]) -> frozenset[AggregationFunction]:
    """Return the aggregation functions legal for a (Y-axis) field.

    Without a field only COUNT is meaningful.
    """
    if field is None:
        return frozenset({AggregationFunction.COUNT})
    if field.data_type == FieldDataType.NUMBER:
        return frozenset(AggregationFunction)
    return _NON_NUMERIC_AGGREGATIONS


def requires_y_axis(chart_type: ChartType) -> bool:
    """Return True if a chart type cannot be drawn without a Y field."""
    return rules_for(chart_type).requires_y


def suggested_aggregation(chart_type: ChartType, y_field: Optional[DataField]) -> AggregationFunction:
    """Return the default aggregation offered by the chart builder."""
    if y_field is None or y_field.data_type != FieldDataType.NUMBER:
        return AggregationFunction.COUNT
    if chart_type == ChartType.SCATTER_PLOT:
        return AggregationFunction.AVERAGE
    return AggregationFunction.SUM


@dataclass(frozen=True)
class ResolvedChart:
    """A validated configuration with its fields resolved."""

    config: DynamicChartConfig
    x_field: DataField
    y_field: Optional[DataField]
    time_field: Optional[DataField]
    rules: ChartRules


def validate_chart_config(
    config: DynamicChartConfig,
    catalog: FieldCatalog = DEFAULT_CATALOG,
) -> ResolvedChart:
    """Resolve and validate a chart configuration.

    Args:
        config: Configuration to check
        catalog: Field catalog used for field resolution

    Returns:
        ResolvedChart ready for computation

    Raises:
        MissingFieldError: If a configured field id does not resolve
        ConfigValidationError: If the combination is not computable
    """
    source = config.data_source
    x_field = catalog.resolve(source, config.x_axis_field)
    y_field = None
    if config.y_axis_field is not None:
        y_field = catalog.resolve(source, config.y_axis_field)
    for data_filter in config.filters:
        catalog.resolve(source, data_filter.field_id)

    chart_type = config.chart_type
    rules = rules_for(chart_type)
    aggregation = config.y_axis_aggregation
    problems: list[str] = []

    if not rules.accepts(AxisRole.X, x_field.data_type):
        problems.append(
            f"{chart_type.name} does not accept {x_field.data_type.name} field '{x_field.id}' on the X axis"
        )
    if y_field is None:
        if rules.requires_y:
            problems.append(f"{chart_type.name} requires a Y-axis field")
        elif aggregation != AggregationFunction.COUNT:
            problems.append(f"{aggregation.name} requires a Y-axis field")
    else:
        if not rules.accepts(AxisRole.Y, y_field.data_type):
            problems.append(
                f"{chart_type.name} does not accept {y_field.data_type.name} field '{y_field.id}' on the Y axis"
            )
        if aggregation not in available_aggregations(y_field):
            problems.append(
                f"{aggregation.name} is not available for {y_field.data_type.name} field '{y_field.id}'"
            )

    grouping = config.grouping.type
    if grouping == GroupingType.BY_DATE and x_field.data_type != FieldDataType.DATE:
        problems.append(f"Date grouping requires a DATE X-axis field, got '{x_field.id}'")
    if grouping == GroupingType.BY_CATEGORY and x_field.data_type == FieldDataType.DATE:
        problems.append(f"Category grouping cannot use DATE field '{x_field.id}'; use date grouping")

    problems.extend(time_range_problems(config.time_range))

    if problems:
        raise ConfigValidationError(problems)

    return ResolvedChart(
        config=config,
        x_field=x_field,
        y_field=y_field,
        time_field=catalog.time_field(source, x_field),
        rules=rules,
    )
