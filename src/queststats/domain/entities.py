"""Domain model entities for queststats.

These are pure data classes describing chart configurations and the values
the chart engine produces. They are independent of how configurations are
stored and of how records are fetched, so the engine stays stable when the
surrounding application changes its persistence layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


# A record is a read-only mapping of field id -> value for one data source.
Record = Mapping[str, Any]


class DataSource(Enum):
    """Origin of raw records."""

    TASKS = "tasks"
    XP_TRANSACTIONS = "xp_transactions"
    CATEGORIES = "categories"
    CALENDAR_EVENTS = "calendar_events"


class FieldDataType(Enum):
    """Declared type of a queryable field."""

    NUMBER = "number"
    STRING = "string"
    DATE = "date"
    ENUM = "enum"
    BOOLEAN = "boolean"


class AggregationFunction(Enum):
    """Reduction applied to the records of one bucket."""

    COUNT = "count"
    SUM = "sum"
    AVERAGE = "average"
    MIN = "min"
    MAX = "max"
    FIRST = "first"
    LAST = "last"


class GroupingType(Enum):
    """How records are partitioned into buckets."""

    NONE = "none"
    BY_CATEGORY = "category"
    BY_DATE = "date"


class DateInterval(Enum):
    """Bucket width for date grouping."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class TimeRangeType(Enum):
    """Relative or absolute time window selector."""

    LAST_7_DAYS = "last-7-days"
    LAST_30_DAYS = "last-30-days"
    LAST_3_MONTHS = "last-3-months"
    LAST_6_MONTHS = "last-6-months"
    LAST_YEAR = "last-year"
    LAST_2_YEARS = "last-2-years"
    LAST_3_YEARS = "last-3-years"
    ALL_TIME = "all-time"
    CUSTOM = "custom"


class ChartType(Enum):
    """Visualization requested by the user."""

    BAR_CHART = "bar"
    LINE_CHART = "line"
    PIE_CHART = "pie"
    TABLE = "table"
    SCATTER_PLOT = "scatter"
    AREA_CHART = "area"


class AxisRole(Enum):
    """Axis a field is bound to."""

    X = "x"
    Y = "y"


class SortKey(Enum):
    """What chart buckets are sorted by."""

    NATURAL = "natural"
    LABEL = "label"
    VALUE = "value"


class SortDirection(Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class FilterOperator(Enum):
    """Comparison used by a record filter."""

    EQUALS = "eq"
    NOT_EQUALS = "ne"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"
    CONTAINS = "contains"
    IN_LIST = "in"


@dataclass(frozen=True)
class DataField:
    """One queryable attribute of a data source."""

    id: str
    label: str
    data_type: FieldDataType
    data_source: DataSource


@dataclass(frozen=True)
class GroupingConfig:
    """Grouping strategy for the X axis."""

    type: GroupingType = GroupingType.NONE
    date_interval: Optional[DateInterval] = None

    @property
    def interval(self) -> DateInterval:
        """Date interval, defaulting to DAY."""
        return self.date_interval or DateInterval.DAY


@dataclass(frozen=True)
class TimeRange:
    """Time window selector; custom bounds are only used for CUSTOM."""

    type: TimeRangeType = TimeRangeType.ALL_TIME
    custom_start: Optional[datetime] = None
    custom_end: Optional[datetime] = None


@dataclass(frozen=True)
class SortConfig:
    """Sort order applied to the computed buckets."""

    key: SortKey = SortKey.NATURAL
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class DataFilter:
    """Record-level filter on one field."""

    field_id: str
    operator: FilterOperator
    value: str


@dataclass(frozen=True)
class DynamicChartConfig:
    """User-authored chart configuration.

    Display flags (legend, values, axis labels, colors) are carried for the
    render layer and never influence computed values.
    """

    title: str
    chart_type: ChartType
    data_source: DataSource
    x_axis_field: str
    y_axis_field: Optional[str] = None
    y_axis_aggregation: AggregationFunction = AggregationFunction.COUNT
    grouping: GroupingConfig = field(default_factory=GroupingConfig)
    time_range: Optional[TimeRange] = None
    sort: SortConfig = field(default_factory=SortConfig)
    filters: tuple[DataFilter, ...] = ()
    show_legend: bool = True
    show_values: bool = True
    show_axis_labels: bool = True
    color_scheme: Optional[str] = None


@dataclass(frozen=True)
class ChartDataResult:
    """Renderable chart data: parallel labels and values."""

    labels: tuple[str, ...]
    values: tuple[float, ...]
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if len(self.labels) != len(self.values):
            raise ValueError(
                f"labels and values must have the same length "
                f"({len(self.labels)} != {len(self.values)})"
            )
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to draw."""
        return not self.labels

    def rows(self) -> list[tuple[str, float]]:
        """Return (label, value) pairs."""
        return list(zip(self.labels, self.values))
