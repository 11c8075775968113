"""Quick-start chart templates offered by the chart builder."""

from dataclasses import dataclass

from queststats.domain.entities import (
    AggregationFunction,
    ChartType,
    DataSource,
    DateInterval,
    DynamicChartConfig,
    GroupingConfig,
    GroupingType,
    TimeRange,
    TimeRangeType,
)
from queststats.domain.errors import NotFoundError, template_not_found


@dataclass(frozen=True)
class ChartTemplate:
    """Named, ready-made chart configuration."""

    name: str
    description: str
    config: DynamicChartConfig


CHART_TEMPLATES: tuple[ChartTemplate, ...] = (
    ChartTemplate(
        name="Tasks by category",
        description="Bar chart: number of tasks per category",
        config=DynamicChartConfig(
            title="Tasks by category",
            chart_type=ChartType.BAR_CHART,
            data_source=DataSource.TASKS,
            x_axis_field="category_name",
            y_axis_aggregation=AggregationFunction.COUNT,
            grouping=GroupingConfig(GroupingType.BY_CATEGORY),
        ),
    ),
    ChartTemplate(
        name="XP over time",
        description="Line chart: XP earned per day",
        config=DynamicChartConfig(
            title="XP over time",
            chart_type=ChartType.LINE_CHART,
            data_source=DataSource.XP_TRANSACTIONS,
            x_axis_field="timestamp",
            y_axis_field="amount",
            y_axis_aggregation=AggregationFunction.SUM,
            grouping=GroupingConfig(GroupingType.BY_DATE, DateInterval.DAY),
            time_range=TimeRange(TimeRangeType.LAST_30_DAYS),
        ),
    ),
    ChartTemplate(
        name="Priority distribution",
        description="Pie chart: tasks per priority",
        config=DynamicChartConfig(
            title="Priority distribution",
            chart_type=ChartType.PIE_CHART,
            data_source=DataSource.TASKS,
            x_axis_field="priority",
            y_axis_aggregation=AggregationFunction.COUNT,
            grouping=GroupingConfig(GroupingType.BY_CATEGORY),
        ),
    ),
    ChartTemplate(
        name="Task overview",
        description="Table: tasks by title",
        config=DynamicChartConfig(
            title="Task overview",
            chart_type=ChartType.TABLE,
            data_source=DataSource.TASKS,
            x_axis_field="title",
            y_axis_aggregation=AggregationFunction.COUNT,
            grouping=GroupingConfig(GroupingType.BY_CATEGORY),
        ),
    ),
)


def get_template(name: str) -> ChartTemplate:
    """Return a template by name (case-insensitive).

    Raises:
        NotFoundError: If no template has that name
    """
    wanted = name.strip().casefold()
    for template in CHART_TEMPLATES:
        if template.name.casefold() == wanted:
            return template
    raise NotFoundError(template_not_found(name))
