"""Tests for domain entities."""

import dataclasses

import pytest

from queststats.domain.entities import (
    AggregationFunction,
    ChartDataResult,
    ChartType,
    DataSource,
    DateInterval,
    DynamicChartConfig,
    GroupingConfig,
    GroupingType,
    SortKey,
)


def test_chart_config_defaults():
    config = DynamicChartConfig(
        title="Tasks",
        chart_type=ChartType.BAR_CHART,
        data_source=DataSource.TASKS,
        x_axis_field="priority",
    )

    assert config.y_axis_field is None
    assert config.y_axis_aggregation == AggregationFunction.COUNT
    assert config.grouping.type == GroupingType.NONE
    assert config.time_range is None
    assert config.sort.key == SortKey.NATURAL
    assert config.filters == ()


def test_chart_config_is_immutable():
    config = DynamicChartConfig(
        title="Tasks",
        chart_type=ChartType.BAR_CHART,
        data_source=DataSource.TASKS,
        x_axis_field="priority",
    )

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.title = "Other"


def test_grouping_interval_defaults_to_day():
    assert GroupingConfig(GroupingType.BY_DATE).interval == DateInterval.DAY
    assert GroupingConfig(GroupingType.BY_DATE, DateInterval.MONTH).interval == DateInterval.MONTH


def test_chart_data_result_normalizes_values():
    result = ChartDataResult(labels=["a", "b"], values=[1, 2.5], metadata={"k": "v"})

    assert result.labels == ("a", "b")
    assert result.values == (1.0, 2.5)
    assert isinstance(result.values[0], float)
    assert result.rows() == [("a", 1.0), ("b", 2.5)]
    with pytest.raises(TypeError):
        result.metadata["k"] = "w"


def test_chart_data_result_length_mismatch():
    with pytest.raises(ValueError, match="same length"):
        ChartDataResult(labels=("a",), values=())


def test_empty_result():
    assert ChartDataResult(labels=(), values=()).is_empty
