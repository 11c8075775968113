"""Tests for debounced chart refresh."""

import pytest

from queststats.domain.entities import (
    AggregationFunction,
    ChartType,
    DataSource,
    DynamicChartConfig,
    GroupingConfig,
    GroupingType,
)
from queststats.domain.refresh import ChartRefresher


class FakeTimer:
    """Manually fired stand-in for threading.Timer."""

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.cancelled = False
        self.started = False
        self.daemon = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args)


class TimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=()):
        timer = FakeTimer(interval, function, args)
        self.timers.append(timer)
        return timer

    def pending(self):
        return [timer for timer in self.timers if not timer.cancelled]


def _config(title="XP", aggregation=AggregationFunction.SUM):
    return DynamicChartConfig(
        title=title,
        chart_type=ChartType.BAR_CHART,
        data_source=DataSource.XP_TRANSACTIONS,
        x_axis_field="source",
        y_axis_field="amount",
        y_axis_aggregation=aggregation,
        grouping=GroupingConfig(GroupingType.BY_CATEGORY),
    )


@pytest.fixture
def timers():
    return TimerFactory()


@pytest.fixture
def delivered():
    return []


@pytest.fixture
def refresher(chart_service, timers, delivered):
    refresher = ChartRefresher(
        chart_service,
        on_result=lambda key, outcome: delivered.append((key, outcome)),
        debounce_seconds=0.1,
        timer_factory=timers,
    )
    yield refresher
    refresher.close()


def test_request_is_debounced(refresher, timers, delivered):
    refresher.request("xp", _config())
    refresher.request("xp", _config())
    refresher.request("xp", _config())

    assert len(timers.pending()) == 1
    assert timers.pending()[0].interval == 0.1
    assert timers.pending()[0].daemon
    timers.pending()[0].fire()

    assert len(delivered) == 1
    key, outcome = delivered[0]
    assert key == "xp"
    assert outcome.ok
    assert outcome.result.values == (15.0, 20.0)


def test_generations_increase(refresher):
    first = refresher.request("xp", _config())
    second = refresher.request("xp", _config())

    assert second > first


def test_stale_result_is_discarded(refresher, timers, delivered):
    refresher.request("xp", _config())
    stale = timers.timers[0]
    refresher.request("xp", _config(aggregation=AggregationFunction.MAX))

    # A timer that already started running must not deliver an old generation.
    stale.function(*stale.args)
    assert delivered == []

    timers.pending()[0].fire()
    assert len(delivered) == 1
    assert delivered[0][1].result.values == (10.0, 20.0)


def test_cancel_discards_pending_work(refresher, timers, delivered):
    refresher.request("xp", _config())
    timer = timers.timers[0]

    refresher.cancel("xp")
    timer.function(*timer.args)

    assert timer.cancelled
    assert delivered == []
    assert refresher.tracked() == []


def test_invalid_config_is_delivered_as_error(refresher, timers, delivered):
    scatter_without_y = DynamicChartConfig(
        title="Bad",
        chart_type=ChartType.SCATTER_PLOT,
        data_source=DataSource.XP_TRANSACTIONS,
        x_axis_field="amount",
    )
    refresher.request("bad", scatter_without_y)
    timers.pending()[0].fire()

    assert len(delivered) == 1
    assert not delivered[0][1].ok


def test_data_change_recomputes_affected_charts(refresher, repositories, timers, delivered):
    refresher.watch(repositories[DataSource.XP_TRANSACTIONS])
    refresher.watch(repositories[DataSource.TASKS])
    refresher.request("xp", _config())
    timers.pending()[0].fire()
    delivered.clear()

    repositories[DataSource.XP_TRANSACTIONS].add(
        {"id": 4, "amount": 7, "source": "BONUS", "timestamp": None, "category_id": None}
    )
    pending = timers.pending()
    pending[-1].fire()

    assert len(delivered) == 1
    assert delivered[0][1].result.labels == ("TASK", "CALENDAR", "BONUS")


def test_unrelated_data_change_is_ignored(refresher, repositories, timers):
    refresher.watch(repositories[DataSource.TASKS])
    refresher.request("xp", _config())
    before = len(timers.timers)

    repositories[DataSource.TASKS].replace([])

    assert len(timers.timers) == before


def test_set_category_scope_rescopes_all_charts(refresher, timers, delivered):
    refresher.request("xp", _config())
    refresher.set_category_scope(2)
    timers.pending()[0].fire()

    assert delivered[0][1].result.rows() == [("CALENDAR", 20.0), ("TASK", 10.0)]


def test_request_after_close_raises(refresher):
    refresher.close()

    with pytest.raises(RuntimeError):
        refresher.request("xp", _config())
