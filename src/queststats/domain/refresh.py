"""Debounced recomputation of dashboard charts.

``ChartRefresher`` tracks the charts of a dashboard, recomputes a chart when
its configuration is edited or when the repository of its data source
publishes a change, and delivers results through a callback. Rapid requests
for one chart collapse into a single computation. Each request takes a new
generation from a shared counter; a computation whose generation is no
longer current when it finishes is discarded instead of delivered.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

from queststats.database.base import RecordRepository
from queststats.domain.chart_data import ChartDataService
from queststats.domain.entities import ChartDataResult, DataSource, DynamicChartConfig
from queststats.domain.errors import DomainError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshOutcome:
    """Delivered result of one chart recomputation."""

    chart_key: Hashable
    generation: int
    result: Optional[ChartDataResult] = None
    error: Optional[DomainError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class _TrackedChart:
    config: DynamicChartConfig
    category_id: Optional[Any]
    generation: int = 0
    timer: Optional[Any] = None


class ChartRefresher:
    """Schedules chart recomputations with debounce and stale-result discard."""

    def __init__(
        self,
        service: ChartDataService,
        on_result: Callable[[Hashable, RefreshOutcome], None],
        debounce_seconds: float = 0.25,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        """Initialize refresher.

        Args:
            service: Chart data service used for computations
            on_result: Called with (chart_key, outcome) for current results only
            debounce_seconds: Quiet period before a requested chart is computed
            timer_factory: ``threading.Timer``-compatible factory
        """
        self.service = service
        self.on_result = on_result
        self.debounce_seconds = debounce_seconds
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._charts: dict[Hashable, _TrackedChart] = {}
        self._unsubscribers: list[Callable[[], None]] = []
        self._closed = False
        self._generations = itertools.count(1)

    def request(
        self,
        chart_key: Hashable,
        config: DynamicChartConfig,
        category_id: Optional[Any] = None,
    ) -> int:
        """Schedule a (re)computation of a chart. Returns the request generation."""
        with self._lock:
            if self._closed:
                raise RuntimeError("ChartRefresher is closed")
            tracked = self._charts.get(chart_key)
            if tracked is None:
                tracked = _TrackedChart(config=config, category_id=category_id)
                self._charts[chart_key] = tracked
            tracked.config = config
            tracked.category_id = category_id
            tracked.generation = next(self._generations)
            self._schedule(chart_key, tracked)
            return tracked.generation

    def cancel(self, chart_key: Hashable) -> None:
        """Stop tracking a chart; pending and in-flight work is discarded."""
        with self._lock:
            tracked = self._charts.pop(chart_key, None)
            if tracked is not None and tracked.timer is not None:
                tracked.timer.cancel()

    def set_category_scope(self, category_id: Optional[Any]) -> None:
        """Rescope every tracked chart and recompute it."""
        with self._lock:
            charts = [(key, tracked.config) for key, tracked in self._charts.items()]
            for key, config in charts:
                self.request(key, config, category_id)

    def watch(self, repository: RecordRepository) -> None:
        """Recompute affected charts whenever a repository reports a change."""
        with self._lock:
            self._unsubscribers.append(repository.subscribe(self._on_data_changed))

    def tracked(self) -> list[Hashable]:
        """Keys of the charts currently tracked."""
        with self._lock:
            return list(self._charts)

    def close(self) -> None:
        """Cancel all pending work and stop listening to repositories."""
        with self._lock:
            self._closed = True
            for tracked in self._charts.values():
                if tracked.timer is not None:
                    tracked.timer.cancel()
            self._charts.clear()
            unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()

    def _schedule(self, chart_key: Hashable, tracked: _TrackedChart) -> None:
        if tracked.timer is not None:
            tracked.timer.cancel()
        timer = self._timer_factory(
            self.debounce_seconds, self._run, args=(chart_key, tracked.generation)
        )
        timer.daemon = True
        tracked.timer = timer
        timer.start()

    def _on_data_changed(self, data_source: DataSource) -> None:
        with self._lock:
            if self._closed:
                return
            affected = [
                (key, tracked.config, tracked.category_id)
                for key, tracked in self._charts.items()
                if tracked.config.data_source == data_source
            ]
            for key, config, category_id in affected:
                self.request(key, config, category_id)

    def _is_current(self, chart_key: Hashable, generation: int) -> bool:
        tracked = self._charts.get(chart_key)
        return not self._closed and tracked is not None and tracked.generation == generation

    def _run(self, chart_key: Hashable, generation: int) -> None:
        with self._lock:
            if not self._is_current(chart_key, generation):
                return
            tracked = self._charts[chart_key]
            tracked.timer = None
            config, category_id = tracked.config, tracked.category_id

        try:
            outcome = RefreshOutcome(
                chart_key, generation, result=self.service.compute(config, category_id)
            )
        except DomainError as e:
            outcome = RefreshOutcome(chart_key, generation, error=e)

        with self._lock:
            if not self._is_current(chart_key, generation):
                logger.debug("Discarding stale result for chart %r (generation %d)", chart_key, generation)
                return
            self.on_result(chart_key, outcome)
