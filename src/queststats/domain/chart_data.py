"""Chart data orchestration.

``ChartDataService`` turns a chart configuration into a ``ChartDataResult``:
validate, fetch a record snapshot, narrow it by category scope, record filters
and time range, group, aggregate, sort. A computation is a pure function of
(config, category scope, now, record snapshot).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from queststats.database.base import RecordRepository, TimeRangeHint
from queststats.domain.aggregation import aggregate
from queststats.domain.compatibility import ResolvedChart, validate_chart_config
from queststats.domain.entities import (
    ChartDataResult,
    DataSource,
    DynamicChartConfig,
    Record,
    SortConfig,
    SortDirection,
    SortKey,
)
from queststats.domain.errors import DataSourceUnavailableError, DomainError
from queststats.domain.field_catalog import DEFAULT_CATALOG, FieldCatalog
from queststats.domain.grouping import Bucket, group_records
from queststats.domain.record_filters import apply_filters
from queststats.domain.time_range import ResolvedTimeRange, resolve_time_range
from queststats.utils.date_parser import to_naive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartOutcome:
    """Result or error of one chart computation."""

    config: DynamicChartConfig
    result: Optional[ChartDataResult] = None
    error: Optional[DomainError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def sort_rows(rows: list[tuple[str, float]], sort: SortConfig) -> list[tuple[str, float]]:
    """Sort (label, value) rows; ties keep natural bucket order."""
    descending = sort.direction == SortDirection.DESC
    if sort.key == SortKey.NATURAL:
        return list(reversed(rows)) if descending else list(rows)
    if sort.key == SortKey.LABEL:
        return sorted(rows, key=lambda row: row[0], reverse=descending)
    if sort.key == SortKey.VALUE:
        return sorted(rows, key=lambda row: row[1], reverse=descending)
    raise ValueError(f"Unsupported sort key: {sort.key!r}")


class ChartDataService:
    """Computes chart data from record repositories."""

    def __init__(
        self,
        repositories: Union[Mapping[DataSource, RecordRepository], Iterable[RecordRepository]],
        catalog: FieldCatalog = DEFAULT_CATALOG,
        fetch_timeout: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize chart data service.

        Args:
            repositories: Repository per data source (mapping or iterable)
            catalog: Field catalog
            fetch_timeout: Seconds a fetch may take before the data source is
                reported unavailable; None fetches on the calling thread
            clock: Source of "now" when a computation is not given one
        """
        if isinstance(repositories, Mapping):
            self.repositories = dict(repositories)
        else:
            self.repositories = {repo.data_source: repo for repo in repositories}
        self.catalog = catalog
        self.fetch_timeout = fetch_timeout
        self.clock = clock
        self._executor: Optional[ThreadPoolExecutor] = None
        if fetch_timeout is not None:
            self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="queststats-fetch")

    def close(self) -> None:
        """Release the fetch worker threads."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def __enter__(self) -> "ChartDataService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def validate(self, config: DynamicChartConfig) -> ResolvedChart:
        """Resolve and validate a configuration without fetching data."""
        return validate_chart_config(config, self.catalog)

    def compute(
        self,
        config: DynamicChartConfig,
        category_id: Optional[Any] = None,
        now: Optional[datetime] = None,
    ) -> ChartDataResult:
        """Compute the data of one chart.

        Args:
            config: Chart configuration
            category_id: Optional category scope; None means all categories
            now: Reference instant for relative time ranges (captured from
                the clock once when omitted)

        Returns:
            ChartDataResult; zero buckets is a valid, empty result

        Raises:
            MissingFieldError: If a configured field does not resolve
            ConfigValidationError: If the configuration is not computable
            DataSourceUnavailableError: If the records cannot be fetched
        """
        resolved = self.validate(config)
        now = to_naive(now if now is not None else self.clock())
        time_range = resolve_time_range(config.time_range, now)

        records = self._fetch(resolved, time_range, now)
        records = self._apply_scope(config.data_source, records, category_id)
        records = apply_filters(records, config.filters, data_source=config.data_source, catalog=self.catalog)
        records = self._apply_time_range(resolved, records, time_range)

        buckets = group_records(
            records,
            grouping=config.grouping,
            key_of=self.catalog.extractor(resolved.x_field),
            density=resolved.rules.density,
            category_order=resolved.rules.category_order,
            time_range=time_range,
            title=config.title,
        )
        rows = sort_rows(self._aggregate(resolved, buckets), config.sort)

        logger.debug(
            "Computed chart %r: %d record(s) in %d bucket(s)", config.title, len(records), len(rows)
        )
        return ChartDataResult(
            labels=tuple(label for label, _ in rows),
            values=tuple(value for _, value in rows),
            metadata={
                "chart_type": config.chart_type.name,
                "data_source": config.data_source.name,
                "grouping": config.grouping.type.name,
            },
        )

    def compute_many(
        self,
        configs: Iterable[DynamicChartConfig],
        category_id: Optional[Any] = None,
        now: Optional[datetime] = None,
    ) -> list[ChartOutcome]:
        """Compute several charts against the same "now".

        Domain errors are captured per chart so one broken chart does not
        hide the others.
        """
        now = now if now is not None else self.clock()
        outcomes = []
        for config in configs:
            try:
                outcomes.append(ChartOutcome(config, result=self.compute(config, category_id, now)))
            except DomainError as e:
                outcomes.append(ChartOutcome(config, error=e))
        return outcomes

    def _fetch(
        self, resolved: ResolvedChart, time_range: ResolvedTimeRange, now: datetime
    ) -> Sequence[Record]:
        source = resolved.config.data_source
        repository = self.repositories.get(source)
        if repository is None:
            raise DataSourceUnavailableError(source, "no repository registered")

        hint = None
        if not time_range.unbounded and resolved.time_field is not None:
            hint = TimeRangeHint(resolved.time_field.id, time_range.start, time_range.end)

        try:
            if self._executor is None:
                records = repository.fetch(hint, now)
            else:
                future = self._executor.submit(repository.fetch, hint, now)
                try:
                    records = future.result(timeout=self.fetch_timeout)
                except FutureTimeoutError:
                    future.cancel()
                    raise DataSourceUnavailableError(
                        source, f"fetch timed out after {self.fetch_timeout}s"
                    ) from None
        except DataSourceUnavailableError:
            logger.warning("Data source %s unavailable", source.name)
            raise
        except Exception as e:
            logger.warning("Fetching %s failed: %s", source.name, e)
            raise DataSourceUnavailableError(source, str(e) or type(e).__name__) from e

        logger.debug("Fetched %d %s record(s)", len(records), source.name)
        return records

    def _apply_scope(
        self, data_source: DataSource, records: Sequence[Record], category_id: Optional[Any]
    ) -> list[Record]:
        if category_id is None:
            return list(records)
        return [
            record for record in records
            if self.catalog.scope_value(data_source, record) == category_id
        ]

    def _apply_time_range(
        self, resolved: ResolvedChart, records: Sequence[Record], time_range: ResolvedTimeRange
    ) -> list[Record]:
        if time_range.unbounded or resolved.time_field is None:
            return list(records)
        moment_of = self.catalog.extractor(resolved.time_field)
        return [record for record in records if time_range.contains(moment_of(record))]

    def _aggregate(self, resolved: ResolvedChart, buckets: Sequence[Bucket]) -> list[tuple[str, float]]:
        value_of = None
        if resolved.y_field is not None:
            value_of = self.catalog.extractor(resolved.y_field)
        function = resolved.config.y_axis_aggregation
        return [
            (bucket.label, aggregate(bucket.records, function=function, value_of=value_of))
            for bucket in buckets
        ]
