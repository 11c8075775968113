"""In-memory record repository."""

import threading
from types import MappingProxyType
from datetime import datetime
from typing import Iterable, Optional, Sequence

from queststats.database.base import RecordRepository, TimeRangeHint
from queststats.domain.entities import DataSource, Record


class InMemoryRecordRepository(RecordRepository):
    """Repository over records held in memory.

    Every write swaps in a new immutable snapshot, so a fetched snapshot is
    never mutated by later writes.
    """

    def __init__(self, data_source: DataSource, records: Iterable[Record] = ()):
        super().__init__(data_source)
        self._lock = threading.Lock()
        self._records: tuple[Record, ...] = self._freeze(records)
        self.fetch_count = 0

    @staticmethod
    def _freeze(records: Iterable[Record]) -> tuple[Record, ...]:
        return tuple(MappingProxyType(dict(record)) for record in records)

    def fetch(
        self,
        time_range_hint: Optional[TimeRangeHint] = None,
        as_of: Optional[datetime] = None,
    ) -> Sequence[Record]:
        """Return the current snapshot (records are stored as given)."""
        with self._lock:
            self.fetch_count += 1
            return self._records

    def replace(self, records: Iterable[Record]) -> None:
        """Replace all records and notify listeners."""
        frozen = self._freeze(records)
        with self._lock:
            self._records = frozen
        self.notify_changed()

    def add(self, *records: Record) -> None:
        """Append records and notify listeners."""
        frozen = self._freeze(records)
        with self._lock:
            self._records = self._records + frozen
        self.notify_changed()
