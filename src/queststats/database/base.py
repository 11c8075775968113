"""Abstract record repository interface."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from queststats.domain.entities import DataSource, Record

logger = logging.getLogger(__name__)

ChangeListener = Callable[[DataSource], None]


@dataclass(frozen=True)
class TimeRangeHint:
    """Optional narrowing a repository may apply while fetching.

    Repositories are free to ignore it; the chart engine filters again.
    """

    field_id: str
    start: datetime
    end: datetime


class RecordRepository(ABC):
    """Read-only source of records for one data source.

    Repositories publish a change notification when their data changes so
    that dependent charts can be recomputed.
    """

    def __init__(self, data_source: DataSource):
        """Initialize repository.

        Args:
            data_source: Data source whose records this repository serves
        """
        self.data_source = data_source
        self._listeners: list[ChangeListener] = []
        self._listeners_lock = threading.Lock()

    @abstractmethod
    def fetch(
        self,
        time_range_hint: Optional[TimeRangeHint] = None,
        as_of: Optional[datetime] = None,
    ) -> Sequence[Record]:
        """Return a snapshot of the records, in natural (chronological) order.

        Args:
            time_range_hint: Optional narrowing the repository may apply
            as_of: "Now" for time-dependent derived fields (e.g. overdue flags);
                None means the repository's own clock
        """
        pass

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def notify_changed(self) -> None:
        """Publish a change event to all listeners."""
        with self._listeners_lock:
            listeners = list(self._listeners)
        logger.debug("%s changed, notifying %d listener(s)", self.data_source.name, len(listeners))
        for listener in listeners:
            listener(self.data_source)
