"""Database layer for queststats application."""

from queststats.database.base import RecordRepository, TimeRangeHint
from queststats.database.memory import InMemoryRecordRepository
from queststats.database.factories import create_sqlite_database

__all__ = [
    "RecordRepository",
    "TimeRangeHint",
    "InMemoryRecordRepository",
    "create_sqlite_database",
]
