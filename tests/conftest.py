"""Shared pytest fixtures for queststats tests."""

import os
import tempfile
from datetime import datetime

import pytest

from queststats.database.factories import create_sqlite_database
from queststats.database.memory import InMemoryRecordRepository
from queststats.domain.chart_data import ChartDataService
from queststats.domain.entities import DataSource


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def now():
    """Fixed reference time (midnight) for relative time ranges."""
    return datetime(2024, 3, 15)


@pytest.fixture
def task_records():
    """Tasks across two categories, in creation order."""
    return [
        {
            "id": 1, "title": "Write report", "category_id": 1, "category_name": "Work",
            "priority": "HIGH", "difficulty": 40, "xp_reward": 20, "is_completed": True,
            "is_overdue": False, "created_at": datetime(2024, 3, 1, 9),
            "completed_at": datetime(2024, 3, 10, 10), "due_date": None, "estimated_minutes": 60,
        },
        {
            "id": 2, "title": "Gym", "category_id": 2, "category_name": "Health",
            "priority": "MEDIUM", "difficulty": 20, "xp_reward": 10, "is_completed": True,
            "is_overdue": False, "created_at": datetime(2024, 3, 2, 9),
            "completed_at": datetime(2024, 3, 10, 18), "due_date": None, "estimated_minutes": 90,
        },
        {
            "id": 3, "title": "Review PR", "category_id": 1, "category_name": "Work",
            "priority": "LOW", "difficulty": 60, "xp_reward": 30, "is_completed": True,
            "is_overdue": False, "created_at": datetime(2024, 3, 3, 9),
            "completed_at": datetime(2024, 3, 10, 20), "due_date": None, "estimated_minutes": None,
        },
        {
            "id": 4, "title": "Run", "category_id": 2, "category_name": "Health",
            "priority": "MEDIUM", "difficulty": 20, "xp_reward": 10, "is_completed": True,
            "is_overdue": False, "created_at": datetime(2024, 3, 4, 9),
            "completed_at": datetime(2024, 3, 13, 7), "due_date": None, "estimated_minutes": 30,
        },
        {
            "id": 5, "title": "Plan sprint", "category_id": 1, "category_name": "Work",
            "priority": "HIGH", "difficulty": 40, "xp_reward": 20, "is_completed": False,
            "is_overdue": True, "created_at": datetime(2024, 3, 5, 9),
            "completed_at": None, "due_date": datetime(2024, 3, 10), "estimated_minutes": 45,
        },
    ]


@pytest.fixture
def xp_records():
    """XP transactions: TASK 5 + TASK 10 + CALENDAR 20."""
    return [
        {"id": 1, "amount": 5, "source": "TASK", "timestamp": datetime(2024, 3, 10, 8), "category_id": 1},
        {"id": 2, "amount": 20, "source": "CALENDAR", "timestamp": datetime(2024, 3, 11, 8), "category_id": 2},
        {"id": 3, "amount": 10, "source": "TASK", "timestamp": datetime(2024, 3, 12, 8), "category_id": 2},
    ]


@pytest.fixture
def repositories(task_records, xp_records):
    """In-memory repositories for every data source."""
    return {
        DataSource.TASKS: InMemoryRecordRepository(DataSource.TASKS, task_records),
        DataSource.XP_TRANSACTIONS: InMemoryRecordRepository(DataSource.XP_TRANSACTIONS, xp_records),
        DataSource.CATEGORIES: InMemoryRecordRepository(DataSource.CATEGORIES),
        DataSource.CALENDAR_EVENTS: InMemoryRecordRepository(DataSource.CALENDAR_EVENTS),
    }


@pytest.fixture
def chart_service(repositories, now):
    """ChartDataService over the in-memory repositories with a fixed clock."""
    return ChartDataService(repositories, clock=lambda: now)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
