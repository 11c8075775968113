"""Mapper functions to convert SQLAlchemy models into engine records.

This layer isolates the conversion logic, so the record keys stay aligned
with the field catalog when the table schema changes.
"""

from datetime import datetime
from typing import Any, Mapping, Optional

from queststats.database.models import (
    CalendarEvent as ORMCalendarEvent,
    Category as ORMCategory,
    Task as ORMTask,
    XpTransaction as ORMXpTransaction,
)

# XP sources whose reference_id points to a task.
TASK_XP_SOURCES = frozenset({"TASK", "SUBTASK"})


def task_to_record(orm_task: ORMTask, now: datetime) -> dict[str, Any]:
    """Convert SQLAlchemy Task model to a TASKS record."""
    is_overdue = (
        not orm_task.is_completed
        and orm_task.due_date is not None
        and orm_task.due_date < now
    )
    return {
        "id": orm_task.id,
        "title": orm_task.title,
        "category_id": orm_task.category_id,
        "category_name": orm_task.category.name if orm_task.category is not None else None,
        "priority": orm_task.priority,
        "difficulty": orm_task.xp_percentage,
        "xp_reward": orm_task.xp_reward,
        "is_completed": orm_task.is_completed,
        "is_overdue": is_overdue,
        "completed_at": orm_task.completed_at,
        "created_at": orm_task.created_at,
        "due_date": orm_task.due_date,
        "estimated_minutes": orm_task.estimated_minutes,
    }


def xp_transaction_to_record(
    orm_transaction: ORMXpTransaction,
    task_categories: Mapping[int, Optional[int]],
    event_categories: Mapping[int, Optional[int]],
) -> dict[str, Any]:
    """Convert SQLAlchemy XpTransaction model to an XP_TRANSACTIONS record.

    The category is looked up through the referenced task or calendar event.
    """
    category_id = None
    reference_id = orm_transaction.reference_id
    if reference_id is not None:
        if orm_transaction.source in TASK_XP_SOURCES:
            category_id = task_categories.get(reference_id)
        elif orm_transaction.source == "CALENDAR":
            category_id = event_categories.get(reference_id)
    return {
        "id": orm_transaction.id,
        "amount": orm_transaction.amount,
        "source": orm_transaction.source,
        "timestamp": orm_transaction.timestamp,
        "category_id": category_id,
    }


def category_to_record(orm_category: ORMCategory) -> dict[str, Any]:
    """Convert SQLAlchemy Category model to a CATEGORIES record."""
    return {
        "id": orm_category.id,
        "name": orm_category.name,
        "level": orm_category.current_level,
        "xp": orm_category.current_xp,
        "total_xp": orm_category.total_xp,
        "is_active": orm_category.is_active,
        "created_at": orm_category.created_at,
    }


def calendar_event_to_record(orm_event: ORMCalendarEvent) -> dict[str, Any]:
    """Convert SQLAlchemy CalendarEvent model to a CALENDAR_EVENTS record."""
    return {
        "id": orm_event.id,
        "title": orm_event.title,
        "category_id": orm_event.category_id,
        "category_name": orm_event.category.name if orm_event.category is not None else None,
        "status": orm_event.status,
        "xp": orm_event.xp,
        "rewarded": orm_event.rewarded,
        "starts_at": orm_event.starts_at,
        "ends_at": orm_event.ends_at,
    }
