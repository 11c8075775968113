"""SQLAlchemy models for the queststats record tables."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    create_engine,
)
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

Base = declarative_base()


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    current_xp = Column(Integer, default=0, nullable=False)
    current_level = Column(Integer, default=1, nullable=False)
    total_xp = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    tasks = relationship("Task", back_populates="category")
    calendar_events = relationship("CalendarEvent", back_populates="category")


class Task(Base):
    """Task model."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    priority = Column(String, default="MEDIUM", nullable=False)
    xp_percentage = Column(Integer, default=40, nullable=False)
    xp_reward = Column(Integer, default=10, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    due_date = Column(DateTime, nullable=True)
    estimated_minutes = Column(Integer, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    category = relationship("Category", back_populates="tasks")


class XpTransaction(Base):
    """XP transaction model.

    ``reference_id`` points to a task for TASK/SUBTASK transactions and to a
    calendar event for CALENDAR transactions.
    """

    __tablename__ = "xp_transactions"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, default=datetime.now, nullable=False)
    source = Column(String, nullable=False)
    reference_id = Column(Integer, nullable=True)
    amount = Column(Integer, nullable=False)


class CalendarEvent(Base):
    """Calendar event linked to the XP system."""

    __tablename__ = "calendar_events"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)
    xp = Column(Integer, default=0, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    rewarded = Column(Boolean, default=False, nullable=False)
    status = Column(String, default="PENDING", nullable=False)

    # Relationships
    category = relationship("Category", back_populates="calendar_events")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
