"""
Event database model for the Events Service.

Every calendar entry is one row in ``events``. A scheduled meeting is stored
as two rows, one per participant, linked by ``meeting_pair_id``.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import Column, DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Convert to timezone-aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    ``DateTime(timezone=True)`` that always hands back aware UTC values.

    PostgreSQL stores ``timestamptz`` natively. SQLite keeps no offset, so
    values are written as UTC and tagged as UTC again when read.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Any:
        return to_utc(value) if value is not None else None

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Any:
        return to_utc(value) if value is not None else None


class EventType(str, Enum):
    ASSIGNMENT = "Assignment"
    EXAM = "Exam"
    REMINDER = "Reminder"
    MEETING = "Meeting"


class RelatedKind(str, Enum):
    """Kinds of record an event may point at through ``related_id``."""

    SUBJECT = "Subject"
    GRADE = "Grade"
    ASSIGNMENT = "Assignment"
    USER = "User"


class Event(SQLModel, table=True):
    """A single calendar event owned by one user."""

    __tablename__ = "events"  # type: ignore[assignment]

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        description="Unique event ID",
    )
    name: str = Field(..., min_length=1, description="Event title")
    type: EventType = Field(..., index=True, description="Event category")
    description: Optional[str] = Field(default=None, description="Free-form notes")
    date: datetime = Field(
        ...,
        sa_column=Column(UTCDateTime(), nullable=False, index=True),
        description="Event date (UTC)",
    )
    owner: str = Field(..., index=True, description="User ID that owns the event")

    # Polymorphic reference; both set or both empty
    related_id: Optional[str] = Field(default=None, description="Referenced record ID")
    related_kind: Optional[RelatedKind] = Field(
        default=None, description="Kind of the referenced record"
    )

    # Meeting specific
    time: Optional[str] = Field(default=None, description="Start time as HH:MM")
    duration: Optional[int] = Field(default=None, description="Length in minutes")
    meeting_pair_id: Optional[str] = Field(
        default=None,
        index=True,
        description="Shared by the two records of a scheduled meeting",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime(), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime(), nullable=False),
    )
