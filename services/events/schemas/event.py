"""
Request and response schemas for the Events Service API.

Field names are snake_case in Python and camelCase on the wire. Input
accepts either form.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from services.events.models.event import EventType, RelatedKind, to_utc

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EventCreate(CamelModel):
    """Payload for creating a single event."""

    name: str = Field(..., min_length=1, description="Event title")
    type: EventType = Field(..., description="Event category")
    description: Optional[str] = Field(None, description="Free-form notes")
    date: datetime = Field(..., description="Event date")
    owner: str = Field(..., min_length=1, description="Owning user ID")
    # Kind stays a plain string so an unknown tag is rejected as an invalid
    # reference rather than as a malformed body.
    related_id: Optional[str] = Field(None, description="Referenced record ID")
    related_kind: Optional[str] = Field(None, description="Referenced record kind")
    time: Optional[str] = Field(None, pattern=TIME_PATTERN, description="HH:MM")
    duration: Optional[int] = Field(None, gt=0, description="Length in minutes")

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return to_utc(value)


class EventUpdate(CamelModel):
    """
    Partial update for an event.

    Only fields present in the request body are applied. Ownership cannot be
    changed.
    """

    name: Optional[str] = Field(None, min_length=1)
    type: Optional[EventType] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    related_id: Optional[str] = None
    related_kind: Optional[str] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    duration: Optional[int] = Field(None, gt=0)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value) if value is not None else None


class UserSummary(CamelModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class EventOut(CamelModel):
    """
    An event as returned by the API.

    Read endpoints fill ``owner_details``, and ``related_user_details`` when
    the event references a user. Both stay null when the user is not in the
    directory.
    """

    id: str
    name: str
    type: EventType
    description: Optional[str] = None
    date: datetime
    owner: str
    related_id: Optional[str] = None
    related_kind: Optional[RelatedKind] = None
    time: Optional[str] = None
    duration: Optional[int] = None
    meeting_pair_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    owner_details: Optional[UserSummary] = None
    related_user_details: Optional[UserSummary] = None


class MeetingCreate(CamelModel):
    """Payload for scheduling an advisor/student meeting."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    date: datetime
    time: str = Field(..., pattern=TIME_PATTERN)
    duration: int = Field(30, gt=0, description="Length in minutes")
    advisor_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return to_utc(value)


class MeetingScheduledResponse(CamelModel):
    student_event: EventOut
    advisor_event: EventOut


class MeetingCanceledResponse(CamelModel):
    message: str
    canceled_events: int


class MessageResponse(CamelModel):
    message: str
