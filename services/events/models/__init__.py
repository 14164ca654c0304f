from services.events.models.directory import Assignment, Grade, Subject, User
from services.events.models.event import (
    Event,
    EventType,
    RelatedKind,
    to_utc,
    utc_now,
)

__all__ = [
    "Assignment",
    "Event",
    "EventType",
    "Grade",
    "RelatedKind",
    "Subject",
    "User",
    "to_utc",
    "utc_now",
]
