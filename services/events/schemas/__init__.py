from services.events.schemas.event import (
    EventCreate,
    EventOut,
    EventUpdate,
    MeetingCanceledResponse,
    MeetingCreate,
    MeetingScheduledResponse,
    MessageResponse,
    UserSummary,
)

__all__ = [
    "EventCreate",
    "EventOut",
    "EventUpdate",
    "MeetingCanceledResponse",
    "MeetingCreate",
    "MeetingScheduledResponse",
    "MessageResponse",
    "UserSummary",
]
