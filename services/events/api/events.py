"""
Event API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from services.events.api.dependencies import get_event_service
from services.events.auth import service_permission_required
from services.events.models import EventType
from services.events.schemas import EventCreate, EventOut, EventUpdate, MessageResponse
from services.events.services.event_service import EventService

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post(
    "",
    response_model=EventOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(service_permission_required(["write_events"]))],
)
async def create_event(
    payload: EventCreate,
    service: EventService = Depends(get_event_service),
) -> EventOut:
    """Create an event owned by an existing user."""
    event = await service.create(payload)
    return EventOut.model_validate(event)


@router.get(
    "",
    response_model=List[EventOut],
    dependencies=[Depends(service_permission_required(["read_events"]))],
)
async def list_events(
    service: EventService = Depends(get_event_service),
) -> List[EventOut]:
    events = await service.list_all()
    return await service.with_user_details(events)


@router.get(
    "/user/{user_id}",
    response_model=List[EventOut],
    dependencies=[Depends(service_permission_required(["read_events"]))],
)
async def list_user_events(
    user_id: str,
    type: Optional[EventType] = Query(None, description="Only events of this type"),
    past: bool = Query(False, description="Past events instead of upcoming ones"),
    service: EventService = Depends(get_event_service),
) -> List[EventOut]:
    """
    List a user's events.

    Upcoming events are returned soonest first; with ``past=true``, past
    events are returned most recent first.
    """
    events = await service.list_for_user(user_id, kind=type, past=past)
    return await service.with_user_details(events)


@router.get(
    "/{event_id}",
    response_model=EventOut,
    dependencies=[Depends(service_permission_required(["read_events"]))],
)
async def get_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
) -> EventOut:
    event = await service.get_by_id(event_id)
    [described] = await service.with_user_details([event])
    return described


@router.put(
    "/{event_id}",
    response_model=EventOut,
    dependencies=[Depends(service_permission_required(["write_events"]))],
)
async def update_event(
    event_id: str,
    payload: EventUpdate,
    service: EventService = Depends(get_event_service),
) -> EventOut:
    """Partially update an event. Fields missing from the body are kept."""
    event = await service.update(event_id, payload)
    return EventOut.model_validate(event)


@router.delete(
    "/{event_id}",
    response_model=MessageResponse,
    dependencies=[Depends(service_permission_required(["write_events"]))],
)
async def delete_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
) -> MessageResponse:
    await service.delete(event_id)
    return MessageResponse(message="Event deleted successfully")
