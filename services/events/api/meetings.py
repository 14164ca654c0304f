"""
Meeting API endpoints.

Scheduling creates one event per participant; cancellation removes both.
"""

from fastapi import APIRouter, Depends, status

from services.events.api.dependencies import get_meeting_coordinator
from services.events.auth import service_permission_required
from services.events.schemas import (
    EventOut,
    MeetingCanceledResponse,
    MeetingCreate,
    MeetingScheduledResponse,
)
from services.events.services.meeting_coordinator import MeetingCoordinator

router = APIRouter(prefix="/api/v1/events/meetings", tags=["meetings"])


@router.post(
    "",
    response_model=MeetingScheduledResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(service_permission_required(["write_events"]))],
)
async def schedule_meeting(
    payload: MeetingCreate,
    coordinator: MeetingCoordinator = Depends(get_meeting_coordinator),
) -> MeetingScheduledResponse:
    student_event, advisor_event = await coordinator.schedule_meeting(payload)
    return MeetingScheduledResponse(
        student_event=EventOut.model_validate(student_event),
        advisor_event=EventOut.model_validate(advisor_event),
    )


@router.delete(
    "/{event_id}",
    response_model=MeetingCanceledResponse,
    dependencies=[Depends(service_permission_required(["write_events"]))],
)
async def cancel_meeting(
    event_id: str,
    coordinator: MeetingCoordinator = Depends(get_meeting_coordinator),
) -> MeetingCanceledResponse:
    """Cancel a meeting given either participant's event ID."""
    canceled = await coordinator.cancel_meeting(event_id)
    return MeetingCanceledResponse(
        message="Meeting canceled successfully", canceled_events=canceled
    )
