from fastapi import Request

from services.events.services.event_service import EventService
from services.events.services.meeting_coordinator import MeetingCoordinator


def get_event_service(request: Request) -> EventService:
    return request.app.state.event_service


def get_meeting_coordinator(request: Request) -> MeetingCoordinator:
    return request.app.state.meeting_coordinator
