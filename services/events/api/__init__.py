from services.events.api.events import router as events_router
from services.events.api.meetings import router as meetings_router

__all__ = ["events_router", "meetings_router"]
