import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict

from fastapi import FastAPI, Request

from services.common.http_errors import register_exception_handlers
from services.common.logging_config import (
    create_request_logging_middleware,
    get_logger,
    log_service_shutdown,
    log_service_startup,
    setup_service_logging,
)
from services.events.api import events_router, meetings_router
from services.events.database import EventsDatabase
from services.events.services.event_service import EventService
from services.events.services.event_store import EventStore
from services.events.services.lookups import EntityDirectory
from services.events.services.meeting_coordinator import MeetingCoordinator
from services.events.settings import get_settings

# Set up centralized logging - will be initialized in lifespan
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    settings = get_settings()

    setup_service_logging(
        service_name="events",
        log_level=settings.log_level,
        log_format=settings.log_format,
    )

    log_service_startup(
        "events",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        debug=settings.debug,
    )

    database = EventsDatabase(settings.db_url_events)
    if settings.db_create_tables:
        await database.create_tables()

    store = EventStore(database.session_factory)
    directory = EntityDirectory.from_session_factory(database.session_factory)
    app.state.database = database
    app.state.event_service = EventService(store, directory)
    app.state.meeting_coordinator = MeetingCoordinator(store, directory)

    yield

    await database.close()
    log_service_shutdown("events")


app = FastAPI(
    title="Academic Platform Events Service",
    description="Calendar events and advisor/student meetings",
    version="0.1.0",
    openapi_tags=[
        {"name": "events", "description": "Single event lifecycle"},
        {"name": "meetings", "description": "Paired advisor/student meetings"},
    ],
    debug=False,
    lifespan=lifespan,
)

# Add centralized request logging middleware
app.middleware("http")(create_request_logging_middleware())

register_exception_handlers(app)

app.include_router(meetings_router)
app.include_router(events_router)


@app.get("/")
async def read_root() -> Dict[str, str]:
    settings = get_settings()
    return {"message": "Academic Platform Events Service", "service": settings.app_name}


@app.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """
    Health check endpoint for load balancers and monitoring.
    Checks database connectivity.
    """
    settings = get_settings()
    start_time = time.time()

    db_status = "ok"
    db_error = None
    try:
        await request.app.state.database.ping()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "error"
        db_error = str(e) if settings.debug else "Database unavailable"

    return {
        "status": db_status,
        "service": settings.app_name,
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": {
                "status": db_status,
                "response_time_ms": round((time.time() - start_time) * 1000, 2),
                "error": db_error,
            },
        },
    }


@app.get("/ready")
async def ready_check() -> Dict[str, str]:
    """
    Simple readiness check.
    """
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
