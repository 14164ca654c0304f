"""
Shared fixtures for Events Service tests.

Service-level tests run against a fresh SQLite file per test. Each store
operation opens its own connection, so an in-memory database would not be
shared between them.
"""

import os
import tempfile

import pytest
from sqlmodel import SQLModel

from services.events.database import EventsDatabase
from services.events.models import Subject, User
from services.events.services.event_service import EventService
from services.events.services.event_store import EventStore
from services.events.services.lookups import EntityDirectory
from services.events.services.meeting_coordinator import MeetingCoordinator


@pytest.fixture
async def database():
    fd, path = tempfile.mkstemp(suffix=".sqlite3")
    db = EventsDatabase(f"sqlite:///{path}")
    await db.create_tables()
    yield db
    await db.close()
    os.close(fd)
    os.unlink(path)


@pytest.fixture
def store(database):
    return EventStore(database.session_factory)


@pytest.fixture
def directory(database):
    return EntityDirectory.from_session_factory(database.session_factory)


@pytest.fixture
def event_service(store, directory):
    return EventService(store, directory)


@pytest.fixture
def coordinator(store, directory):
    return MeetingCoordinator(store, directory)


@pytest.fixture
def seed(database):
    """Insert directory records (or events) directly."""

    async def _seed(*records: SQLModel) -> None:
        async with database.session_factory() as session:
            session.add_all(records)
            await session.commit()

    return _seed


@pytest.fixture
async def people(seed):
    """An advisor, a student and a subject."""
    await seed(
        User(id="advisor-1", first_name="Ada", role="advisor"),
        User(id="student-1", first_name="Sam", role="student"),
        Subject(id="subject-1", name="Linear Algebra", code="MATH201"),
    )
    return {"advisor": "advisor-1", "student": "student-1", "subject": "subject-1"}
