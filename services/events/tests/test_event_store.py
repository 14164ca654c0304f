"""
Tests for the Event persistence layer.
"""

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from services.common.http_errors import PersistenceError
from services.events.models import Event, EventType
from services.events.tests.factories import make_event


class TestEventStore:
    async def test_concurrent_creates(self, store):
        events = [make_event(f"user-{i}", i + 1) for i in range(4)]

        created = await asyncio.gather(*(store.create(e) for e in events))

        assert {e.id for e in created} == {e.id for e in events}
        assert len(await store.find_many()) == 4

    async def test_find_one_and_many(self, store, seed):
        await seed(
            make_event("u-1", 1, type=EventType.EXAM),
            make_event("u-1", 2),
            make_event("u-2", 3, type=EventType.EXAM),
        )

        exams = await store.find_many(
            Event.type == EventType.EXAM, order_by=[Event.date.desc()]
        )
        assert [e.owner for e in exams] == ["u-2", "u-1"]

        match = await store.find_one(Event.owner == "u-2")
        assert match is not None and match.owner == "u-2"
        assert await store.find_one(Event.owner == "nobody") is None

    async def test_update_and_delete_missing(self, store):
        assert await store.update("nope", {"name": "x"}) is None
        assert await store.delete_by_id("nope") is None

    async def test_driver_error_becomes_persistence_error(self, store):
        def broken_session():
            raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

        with patch.object(store, "session_factory", side_effect=broken_session):
            with pytest.raises(PersistenceError) as exc_info:
                await store.find_by_id("anything")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "A database error occurred"
        assert "disk I/O" not in exc_info.value.message
