"""
Persistence for Event records.

Every operation opens its own session and commits before returning, so
callers may run store operations concurrently with ``asyncio.gather``.
Driver errors surface as ``PersistenceError``.
"""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import ColumnElement
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from services.common.http_errors import PersistenceError
from services.common.logging_config import get_logger
from services.events.models import Event

logger = get_logger(__name__)


class EventStore:
    """CRUD and filtered queries on the ``events`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def create(self, event: Event) -> Event:
        try:
            async with self.session_factory() as session:
                session.add(event)
                await session.commit()
                await session.refresh(event)
                return event
        except SQLAlchemyError as e:
            logger.error(f"Error creating event {event.id}: {e}")
            raise PersistenceError("create_event") from e

    async def find_by_id(self, event_id: str) -> Optional[Event]:
        try:
            async with self.session_factory() as session:
                return await session.get(Event, event_id)
        except SQLAlchemyError as e:
            logger.error(f"Error loading event {event_id}: {e}")
            raise PersistenceError("find_event") from e

    async def find_one(self, *conditions: ColumnElement[bool]) -> Optional[Event]:
        """Return the first record matching all conditions, or None."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Event).where(*conditions).limit(1)
                )
                return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"Error querying event: {e}")
            raise PersistenceError("find_event") from e

    async def find_many(
        self,
        *conditions: ColumnElement[bool],
        order_by: Optional[Sequence[Any]] = None,
    ) -> List[Event]:
        try:
            async with self.session_factory() as session:
                query = select(Event).where(*conditions)
                if order_by:
                    query = query.order_by(*order_by)
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing events: {e}")
            raise PersistenceError("list_events") from e

    async def update(self, event_id: str, values: Dict[str, Any]) -> Optional[Event]:
        """Apply ``values`` to the record and return it, or None if absent."""
        try:
            async with self.session_factory() as session:
                event = await session.get(Event, event_id)
                if event is None:
                    return None
                for field_name, value in values.items():
                    setattr(event, field_name, value)
                session.add(event)
                await session.commit()
                await session.refresh(event)
                return event
        except SQLAlchemyError as e:
            logger.error(f"Error updating event {event_id}: {e}")
            raise PersistenceError("update_event") from e

    async def delete_by_id(self, event_id: str) -> Optional[Event]:
        """Delete the record and return it, or None if it did not exist."""
        try:
            async with self.session_factory() as session:
                event = await session.get(Event, event_id)
                if event is None:
                    return None
                await session.delete(event)
                await session.commit()
                return event
        except SQLAlchemyError as e:
            logger.error(f"Error deleting event {event_id}: {e}")
            raise PersistenceError("delete_event") from e
