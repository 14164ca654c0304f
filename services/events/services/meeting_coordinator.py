"""
Meeting scheduling and cancellation.

A meeting is stored as two Event records, one owned by each participant and
each pointing at the other participant through ``related_id``. Both records
carry the same ``meeting_pair_id``. Records created before the pair id
existed are matched on their shared fields instead.
"""

import asyncio
import uuid
from typing import Optional, Tuple

from sqlalchemy import ColumnElement

from services.common.http_errors import NotFoundError, PersistenceError
from services.common.logging_config import get_logger
from services.events.models import Event, EventType, RelatedKind, utc_now
from services.events.schemas import MeetingCreate
from services.events.services.event_store import EventStore
from services.events.services.lookups import EntityDirectory

logger = get_logger(__name__)

COMPENSATION_ATTEMPTS = 3
COMPENSATION_BACKOFF_SECONDS = 0.05


class MeetingCoordinator:
    def __init__(self, store: EventStore, directory: EntityDirectory) -> None:
        self.store = store
        self.directory = directory

    async def schedule_meeting(self, data: MeetingCreate) -> Tuple[Event, Event]:
        """
        Create the student-side and advisor-side records of a meeting.

        Both participants must exist. The two records are written
        concurrently; if only one write succeeds it is deleted again so a
        failed schedule never leaves half a meeting behind.

        Returns:
            ``(student_event, advisor_event)``
        """
        advisor, student = await asyncio.gather(
            self.directory.users.find_by_id(data.advisor_id),
            self.directory.users.find_by_id(data.student_id),
        )
        if advisor is None:
            raise NotFoundError("Advisor")
        if student is None:
            raise NotFoundError("Student")

        pair_id = str(uuid.uuid4())
        now = utc_now()

        def build(owner: str, other: str) -> Event:
            return Event(
                name=data.name,
                type=EventType.MEETING,
                description=data.description,
                date=data.date,
                time=data.time,
                duration=data.duration,
                owner=owner,
                related_id=other,
                related_kind=RelatedKind.USER,
                meeting_pair_id=pair_id,
                created_at=now,
                updated_at=now,
            )

        student_event = build(data.student_id, data.advisor_id)
        advisor_event = build(data.advisor_id, data.student_id)

        results = await asyncio.gather(
            self.store.create(student_event),
            self.store.create(advisor_event),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            await self._compensate(results, pair_id)
            logger.error(
                f"Failed to schedule meeting {pair_id}: "
                f"{len(failures)} of 2 writes failed",
                errors=[repr(f) for f in failures],
            )
            raise PersistenceError("schedule_meeting") from failures[0]

        created_student, created_advisor = results
        logger.info(
            f"Scheduled meeting {pair_id} between advisor {data.advisor_id} "
            f"and student {data.student_id}"
        )
        return created_student, created_advisor  # type: ignore[return-value]

    async def _compensate(self, results: list, pair_id: str) -> None:
        for result in results:
            if not isinstance(result, Event):
                continue
            logger.warning(
                f"Removing event {result.id} left by partially failed "
                f"meeting {pair_id}"
            )
            for attempt in range(1, COMPENSATION_ATTEMPTS + 1):
                try:
                    await self.store.delete_by_id(result.id)
                    break
                except PersistenceError:
                    if attempt == COMPENSATION_ATTEMPTS:
                        logger.error(
                            f"Could not remove event {result.id} of failed "
                            f"meeting {pair_id}; it is left unpaired",
                            event_id=result.id,
                            attempts=attempt,
                        )
                    else:
                        await asyncio.sleep(COMPENSATION_BACKOFF_SECONDS * attempt)

    async def find_counterpart(self, event: Event) -> Optional[Event]:
        """The other participant's record for a meeting event, if it still exists."""
        conditions: list[ColumnElement[bool]] = [
            Event.type == EventType.MEETING,  # type: ignore[list-item]
            Event.id != event.id,  # type: ignore[list-item]
        ]
        if event.meeting_pair_id:
            conditions.append(Event.meeting_pair_id == event.meeting_pair_id)  # type: ignore[arg-type]
        else:
            # Legacy records without a pair id
            conditions.extend(
                [
                    Event.date == event.date,  # type: ignore[list-item]
                    Event.time == event.time,  # type: ignore[list-item]
                    Event.owner == event.related_id,  # type: ignore[list-item]
                    Event.related_id == event.owner,  # type: ignore[list-item]
                ]
            )
        return await self.store.find_one(*conditions)

    async def cancel_meeting(self, event_id: str) -> int:
        """
        Delete a meeting record and its counterpart.

        Returns the number of records removed: 2 for an intact pair, 1 when
        the counterpart was already gone.
        """
        event = await self.store.find_by_id(event_id)
        if event is None or event.type != EventType.MEETING:
            raise NotFoundError("Meeting")

        counterpart = await self.find_counterpart(event)

        if await self.store.delete_by_id(event.id) is None:
            # Canceled concurrently
            raise NotFoundError("Meeting")
        canceled = 1

        if counterpart is not None:
            try:
                removed = await self.store.delete_by_id(counterpart.id)
            except PersistenceError:
                logger.error(
                    f"Meeting event {event_id} was deleted but its counterpart "
                    f"{counterpart.id} could not be",
                    counterpart_id=counterpart.id,
                )
                raise
            if removed is not None:
                canceled += 1
        else:
            logger.info(f"Meeting event {event_id} had no counterpart")

        logger.info(f"Canceled meeting event {event_id}", canceled_events=canceled)
        return canceled
