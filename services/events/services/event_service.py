"""
Event lifecycle operations: create, read, list, update and delete single
events.
"""

from typing import Any, Dict, List, Optional, Sequence

from services.common.http_errors import NotFoundError, ValidationError
from services.common.logging_config import get_logger
from services.events.models import Event, EventType, RelatedKind, User, utc_now
from services.events.schemas import EventCreate, EventOut, EventUpdate, UserSummary
from services.events.services.event_store import EventStore
from services.events.services.lookups import EntityDirectory
from services.events.services.reference_validator import (
    ReferenceValidator,
    RelatedReference,
)

logger = get_logger(__name__)

REQUIRED_FIELDS = ("name", "type", "date")


def _related_user_id(event: Event) -> Optional[str]:
    if event.related_kind == RelatedKind.USER:
        return event.related_id
    return None


def _summary(user: Optional[User]) -> Optional[UserSummary]:
    return UserSummary.model_validate(user) if user is not None else None


class EventService:
    """Business logic for single-record event operations."""

    def __init__(
        self,
        store: EventStore,
        directory: EntityDirectory,
        validator: Optional[ReferenceValidator] = None,
    ) -> None:
        self.store = store
        self.directory = directory
        self.validator = validator or ReferenceValidator(directory)

    async def _require_user(self, user_id: str) -> None:
        if await self.directory.users.find_by_id(user_id) is None:
            raise NotFoundError("User")

    async def _validate_reference(
        self, related_id: Optional[str], related_kind: Optional[Any]
    ) -> Optional[RelatedReference]:
        if related_id is None and related_kind is None:
            return None
        if related_id is None:
            raise ValidationError(
                "relatedId is required when relatedKind is set", field="relatedId"
            )
        if related_kind is None:
            raise ValidationError(
                "relatedKind is required when relatedId is set", field="relatedKind"
            )
        return await self.validator.validate(related_kind, related_id)

    async def create(self, data: EventCreate) -> Event:
        await self._require_user(data.owner)
        reference = await self._validate_reference(data.related_id, data.related_kind)

        now = utc_now()
        event = Event(
            name=data.name,
            type=data.type,
            description=data.description,
            date=data.date,
            owner=data.owner,
            related_id=reference.id if reference else None,
            related_kind=reference.kind if reference else None,
            time=data.time,
            duration=data.duration,
            created_at=now,
            updated_at=now,
        )
        event = await self.store.create(event)
        logger.info(f"Created {event.type.value} event {event.id} for {event.owner}")
        return event

    async def get_by_id(self, event_id: str) -> Event:
        event = await self.store.find_by_id(event_id)
        if event is None:
            raise NotFoundError("Event")
        return event

    async def with_user_details(self, events: Sequence[Event]) -> List[EventOut]:
        """
        Response models for ``events`` with user summaries attached.

        Every event gets its owner's name and email. Events whose reference is
        a User also get that user's. All users are fetched in one query.
        """
        user_ids = {event.owner for event in events}
        user_ids.update(filter(None, (_related_user_id(e) for e in events)))
        users = await self.directory.users.find_by_ids(user_ids)

        described = []
        for event in events:
            out = EventOut.model_validate(event)
            out.owner_details = _summary(users.get(event.owner))  # type: ignore[arg-type]
            related_user_id = _related_user_id(event)
            if related_user_id is not None:
                out.related_user_details = _summary(users.get(related_user_id))  # type: ignore[arg-type]
            described.append(out)
        return described

    async def list_all(self) -> List[Event]:
        return await self.store.find_many(order_by=[Event.created_at.asc()])  # type: ignore[attr-defined]

    async def list_for_user(
        self,
        user_id: str,
        kind: Optional[EventType] = None,
        past: bool = False,
    ) -> List[Event]:
        """
        Events owned by a user, either upcoming or past.

        Upcoming events (``date >= now``) come soonest first; past events
        (``date < now``) come most recent first.
        """
        await self._require_user(user_id)

        now = utc_now()
        conditions = [Event.owner == user_id]
        if past:
            conditions.append(Event.date < now)  # type: ignore[arg-type]
            order_by = [Event.date.desc()]  # type: ignore[attr-defined]
        else:
            conditions.append(Event.date >= now)  # type: ignore[arg-type]
            order_by = [Event.date.asc()]  # type: ignore[attr-defined]
        if kind is not None:
            conditions.append(Event.type == kind)

        return await self.store.find_many(*conditions, order_by=order_by)  # type: ignore[arg-type]

    async def update(self, event_id: str, data: EventUpdate) -> Event:
        """
        Apply the fields present in ``data`` to an existing event.

        A supplied ``relatedId``/``relatedKind`` is merged over the stored pair
        and the result re-validated. Changes are never copied to a meeting's
        counterpart record.
        """
        existing = await self.get_by_id(event_id)
        values: Dict[str, Any] = data.model_dump(exclude_unset=True)

        for field_name in REQUIRED_FIELDS:
            if field_name in values and values[field_name] is None:
                raise ValidationError(f"{field_name} cannot be null", field=field_name)

        if "related_id" in values or "related_kind" in values:
            reference = await self._validate_reference(
                values.get("related_id", existing.related_id),
                values.get("related_kind", existing.related_kind),
            )
            values["related_id"] = reference.id if reference else None
            values["related_kind"] = reference.kind if reference else None

        values["updated_at"] = utc_now()
        event = await self.store.update(event_id, values)
        if event is None:
            # Deleted between the read and the write
            raise NotFoundError("Event")
        logger.info(f"Updated event {event_id}", fields=sorted(values))
        return event

    async def delete(self, event_id: str) -> None:
        deleted = await self.store.delete_by_id(event_id)
        if deleted is None:
            raise NotFoundError("Event")
        logger.info(f"Deleted event {event_id}")
