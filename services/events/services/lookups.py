"""
Lookups against the read-only directory tables.
"""

from typing import Dict, Generic, Iterable, Optional, Protocol, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from services.common.http_errors import PersistenceError
from services.common.logging_config import get_logger
from services.events.models import Assignment, Grade, RelatedKind, Subject, User

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=SQLModel)

_LOOKUP_ATTRIBUTES: Dict[RelatedKind, str] = {
    RelatedKind.SUBJECT: "subjects",
    RelatedKind.GRADE: "grades",
    RelatedKind.ASSIGNMENT: "assignments",
    RelatedKind.USER: "users",
}


class EntityLookup(Protocol):
    async def find_by_id(self, record_id: str) -> Optional[SQLModel]: ...

    async def find_by_ids(self, record_ids: Iterable[str]) -> Dict[str, SQLModel]: ...


class TableLookup(Generic[RecordT]):
    """Looks up one directory table by primary key."""

    def __init__(
        self,
        model: Type[RecordT],
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self.model = model
        self.session_factory = session_factory

    async def find_by_id(self, record_id: str) -> Optional[RecordT]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(self.model).where(self.model.id == record_id)  # type: ignore[attr-defined]
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error looking up {self.model.__name__} {record_id}: {e}")
            raise PersistenceError(f"find_{self.model.__name__.lower()}") from e

    async def find_by_ids(self, record_ids: Iterable[str]) -> Dict[str, RecordT]:
        """Records for the given ids, keyed by id. Unknown ids are left out."""
        ids = set(record_ids)
        if not ids:
            return {}
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(self.model).where(self.model.id.in_(ids))  # type: ignore[attr-defined]
                )
                return {record.id: record for record in result.scalars()}  # type: ignore[attr-defined]
        except SQLAlchemyError as e:
            logger.error(f"Error looking up {len(ids)} {self.model.__name__} records: {e}")
            raise PersistenceError(f"find_{self.model.__name__.lower()}s") from e


class EntityDirectory:
    """The four lookups an event reference can resolve through."""

    def __init__(
        self,
        users: EntityLookup,
        subjects: EntityLookup,
        grades: EntityLookup,
        assignments: EntityLookup,
    ) -> None:
        self.users = users
        self.subjects = subjects
        self.grades = grades
        self.assignments = assignments

    @classmethod
    def from_session_factory(
        cls, session_factory: async_sessionmaker[AsyncSession]
    ) -> "EntityDirectory":
        return cls(
            users=TableLookup(User, session_factory),
            subjects=TableLookup(Subject, session_factory),
            grades=TableLookup(Grade, session_factory),
            assignments=TableLookup(Assignment, session_factory),
        )

    def lookup_for(self, kind: RelatedKind) -> EntityLookup:
        return getattr(self, _LOOKUP_ATTRIBUTES[kind])
