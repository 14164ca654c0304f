"""
Validation of an event's polymorphic reference (``relatedKind`` + ``relatedId``).
"""

from dataclasses import dataclass
from typing import Any

from services.common.http_errors import InvalidReferenceKindError, NotFoundError
from services.common.logging_config import get_logger
from services.events.models import RelatedKind
from services.events.services.lookups import EntityDirectory

logger = get_logger(__name__)


@dataclass(frozen=True)
class RelatedReference:
    kind: RelatedKind
    id: str

    @classmethod
    def parse(cls, kind: Any, related_id: str) -> "RelatedReference":
        """Build a reference from a raw kind tag, rejecting unknown tags."""
        try:
            return cls(kind=RelatedKind(kind), id=related_id)
        except ValueError:
            raise InvalidReferenceKindError(
                kind, allowed=[k.value for k in RelatedKind]
            ) from None


class ReferenceValidator:
    """Checks that a reference points at an existing record of its kind."""

    def __init__(self, directory: EntityDirectory) -> None:
        self.directory = directory

    async def validate(self, kind: Any, related_id: str) -> RelatedReference:
        """
        Resolve ``(kind, related_id)``.

        Raises:
            InvalidReferenceKindError: kind is not a known tag
            NotFoundError: no record of that kind has the id
        """
        reference = RelatedReference.parse(kind, related_id)
        record = await self.directory.lookup_for(reference.kind).find_by_id(
            reference.id
        )
        if record is None:
            logger.info(f"Related {reference.kind.value} {reference.id} not found")
            raise NotFoundError(reference.kind.value)
        return reference
