"""Many-to-many link between parts and tags with full-replace semantics."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, insert
from sqlalchemy.orm import Session

from wrenchlog.models import PartTag
from wrenchlog.repositories.tag import TagRepository
from wrenchlog.services._shared.errors import InvalidReferenceError


class TagAssociationManager:
    """Validate and write ``part_tags`` rows for one owner's parts.

    Runs inside the caller's unit of work, so a failed validation rolls back
    the surrounding part insert as well.
    """

    def __init__(self, session: Session, tags: TagRepository | None = None) -> None:
        self.session = session
        self.tags = tags or TagRepository(session)

    def validate(self, owner_id: str, tag_ids: Sequence[str]) -> list[str]:
        """Return ``tag_ids`` deduplicated in order, all owned by ``owner_id``.

        :raises InvalidReferenceError: ``invalid_tags`` when any id does not
            resolve to a tag of the owner.
        """
        unique = list(dict.fromkeys(tag_ids))
        missing = set(unique) - self.tags.owned_ids(owner_id, unique)
        if missing:
            raise InvalidReferenceError.of("Tag", missing)
        return unique

    def attach(self, part_id: str, owner_id: str, tag_ids: Sequence[str]) -> None:
        """Link a freshly created part to ``tag_ids``."""
        unique = self.validate(owner_id, tag_ids)
        if unique:
            self.session.execute(
                insert(PartTag), [{"part_id": part_id, "tag_id": t} for t in unique]
            )

    def replace(self, part_id: str, owner_id: str, tag_ids: Sequence[str]) -> None:
        """Replace every association of ``part_id``; ``[]`` removes all tags."""
        unique = self.validate(owner_id, tag_ids)
        self.session.execute(delete(PartTag).where(PartTag.part_id == part_id))
        if unique:
            self.session.execute(
                insert(PartTag), [{"part_id": part_id, "tag_id": t} for t in unique]
            )
