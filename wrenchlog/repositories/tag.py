"""Tag repository."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import select

from wrenchlog.models import Tag
from wrenchlog.models.catalog import slugify
from wrenchlog.repositories.hydration import as_utc
from wrenchlog.repositories.owned import OwnedRepository
from wrenchlog.repositories.views import TagView


class TagRepository(OwnedRepository[Tag, TagView]):
    """Owner-scoped persistence for :class:`Tag`, listed by name."""

    model = Tag

    def _updatable_fields(self) -> set[str]:
        # ``slug`` follows ``name`` through the model validator.
        return {"name", "color"}

    def _natural_order(self) -> Sequence[Any]:
        return (Tag.name.asc(), Tag.id.asc())

    def _to_view(self, instance: Tag) -> TagView:
        return TagView(
            id=instance.id,
            owner_id=instance.owner_id,
            name=instance.name,
            color=instance.color,
            slug=instance.slug,
            created_at=as_utc(instance.created_at),  # type: ignore[arg-type]
        )

    def name_taken(self, owner_id: str, name: str, *, exclude_id: str | None = None) -> bool:
        """Whether another tag of ``owner_id`` already uses ``name`` or its slug.

        :param owner_id: Owner to check within.
        :param name: Candidate name.
        :param exclude_id: Tag being renamed, ignored in the check.
        """
        name = name.strip()
        stmt = self.owned_select(owner_id).where(
            (Tag.name == name) | (Tag.slug == slugify(name))
        )
        if exclude_id is not None:
            stmt = stmt.where(Tag.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def owned_ids(self, owner_id: str, tag_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``tag_ids`` owned by ``owner_id``."""
        wanted = set(tag_ids)
        if not wanted:
            return set()
        stmt = select(Tag.id).where(Tag.owner_id == owner_id, Tag.id.in_(wanted))
        return set(self.session.execute(stmt).scalars().all())
