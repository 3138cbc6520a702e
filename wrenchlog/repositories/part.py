"""Part repository with tag hydration and tag filtering."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, exists, or_, select
from sqlalchemy.orm import Session

from wrenchlog.models import MaintenanceItem, Part, PartTag, Tag
from wrenchlog.repositories.hydration import (
    PART_COLUMNS,
    TAG_COLUMNS,
    PartTagRow,
    hydrate_parts,
)
from wrenchlog.repositories.owned import OwnedRepository
from wrenchlog.repositories.tag_association import TagAssociationManager
from wrenchlog.repositories.views import PartView


@dataclass(frozen=True, slots=True)
class PartFilters:
    """
    Part listing filters.

    :param q: Case-insensitive substring matched against name or description.
    :param tag_ids: Keep parts linked to at least one of these tags.
    """

    q: str | None = None
    tag_ids: tuple[str, ...] = ()


def part_tag_select() -> Select[Any]:
    """``parts ⟕ part_tags ⟕ tags`` with prefixed columns, unfiltered."""
    return (
        select(*PART_COLUMNS, *TAG_COLUMNS)
        .select_from(Part)
        .outerjoin(PartTag, PartTag.part_id == Part.id)
        .outerjoin(Tag, Tag.id == PartTag.tag_id)
    )


class PartRepository(OwnedRepository[Part, PartView]):
    """Owner-scoped persistence for :class:`Part`.

    Writes accept a ``tag_ids`` key next to the column values; it is routed to
    the :class:`TagAssociationManager`, never assigned to the model.
    """

    model = Part

    def __init__(self, session: Session, associations: TagAssociationManager | None = None) -> None:
        super().__init__(session)
        self.associations = associations or TagAssociationManager(session)

    def _updatable_fields(self) -> set[str]:
        return {"name", "description", "price_cents", "currency", "url"}

    def _apply_filters(self, stmt: Select[Any], filters: PartFilters | None) -> Select[Any]:
        if filters is None:
            return stmt
        if filters.q:
            stmt = stmt.where(
                or_(
                    Part.name.icontains(filters.q, autoescape=True),
                    Part.description.icontains(filters.q, autoescape=True),
                )
            )
        if filters.tag_ids:
            stmt = stmt.where(
                exists().where(PartTag.part_id == Part.id, PartTag.tag_id.in_(filters.tag_ids))
            )
        return stmt

    def _views(self, instances: Sequence[Part]) -> list[PartView]:
        if not instances:
            return []
        ids = [p.id for p in instances]
        stmt = part_tag_select().where(Part.id.in_(ids)).order_by(Part.id, Tag.name, Tag.id)
        rows = [PartTagRow.from_result(r) for r in self.session.execute(stmt)]
        by_id = {view.id: view for view in hydrate_parts(rows)}
        return [by_id[i] for i in ids]

    # ------------------------------ Commands ---------------------------------

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> PartView:
        """Insert a part and link it to ``fields["tag_ids"]`` when given.

        :raises InvalidReferenceError: ``invalid_tags`` before anything is
            written when a tag id does not resolve for the owner.
        """
        values = dict(fields)
        tag_ids = values.pop("tag_ids", None)
        if tag_ids:
            self.associations.validate(owner_id, tag_ids)
        part = Part(**self._stamp_owner(values, owner_id))
        self.add(part)
        if tag_ids:
            self.associations.attach(part.id, owner_id, tag_ids)
        return self._views([part])[0]

    def update(self, entity_id: str, owner_id: str, patch: Mapping[str, Any]) -> PartView | None:
        """Partial update; a present ``tag_ids`` list replaces all tags."""
        values = dict(patch)
        replace_tags = "tag_ids" in values
        tag_ids = values.pop("tag_ids", None) or []
        if self.get_owned(entity_id, owner_id) is None:
            return None
        if replace_tags:
            self.associations.validate(owner_id, tag_ids)
        view = super().update(entity_id, owner_id, values)
        if view is None or not replace_tags:
            return view
        self.associations.replace(entity_id, owner_id, tag_ids)
        return self.find_by_id(entity_id, owner_id)

    # ------------------------------ Helpers ----------------------------------

    def owned_ids(self, owner_id: str, part_ids: Sequence[str]) -> set[str]:
        """Return the subset of ``part_ids`` owned by ``owner_id``."""
        wanted = set(part_ids)
        if not wanted:
            return set()
        stmt = select(Part.id).where(Part.owner_id == owner_id, Part.id.in_(wanted))
        return set(self.session.execute(stmt).scalars().all())

    def is_referenced(self, part_id: str) -> bool:
        """Whether any maintenance item still points at ``part_id``."""
        stmt = select(exists().where(MaintenanceItem.part_id == part_id))
        return bool(self.session.execute(stmt).scalar())
