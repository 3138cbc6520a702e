"""Maintenance record and item repositories."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import Select, delete, func, insert, select
from sqlalchemy.orm import Session

from wrenchlog.models import MaintenanceItem, MaintenanceRecord, Part, PartTag, Tag
from wrenchlog.models.base import new_id
from wrenchlog.repositories.hydration import (
    ITEM_COLUMNS,
    PART_COLUMNS,
    TAG_COLUMNS,
    ItemPartTagRow,
    as_utc,
    hydrate_items,
)
from wrenchlog.repositories.owned import OwnedRepository
from wrenchlog.repositories.part import PartRepository
from wrenchlog.repositories.views import MaintenanceItemView, MaintenanceRecordView
from wrenchlog.services._shared.errors import InvalidReferenceError

ITEM_FIELDS = ("part_id", "quantity", "unit", "unit_price_cents_override", "notes")


@dataclass(frozen=True, slots=True)
class MaintenanceFilters:
    """
    Maintenance listing filters.

    :param vehicle_id: Only records of this vehicle.
    :param date_from: Inclusive lower bound on ``happened_at``.
    :param date_to: Inclusive upper bound on ``happened_at``.
    """

    vehicle_id: str | None = None
    date_from: date | None = None
    date_to: date | None = None


def item_part_tag_select() -> Select[Any]:
    """``maintenance_items ⟕ parts ⟕ part_tags ⟕ tags`` with prefixed columns."""
    return (
        select(*ITEM_COLUMNS, *PART_COLUMNS, *TAG_COLUMNS)
        .select_from(MaintenanceItem)
        .join(Part, Part.id == MaintenanceItem.part_id)
        .outerjoin(PartTag, PartTag.part_id == Part.id)
        .outerjoin(Tag, Tag.id == PartTag.tag_id)
    )


class MaintenanceItemRepository(OwnedRepository[MaintenanceItem, MaintenanceItemView]):
    """Items are owned through their record; scoping joins ``maintenance_records``."""

    model = MaintenanceItem

    def __init__(self, session: Session, parts: PartRepository | None = None) -> None:
        super().__init__(session)
        self.parts = parts or PartRepository(session)

    def _scope(self, stmt: Select[Any], owner_id: str) -> Select[Any]:
        return stmt.join(
            MaintenanceRecord, MaintenanceRecord.id == MaintenanceItem.maintenance_id
        ).where(MaintenanceRecord.owner_id == owner_id)

    def _natural_order(self) -> Sequence[Any]:
        return (MaintenanceItem.position.asc(), MaintenanceItem.id.asc())

    def _filterable_fields(self):
        return {"maintenance_id": MaintenanceItem.maintenance_id}

    def _updatable_fields(self) -> set[str]:
        return set(ITEM_FIELDS)

    def _stamp_owner(self, fields: dict[str, Any], owner_id: str) -> dict[str, Any]:
        # No owner column; the caller checked the record belongs to the owner.
        return fields

    def _views(self, instances: Sequence[MaintenanceItem]) -> list[MaintenanceItemView]:
        if not instances:
            return []
        ids = [i.id for i in instances]
        stmt = item_part_tag_select().where(MaintenanceItem.id.in_(ids))
        stmt = stmt.order_by(MaintenanceItem.id, Tag.name, Tag.id)
        rows = [ItemPartTagRow.from_result(r) for r in self.session.execute(stmt)]
        by_id = {view.id: view for view in hydrate_items(rows)}
        return [by_id[i] for i in ids]

    # ------------------------------ Helpers ----------------------------------

    def validate_parts(self, owner_id: str, items: Sequence[Mapping[str, Any]]) -> None:
        """Ensure every item references a part of ``owner_id``.

        :raises InvalidReferenceError: ``invalid_parts`` on unknown part ids.
        """
        part_ids = [item["part_id"] for item in items]
        missing = set(part_ids) - self.parts.owned_ids(owner_id, part_ids)
        if missing:
            raise InvalidReferenceError.of("Part", missing)

    def for_records(self, record_ids: Sequence[str]) -> dict[str, tuple[MaintenanceItemView, ...]]:
        """Hydrated items of several records, grouped by record id."""
        grouped: dict[str, list[MaintenanceItemView]] = defaultdict(list)
        if not record_ids:
            return {}
        stmt = item_part_tag_select().where(MaintenanceItem.maintenance_id.in_(record_ids))
        stmt = stmt.order_by(
            MaintenanceItem.maintenance_id,
            MaintenanceItem.position,
            MaintenanceItem.id,
            Tag.name,
            Tag.id,
        )
        rows = [ItemPartTagRow.from_result(r) for r in self.session.execute(stmt)]
        for view in hydrate_items(rows):
            grouped[view.maintenance_id].append(view)
        return {record_id: tuple(views) for record_id, views in grouped.items()}

    def replace_for_record(self, record_id: str, items: Sequence[Mapping[str, Any]]) -> None:
        """Delete the record's items and insert ``items`` in order."""
        self.session.execute(
            delete(MaintenanceItem).where(MaintenanceItem.maintenance_id == record_id)
        )
        if not items:
            return
        self.session.execute(
            insert(MaintenanceItem),
            [
                {
                    "id": new_id(),
                    "maintenance_id": record_id,
                    "position": position,
                    **{key: item.get(key) for key in ITEM_FIELDS},
                }
                for position, item in enumerate(items)
            ],
        )

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> MaintenanceItemView:
        """Append one item at the end of its record."""
        values = dict(fields)
        stmt = select(func.max(MaintenanceItem.position)).where(
            MaintenanceItem.maintenance_id == values["maintenance_id"]
        )
        last = self.session.execute(stmt).scalar()
        values["position"] = 0 if last is None else last + 1
        return super().create(owner_id, values)


class MaintenanceRecordRepository(OwnedRepository[MaintenanceRecord, MaintenanceRecordView]):
    """Owner-scoped persistence for :class:`MaintenanceRecord`.

    Writes accept an ``items`` key; when present it replaces every item of the
    record.
    """

    model = MaintenanceRecord

    def __init__(
        self, session: Session, items: MaintenanceItemRepository | None = None
    ) -> None:
        super().__init__(session)
        self.items = items or MaintenanceItemRepository(session)

    def _updatable_fields(self) -> set[str]:
        return {"vehicle_id", "happened_at", "odometer_reading", "title", "notes"}

    def _natural_order(self) -> Sequence[Any]:
        return (
            MaintenanceRecord.happened_at.desc(),
            MaintenanceRecord.created_at.desc(),
            MaintenanceRecord.id.asc(),
        )

    def _apply_filters(
        self, stmt: Select[Any], filters: MaintenanceFilters | None
    ) -> Select[Any]:
        if filters is None:
            return stmt
        if filters.vehicle_id is not None:
            stmt = stmt.where(MaintenanceRecord.vehicle_id == filters.vehicle_id)
        if filters.date_from is not None:
            stmt = stmt.where(MaintenanceRecord.happened_at >= filters.date_from)
        if filters.date_to is not None:
            stmt = stmt.where(MaintenanceRecord.happened_at <= filters.date_to)
        return stmt

    def _views(self, instances: Sequence[MaintenanceRecord]) -> list[MaintenanceRecordView]:
        items = self.items.for_records([r.id for r in instances])
        return [
            MaintenanceRecordView(
                id=r.id,
                owner_id=r.owner_id,
                vehicle_id=r.vehicle_id,
                happened_at=r.happened_at,
                odometer_reading=r.odometer_reading,
                title=r.title,
                notes=r.notes,
                items=items.get(r.id, ()),
                created_at=as_utc(r.created_at),  # type: ignore[arg-type]
                updated_at=as_utc(r.updated_at),  # type: ignore[arg-type]
            )
            for r in instances
        ]

    # ------------------------------ Commands ---------------------------------

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> MaintenanceRecordView:
        """Insert a record together with its items.

        :raises InvalidReferenceError: ``invalid_parts`` before anything is
            written when an item references a part the owner does not have.
        """
        values = dict(fields)
        items = values.pop("items", None) or []
        self.items.validate_parts(owner_id, items)
        record = MaintenanceRecord(**self._stamp_owner(values, owner_id))
        self.add(record)
        self.items.replace_for_record(record.id, items)
        return self._views([record])[0]

    def update(
        self, entity_id: str, owner_id: str, patch: Mapping[str, Any]
    ) -> MaintenanceRecordView | None:
        """Partial update; a present ``items`` list replaces all items."""
        values = dict(patch)
        replace_items = "items" in values
        items = values.pop("items", None) or []
        if self.get_owned(entity_id, owner_id) is None:
            return None
        if replace_items:
            self.items.validate_parts(owner_id, items)
            self.items.replace_for_record(entity_id, items)
        return super().update(entity_id, owner_id, values)
