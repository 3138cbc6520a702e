"""Rebuild nested views from flat, left-joined rows.

Joining a parent through an association table (``parts ⟕ part_tags ⟕ tags``)
or through several hops (``maintenance_items ⟕ parts ⟕ part_tags ⟕ tags``)
yields one row per (parent, child) pair, with the parent columns repeated and
the child columns NULL when the parent has no child at all. :func:`hydrate`
turns such a row list back into one object per parent:

1. rows are grouped by parent id in first-seen order (no sorting);
2. the first row of each group supplies the parent's scalar fields;
3. rows whose child id is NULL are skipped, the rest are deduplicated by
   child id keeping the first occurrence;
4. the resulting child tuple is handed to the parent builder.

The same routine serves every hop count.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, TypeVar

from sqlalchemy import Row

from wrenchlog.models import MaintenanceItem, Part, Tag
from wrenchlog.repositories.views import MaintenanceItemView, PartView, TagView

R = TypeVar("R")
C = TypeVar("C")
P = TypeVar("P")


def hydrate(
    rows: Iterable[R],
    *,
    parent_key: Callable[[R], Hashable],
    child_key: Callable[[R], Hashable | None],
    build_child: Callable[[R], C],
    build_parent: Callable[[R, tuple[C, ...]], P],
) -> list[P]:
    """Group flat rows into parents carrying deduplicated children.

    :param rows: Flat joined rows, in the order parents should come out.
    :param parent_key: Extracts the parent id from a row.
    :param child_key: Extracts the child id, ``None`` for an unmatched join.
    :param build_child: Builds a child from a row whose child id is set.
    :param build_parent: Builds a parent from its first row and its children.
    :returns: One parent per distinct parent id, in first-seen order.
    :rtype: list[P]
    """
    firsts: dict[Hashable, R] = {}
    children: dict[Hashable, dict[Hashable, C]] = {}
    for row in rows:
        pid = parent_key(row)
        if pid not in firsts:
            firsts[pid] = row
            children[pid] = {}
        cid = child_key(row)
        if cid is None or cid in children[pid]:
            continue
        children[pid][cid] = build_child(row)
    return [build_parent(first, tuple(children[pid].values())) for pid, first in firsts.items()]


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from backends without tz support."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# --------------------------------------------------------------------------- #
# Typed flat rows
# --------------------------------------------------------------------------- #

# Selected columns, labelled so that every joined table keeps its own prefix.
TAG_COLUMNS = (
    Tag.id.label("tag_id"),
    Tag.owner_id.label("tag_owner_id"),
    Tag.name.label("tag_name"),
    Tag.color.label("tag_color"),
    Tag.slug.label("tag_slug"),
    Tag.created_at.label("tag_created_at"),
)

PART_COLUMNS = (
    Part.id.label("part_id"),
    Part.owner_id.label("part_owner_id"),
    Part.name.label("part_name"),
    Part.description.label("part_description"),
    Part.price_cents.label("part_price_cents"),
    Part.currency.label("part_currency"),
    Part.url.label("part_url"),
    Part.created_at.label("part_created_at"),
    Part.updated_at.label("part_updated_at"),
)

ITEM_COLUMNS = (
    MaintenanceItem.id.label("item_id"),
    MaintenanceItem.maintenance_id.label("item_maintenance_id"),
    MaintenanceItem.quantity.label("item_quantity"),
    MaintenanceItem.unit.label("item_unit"),
    MaintenanceItem.unit_price_cents_override.label("item_unit_price_cents_override"),
    MaintenanceItem.notes.label("item_notes"),
)


@dataclass(frozen=True, slots=True)
class TagRow:
    """Tag side of a left join; every field is ``None`` when unmatched."""

    id: str | None
    owner_id: str | None
    name: str | None
    color: str | None
    slug: str | None
    created_at: datetime | None

    @classmethod
    def from_result(cls, row: Row[Any]) -> TagRow:
        return cls(
            id=row.tag_id,
            owner_id=row.tag_owner_id,
            name=row.tag_name,
            color=row.tag_color,
            slug=row.tag_slug,
            created_at=row.tag_created_at,
        )


@dataclass(frozen=True, slots=True)
class PartTagRow:
    """One ``parts ⟕ part_tags ⟕ tags`` row."""

    id: str
    owner_id: str
    name: str
    description: str | None
    price_cents: int | None
    currency: str | None
    url: str | None
    created_at: datetime
    updated_at: datetime
    tag: TagRow

    @classmethod
    def from_result(cls, row: Row[Any]) -> PartTagRow:
        return cls(
            id=row.part_id,
            owner_id=row.part_owner_id,
            name=row.part_name,
            description=row.part_description,
            price_cents=row.part_price_cents,
            currency=row.part_currency,
            url=row.part_url,
            created_at=row.part_created_at,
            updated_at=row.part_updated_at,
            tag=TagRow.from_result(row),
        )


@dataclass(frozen=True, slots=True)
class ItemPartTagRow:
    """One ``maintenance_items ⟕ parts ⟕ part_tags ⟕ tags`` row."""

    id: str
    maintenance_id: str
    quantity: Decimal
    unit: str | None
    unit_price_cents_override: int | None
    notes: str | None
    part: PartTagRow

    @classmethod
    def from_result(cls, row: Row[Any]) -> ItemPartTagRow:
        return cls(
            id=row.item_id,
            maintenance_id=row.item_maintenance_id,
            quantity=row.item_quantity,
            unit=row.item_unit,
            unit_price_cents_override=row.item_unit_price_cents_override,
            notes=row.item_notes,
            part=PartTagRow.from_result(row),
        )


# --------------------------------------------------------------------------- #
# Row -> view mapping
# --------------------------------------------------------------------------- #


def tag_view(row: TagRow) -> TagView:
    """Map a matched tag row; callers skip unmatched rows first."""
    if row.id is None or row.owner_id is None or row.name is None or row.slug is None:
        raise ValueError("Cannot build a tag from an unmatched join row.")
    return TagView(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        color=row.color,
        slug=row.slug,
        created_at=as_utc(row.created_at),  # type: ignore[arg-type]
    )


def part_view(row: PartTagRow, tags: tuple[TagView, ...]) -> PartView:
    return PartView(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        description=row.description,
        price_cents=row.price_cents,
        currency=row.currency,
        url=row.url,
        tags=tags,
        created_at=as_utc(row.created_at),  # type: ignore[arg-type]
        updated_at=as_utc(row.updated_at),  # type: ignore[arg-type]
    )


def item_view(row: ItemPartTagRow, tags: tuple[TagView, ...]) -> MaintenanceItemView:
    return MaintenanceItemView(
        id=row.id,
        maintenance_id=row.maintenance_id,
        part_id=row.part.id,
        quantity=row.quantity,
        unit=row.unit,
        unit_price_cents_override=row.unit_price_cents_override,
        notes=row.notes,
        part=part_view(row.part, tags),
    )


def hydrate_parts(rows: Iterable[PartTagRow]) -> list[PartView]:
    """Parts with their tags from a two-hop join."""
    return hydrate(
        rows,
        parent_key=lambda r: r.id,
        child_key=lambda r: r.tag.id,
        build_child=lambda r: tag_view(r.tag),
        build_parent=part_view,
    )


def hydrate_items(rows: Iterable[ItemPartTagRow]) -> list[MaintenanceItemView]:
    """Items with their part and the part's tags from a three-hop join."""
    return hydrate(
        rows,
        parent_key=lambda r: r.id,
        child_key=lambda r: r.part.tag.id,
        build_child=lambda r: tag_view(r.part.tag),
        build_parent=item_view,
    )
