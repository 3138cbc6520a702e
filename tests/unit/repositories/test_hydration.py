"""Unit tests for rebuilding nested views from flat joined rows."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from wrenchlog.repositories.hydration import (
    ItemPartTagRow,
    PartTagRow,
    TagRow,
    as_utc,
    hydrate,
    hydrate_items,
    hydrate_parts,
)

NOW = datetime(2024, 1, 1, 12, 0)


def _pair(parent, child):
    return {"parent": parent, "child": child}


def _group(rows):
    return hydrate(
        rows,
        parent_key=lambda r: r["parent"],
        child_key=lambda r: r["child"],
        build_child=lambda r: r["child"],
        build_parent=lambda r, children: (r["parent"], children),
    )


def _tag(tag_id: str | None, name: str | None = None) -> TagRow:
    if tag_id is None:
        return TagRow(None, None, None, None, None, None)
    return TagRow(tag_id, "owner", name or tag_id, None, tag_id, NOW)


def _part(part_id: str, tag: TagRow) -> PartTagRow:
    return PartTagRow(
        id=part_id,
        owner_id="owner",
        name=f"part {part_id}",
        description=None,
        price_cents=None,
        currency=None,
        url=None,
        created_at=NOW,
        updated_at=NOW,
        tag=tag,
    )


class TestHydrate:
    def test_groups_in_first_seen_order(self) -> None:
        rows = [_pair("b", 1), _pair("a", 2), _pair("b", 3)]

        assert _group(rows) == [("b", (1, 3)), ("a", (2,))]

    def test_deduplicates_children_keeping_first(self) -> None:
        rows = [_pair("a", 1), _pair("a", 2), _pair("a", 1)]

        assert _group(rows) == [("a", (1, 2))]

    def test_null_child_yields_empty_children(self) -> None:
        assert _group([_pair("a", None)]) == [("a", ())]

    def test_mixed_null_rows_are_skipped(self) -> None:
        rows = [_pair("a", None), _pair("a", 7)]

        assert _group(rows) == [("a", (7,))]

    def test_empty_input(self) -> None:
        assert _group([]) == []


class TestTypedHydration:
    def test_parts_with_and_without_tags(self) -> None:
        rows = [
            _part("p1", _tag("t1", "brakes")),
            _part("p1", _tag("t2", "front")),
            _part("p2", _tag(None)),
        ]

        parts = hydrate_parts(rows)

        assert [p.id for p in parts] == ["p1", "p2"]
        assert [t.name for t in parts[0].tags] == ["brakes", "front"]
        assert parts[1].tags == ()
        assert parts[0].created_at.tzinfo is timezone.utc

    def test_items_resolve_part_and_tags_across_three_hops(self) -> None:
        rows = [
            ItemPartTagRow("i1", "m1", Decimal("2"), "L", None, None, _part("p1", _tag("t1"))),
            ItemPartTagRow("i1", "m1", Decimal("2"), "L", None, None, _part("p1", _tag("t2"))),
            ItemPartTagRow("i2", "m1", Decimal("3"), None, 450, "spare", _part("p1", _tag("t1"))),
            ItemPartTagRow("i2", "m1", Decimal("3"), None, 450, "spare", _part("p1", _tag("t2"))),
        ]

        items = hydrate_items(rows)

        assert [(i.id, i.quantity) for i in items] == [("i1", Decimal("2")), ("i2", Decimal("3"))]
        assert items[0].part == items[1].part
        assert [t.id for t in items[0].part.tags] == ["t1", "t2"]
        assert items[1].unit_price_cents_override == 450

    def test_tag_view_refuses_unmatched_row(self) -> None:
        from wrenchlog.repositories.hydration import tag_view

        with pytest.raises(ValueError):
            tag_view(_tag(None))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        (NOW, NOW.replace(tzinfo=timezone.utc)),
        (NOW.replace(tzinfo=timezone.utc), NOW.replace(tzinfo=timezone.utc)),
    ],
)
def test_as_utc(value, expected) -> None:
    assert as_utc(value) == expected
