"""Maintenance record and item schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from marshmallow import Schema, ValidationError, fields, post_load, validate, validates_schema

from wrenchlog.schemas.catalog import PartSchema
from wrenchlog.services.maintenance.dto import (
    MaintenanceCreateIn,
    MaintenanceFilters,
    MaintenanceItemIn,
)

_ID = validate.Length(min=1, max=36)
_TITLE = [validate.Length(min=1, max=200), validate.Regexp(r"\S", error="Must not be blank.")]


class _ItemFields(Schema):
    part_id = fields.String(validate=_ID)
    quantity = fields.Decimal(
        places=3, validate=validate.Range(min=Decimal("0"), min_inclusive=False)
    )
    unit = fields.String(allow_none=True, validate=validate.Length(max=20))
    unit_price_cents_override = fields.Integer(allow_none=True, validate=validate.Range(min=0))
    notes = fields.String(allow_none=True)


class MaintenanceItemSchema(_ItemFields):
    """One part used during maintenance."""

    part_id = fields.String(required=True, validate=_ID)
    quantity = fields.Decimal(
        required=True, places=3, validate=validate.Range(min=Decimal("0"), min_inclusive=False)
    )

    @post_load
    def make_dto(self, data: dict[str, Any], **_: Any) -> MaintenanceItemIn:
        return MaintenanceItemIn(**data)


class MaintenanceItemUpdateSchema(_ItemFields):
    """Partial item update."""


class _RecordFields(Schema):
    vehicle_id = fields.String(validate=_ID)
    happened_at = fields.Date()
    odometer_reading = fields.Integer(allow_none=True, validate=validate.Range(min=0))
    title = fields.String(validate=_TITLE)
    notes = fields.String(allow_none=True)
    items = fields.List(fields.Nested(MaintenanceItemSchema))


class MaintenanceCreateSchema(_RecordFields):
    """Validate maintenance creation payloads."""

    vehicle_id = fields.String(required=True, validate=_ID)
    happened_at = fields.Date(required=True)
    title = fields.String(required=True, validate=_TITLE)

    @post_load
    def make_dto(self, data: dict[str, Any], **_: Any) -> MaintenanceCreateIn:
        data["items"] = tuple(data.get("items") or ())
        return MaintenanceCreateIn(**data)


class MaintenanceUpdateSchema(_RecordFields):
    """Partial update; ``items`` present replaces every item, absent keeps them."""

    @post_load
    def freeze_items(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        if "items" in data:
            data["items"] = tuple(data["items"] or ())
        return data


class MaintenanceFilterSchema(Schema):
    """Listing filters; ``from``/``to`` are inclusive dates."""

    vehicle_id = fields.String(load_default=None, validate=_ID)
    date_from = fields.Date(data_key="from", load_default=None)
    date_to = fields.Date(data_key="to", load_default=None)

    @validates_schema
    def check_range(self, data: dict[str, Any], **_: Any) -> None:
        start, end = data.get("date_from"), data.get("date_to")
        if start and end and start > end:
            raise ValidationError("'from' must not be after 'to'.", field_name="from")

    @post_load
    def make_filters(self, data: dict[str, Any], **_: Any) -> MaintenanceFilters:
        return MaintenanceFilters(**data)


class MaintenanceItemOutSchema(Schema):
    """Serialize an item with its hydrated part."""

    id = fields.String(dump_only=True)
    part_id = fields.String()
    quantity = fields.Decimal(as_string=True)
    unit = fields.String(allow_none=True)
    unit_price_cents_override = fields.Integer(allow_none=True)
    notes = fields.String(allow_none=True)
    part = fields.Nested(PartSchema, dump_only=True)


class MaintenanceRecordSchema(Schema):
    """Serialize a maintenance record with its items."""

    id = fields.String(dump_only=True)
    vehicle_id = fields.String()
    happened_at = fields.Date()
    odometer_reading = fields.Integer(allow_none=True)
    title = fields.String()
    notes = fields.String(allow_none=True)
    items = fields.List(fields.Nested(MaintenanceItemOutSchema), dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)
