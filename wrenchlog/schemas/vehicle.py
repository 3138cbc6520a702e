"""Vehicle schemas."""

from __future__ import annotations

from datetime import date
from typing import Any

from marshmallow import Schema, ValidationError, fields, post_load, validate

from wrenchlog.models import OdometerUnit
from wrenchlog.services.vehicles.dto import VehicleCreateIn

ODOMETER_UNITS = [unit.value for unit in OdometerUnit]
MIN_BUILD_YEAR = 1950


def validate_build_year(value: int) -> None:
    """Accept years from 1950 up to next year, evaluated at call time."""
    latest = date.today().year + 1
    if not MIN_BUILD_YEAR <= value <= latest:
        raise ValidationError(f"Must be between {MIN_BUILD_YEAR} and {latest}.")


class VehicleUpdateSchema(Schema):
    """Partial update: only keys present in the payload are loaded."""

    manufacturer = fields.String(validate=validate.Length(min=1, max=100))
    model = fields.String(validate=validate.Length(min=1, max=100))
    license_plate = fields.String(allow_none=True, validate=validate.Length(max=16))
    vin = fields.String(allow_none=True, validate=validate.Length(equal=17))
    build_year = fields.Integer(allow_none=True, validate=validate_build_year)
    fuel_type = fields.String(allow_none=True, validate=validate.Length(max=50))
    odometer_unit = fields.String(validate=validate.OneOf(ODOMETER_UNITS))
    current_odometer = fields.Integer(allow_none=True, validate=validate.Range(min=0))


class VehicleCreateSchema(VehicleUpdateSchema):
    """Validate vehicle creation payloads."""

    manufacturer = fields.String(required=True, validate=validate.Length(min=1, max=100))
    model = fields.String(required=True, validate=validate.Length(min=1, max=100))
    odometer_unit = fields.String(
        load_default=OdometerUnit.KM.value, validate=validate.OneOf(ODOMETER_UNITS)
    )

    @post_load
    def make_dto(self, data: dict[str, Any], **_: Any) -> VehicleCreateIn:
        return VehicleCreateIn(**data)


class VehicleSchema(Schema):
    """Serialize vehicle read models."""

    id = fields.String(dump_only=True)
    owner_id = fields.String(dump_only=True)
    manufacturer = fields.String()
    model = fields.String()
    license_plate = fields.String(allow_none=True)
    vin = fields.String(allow_none=True)
    build_year = fields.Integer(allow_none=True)
    fuel_type = fields.String(allow_none=True)
    odometer_unit = fields.String()
    current_odometer = fields.Integer(allow_none=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)
