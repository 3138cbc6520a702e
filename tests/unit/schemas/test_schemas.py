"""Unit tests for payload validation at the service boundary."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from wrenchlog.models import Vehicle
from wrenchlog.schemas import (
    LoginSchema,
    MaintenanceCreateSchema,
    MaintenanceFilterSchema,
    MaintenanceUpdateSchema,
    PaginationQuerySchema,
    PartCreateSchema,
    PartFilterSchema,
    PartUpdateSchema,
    RegisterSchema,
    TagCreateSchema,
    VehicleCreateSchema,
    VehicleUpdateSchema,
    load_or_raise,
)
from wrenchlog.services._shared.dto import PaginationIn
from wrenchlog.services._shared.errors import ValidationFailedError
from wrenchlog.services.auth.dto import RegisterIn
from wrenchlog.services.maintenance.dto import MaintenanceCreateIn, MaintenanceItemIn
from wrenchlog.services.vehicles.dto import VehicleCreateIn


def _errors(schema, payload):
    with pytest.raises(ValidationFailedError) as exc_info:
        load_or_raise(schema, payload)
    return exc_info.value.errors


# --------------------------------- Auth --------------------------------------


class TestRegisterSchema:
    def test_valid_payload_becomes_dto(self) -> None:
        dto = load_or_raise(
            RegisterSchema(), {"email": "a@x.io", "password": "Secure123A", "name": "Ann"}
        )

        assert dto == RegisterIn(email="a@x.io", password="Secure123A", name="Ann")

    @pytest.mark.parametrize("password", ["short1A", "alllower123", "ALLUPPER123", "NoDigitsHere"])
    def test_weak_passwords_are_rejected(self, password: str) -> None:
        assert "password" in _errors(RegisterSchema(), {"email": "a@x.io", "password": password})

    def test_invalid_email(self) -> None:
        assert "email" in _errors(RegisterSchema(), {"email": "nope", "password": "Secure123A"})

    def test_login_requires_both_fields(self) -> None:
        assert set(_errors(LoginSchema(), {})) == {"email", "password"}


# -------------------------------- Vehicles -----------------------------------


class TestVehicleSchemas:
    def test_missing_manufacturer_is_rejected_and_nothing_is_written(self, session) -> None:
        before = session.execute(select(func.count()).select_from(Vehicle)).scalar_one()

        errors = _errors(VehicleCreateSchema(), {"model": "Golf"})

        assert "manufacturer" in errors
        after = session.execute(select(func.count()).select_from(Vehicle)).scalar_one()
        assert after == before

    def test_defaults_odometer_unit_to_km(self) -> None:
        dto = load_or_raise(VehicleCreateSchema(), {"manufacturer": "VW", "model": "Golf"})

        assert isinstance(dto, VehicleCreateIn)
        assert dto.odometer_unit == "KM"

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("vin", "TOO-SHORT"),
            ("build_year", 1900),
            ("odometer_unit", "MILES"),
            ("current_odometer", -1),
        ],
    )
    def test_field_rules(self, field: str, value) -> None:
        payload = {"manufacturer": "VW", "model": "Golf", field: value}

        assert field in _errors(VehicleCreateSchema(), payload)

    def test_build_year_limit_follows_the_calendar(self, freeze_time) -> None:
        payload = {"manufacturer": "VW", "model": "Golf", "build_year": 2031}

        with freeze_time("2030-06-01"):
            assert load_or_raise(VehicleCreateSchema(), payload).build_year == 2031
        with freeze_time("2029-06-01"):
            assert "build_year" in _errors(VehicleCreateSchema(), payload)

    def test_update_loads_only_present_keys(self) -> None:
        assert load_or_raise(VehicleUpdateSchema(), {"license_plate": None}) == {
            "license_plate": None
        }
        assert load_or_raise(VehicleUpdateSchema(), {}) == {}

    def test_unknown_fields_are_rejected(self) -> None:
        assert "owner_id" in _errors(VehicleUpdateSchema(), {"owner_id": "someone-else"})


# -------------------------------- Catalog ------------------------------------


class TestCatalogSchemas:
    @pytest.mark.parametrize("color", ["red", "#12345", "#GGGGGG"])
    def test_tag_color_must_be_hex(self, color: str) -> None:
        assert "color" in _errors(TagCreateSchema(), {"name": "Brakes", "color": color})

    @pytest.mark.parametrize("name", ["!!!", "???"])
    def test_tag_name_needs_a_letter_or_digit(self, name: str) -> None:
        assert "name" in _errors(TagCreateSchema(), {"name": name})

    def test_tag_name_must_not_be_blank(self) -> None:
        assert "name" in _errors(TagCreateSchema(), {"name": "   "})

    @pytest.mark.parametrize("currency", ["eur", "EURO", "E1R"])
    def test_part_currency_is_iso_like(self, currency: str) -> None:
        assert "currency" in _errors(PartCreateSchema(), {"name": "Pad", "currency": currency})

    def test_part_create_freezes_tag_ids(self) -> None:
        dto = load_or_raise(PartCreateSchema(), {"name": "Pad", "tag_ids": ["a", "b"]})

        assert dto.tag_ids == ("a", "b")

    def test_part_update_distinguishes_absent_and_empty_tags(self) -> None:
        assert "tag_ids" not in load_or_raise(PartUpdateSchema(), {"name": "Pad"})
        assert load_or_raise(PartUpdateSchema(), {"tag_ids": []}) == {"tag_ids": ()}

    def test_part_filters_blank_q_is_none(self) -> None:
        filters = load_or_raise(PartFilterSchema(), {"q": "  ", "tag_ids": ["t1"]})

        assert filters.q is None
        assert filters.tag_ids == ("t1",)


# ------------------------------ Maintenance ----------------------------------


class TestMaintenanceSchemas:
    def test_create_payload_becomes_dto_with_items(self) -> None:
        dto = load_or_raise(
            MaintenanceCreateSchema(),
            {
                "vehicle_id": "v1",
                "happened_at": "2024-03-01",
                "title": "Oil change",
                "items": [{"part_id": "p1", "quantity": "4.5", "unit": "L"}],
            },
        )

        assert isinstance(dto, MaintenanceCreateIn)
        assert dto.happened_at == date(2024, 3, 1)
        assert dto.items == (MaintenanceItemIn(part_id="p1", quantity=Decimal("4.500"), unit="L"),)

    @pytest.mark.parametrize("quantity", ["0", "-1"])
    def test_item_quantity_must_be_positive(self, quantity: str) -> None:
        errors = _errors(
            MaintenanceCreateSchema(),
            {
                "vehicle_id": "v1",
                "happened_at": "2024-03-01",
                "title": "Oil change",
                "items": [{"part_id": "p1", "quantity": quantity}],
            },
        )

        assert "items" in errors

    def test_update_without_items_keeps_key_absent(self) -> None:
        assert load_or_raise(MaintenanceUpdateSchema(), {"title": "Tyres"}) == {"title": "Tyres"}

    def test_filters_use_from_and_to_keys(self) -> None:
        filters = load_or_raise(MaintenanceFilterSchema(), {"from": "2024-01-01", "to": "2024-01-31"})

        assert filters.date_from == date(2024, 1, 1)
        assert filters.date_to == date(2024, 1, 31)

    def test_filters_reject_inverted_range(self) -> None:
        errors = _errors(MaintenanceFilterSchema(), {"from": "2024-02-01", "to": "2024-01-01"})

        assert "from" in errors


# -------------------------------- Paging -------------------------------------


class TestPaginationQuerySchema:
    def test_defaults(self) -> None:
        assert load_or_raise(PaginationQuerySchema(default_page_size=20), {}) == PaginationIn(1, 20)

    def test_instance_cap_applies(self) -> None:
        schema = PaginationQuerySchema(default_page_size=10, max_page_size=50)

        assert load_or_raise(schema, {"page": 2, "page_size": 80}) == PaginationIn(2, 50)

    @pytest.mark.parametrize("query", [{"page": 0}, {"page_size": 0}, {"page_size": 101}])
    def test_out_of_range(self, query) -> None:
        assert _errors(PaginationQuerySchema(), query)
