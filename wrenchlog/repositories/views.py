"""Immutable read models returned by repositories and services.

Views are plain frozen dataclasses detached from the ORM session, so callers
can never trigger lazy loads or walk back-references from a Tag to its Parts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class UserView:
    """
    Public projection of a user; deliberately has no password field.

    :param id: User identifier.
    :param email: Normalized email.
    :param name: Optional display name.
    :param created_at: Creation time (UTC).
    """

    id: str
    email: str
    name: str | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class RefreshTokenView:
    """
    Stored refresh token row.

    :param id: Row identifier.
    :param user_id: Owning user.
    :param token_hash: Keyed digest of the raw token.
    :param expires_at: Recorded expiry (UTC).
    :param created_at: Creation time (UTC).
    """

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    created_at: datetime


@dataclass(frozen=True, slots=True)
class VehicleView:
    id: str
    owner_id: str
    license_plate: str | None
    vin: str | None
    manufacturer: str
    model: str
    build_year: int | None
    fuel_type: str | None
    odometer_unit: str
    current_odometer: int | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class TagView:
    id: str
    owner_id: str
    name: str
    color: str | None
    slug: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class PartView:
    """
    Part with its tags hydrated from the ``part_tags`` join.

    :param tags: Distinct tags in join order; empty when untagged.
    """

    id: str
    owner_id: str
    name: str
    description: str | None
    price_cents: int | None
    currency: str | None
    url: str | None
    tags: tuple[TagView, ...]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class MaintenanceItemView:
    """
    Item of a maintenance record with the referenced part resolved.

    :param part: Referenced part including its tags.
    """

    id: str
    maintenance_id: str
    part_id: str
    quantity: Decimal
    unit: str | None
    unit_price_cents_override: int | None
    notes: str | None
    part: PartView


@dataclass(frozen=True, slots=True)
class MaintenanceRecordView:
    id: str
    owner_id: str
    vehicle_id: str
    happened_at: date
    odometer_reading: int | None
    title: str
    notes: str | None
    items: tuple[MaintenanceItemView, ...]
    created_at: datetime
    updated_at: datetime
