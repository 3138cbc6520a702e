"""Maintenance log models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from wrenchlog.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class MaintenanceRecord(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """One service event on a vehicle (an oil change, a tyre swap...)."""

    __tablename__ = "maintenance_records"

    vehicle_id: Mapped[str] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False
    )
    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    happened_at: Mapped[date] = mapped_column(Date, nullable=False)
    odometer_reading: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "odometer_reading IS NULL OR odometer_reading >= 0",
            name="maintenance_odometer_non_negative",
        ),
        Index("ix_maintenance_records_owner_vehicle", "owner_id", "vehicle_id"),
        Index("ix_maintenance_records_happened_at", "happened_at"),
    )


class MaintenanceItem(PKMixin, ReprMixin, db.Model):
    """A part used during a maintenance record.

    Owned by its record (cascade); the referenced part cannot be deleted while
    any item points at it.
    """

    __tablename__ = "maintenance_items"

    maintenance_id: Mapped[str] = mapped_column(
        ForeignKey("maintenance_records.id", ondelete="CASCADE"), nullable=False
    )
    part_id: Mapped[str] = mapped_column(
        ForeignKey("parts.id", ondelete="RESTRICT"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    unit_price_cents_override: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Order of the item within its record.
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="maintenance_item_quantity_positive"),
        CheckConstraint(
            "unit_price_cents_override IS NULL OR unit_price_cents_override >= 0",
            name="maintenance_item_price_non_negative",
        ),
        Index("ix_maintenance_items_maintenance_id", "maintenance_id"),
        Index("ix_maintenance_items_part_id", "part_id"),
    )
