"""Vehicle model."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from wrenchlog.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class OdometerUnit(str, Enum):
    """Unit in which a vehicle's odometer counts."""

    KM = "KM"
    HOURS = "HOURS"


class Vehicle(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """A car, motorbike or machine belonging to one owner."""

    __tablename__ = "vehicles"

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    license_plate: Mapped[str | None] = mapped_column(String(16), nullable=True)
    vin: Mapped[str | None] = mapped_column(String(17), nullable=True)
    manufacturer: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    build_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fuel_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    odometer_unit: Mapped[str] = mapped_column(
        String(10), nullable=False, default=OdometerUnit.KM.value
    )
    current_odometer: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "odometer_unit IN ('KM', 'HOURS')", name="vehicle_odometer_unit_valid"
        ),
        CheckConstraint(
            "current_odometer IS NULL OR current_odometer >= 0",
            name="vehicle_odometer_non_negative",
        ),
        # The upper bound moves with the calendar and is checked on input.
        CheckConstraint(
            "build_year IS NULL OR build_year >= 1950", name="vehicle_build_year_min"
        ),
        Index("ix_vehicles_owner_id", "owner_id"),
    )
