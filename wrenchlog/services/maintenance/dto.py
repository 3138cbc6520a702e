# comments in English; strict reST docstrings
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from wrenchlog.repositories.maintenance import MaintenanceFilters

__all__ = ["MaintenanceCreateIn", "MaintenanceFilters", "MaintenanceItemIn"]


@dataclass(frozen=True, slots=True)
class MaintenanceItemIn:
    """
    One part used during a maintenance record.

    :param part_id: Referenced part; must belong to the same owner.
    :type part_id: str
    :param quantity: Amount used (> 0, three decimals).
    :type quantity: Decimal
    :param unit: Optional unit label ("L", "pcs"...).
    :type unit: str | None
    :param unit_price_cents_override: Optional price replacing the part's.
    :type unit_price_cents_override: int | None
    :param notes: Optional free text.
    :type notes: str | None
    """

    part_id: str
    quantity: Decimal
    unit: str | None = None
    unit_price_cents_override: int | None = None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class MaintenanceCreateIn:
    """
    Input to log maintenance on a vehicle.

    :param vehicle_id: Vehicle serviced; must belong to the same owner.
    :type vehicle_id: str
    :param happened_at: Date of the work.
    :type happened_at: date
    :param title: Short summary.
    :type title: str
    :param odometer_reading: Optional reading at the time (>= 0).
    :type odometer_reading: int | None
    :param notes: Optional free text.
    :type notes: str | None
    :param items: Parts used, in order.
    :type items: tuple[MaintenanceItemIn, ...]
    """

    vehicle_id: str
    happened_at: date
    title: str
    odometer_reading: int | None = None
    notes: str | None = None
    items: tuple[MaintenanceItemIn, ...] = field(default_factory=tuple)
