# comments in English; strict reST docstrings
from __future__ import annotations

from dataclasses import dataclass

from wrenchlog.models.vehicle import OdometerUnit


@dataclass(frozen=True, slots=True)
class VehicleCreateIn:
    """
    Input to create a vehicle.

    :param manufacturer: Make, e.g. "Volvo".
    :type manufacturer: str
    :param model: Model name.
    :type model: str
    :param license_plate: Optional registration plate.
    :type license_plate: str | None
    :param vin: Optional 17 character vehicle identification number.
    :type vin: str | None
    :param build_year: Optional year of manufacture.
    :type build_year: int | None
    :param fuel_type: Optional free-form fuel description.
    :type fuel_type: str | None
    :param odometer_unit: ``KM`` or ``HOURS``.
    :type odometer_unit: str
    :param current_odometer: Optional current reading (>= 0).
    :type current_odometer: int | None
    """

    manufacturer: str
    model: str
    license_plate: str | None = None
    vin: str | None = None
    build_year: int | None = None
    fuel_type: str | None = None
    odometer_unit: str = OdometerUnit.KM.value
    current_odometer: int | None = None
