"""Vehicle repository."""

from __future__ import annotations

from wrenchlog.models import Vehicle
from wrenchlog.repositories.hydration import as_utc
from wrenchlog.repositories.owned import OwnedRepository
from wrenchlog.repositories.views import VehicleView


class VehicleRepository(OwnedRepository[Vehicle, VehicleView]):
    """Owner-scoped persistence for :class:`Vehicle`."""

    model = Vehicle

    def _updatable_fields(self) -> set[str]:
        return {
            "license_plate",
            "vin",
            "manufacturer",
            "model",
            "build_year",
            "fuel_type",
            "odometer_unit",
            "current_odometer",
        }

    def _to_view(self, instance: Vehicle) -> VehicleView:
        return VehicleView(
            id=instance.id,
            owner_id=instance.owner_id,
            license_plate=instance.license_plate,
            vin=instance.vin,
            manufacturer=instance.manufacturer,
            model=instance.model,
            build_year=instance.build_year,
            fuel_type=instance.fuel_type,
            odometer_unit=instance.odometer_unit,
            current_odometer=instance.current_odometer,
            created_at=as_utc(instance.created_at),  # type: ignore[arg-type]
            updated_at=as_utc(instance.updated_at),  # type: ignore[arg-type]
        )

    def exists_owned(self, vehicle_id: str, owner_id: str) -> bool:
        """Check that ``vehicle_id`` belongs to ``owner_id``."""
        return self.get_owned(vehicle_id, owner_id) is not None
