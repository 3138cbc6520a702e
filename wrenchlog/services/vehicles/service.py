"""Owner-scoped vehicle use cases."""

from __future__ import annotations

from wrenchlog.repositories.vehicle import VehicleRepository
from wrenchlog.repositories.views import VehicleView
from wrenchlog.services._shared.base import OwnedEntityService
from wrenchlog.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer


class VehicleService(OwnedEntityService[VehicleView]):
    """Owner-scoped vehicle CRUD, newest first."""

    entity = "Vehicle"

    def _repo(self, uow: SQLAlchemyRepositoryContainer) -> VehicleRepository:
        return uow.vehicles
