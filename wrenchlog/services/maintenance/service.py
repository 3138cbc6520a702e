"""Maintenance record and item use cases."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from wrenchlog.repositories.maintenance import MaintenanceRecordRepository
from wrenchlog.repositories.views import MaintenanceItemView, MaintenanceRecordView
from wrenchlog.services._shared.base import OwnedEntityService, as_fields
from wrenchlog.services._shared.dto import OwnerId
from wrenchlog.services._shared.errors import NotFoundError
from wrenchlog.services.maintenance.dto import MaintenanceCreateIn, MaintenanceItemIn
from wrenchlog.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer


class MaintenanceService(OwnedEntityService[MaintenanceRecordView]):
    """
    Maintenance records of the owner's vehicles, with hydrated items.

    Records list by ``happened_at`` descending and filter through
    :class:`~wrenchlog.repositories.maintenance.MaintenanceFilters`.
    Item-level calls are scoped through the owning record.
    """

    entity = "MaintenanceRecord"

    def _repo(self, uow: SQLAlchemyRepositoryContainer) -> MaintenanceRecordRepository:
        return uow.maintenance_records

    @staticmethod
    def _require_vehicle(uow: SQLAlchemyRepositoryContainer, vehicle_id: str, owner_id: str) -> None:
        if not uow.vehicles.exists_owned(vehicle_id, owner_id):
            raise NotFoundError("Vehicle", vehicle_id)

    # ------------------------------ Records ----------------------------------

    def create(
        self, owner_id: OwnerId, data: MaintenanceCreateIn | Mapping[str, Any]
    ) -> MaintenanceRecordView:
        """
        Log maintenance with its items in one transaction.

        :raises NotFoundError: When the vehicle is not the owner's.
        :raises InvalidReferenceError: ``invalid_parts`` for unknown part ids.
        """
        fields = as_fields(data)
        fields["items"] = [as_fields(item) for item in fields.get("items") or []]
        with self.rw_uow() as uow:
            self._require_vehicle(uow, fields["vehicle_id"], owner_id)
            return uow.maintenance_records.create(owner_id, fields)

    def update(
        self, entity_id: str, owner_id: OwnerId, patch: Mapping[str, Any]
    ) -> MaintenanceRecordView | None:
        """
        Partial update; ``items`` present replaces every item.

        :raises NotFoundError: When moving the record to a foreign vehicle.
        :raises InvalidReferenceError: ``invalid_parts`` for unknown part ids.
        """
        values = dict(patch)
        if "items" in values:
            values["items"] = [as_fields(item) for item in values["items"] or []]
        with self.rw_uow() as uow:
            if "vehicle_id" in values:
                self._require_vehicle(uow, values["vehicle_id"], owner_id)
            return uow.maintenance_records.update(entity_id, owner_id, values)

    # ------------------------------ Items ------------------------------------

    def list_items(self, record_id: str, owner_id: OwnerId) -> list[MaintenanceItemView]:
        """
        Items of one record in their stored order.

        :raises NotFoundError: When the record is not the owner's.
        """
        with self.ro_uow() as uow:
            if uow.maintenance_records.get_owned(record_id, owner_id) is None:
                raise NotFoundError(self.entity, record_id)
            return list(uow.maintenance_items.for_records([record_id]).get(record_id, ()))

    def find_item(self, item_id: str, owner_id: OwnerId) -> MaintenanceItemView | None:
        with self.ro_uow() as uow:
            return uow.maintenance_items.find_by_id(item_id, owner_id)

    def add_item(
        self, record_id: str, owner_id: OwnerId, item: MaintenanceItemIn | Mapping[str, Any]
    ) -> MaintenanceItemView:
        """
        Append one item to a record.

        :raises NotFoundError: When the record is not the owner's.
        :raises InvalidReferenceError: ``invalid_parts`` for an unknown part.
        """
        fields = as_fields(item)
        with self.rw_uow() as uow:
            if uow.maintenance_records.get_owned(record_id, owner_id) is None:
                raise NotFoundError(self.entity, record_id)
            uow.maintenance_items.validate_parts(owner_id, [fields])
            fields["maintenance_id"] = record_id
            return uow.maintenance_items.create(owner_id, fields)

    def update_item(
        self, item_id: str, owner_id: OwnerId, patch: Mapping[str, Any]
    ) -> MaintenanceItemView | None:
        """Partial item update; ``None`` when the item is not the owner's."""
        with self.rw_uow() as uow:
            if "part_id" in patch:
                uow.maintenance_items.validate_parts(owner_id, [patch])
            return uow.maintenance_items.update(item_id, owner_id, patch)

    def delete_item(self, item_id: str, owner_id: OwnerId) -> bool:
        with self.rw_uow() as uow:
            return uow.maintenance_items.delete(item_id, owner_id)
