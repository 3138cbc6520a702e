"""Factories for maintenance records and items."""

from __future__ import annotations

from decimal import Decimal

import factory

from wrenchlog.models import MaintenanceItem, MaintenanceRecord

from . import SQLAlchemyFactory, faker
from .catalog import PartFactory
from .vehicle import VehicleFactory


class MaintenanceRecordFactory(SQLAlchemyFactory):
    """Factory for :class:`wrenchlog.models.MaintenanceRecord`.

    Pass ``vehicle=`` to log on an existing vehicle; its owner is reused.
    """

    class Meta:
        model = MaintenanceRecord
        exclude = ("vehicle",)

    vehicle = factory.LazyAttribute(lambda _: VehicleFactory())
    vehicle_id = factory.LazyAttribute(lambda o: o.vehicle.id)
    owner_id = factory.LazyAttribute(lambda o: o.vehicle.owner_id)
    happened_at = factory.LazyAttribute(lambda _: faker.date_between("-2y", "today"))
    odometer_reading = factory.LazyAttribute(lambda _: faker.random_int(min=0, max=300_000))
    title = factory.LazyAttribute(lambda _: faker.sentence(nb_words=3)[:200])
    notes = None


class MaintenanceItemFactory(SQLAlchemyFactory):
    """Factory for :class:`wrenchlog.models.MaintenanceItem`."""

    class Meta:
        model = MaintenanceItem
        exclude = ("record",)

    record = factory.LazyAttribute(lambda _: MaintenanceRecordFactory())
    maintenance_id = factory.LazyAttribute(lambda o: o.record.id)
    part_id = factory.LazyAttribute(lambda o: PartFactory(owner_id=o.record.owner_id).id)
    quantity = Decimal("1.000")
    unit = "pcs"
    position = factory.Sequence(lambda n: n)
