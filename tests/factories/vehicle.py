"""Factories for vehicles."""

from __future__ import annotations

import factory

from wrenchlog.models import Vehicle

from . import SQLAlchemyFactory, faker
from .user import UserFactory


class VehicleFactory(SQLAlchemyFactory):
    """Factory for :class:`wrenchlog.models.Vehicle`."""

    class Meta:
        model = Vehicle

    owner_id = factory.LazyAttribute(lambda _: UserFactory().id)
    manufacturer = factory.LazyAttribute(lambda _: faker.company()[:100])
    model = factory.LazyAttribute(lambda _: faker.word().capitalize())
    license_plate = factory.LazyAttribute(lambda _: faker.license_plate()[:16])
    vin = factory.LazyAttribute(lambda _: faker.bothify("?????????????????").upper())
    build_year = factory.LazyAttribute(lambda _: faker.random_int(min=1990, max=2024))
    fuel_type = "diesel"
    odometer_unit = "KM"
    current_odometer = factory.LazyAttribute(lambda _: faker.random_int(min=0, max=300_000))
