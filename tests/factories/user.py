"""Factories for identity models."""

from __future__ import annotations

from datetime import timedelta

import factory
from werkzeug.security import generate_password_hash

from wrenchlog.models import RefreshToken, User
from wrenchlog.models.base import utcnow

from . import SQLAlchemyFactory, faker

DEFAULT_PASSWORD = "Secure123A"


class UserFactory(SQLAlchemyFactory):
    """Factory for :class:`wrenchlog.models.User`."""

    class Meta:
        model = User

    email = factory.LazyAttribute(lambda _: faker.unique.email())
    name = factory.LazyAttribute(lambda _: faker.name()[:100])
    password_hash = factory.LazyAttribute(
        lambda _: generate_password_hash(DEFAULT_PASSWORD, method="pbkdf2:sha256:1000")
    )


class RefreshTokenFactory(SQLAlchemyFactory):
    """Factory for stored refresh token digests."""

    class Meta:
        model = RefreshToken

    user_id = factory.LazyAttribute(lambda _: UserFactory().id)
    token_hash = factory.LazyAttribute(lambda _: faker.unique.sha256())
    expires_at = factory.LazyAttribute(lambda _: utcnow() + timedelta(days=7))
