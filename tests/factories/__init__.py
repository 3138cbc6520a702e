"""Factory Boy setup for test data generation."""

from __future__ import annotations

from typing import Any

import factory
from faker import Faker

faker = Faker()
Faker.seed(1234)

_current: dict[str, Any] = {"session": None}


def bind_session(session: Any) -> None:
    """Point every factory at the session of the running test."""

    _current["session"] = session


def current_session() -> Any:
    session = _current["session"]
    if session is None:
        raise RuntimeError("Factories used outside of the 'session' fixture.")
    return session


class SQLAlchemyFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base factory for SQLAlchemy models."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = current_session
        sqlalchemy_session_persistence = "flush"
