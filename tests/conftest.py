"""Global pytest fixtures for the Wrenchlog test-suite."""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest
from flask import Flask
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from wrenchlog import create_app
from wrenchlog.container import Services, build_services
from wrenchlog.core.config import TestingConfig
from wrenchlog.core.extensions import db
from wrenchlog.models import User
from wrenchlog.services._shared.dto import OwnerId

from tests.factories import bind_session
from tests.factories.user import UserFactory


@pytest.fixture(scope="session")
def app() -> Generator[Flask, None, None]:
    """Create and configure a Flask application for tests."""

    application = create_app(TestingConfig, instance_relative_config=False)
    with application.app_context():
        yield application


@pytest.fixture(scope="session")
def _db(app: Flask) -> Generator[Any, None, None]:
    """Initialize the database schema for the test session.

    pysqlite opens transactions lazily and ignores ``SAVEPOINT`` bookkeeping
    unless SQLAlchemy emits ``BEGIN`` itself, hence the two listeners.
    """

    engine = db.engine

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection: Any, _: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    db.create_all()
    yield db
    db.session.remove()
    db.drop_all()


@pytest.fixture()
def session(_db: Any) -> Generator[scoped_session, None, None]:
    """Provide a session whose commits only release savepoints.

    One outer transaction wraps the whole test and is rolled back at the
    end, so units of work may commit freely.
    """

    connection = _db.engine.connect()
    transaction = connection.begin()
    factory = sessionmaker(
        bind=connection, join_transaction_mode="create_savepoint", autoflush=False
    )
    sess = scoped_session(factory)
    bind_session(sess)
    try:
        yield sess
    finally:
        bind_session(None)
        sess.remove()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def services(app: Flask, session: scoped_session) -> Services:
    """All services wired on the test session."""

    return build_services(session, app.config)


@pytest.fixture()
def user(session: scoped_session) -> User:
    """Persist and return a user instance."""

    return UserFactory()


@pytest.fixture()
def owner(user: User) -> OwnerId:
    """Verified identity of :func:`user`."""

    return OwnerId(user.id)


@pytest.fixture()
def other_owner(session: scoped_session) -> OwnerId:
    """A second, unrelated tenant."""

    return OwnerId(UserFactory().id)


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory
