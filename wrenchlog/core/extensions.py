"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import sqlite3
from typing import Any

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singleton (import-safe); components receive sessions by injection.
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Turn on foreign-key enforcement for SQLite connections.

    SQLite ignores ``ON DELETE CASCADE``/``RESTRICT`` unless the pragma is set
    on every new connection.
    """
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy for ``app``.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`wrenchlog.models` package so the metadata holds every table.
    """
    db.init_app(app)

    from wrenchlog import models as _models  # noqa: F401
