"""
SQLAlchemy implementations of UnitOfWork.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wrenchlog.repositories import (
    MaintenanceItemRepository,
    MaintenanceRecordRepository,
    PartRepository,
    RefreshTokenRepository,
    TagAssociationManager,
    TagRepository,
    UserRepository,
    VehicleRepository,
)
from wrenchlog.uow.base import SessionFactory, UnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(self.session)
        self.refresh_tokens = RefreshTokenRepository(self.session)
        self.vehicles = VehicleRepository(self.session)
        self.tags = TagRepository(self.session)
        self.tag_associations = TagAssociationManager(self.session, self.tags)
        self.parts = PartRepository(self.session, self.tag_associations)
        self.maintenance_items = MaintenanceItemRepository(self.session, self.parts)
        self.maintenance_records = MaintenanceRecordRepository(
            self.session, self.maintenance_items
        )


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW: commit on success, rollback on error.

    The same session is shared across all repositories for a consistent transaction.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        """Initialise the Unit of Work on the session produced by ``session_factory``.

        All repositories receive the same session instance so that they operate
        within the identical transactional context.
        """
        super().__init__(session=session_factory())

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work.

    This UoW:
    - Optionally sets the isolation level and ``READ ONLY`` on dialects that
      support ``SET TRANSACTION`` (PostgreSQL, MySQL/MariaDB).
    - Installs portable write-guards and rolls back the transaction it owns.
    - Disallows ``commit()``.

    Parameters
    ----------
    session_factory:
        Callable returning the session to run on.
    isolation_level:
        Optional transaction isolation level hint, e.g. ``"READ COMMITTED"``.
    enforce_db_readonly:
        If ``True`` (default), applies ``SET TRANSACTION READ ONLY`` when supported.

    Notes
    -----
    When the session already has a transaction open (an outer fixture, or
    pending work of the caller) the scope attaches to it: guards are still
    installed, ``SET TRANSACTION`` is skipped and nothing is rolled back.
    """

    # Guard patterns for portable "no write" at driver level
    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
        "grant",
        "revoke",
    )
    _SET_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=session_factory())
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly

        self._conn: Connection | None = None
        self._owns_transaction = False
        self._listeners_installed = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._owns_transaction = not self.session.in_transaction()
        # Autobegins a transaction when none is open.
        self._conn = self.session.connection()
        self._install_listeners()

        dialect = self._conn.dialect.name
        if self._owns_transaction and dialect in self._SET_TRANSACTION_DIALECTS:
            try:
                if self.isolation_level:
                    iso = self.isolation_level.upper().strip()
                    self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
                if self.enforce_db_readonly:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
            except SQLAlchemyError as exc:
                log.warning(
                    "SET TRANSACTION directives failed (%s). Falling back to guards-only.", exc
                )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self.session.rollback()
        finally:
            self._remove_listeners()
            self._conn = None
            self._owns_transaction = False

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards & Listeners --------------------------

    def _install_listeners(self) -> None:
        """Install ORM/db-level listeners to prevent any write attempt."""
        if self._listeners_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        event.listen(self.session, "before_flush", _before_flush)

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first_token.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(
                    f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}"
                )

        event.listen(self._conn, "before_cursor_execute", _before_cursor_execute)

        self._ro_before_flush = _before_flush
        self._ro_before_cursor_execute = _before_cursor_execute
        self._listeners_installed = True

    def _remove_listeners(self) -> None:
        """Detach previously installed listeners."""
        if not self._listeners_installed:
            return

        with suppress(SQLAlchemyError):
            event.remove(self.session, "before_flush", self._ro_before_flush)
        with suppress(SQLAlchemyError):
            event.remove(self._conn, "before_cursor_execute", self._ro_before_cursor_execute)

        self._listeners_installed = False
