"""Generic repository base and query utilities for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Offset pagination over a select with a separate ``COUNT``.
- Safe update helpers with per-repository updatable-field whitelists.
- Equality filters restricted to a per-repository whitelist.
- No business logic, no commit/rollback. Services own transactions.

Design decisions
----------------
* Repositories MUST remain thin and persistence-focused:
  - They never implement use cases or domain policies.
  - They never call commit/rollback; Services define the Unit of Work.
* The session is injected by the unit of work; there is no global fallback.
* Updates MUST NOT allow mass-assignment: each repo exposes an explicit
  ``_updatable_fields`` whitelist.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

E = TypeVar("E")  # SQLAlchemy mapped entity type


# --------------------------- Pagination execution ----------------------------


def page_offset(page: int, page_size: int) -> int:
    """Return the row offset of a 1-based ``page``.

    :param page: 1-based page number (clamped to ``>= 1``).
    :param page_size: Page size (clamped to ``>= 1``).
    :returns: ``(page - 1) * page_size``.
    :rtype: int
    """
    return (max(int(page), 1) - 1) * max(int(page_size), 1)


def count_select(session: Session, stmt: Select[Any]) -> int:
    """Count the rows produced by ``stmt``.

    The statement's ``ORDER BY`` is stripped for the ``COUNT`` to avoid
    unnecessary sorting overhead.

    :param session: Active SQLAlchemy session.
    :type session: :class:`sqlalchemy.orm.Session`
    :param stmt: Filtered select.
    :type stmt: :class:`sqlalchemy.sql.Select`
    :returns: Number of matching rows.
    :rtype: int
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    return int(session.execute(count_stmt).scalar_one())


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    page_size: int,
) -> list[Any]:
    """Execute an already ordered select for one page of scalars.

    A page past the end yields an empty list.

    :param session: Active SQLAlchemy session.
    :type session: :class:`sqlalchemy.orm.Session`
    :param stmt: Base select to paginate (already filtered/sorted).
    :type stmt: :class:`sqlalchemy.sql.Select`
    :param page: 1-based page number (clamped to ``>= 1``).
    :type page: int
    :param page_size: Page size (clamped to ``>= 1``).
    :type page_size: int
    :returns: Items of the requested page.
    :rtype: list[Any]
    """
    sliced = stmt.limit(max(int(page_size), 1)).offset(page_offset(page, page_size))
    return list(session.execute(sliced).scalars().all())


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single table.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class.

    Subclasses MAY override:

    * ``_filterable_fields`` to whitelist equality filters.
    * ``_updatable_fields`` to whitelist keys allowed for updates.

    This class NEVER opens, commits or rolls back transactions.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session) -> None:
        """Bind the repository to the unit of work's session.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session`
        """
        self.session = session

    # ------------------------------ Extensibility ----------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any]:
        """Return the model's primary-key attribute (``model.id``)."""
        return cast(InstrumentedAttribute[Any], getattr(self.model, "id"))

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist mapping of public filter keys to model attributes.

        Unknown keys are silently ignored.
        """
        return {}

    def _updatable_fields(self) -> set[str]:
        """Whitelist of public keys that can be assigned on update.

        Subclasses **should** override this to prevent mass-assignment.
        """
        return set()

    # ------------------------------ Internals --------------------------------

    def _apply_equality_filters(
        self,
        stmt: Select[Any],
        filters: Mapping[str, Any] | None,
    ) -> Select[Any]:
        """Apply whitelisted equality filters to ``stmt``.

        :param stmt: Input select to filter.
        :type stmt: :class:`sqlalchemy.sql.Select`
        :param filters: Field=value mapping (equality only).
        :type filters: Mapping[str, Any] | None
        :returns: Filtered select.
        :rtype: :class:`sqlalchemy.sql.Select`
        """
        if not filters:
            return stmt

        allowed = self._filterable_fields()
        clauses: list[Any] = []
        for k, v in filters.items():
            col = allowed.get(k)
            if col is not None:
                clauses.append(col == v)
        return stmt.where(and_(*clauses)) if clauses else stmt

    def _sanitize_update_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Return ``fields`` after checking every key against the whitelist.

        :param fields: Raw update mapping (public keys).
        :type fields: Mapping[str, Any]
        :returns: Copy of the mapping.
        :rtype: dict[str, Any]
        :raises ValueError: If unknown keys are present.
        """
        allowed = self._updatable_fields()
        unknown = sorted(k for k in fields if k not in allowed)
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return dict(fields)

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity for persistence and flush to materialize it.

        :param instance: New entity instance.
        :type instance: E
        :returns: The same instance after ``flush()``.
        :rtype: E
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key, ignoring ownership."""
        stmt = select(self.model).where(self._pk_attr() == entity_id)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any]) -> E:
        """Assign only whitelisted keys to ``instance`` and flush.

        The assignment uses ``setattr`` to trigger SQLAlchemy ``@validates``
        decorators defined on the mapped class.

        :param instance: Entity to mutate.
        :type instance: E
        :param fields: Public mapping of fields to assign.
        :type fields: Mapping[str, Any]
        :returns: The mutated instance.
        :rtype: E
        :raises ValueError: If unknown keys are present.
        """
        for k, v in self._sanitize_update_fields(fields).items():
            setattr(instance, k, v)
        self.flush()
        return instance
