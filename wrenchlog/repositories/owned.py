"""Owner-scoped repository contract shared by every user-owned entity.

Every statement built here is filtered by the owner id. A row owned by
somebody else is indistinguishable from a missing row: lookups return
``None``, updates return ``None`` and deletes return ``False``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.orm import InstrumentedAttribute

from wrenchlog.models.base import utcnow
from wrenchlog.repositories.base import BaseRepository, count_select, paginate_select

E = TypeVar("E")  # mapped entity
V = TypeVar("V")  # read model


class OwnedRepository(BaseRepository[E], Generic[E, V]):
    """Generic owner-scoped CRUD returning read models.

    Subclasses MUST define ``model`` and :meth:`_to_view`.

    Subclasses MAY override:

    * :meth:`_scope` when ownership is inherited through a parent table.
    * :meth:`_natural_order` to change the default listing order.
    * :meth:`_apply_filters` for filters beyond whitelisted equality.
    * :meth:`_views` to hydrate nested children for a batch of rows.
    """

    # ------------------------------ Extensibility ----------------------------

    def _owner_attr(self) -> InstrumentedAttribute[Any]:
        return getattr(self.model, "owner_id")  # type: ignore[no-any-return]

    def _scope(self, stmt: Select[Any], owner_id: str) -> Select[Any]:
        """Restrict ``stmt`` to rows belonging to ``owner_id``."""
        return stmt.where(self._owner_attr() == owner_id)

    def _natural_order(self) -> Sequence[Any]:
        """Default ordering: newest first, id as tiebreaker."""
        return (getattr(self.model, "created_at").desc(), self._pk_attr().asc())

    def _apply_filters(self, stmt: Select[Any], filters: Any) -> Select[Any]:
        if filters is None:
            return stmt
        return self._apply_equality_filters(stmt, filters)

    def _stamp_owner(self, fields: dict[str, Any], owner_id: str) -> dict[str, Any]:
        fields["owner_id"] = owner_id
        return fields

    def _to_view(self, instance: E) -> V:
        raise NotImplementedError

    def _views(self, instances: Sequence[E]) -> list[V]:
        return [self._to_view(i) for i in instances]

    # ------------------------------ Queries ----------------------------------

    def owned_select(self, owner_id: str, filters: Any = None) -> Select[Any]:
        """Return the filtered, owner-scoped ``SELECT`` without ordering."""
        stmt = self._scope(select(self.model), owner_id)
        return self._apply_filters(stmt, filters)

    def get_owned(self, entity_id: str, owner_id: str) -> E | None:
        """Fetch the mapped instance when ``(id, owner)`` matches."""
        stmt = self.owned_select(owner_id).where(self._pk_attr() == entity_id)
        return self.session.execute(stmt).scalars().first()  # type: ignore[no-any-return]

    def find_by_id(self, entity_id: str, owner_id: str) -> V | None:
        """Return the read model of an owned row, else ``None``."""
        instance = self.get_owned(entity_id, owner_id)
        if instance is None:
            return None
        return self._views([instance])[0]

    def find_by_owner(
        self,
        owner_id: str,
        filters: Any = None,
        *,
        page: int = 1,
        page_size: int = 20,
    ) -> list[V]:
        """Return one page of owned rows in natural order.

        :param owner_id: Owner whose rows are listed.
        :param filters: Entity-specific filters.
        :param page: 1-based page; past the end yields ``[]``.
        :param page_size: Maximum rows returned.
        :returns: Read models of the page.
        :rtype: list[V]
        """
        stmt = self.owned_select(owner_id, filters).order_by(*self._natural_order())
        instances = paginate_select(self.session, stmt, page=page, page_size=page_size)
        return self._views(instances)

    def count_by_owner(self, owner_id: str, filters: Any = None) -> int:
        """Count owned rows matching ``filters``, ignoring pagination."""
        return count_select(self.session, self.owned_select(owner_id, filters))

    # ------------------------------ Commands ---------------------------------

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> V:
        """Insert a row stamped with ``owner_id`` and return its read model.

        :param owner_id: Owner of the new row.
        :param fields: Column values (already validated).
        :returns: Hydrated read model of the inserted row.
        """
        instance = self.model(**self._stamp_owner(dict(fields), owner_id))
        self.add(instance)
        return self._views([instance])[0]

    def update(self, entity_id: str, owner_id: str, patch: Mapping[str, Any]) -> V | None:
        """Apply the keys present in ``patch`` and stamp ``updated_at``.

        :param entity_id: Row id.
        :param owner_id: Owner the row must belong to.
        :param patch: Partial update; absent keys are left untouched.
        :returns: Refreshed read model, ``None`` when nothing matched.
        """
        instance = self.get_owned(entity_id, owner_id)
        if instance is None:
            return None
        self.assign_updates(instance, patch)
        if hasattr(instance, "updated_at"):
            setattr(instance, "updated_at", utcnow())
            self.flush()
        return self._views([instance])[0]

    def delete(self, entity_id: str, owner_id: str) -> bool:
        """Delete an owned row; ``False`` when no owned row matched."""
        instance = self.get_owned(entity_id, owner_id)
        if instance is None:
            return False
        self.session.delete(instance)
        self.flush()
        return True
