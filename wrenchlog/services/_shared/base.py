"""Shared base for owner-scoped CRUD services."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from typing import Any, Generic, TypeVar

from wrenchlog.repositories.owned import OwnedRepository
from wrenchlog.services._shared.dto import OwnerId, PageOut, PaginationIn
from wrenchlog.services._shared.errors import NotFoundError
from wrenchlog.uow.base import SessionFactory
from wrenchlog.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyRepositoryContainer,
    SQLAlchemyUnitOfWork,
)

V = TypeVar("V")

log = logging.getLogger(__name__)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared validation helpers (pagination).
    * Keep services thin, orchestration-only, no web leakage.

    Notes
    -----
    - Services never touch a global session; the session factory is injected.
    - Each public method opens exactly one unit of work.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        default_page_size: int | None = None,
        max_page_size: int | None = None,
    ) -> None:
        """
        Initialize the base service.

        :param session_factory: Callable returning the session units of work run on.
        :type session_factory: SessionFactory
        :param default_page_size: Page size used when callers pass none.
        :param max_page_size: Upper clamp for page sizes.
        """
        self.session_factory = session_factory
        self.default_page_size = default_page_size or self.DEFAULT_PAGE_SIZE
        self.max_page_size = max_page_size or self.MAX_PAGE_SIZE

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork(self.session_factory)

    def ro_uow(self, *, isolation: str | None = None) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            self.session_factory,
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
        )

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(self, pagination: PaginationIn | None) -> PaginationIn:
        """
        Clamp paging input to ``page >= 1`` and ``1 <= page_size <= max``.

        :param pagination: Caller input, ``None`` for defaults.
        :type pagination: PaginationIn | None
        :returns: Sanitized pagination.
        :rtype: PaginationIn
        """
        if pagination is None:
            return PaginationIn(page=1, page_size=self.default_page_size)
        page = max(1, int(pagination.page))
        size = min(max(1, int(pagination.page_size)), self.max_page_size)
        return PaginationIn(page=page, page_size=size)


def as_fields(data: Any) -> dict[str, Any]:
    """Turn a create DTO (dataclass) or a mapping into a plain field dict."""
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    if isinstance(data, Mapping):
        return dict(data)
    raise TypeError(f"Unsupported payload type: {type(data).__name__}")


class OwnedEntityService(BaseService, Generic[V]):
    """
    Owner-scoped CRUD use cases, one unit of work per call.

    Subclasses set ``entity`` and implement :meth:`_repo` to pick their
    repository from the unit of work.
    """

    entity: str = "Entity"

    def _repo(self, uow: SQLAlchemyRepositoryContainer) -> OwnedRepository[Any, V]:
        raise NotImplementedError

    # ------------------------------ Queries ----------------------------------

    def find_by_id(self, entity_id: str, owner_id: OwnerId) -> V | None:
        """
        Return the entity when it exists and belongs to ``owner_id``.

        :param entity_id: Entity identifier.
        :param owner_id: Verified caller.
        :returns: Read model or ``None`` (missing and foreign look the same).
        """
        with self.ro_uow() as uow:
            return self._repo(uow).find_by_id(entity_id, owner_id)

    def get(self, entity_id: str, owner_id: OwnerId) -> V:
        """
        Same as :meth:`find_by_id` but fails loudly.

        :raises NotFoundError: When nothing owned matches.
        """
        view = self.find_by_id(entity_id, owner_id)
        if view is None:
            raise NotFoundError(self.entity, entity_id)
        return view

    def find_by_owner(
        self,
        owner_id: OwnerId,
        filters: Any = None,
        pagination: PaginationIn | None = None,
    ) -> list[V]:
        """Return one page of the owner's entities in natural order."""
        p = self.ensure_pagination(pagination)
        with self.ro_uow() as uow:
            return self._repo(uow).find_by_owner(
                owner_id, filters, page=p.page, page_size=p.page_size
            )

    def count_by_owner(self, owner_id: OwnerId, filters: Any = None) -> int:
        """Count the owner's entities matching ``filters``."""
        with self.ro_uow() as uow:
            return self._repo(uow).count_by_owner(owner_id, filters)

    def list_page(
        self,
        owner_id: OwnerId,
        filters: Any = None,
        pagination: PaginationIn | None = None,
    ) -> PageOut[V]:
        """
        Page plus totals, as two independent reads.

        The count and the page are not taken from one snapshot; concurrent
        writes between them can make the totals disagree with the items.
        """
        p = self.ensure_pagination(pagination)
        total = self.count_by_owner(owner_id, filters)
        items = self.find_by_owner(owner_id, filters, p)
        return PageOut(items=items, page=p.page, page_size=p.page_size, total_count=total)

    # ------------------------------ Commands ---------------------------------

    def create(self, owner_id: OwnerId, data: Any) -> V:
        """Insert an entity owned by ``owner_id`` and return it hydrated."""
        with self.rw_uow() as uow:
            view = self._repo(uow).create(owner_id, as_fields(data))
        log.info("%s created", self.entity, extra={"owner_id": owner_id, "entity": self.entity})
        return view

    def update(self, entity_id: str, owner_id: OwnerId, patch: Mapping[str, Any]) -> V | None:
        """Apply a partial update; ``None`` when nothing owned matched."""
        with self.rw_uow() as uow:
            return self._repo(uow).update(entity_id, owner_id, patch)

    def delete(self, entity_id: str, owner_id: OwnerId) -> bool:
        """Delete an owned entity; ``False`` when nothing owned matched."""
        with self.rw_uow() as uow:
            deleted = self._repo(uow).delete(entity_id, owner_id)
        if deleted:
            log.info(
                "%s deleted",
                self.entity,
                extra={"owner_id": owner_id, "entity": self.entity, "entity_id": entity_id},
            )
        return deleted
