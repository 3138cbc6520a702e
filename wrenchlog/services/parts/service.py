"""Owner-scoped part use cases."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from wrenchlog.repositories.part import PartRepository
from wrenchlog.repositories.views import PartView
from wrenchlog.services._shared.base import OwnedEntityService
from wrenchlog.services._shared.dto import OwnerId
from wrenchlog.services._shared.errors import ConflictError, violates
from wrenchlog.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer

log = logging.getLogger(__name__)


class PartService(OwnedEntityService[PartView]):
    """
    Owner-scoped parts with their tags.

    Notes
    -----
    - ``create``/``update`` accept ``tag_ids``; unknown ids fail the whole
      call with ``invalid_tags`` and nothing is written.
    - ``update`` with ``tag_ids`` replaces every link; omitting the key keeps
      the current tags.
    - Listing supports :class:`~wrenchlog.repositories.part.PartFilters`.
    """

    entity = "Part"

    def _repo(self, uow: SQLAlchemyRepositoryContainer) -> PartRepository:
        return uow.parts

    def delete(self, entity_id: str, owner_id: OwnerId) -> bool:
        """
        Delete a part that no maintenance item references.

        :raises ConflictError: ``part_in_use`` while items still point at it.
        """
        try:
            with self.rw_uow() as uow:
                if uow.parts.get_owned(entity_id, owner_id) is None:
                    return False
                if uow.parts.is_referenced(entity_id):
                    raise ConflictError(
                        "Part", "part is used by maintenance records", reason="part_in_use"
                    )
                uow.parts.delete(entity_id, owner_id)
        except IntegrityError as ie:
            # An item was added between the check and the delete.
            if violates(
                ie, "fk_maintenance_items_part_id_parts", "foreign key constraint failed"
            ):
                raise ConflictError(
                    "Part", "part is used by maintenance records", reason="part_in_use"
                ) from ie
            raise
        log.info("Part deleted", extra={"owner_id": owner_id, "entity_id": entity_id})
        return True
