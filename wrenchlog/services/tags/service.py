"""Owner-scoped tag use cases."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError

from wrenchlog.models.catalog import slugify
from wrenchlog.repositories.tag import TagRepository
from wrenchlog.repositories.views import TagView
from wrenchlog.services._shared.base import OwnedEntityService, as_fields
from wrenchlog.services._shared.dto import OwnerId
from wrenchlog.services._shared.errors import ConflictError, ValidationFailedError, violates
from wrenchlog.services.tags.dto import TagCreateIn
from wrenchlog.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer


def _tag_exists(name: str) -> ConflictError:
    return ConflictError("Tag", f"a tag named {name!r} already exists", reason="tag_exists")


def _require_slug(name: str) -> None:
    """Reject names whose slug would be empty (only symbols or non-ASCII)."""
    if not slugify(name):
        raise ValidationFailedError(
            errors={"name": ["Name must contain at least one letter or digit."]}
        )


def _is_duplicate(ie: IntegrityError) -> bool:
    # SQLite names the columns instead of the constraint.
    return violates(
        ie, "uq_tags_owner_name", "unique constraint failed: tags.owner_id, tags.name"
    ) or violates(ie, "uq_tags_owner_slug", "unique constraint failed: tags.owner_id, tags.slug")


class TagService(OwnedEntityService[TagView]):
    """
    Owner-scoped tags, listed by name.

    Notes
    -----
    - Names and slugs are unique per owner, never globally.
    - A name must yield a non-empty slug.
    - Deleting a tag removes its part links (database cascade) but no parts.
    """

    entity = "Tag"

    def _repo(self, uow: SQLAlchemyRepositoryContainer) -> TagRepository:
        return uow.tags

    def create(self, owner_id: OwnerId, data: TagCreateIn | Mapping[str, Any]) -> TagView:
        """
        Create a tag.

        :raises ValidationFailedError: When the name has no letter or digit.
        :raises ConflictError: ``tag_exists`` when the owner already has a tag
            with the same name or slug.
        """
        fields = as_fields(data)
        _require_slug(fields["name"])
        try:
            with self.rw_uow() as uow:
                if uow.tags.name_taken(owner_id, fields["name"]):
                    raise _tag_exists(fields["name"])
                return uow.tags.create(owner_id, fields)
        except IntegrityError as ie:
            # Lost a race against a concurrent insert of the same name.
            if _is_duplicate(ie):
                raise _tag_exists(fields["name"]) from ie
            raise

    def update(
        self, entity_id: str, owner_id: OwnerId, patch: Mapping[str, Any]
    ) -> TagView | None:
        """
        Rename or recolor a tag; a new name regenerates the slug.

        :raises ValidationFailedError: When the new name has no letter or digit.
        :raises ConflictError: ``tag_exists`` when the new name collides.
        """
        name = patch.get("name")
        if name is not None:
            _require_slug(name)
        try:
            with self.rw_uow() as uow:
                if name is not None and uow.tags.name_taken(owner_id, name, exclude_id=entity_id):
                    raise _tag_exists(name)
                return uow.tags.update(entity_id, owner_id, patch)
        except IntegrityError as ie:
            if _is_duplicate(ie):
                raise _tag_exists(str(name)) from ie
            raise
