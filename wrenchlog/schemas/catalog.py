"""Tag and part schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, ValidationError, fields, post_load, validate

from wrenchlog.models.catalog import slugify
from wrenchlog.services.parts.dto import PartCreateIn, PartFilters
from wrenchlog.services.tags.dto import TagCreateIn

_NOT_BLANK = validate.Regexp(r"\S", error="Must not be blank.")
COLOR = validate.Regexp(r"^#[0-9A-Fa-f]{6}$", error="Color must look like #RRGGBB.")
CURRENCY = validate.Regexp(r"^[A-Z]{3}$", error="Currency must be three upper case letters.")


def validate_sluggable(value: str) -> None:
    """Require at least one ASCII letter or digit so the slug is not empty."""
    if not slugify(value):
        raise ValidationError("Name must contain at least one letter or digit.")


# --------------------------------- Tags --------------------------------------


class TagUpdateSchema(Schema):
    """Partial tag update."""

    name = fields.String(validate=[validate.Length(min=1, max=50), validate_sluggable])
    color = fields.String(allow_none=True, validate=COLOR)


class TagCreateSchema(TagUpdateSchema):
    """Validate tag creation payloads."""

    name = fields.String(required=True, validate=[validate.Length(min=1, max=50), validate_sluggable])

    @post_load
    def make_dto(self, data: dict[str, Any], **_: Any) -> TagCreateIn:
        return TagCreateIn(**data)


class TagSchema(Schema):
    """Serialize tag read models."""

    id = fields.String(dump_only=True)
    name = fields.String()
    color = fields.String(allow_none=True)
    slug = fields.String(dump_only=True)
    created_at = fields.DateTime(dump_only=True)


# --------------------------------- Parts -------------------------------------


class _PartFields(Schema):
    """Field set shared by part create and update payloads."""

    name = fields.String(validate=[validate.Length(min=1, max=200), _NOT_BLANK])
    description = fields.String(allow_none=True)
    price_cents = fields.Integer(allow_none=True, validate=validate.Range(min=0))
    currency = fields.String(allow_none=True, validate=CURRENCY)
    url = fields.Url(allow_none=True, validate=validate.Length(max=2048))
    tag_ids = fields.List(fields.String(validate=validate.Length(min=1, max=36)))


class PartUpdateSchema(_PartFields):
    """Partial part update; ``tag_ids`` present replaces all associations."""

    @post_load
    def freeze_tag_ids(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        if "tag_ids" in data:
            data["tag_ids"] = tuple(data["tag_ids"] or ())
        return data


class PartCreateSchema(_PartFields):
    """Validate part creation payloads."""

    name = fields.String(required=True, validate=[validate.Length(min=1, max=200), _NOT_BLANK])

    @post_load
    def make_dto(self, data: dict[str, Any], **_: Any) -> PartCreateIn:
        data["tag_ids"] = tuple(data.get("tag_ids") or ())
        return PartCreateIn(**data)


class PartFilterSchema(Schema):
    """Listing filters for parts."""

    q = fields.String(load_default=None, validate=validate.Length(max=200))
    tag_ids = fields.List(fields.String(), load_default=list)

    @post_load
    def make_filters(self, data: dict[str, Any], **_: Any) -> PartFilters:
        q = (data.get("q") or "").strip() or None
        return PartFilters(q=q, tag_ids=tuple(data.get("tag_ids") or ()))


class PartSchema(Schema):
    """Serialize part read models with their tags."""

    id = fields.String(dump_only=True)
    name = fields.String()
    description = fields.String(allow_none=True)
    price_cents = fields.Integer(allow_none=True)
    currency = fields.String(allow_none=True)
    url = fields.String(allow_none=True)
    tags = fields.List(fields.Nested(TagSchema), dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)
