"""Common Marshmallow schemas and helpers shared across resources."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from marshmallow import Schema, ValidationError, fields, post_load, validate

from wrenchlog.services._shared.dto import PageOut, PaginationIn
from wrenchlog.services._shared.errors import ValidationFailedError


def load_or_raise(schema: Schema, payload: Mapping[str, Any] | None) -> Any:
    """
    Validate ``payload`` with ``schema`` and return the loaded value.

    :param schema: Marshmallow schema instance.
    :type schema: Schema
    :param payload: Raw input mapping (``None`` is treated as empty).
    :type payload: Mapping[str, Any] | None
    :returns: Whatever the schema's ``post_load`` hooks produce.
    :raises ValidationFailedError: Carrying the marshmallow field messages.
    """
    try:
        return schema.load(payload or {})
    except ValidationError as exc:
        messages = exc.messages if isinstance(exc.messages, dict) else {"_schema": exc.messages}
        raise ValidationFailedError(errors=messages) from exc


class PaginationQuerySchema(Schema):
    """Validate paging query parameters into :class:`PaginationIn`."""

    def __init__(self, *, default_page_size: int = 20, max_page_size: int = 100, **kwargs: Any) -> None:
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size
        super().__init__(**kwargs)

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    page_size = fields.Integer(validate=validate.Range(min=1, max=100))

    @post_load
    def make_pagination(self, data: dict[str, Any], **_: Any) -> PaginationIn:
        size = data.get("page_size", self._default_page_size)
        return PaginationIn(page=data["page"], page_size=min(size, self._max_page_size))


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    page = fields.Integer(required=True)
    page_size = fields.Integer(required=True)
    total_count = fields.Integer(required=True)
    total_pages = fields.Integer(required=True)


def build_meta(page: PageOut[Any]) -> dict[str, int]:
    """Return a ``meta`` mapping for a page of results."""

    return MetaSchema().dump(
        {
            "page": page.page,
            "page_size": page.page_size,
            "total_count": page.total_count,
            "total_pages": page.total_pages,
        }
    )
