"""Parts catalog models: tags, parts and their many-to-many join rows.

No ORM relationships are declared between Part and Tag. Repositories join the
tables explicitly and hydrate nested views from the flat rows.
"""

from __future__ import annotations

import re

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, validates

from wrenchlog.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin, TimestampMixin


class Tag(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """Owner-scoped label attached to parts; unique by name and slug per owner."""

    __tablename__ = "tags"

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    slug: Mapped[str] = mapped_column(String(60), nullable=False)

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_tags_owner_name"),
        UniqueConstraint("owner_id", "slug", name="uq_tags_owner_slug"),
    )

    @validates("name")
    def _derive_slug(self, key: str, value: str) -> str:
        """Trim the name and keep ``slug`` in step with it."""
        name = value.strip()
        self.slug = slugify(name)
        return name


class Part(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """A consumable or spare part with an optional price."""

    __tablename__ = "parts"

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_cents: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "price_cents IS NULL OR price_cents >= 0", name="part_price_non_negative"
        ),
        Index("ix_parts_owner_id", "owner_id"),
    )


class PartTag(ReprMixin, db.Model):
    """Pure join row between a part and a tag; cascades with either side."""

    __tablename__ = "part_tags"

    part_id: Mapped[str] = mapped_column(
        ForeignKey("parts.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[str] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (Index("ix_part_tags_tag_id", "tag_id"),)


_SLUG_DROP = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACES = re.compile(r"\s+")
_SLUG_DASHES = re.compile(r"-+")


def slugify(name: str) -> str:
    """Derive the identifier-safe slug of a tag name.

    Deterministic and idempotent: ``slugify(slugify(x)) == slugify(x)``.

    :param name: Display name.
    :type name: str
    :returns: Lower-case ``[a-z0-9-]`` slug without leading/trailing dashes.
    :rtype: str
    """
    slug = _SLUG_DROP.sub("", name.lower())
    slug = _SLUG_SPACES.sub("-", slug.strip())
    slug = _SLUG_DASHES.sub("-", slug)
    return slug.strip("-")
