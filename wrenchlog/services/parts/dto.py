# comments in English; strict reST docstrings
from __future__ import annotations

from dataclasses import dataclass, field

from wrenchlog.repositories.part import PartFilters

__all__ = ["PartCreateIn", "PartFilters"]


@dataclass(frozen=True, slots=True)
class PartCreateIn:
    """
    Input to create a part.

    :param name: Display name.
    :type name: str
    :param description: Optional free text.
    :type description: str | None
    :param price_cents: Optional unit price in minor units (>= 0).
    :type price_cents: int | None
    :param currency: Optional ISO 4217 code.
    :type currency: str | None
    :param url: Optional shop or datasheet link.
    :type url: str | None
    :param tag_ids: Tags to link; each must belong to the same owner.
    :type tag_ids: tuple[str, ...]
    """

    name: str
    description: str | None = None
    price_cents: int | None = None
    currency: str | None = None
    url: str | None = None
    tag_ids: tuple[str, ...] = field(default_factory=tuple)
