# comments in English; strict reST docstrings
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TagCreateIn:
    """
    Input to create a tag; the slug is derived from ``name``.

    :param name: Display name, unique per owner.
    :type name: str
    :param color: Optional ``#RRGGBB`` color.
    :type color: str | None
    """

    name: str
    color: str | None = None
