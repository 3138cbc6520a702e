# comments in English; reST docstrings strict
from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, NewType, TypeVar

T = TypeVar("T")

#: Identity of a verified caller. Only :meth:`AuthService.authenticate`
#: produces one; every owner-scoped service call requires it.
OwnerId = NewType("OwnerId", str)


@dataclass(frozen=True, slots=True)
class PaginationIn:
    """
    Input pagination contract.

    :param page: 1-based page number.
    :type page: int
    :param page_size: Page size (> 0).
    :type page_size: int
    """

    page: int = 1
    page_size: int = 20


@dataclass(frozen=True, slots=True)
class PageOut(Generic[T]):
    """
    One page of results with its metadata.

    :param items: Items of the page; empty past the last page.
    :type items: Sequence[T]
    :param page: Current page (1-based).
    :type page: int
    :param page_size: Page size.
    :type page_size: int
    :param total_count: Total rows matching, independent of paging.
    :type total_count: int
    """

    items: Sequence[T]
    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        """``ceil(total_count / page_size)``."""
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
