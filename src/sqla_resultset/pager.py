"""
Page arithmetic for paginating result sets.

A ``Pager`` is pure derived data: given the total number of matching
rows, the page size and the requested page it answers which rows belong
on the page.  Requested pages outside ``[first_page, last_page]`` are
clamped to the nearest valid page.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from .exceptions import PagerError

T = TypeVar("T")

DEFAULT_ENTRIES_PER_PAGE = 10


@dataclass(frozen=True)
class Pager:
    """
    Immutable pager.

    Attributes:
        total_entries: Number of rows matching the unpaginated query.
        entries_per_page: Page size.
        current_page: Page number, 1-based, clamped into range.
    """

    total_entries: int
    entries_per_page: int = DEFAULT_ENTRIES_PER_PAGE
    current_page: int = 1

    def __post_init__(self) -> None:
        if self.total_entries < 0:
            raise PagerError(f"total_entries cannot be negative: {self.total_entries}")
        if self.entries_per_page < 1:
            raise PagerError(
                f"entries_per_page must be at least 1, got {self.entries_per_page}"
            )
        page = min(max(self.current_page, self.first_page), self.last_page)
        object.__setattr__(self, "current_page", page)

    @property
    def first_page(self) -> int:
        return 1

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total_entries / self.entries_per_page))

    @property
    def first(self) -> int:
        """1-based index of the first entry on this page, 0 when empty."""
        if self.total_entries == 0:
            return 0
        return (self.current_page - 1) * self.entries_per_page + 1

    @property
    def last(self) -> int:
        """1-based index of the last entry on this page."""
        if self.current_page == self.last_page:
            return self.total_entries
        return self.current_page * self.entries_per_page

    @property
    def entries_on_this_page(self) -> int:
        if self.total_entries == 0:
            return 0
        return self.last - self.first + 1

    @property
    def skipped(self) -> int:
        """Rows before this page, i.e. the OFFSET of the page query."""
        return max(self.first - 1, 0)

    @property
    def previous_page(self) -> int | None:
        return self.current_page - 1 if self.current_page > self.first_page else None

    @property
    def next_page(self) -> int | None:
        return self.current_page + 1 if self.current_page < self.last_page else None

    def splice(self, items: Sequence[T]) -> list[T]:
        """Return the part of a full, unpaginated list that is on this page."""
        if self.total_entries == 0:
            return []
        top = min(self.last, len(items))
        return list(items[self.first - 1 : top])

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        return {
            "total_entries": self.total_entries,
            "entries_per_page": self.entries_per_page,
            "current_page": self.current_page,
            "first_page": self.first_page,
            "last_page": self.last_page,
            "previous_page": self.previous_page,
            "next_page": self.next_page,
            "entries_on_this_page": self.entries_on_this_page,
        }
