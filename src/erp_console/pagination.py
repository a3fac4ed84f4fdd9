"""
Client-side pagination over filtered record lists.

paginate() projects one page out of a sequence. PageWindow holds the
current page for a table and applies the navigation policy: clamp when the
user navigates, reset to page 1 when the filter changes or a refresh
shrinks the list below the current page.
"""

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class PageSlice(Generic[T]):
    """
    One page of a sequence.

    Attributes:
        visible: Items on the page.
        total_pages: Page count, at least 1.
        first_index: Index of the first item of the page in the full list.
        last_index: Index one past the last slot of the page.
    """

    visible: Sequence[T]
    total_pages: int
    first_index: int
    last_index: int


def total_pages(count: int, page_size: int) -> int:
    """Return ``ceil(count / page_size)``, never less than 1."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, math.ceil(count / page_size))


def paginate(items: Sequence[T], page: int, page_size: int) -> PageSlice[T]:
    """
    Return the slice of ``items`` shown on ``page``.

    Args:
        items: Full (already filtered) sequence.
        page: 1-indexed page number. Pages past the end yield an empty slice;
            callers clamp with PageWindow.
        page_size: Items per page.

    Raises:
        ValueError: If ``page < 1`` or ``page_size <= 0``.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    pages = total_pages(len(items), page_size)
    first = (page - 1) * page_size
    last = page * page_size
    return PageSlice(
        visible=list(items[first:last]),
        total_pages=pages,
        first_index=first,
        last_index=last,
    )


@dataclass(slots=True)
class PageWindow:
    """
    Current page of a paginated table.

    Attributes:
        page: 1-indexed current page.
        page_size: Items per page.
    """

    page: int = 1
    page_size: int = 10

    def go_to(self, page: int, total_items: int) -> int:
        """Navigate to ``page``, clamped into the valid range."""
        self.page = min(max(page, 1), total_pages(total_items, self.page_size))
        return self.page

    def next(self, total_items: int) -> int:
        return self.go_to(self.page + 1, total_items)

    def previous(self, total_items: int) -> int:
        return self.go_to(self.page - 1, total_items)

    def reset(self) -> int:
        """Return to page 1, used whenever the filter predicate changes."""
        self.page = 1
        return self.page

    def on_refresh(self, total_items: int) -> int:
        """Reset to page 1 if a refresh left the current page out of range."""
        if self.page > total_pages(total_items, self.page_size):
            return self.reset()
        return self.page

    def project(self, items: Sequence[T]) -> PageSlice[T]:
        """Return the current page of ``items``."""
        return paginate(items, self.page, self.page_size)

    def to_dict(self) -> dict:
        return {"page": self.page, "page_size": self.page_size}

    @classmethod
    def from_dict(cls, data: dict | None, page_size: int = 10) -> "PageWindow":
        if not data:
            return cls(page_size=page_size)
        return cls(page=data.get("page", 1), page_size=data.get("page_size", page_size))
