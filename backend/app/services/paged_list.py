"""
Library API — Paged List
==========================

What:  One materialized page of an ordered source plus its navigation
       metadata (total count, page size, current page).
How:   Built either from an already-sliced page and a separately counted
       total (the database path) or by slicing an in-memory sequence
       (PagedList.create). Derived values are computed on every access.

    total_pages  = ceil(total_count / page_size)
    has_previous = current_page > 1
    has_next     = current_page < total_pages

    total_count=10, page_size=3:
        page 1 → items 0-2, page 2 → 3-5, page 3 → 6-8, page 4 → 9
"""

import math
from typing import Generic, Iterator, Optional, Sequence, Tuple, TypeVar

from app.exceptions import ValidationError
from app.schemas.common import PaginationMetadata

T = TypeVar("T")


def _check_positive(value: int, field: str) -> None:
    if value <= 0:
        raise ValidationError(
            message=f"{field} must be a positive integer",
            field=field,
            context={"value": value},
        )


class PagedList(Generic[T]):
    """
    Immutable page of items with paging metadata.

    Raises:
        ValidationError: non-positive page number or size, negative total,
            or more items than the page size allows.
    """

    def __init__(
        self,
        items: Sequence[T],
        total_count: int,
        current_page: int,
        page_size: int,
    ):
        _check_positive(current_page, "pageNumber")
        _check_positive(page_size, "pageSize")
        if total_count < 0:
            raise ValidationError(
                message="totalCount cannot be negative",
                field="totalCount",
                context={"value": total_count},
            )
        if len(items) > page_size:
            raise ValidationError(
                message="A page cannot hold more items than its page size",
                field="pageSize",
                context={"items": len(items), "page_size": page_size},
            )
        self._items: Tuple[T, ...] = tuple(items)
        self._total_count = total_count
        self._current_page = current_page
        self._page_size = page_size

    @classmethod
    def create(cls, source: Sequence[T], page_number: int, page_size: int) -> "PagedList[T]":
        """Slice an in-memory ordered source; out-of-range pages are empty."""
        _check_positive(page_number, "pageNumber")
        _check_positive(page_size, "pageSize")
        start = (page_number - 1) * page_size
        return cls(
            items=list(source[start:start + page_size]),
            total_count=len(source),
            current_page=page_number,
            page_size=page_size,
        )

    @property
    def items(self) -> Tuple[T, ...]:
        return self._items

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(self._total_count / self._page_size)

    @property
    def has_previous(self) -> bool:
        return self._current_page > 1

    @property
    def has_next(self) -> bool:
        return self._current_page < self.total_pages

    def to_metadata(
        self,
        previous_page_link: Optional[str] = None,
        next_page_link: Optional[str] = None,
    ) -> PaginationMetadata:
        """Paging metadata for the X-Pagination response header."""
        return PaginationMetadata(
            total_count=self._total_count,
            page_size=self._page_size,
            current_page=self._current_page,
            total_pages=self.total_pages,
            previous_page_link=previous_page_link,
            next_page_link=next_page_link,
        )

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return (
            f"<PagedList(page={self._current_page}/{self.total_pages}, "
            f"size={self._page_size}, total={self._total_count})>"
        )
