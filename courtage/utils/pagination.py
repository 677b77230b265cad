"""
Client-side pagination for lists fetched from the portal API
"""
import math
from typing import Generic, List, Sequence, Tuple, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginationState(BaseModel):
    """Current page position over a list of items"""
    current_page: int
    items_per_page: int
    total_items: int
    total_pages: int


class Paginator(Generic[T]):
    """Slices a list into pages; pages are numbered from 1"""

    def __init__(self, items: Sequence[T], items_per_page: int = 10):
        self._items = list(items)
        self._per_page = max(1, items_per_page)
        self._current_page = 1

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self._items) / self._per_page)

    @property
    def pagination(self) -> PaginationState:
        return PaginationState(
            current_page=self._current_page,
            items_per_page=self._per_page,
            total_items=len(self._items),
            total_pages=self.total_pages,
        )

    @property
    def paginated_data(self) -> List[T]:
        start = (self._current_page - 1) * self._per_page
        return self._items[start:start + self._per_page]

    def go_to_page(self, page: int) -> None:
        self._current_page = max(1, min(page, self.total_pages))

    def next_page(self) -> None:
        if self._current_page < self.total_pages:
            self._current_page += 1

    def prev_page(self) -> None:
        if self._current_page > 1:
            self._current_page -= 1

    def set_items_per_page(self, items: int) -> None:
        """Change the page size and go back to the first page"""
        self._per_page = max(1, items)
        self._current_page = 1

    def set_items(self, items: Sequence[T]) -> None:
        """Replace the paginated list; a different length resets to page 1"""
        new_items = list(items)
        if len(new_items) != len(self._items):
            self._current_page = 1
        self._items = new_items

    def visible_pages(self, max_visible: int = 5) -> List[int]:
        """Page numbers to offer as direct links, centred on the current page"""
        total = self.total_pages
        start = max(1, self._current_page - max_visible // 2)
        end = min(total, start + max_visible - 1)
        if end - start < max_visible - 1:
            start = max(1, end - max_visible + 1)
        return list(range(start, end + 1))

    def display_range(self) -> Tuple[int, int]:
        """1-based positions of the first and last item on the current page"""
        if not self._items:
            return (0, 0)
        first = (self._current_page - 1) * self._per_page + 1
        last = min(self._current_page * self._per_page, len(self._items))
        return (first, last)
