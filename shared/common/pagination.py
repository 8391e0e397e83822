import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

MAX_PAGE_SIZE = 100


class PaginationParams(BaseModel):
    page_number: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE)
    search_term: Optional[str] = None
    sort_by: Optional[str] = None
    sort_descending: bool = False

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


class PaginatedList(Generic[T]):
    """One page of results plus the total count needed to derive the page count."""

    def __init__(self, items: List[T], total_count: int, page_number: int, page_size: int):
        self.items = items
        self.total_count = total_count
        self.page_number = page_number
        self.page_size = page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages
