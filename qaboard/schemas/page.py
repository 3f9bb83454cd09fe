"""Page envelope returned by paginated queries."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, computed_field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One window of a sorted result set. `page` is zero-based."""

    items: list[T]
    page: int
    size: int
    total_elements: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size else 0

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def is_empty(self) -> bool:
        return not self.items
