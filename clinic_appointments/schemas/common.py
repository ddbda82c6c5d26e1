from math import ceil
from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a listing."""
    items: List[T]
    total: int
    page: int
    per_page: int
    pages: int

    @classmethod
    def build(cls, items: List[T], total: int, page: int, per_page: int) -> "Page[T]":
        return cls(
            items=items,
            total=total,
            page=page,
            per_page=per_page,
            pages=ceil(total / per_page) if total else 0,
        )
