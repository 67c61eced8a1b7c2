import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def count_pages(total: int, limit: int) -> int:
    """Number of pages needed to show `total` items, `limit` per page."""
    return math.ceil(total / limit)


class PageResult(BaseModel, Generic[T]):
    """Page-numbered result wrapper for list endpoints."""

    items: list[T] = Field(..., description="Items on the requested page")
    page: int = Field(..., description="1-based page number", ge=1)
    pages: int = Field(..., description="Total number of pages", ge=0)
    total: int = Field(..., description="Total number of matching items across all pages", ge=0)
