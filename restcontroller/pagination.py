"""
restcontroller — Pagination Headers
=====================================

What:  Page arithmetic for list actions and the X-Pagination-* headers the
       CORS filter exposes to browsers by default.
Why:   Keeping totals in headers leaves the JSON body a plain list.

Usage:
    @router.get("")
    async def list_posts(response: Response, page: int = 1, per_page: int = 20):
        pagination = Pagination(total_count=await count_posts(), page=page, per_page=per_page)
        set_pagination_headers(response, pagination)
        return await fetch_posts(offset=pagination.offset, limit=pagination.limit)
"""

from fastapi import Response
from pydantic import BaseModel, Field, model_validator

MAX_PER_PAGE = 100


class Pagination(BaseModel):
    """
    Page window over a collection of `total_count` items.

    `page` is 1-based and clamped into [1, page_count]; `per_page` must be
    between 1 and MAX_PER_PAGE.
    """

    total_count: int = Field(ge=0)
    page: int = Field(default=1)
    per_page: int = Field(default=20, ge=1, le=MAX_PER_PAGE)

    @model_validator(mode="after")
    def clamp_page(self) -> "Pagination":
        self.page = min(max(self.page, 1), max(self.page_count, 1))
        return self

    @property
    def page_count(self) -> int:
        return (self.total_count + self.per_page - 1) // self.per_page

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        return self.per_page


def set_pagination_headers(response: Response, pagination: Pagination) -> None:
    response.headers["X-Pagination-Total-Count"] = str(pagination.total_count)
    response.headers["X-Pagination-Page-Count"] = str(pagination.page_count)
    response.headers["X-Pagination-Current-Page"] = str(pagination.page)
    response.headers["X-Pagination-Per-Page"] = str(pagination.per_page)
