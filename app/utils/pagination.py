"""
Pagination Utility Module

`page` and `limit` travel together: both supplied, or neither. Pages are
zero-based, so the offset is `page * limit`.
"""
from typing import Optional

from fastapi import Query
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from sqlalchemy.sql import Select


class PaginationParams(BaseModel):
    """Standard pagination parameters"""
    page: Optional[int] = None
    limit: Optional[int] = None

    @property
    def is_set(self) -> bool:
        return self.page is not None and self.limit is not None

    @property
    def offset(self) -> int:
        return (self.page or 0) * (self.limit or 0)

    def apply(self, query: Select) -> Select:
        """Apply offset/limit to a SQLAlchemy query when pagination was requested"""
        if not self.is_set:
            return query
        return query.offset(self.offset).limit(self.limit)


def get_pagination(
    page: Optional[int] = Query(None, ge=0, description="Zero-based page index"),
    limit: Optional[int] = Query(None, ge=1, le=500, description="Items per page"),
) -> PaginationParams:
    """FastAPI dependency enforcing the both-or-neither rule"""
    if (page is None) != (limit is None):
        missing = "limit" if limit is None else "page"
        raise RequestValidationError([
            {
                "loc": ("query", missing),
                "msg": "page and limit must be supplied together",
                "type": "value_error",
            }
        ])
    return PaginationParams(page=page, limit=limit)
