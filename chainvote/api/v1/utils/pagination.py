"""
Pagination utilities for list endpoints.

Page numbers start at 1; page size is bounded by ``DatabaseConfig.MAX_PAGE_SIZE``.
"""

from typing import Any, List, Optional, Tuple, TypeVar
from pydantic import BaseModel, Field
from fastapi import Query
from sqlalchemy import or_
from sqlalchemy.orm import Query as SQLQuery
import math

from chainvote.core.constants import DatabaseConfig
from chainvote.schemas.common import PaginatedResponse


T = TypeVar('T')


class PaginationParams(BaseModel):
    """Parameters for pagination"""
    page: int = Field(..., ge=1, description="Page number (starts from 1)")
    size: int = Field(..., ge=1, le=DatabaseConfig.MAX_PAGE_SIZE, description="Items per page")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(DatabaseConfig.DEFAULT_PAGE_SIZE, ge=1, le=DatabaseConfig.MAX_PAGE_SIZE, description="Items per page")
) -> PaginationParams:
    """FastAPI dependency for pagination parameters"""
    return PaginationParams(page=page, size=size)


def page_count(total: int, size: int) -> int:
    # An empty result still has one (empty) page
    return math.ceil(total / size) if total > 0 else 1


def apply_search(query: SQLQuery, search_term: Optional[str], search_fields: List[Any]) -> SQLQuery:
    """Case-insensitive substring match on any of ``search_fields``."""
    if not search_term or not search_fields:
        return query
    return query.filter(or_(*[field.ilike(f"%{search_term}%") for field in search_fields]))


def create_paginated_response(items: List[T], total: int, pagination: PaginationParams) -> PaginatedResponse[T]:
    pages = page_count(total, pagination.size)
    return PaginatedResponse(
        items=items,
        total=total,
        page=pagination.page,
        size=pagination.size,
        pages=pages,
        has_next=pagination.page < pages,
        has_prev=pagination.page > 1
    )


def paginate_query(
    query: SQLQuery,
    pagination: PaginationParams,
    search_term: Optional[str] = None,
    search_fields: Optional[List[Any]] = None
) -> Tuple[List[Any], int]:
    """
    Apply optional search, count, then slice the query to one page.

    Returns:
        Tuple of (items, total_count)
    """
    query = apply_search(query, search_term, search_fields or [])
    total = query.count()
    items = query.offset(pagination.offset).limit(pagination.size).all()
    return items, total
