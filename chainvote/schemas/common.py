"""
Schemas shared across endpoints.
"""

from typing import TypeVar, Generic, List
from pydantic import BaseModel, Field


T = TypeVar('T')


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a list endpoint, with navigation metadata"""
    items: List[T] = Field(..., description="Items on this page")
    total: int = Field(..., description="Total number of items across pages")
    page: int = Field(..., description="Current page number")
    size: int = Field(..., description="Items per page")
    pages: int = Field(..., description="Total number of pages")
    has_next: bool
    has_prev: bool


class MessageResponse(BaseModel):
    message: str
