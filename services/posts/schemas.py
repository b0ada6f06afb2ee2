"""Pydantic schemas for Post Service request/response validation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


# --- Post Schemas ---


class PostResponse(BaseModel):
    """Schema for post response.

    ``creator_name`` comes from the shadow user table and is None when the
    author has been deleted or not yet replicated.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    user_id: str
    creator_name: str | None = None
    view_count: int
    created_at: datetime


class ViewCountResponse(BaseModel):
    """Schema for view count response."""

    id: str
    view_count: int


# --- Pagination Schemas ---


class PaginatedResponse(BaseModel):
    """Generic paginated response."""

    total: int
    page: int
    page_size: int
    total_pages: int


class PaginatedPosts(PaginatedResponse):
    """Paginated posts response."""

    items: list[PostResponse]


# --- Response Schemas ---


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str
    broker: str
    consuming: bool
