"""Pydantic schemas for post and comment resources."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from .common import CursorPage
from .users import AuthorPreview


class PostCreate(BaseModel):
    """Payload used by API clients when constructing a post."""

    content: str = Field(..., min_length=1, max_length=2000)
    image: HttpUrl | None = None

    @field_validator("image", mode="before")
    @classmethod
    def _blank_image(cls, value):
        # An empty string from a form means "no image"
        if value == "":
            return None
        return value


class PostResponse(BaseModel):
    """Serialized representation of a persisted post."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content: str
    image: str | None = None
    created_at: datetime
    author: AuthorPreview
    like_count: int = 0
    comment_count: int = 0
    is_liked: bool = False


class PostFeedResponse(CursorPage[PostResponse]):
    """Envelope used when returning a page of posts."""


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)
    parent_id: UUID | None = None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    content: str
    parent_id: UUID | None = None
    created_at: datetime
    author: AuthorPreview
    replies: list["CommentResponse"] = Field(default_factory=list)


class CommentListResponse(CursorPage[CommentResponse]):
    """Top-level comments, each carrying its replies."""


CommentResponse.model_rebuild()


__all__ = [
    "PostCreate",
    "PostResponse",
    "PostFeedResponse",
    "CommentCreate",
    "CommentResponse",
    "CommentListResponse",
]
