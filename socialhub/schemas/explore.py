"""Schemas for explore/search endpoints."""
from __future__ import annotations

from pydantic import BaseModel

from .posts import PostResponse
from .users import AuthorPreview


class PostListResponse(BaseModel):
    items: list[PostResponse]


class SearchResponse(BaseModel):
    posts: list[PostResponse]
    users: list[AuthorPreview]


class TagCount(BaseModel):
    tag: str
    count: int


class TagListResponse(BaseModel):
    tags: list[TagCount]


__all__ = ["PostListResponse", "SearchResponse", "TagCount", "TagListResponse"]
