"""Schemas backing the admin dashboard."""
from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from .users import ProfileCounts


class AdminStatsResponse(BaseModel):
    total_users: int
    total_posts: int
    total_likes: int
    total_comments: int
    new_users_this_month: int
    new_posts_this_month: int
    new_likes_this_month: int
    new_comments_this_month: int


class AdminUserSummary(BaseModel):
    id: UUID
    username: str
    name: str | None = None
    email: str | None = None
    image: str | None = None
    role: str
    created_at: datetime
    counts: ProfileCounts


class AdminUserListResponse(BaseModel):
    users: list[AdminUserSummary]
    total: int
    pages: int
    current_page: int


class RoleUpdateRequest(BaseModel):
    role: Literal["USER", "MODERATOR", "ADMIN"]


class GrowthPoint(BaseModel):
    month: str
    users: int


class RoleShare(BaseModel):
    name: str
    value: int


class ActivityDay(BaseModel):
    name: str
    posts: int
    comments: int
    likes: int


__all__ = [
    "AdminStatsResponse",
    "AdminUserSummary",
    "AdminUserListResponse",
    "RoleUpdateRequest",
    "GrowthPoint",
    "RoleShare",
    "ActivityDay",
]
