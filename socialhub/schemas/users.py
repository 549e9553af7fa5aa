"""Schemas for user previews and profile endpoints."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from .auth import USERNAME_PATTERN
from .common import CursorPage


class AuthorPreview(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    name: str | None = None
    image: str | None = None


class UserPreview(AuthorPreview):
    bio: str | None = None
    is_following: bool = False


class UserListResponse(CursorPage[UserPreview]):
    """Followers / following page."""


class ProfileCounts(BaseModel):
    posts: int = 0
    followers: int = 0
    following: int = 0


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    name: str | None = None
    email: str | None = None
    image: str | None = None
    bio: str | None = None
    role: str | None = None
    created_at: datetime
    counts: ProfileCounts = Field(default_factory=ProfileCounts)
    is_following: bool = False
    is_own_profile: bool = False


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=50)
    username: str | None = Field(default=None, min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    bio: str | None = Field(default=None, max_length=500)
    image: HttpUrl | None = None

    @field_validator("image", "bio", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value in ("", "None"):
            return None
        return value


class UserSearchResponse(BaseModel):
    items: list[AuthorPreview]


class SuggestedUsersResponse(BaseModel):
    items: list[UserPreview]


__all__ = [
    "AuthorPreview",
    "UserPreview",
    "UserListResponse",
    "ProfileCounts",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "UserSearchResponse",
    "SuggestedUsersResponse",
]
