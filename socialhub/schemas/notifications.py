"""Schemas for notifications."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .common import CursorPage
from .users import AuthorPreview


class ContentExcerpt(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content: str


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    read: bool
    created_at: datetime
    sender: AuthorPreview
    post: ContentExcerpt | None = None
    comment: ContentExcerpt | None = None


class NotificationListResponse(CursorPage[NotificationResponse]):
    """Receiver-scoped notifications, newest first."""


class UnreadCountResponse(BaseModel):
    unread_count: int = 0


__all__ = ["ContentExcerpt", "NotificationResponse", "NotificationListResponse", "UnreadCountResponse"]
