"""Notification API routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_session
from ..schemas import NotificationListResponse, NotificationResponse, UnreadCountResponse
from ..services import (
    count_unread,
    delete_notification,
    get_optional_actor_id,
    list_notifications,
    mark_all_read,
    mark_read,
)
from .responses import action_response, page_response, read_or_raise

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_my_notifications(
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> NotificationListResponse:
    page = read_or_raise(lambda: list_notifications(db, actor_id=actor_id, cursor=cursor, limit=limit))
    return page_response(page, NotificationListResponse, NotificationResponse)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count_endpoint(
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=count_unread(db, actor_id=actor_id))


@router.post("/mark-all-read")
async def mark_all_read_endpoint(
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(mark_all_read(db, actor_id=actor_id))


@router.post("/{notification_id}/read")
async def mark_read_endpoint(
    notification_id: UUID,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(mark_read(db, actor_id=actor_id, notification_id=notification_id))


@router.delete("/{notification_id}")
async def delete_notification_endpoint(
    notification_id: UUID,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(delete_notification(db, actor_id=actor_id, notification_id=notification_id))


__all__ = ["router"]
