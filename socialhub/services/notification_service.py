"""Notification facts: staged as side effects of mutations, read and cleared by their receiver."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, joinedload

from ..constants import NOTIFICATIONS_PAGE_SIZE
from ..database import unit_of_work
from ..models import Notification, NotificationType
from .auth_service import require_actor
from .pagination import Page, paginate
from .results import ActionResult, NotFoundError, action_boundary

logger = logging.getLogger(__name__)


def record_notification(
    db: Session,
    *,
    type_: NotificationType,
    sender_id: UUID,
    receiver_id: UUID,
    post_id: UUID | None = None,
    comment_id: UUID | None = None,
) -> Notification | None:
    """Stage a notification in the caller's transaction.

    Nothing is committed here; the triggering mutation owns the transaction so
    the notification can never outlive it. Self-notifications are skipped.
    """

    if sender_id == receiver_id:
        return None
    notification = Notification(
        type=str(type_),
        sender_id=sender_id,
        receiver_id=receiver_id,
        post_id=post_id,
        comment_id=comment_id,
    )
    db.add(notification)
    return notification


def _serialize(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "type": notification.type,
        "read": notification.read,
        "created_at": notification.created_at,
        "sender": notification.sender,
        "post": notification.post,
        "comment": notification.comment,
    }


def list_notifications(
    db: Session,
    *,
    actor_id: UUID | None,
    cursor: str | None = None,
    limit: int | None = None,
) -> Page[dict[str, Any]]:
    """Return the actor's notifications, newest first."""

    receiver_id = require_actor(actor_id)
    stmt = select(Notification).where(Notification.receiver_id == receiver_id)
    page = paginate(
        db,
        stmt,
        Notification,
        cursor=cursor,
        limit=limit,
        default_limit=NOTIFICATIONS_PAGE_SIZE,
        options=(
            joinedload(Notification.sender),
            joinedload(Notification.post),
            joinedload(Notification.comment),
        ),
    )
    return page.map(_serialize)


def count_unread(db: Session, *, actor_id: UUID | None) -> int:
    """Return the unread notification total for the actor (0 when anonymous)."""

    if actor_id is None:
        return 0
    stmt = (
        select(func.count())
        .select_from(Notification)
        .where(Notification.receiver_id == actor_id, Notification.read.is_(False))
    )
    return int(db.scalar(stmt) or 0)


def _get_own_notification(db: Session, receiver_id: UUID, notification_id: UUID) -> Notification:
    notification = db.scalar(
        select(Notification).where(Notification.id == notification_id, Notification.receiver_id == receiver_id)
    )
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


@action_boundary("Failed to mark notification as read")
def mark_read(db: Session, *, actor_id: UUID | None, notification_id: UUID) -> ActionResult:
    receiver_id = require_actor(actor_id)
    notification = _get_own_notification(db, receiver_id, notification_id)
    with unit_of_work(db):
        notification.read = True
    return ActionResult.ok()


@action_boundary("Failed to mark notifications as read")
def mark_all_read(db: Session, *, actor_id: UUID | None) -> ActionResult:
    receiver_id = require_actor(actor_id)
    stmt = (
        update(Notification)
        .where(Notification.receiver_id == receiver_id, Notification.read.is_(False))
        .values(read=True)
    )
    with unit_of_work(db):
        result = db.execute(stmt)
    logger.debug("Marked %s notifications read for %s", result.rowcount, receiver_id)
    return ActionResult.ok("All notifications marked as read", count=0)


@action_boundary("Failed to delete notification")
def delete_notification(db: Session, *, actor_id: UUID | None, notification_id: UUID) -> ActionResult:
    receiver_id = require_actor(actor_id)
    notification = _get_own_notification(db, receiver_id, notification_id)
    with unit_of_work(db):
        db.delete(notification)
    return ActionResult.ok()


__all__ = [
    "NotificationType",
    "record_notification",
    "list_notifications",
    "count_unread",
    "mark_read",
    "mark_all_read",
    "delete_notification",
]
