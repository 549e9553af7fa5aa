"""Business logic for follower relationships."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from ..constants import FOLLOWS_PAGE_SIZE
from ..models import Follow, NotificationType, User
from .auth_service import require_actor
from .notification_service import record_notification
from .pagination import Page, paginate
from .results import ActionResult, NotFoundError, ValidationError, action_boundary
from .toggles import EdgeSpec, set_membership

logger = logging.getLogger(__name__)

FOLLOW_EDGE = EdgeSpec(model=Follow, actor_column="follower_id", target_column="following_id")


@dataclass(slots=True)
class FollowStats:
    user_id: UUID
    followers_count: int
    following_count: int
    is_following: bool


def resolve_user(db: Session, target: UUID | str) -> User:
    """Look a user up by id or username."""

    if isinstance(target, UUID):
        user = db.get(User, target)
    else:
        user = db.scalar(select(User).where(User.username == target))
    if user is None:
        raise NotFoundError("User not found")
    return user


def is_following(db: Session, *, follower_id: UUID | None, following_id: UUID) -> bool:
    if follower_id is None:
        return False
    stmt = select(Follow.id).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    return db.scalar(stmt) is not None


def followed_ids(db: Session, viewer_id: UUID | None, candidates: Iterable[UUID]) -> set[UUID]:
    """Return the subset of ``candidates`` the viewer follows."""

    ids = list(candidates)
    if viewer_id is None or not ids:
        return set()
    stmt = select(Follow.following_id).where(Follow.follower_id == viewer_id, Follow.following_id.in_(ids))
    return set(db.scalars(stmt).all())


def user_preview(user: User, *, following: bool) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "image": user.image,
        "bio": user.bio,
        "is_following": following,
    }


def get_follow_stats(db: Session, *, user_id: UUID, viewer_id: UUID | None = None) -> FollowStats:
    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")

    followers_count = db.scalar(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    ) or 0
    following_count = db.scalar(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    ) or 0

    return FollowStats(
        user_id=user_id,
        followers_count=int(followers_count),
        following_count=int(following_count),
        is_following=is_following(db, follower_id=viewer_id, following_id=user_id),
    )


def _set_follow(db: Session, actor_id: UUID | None, target: UUID | str, desired: bool | None) -> ActionResult:
    follower_id = require_actor(actor_id)
    if isinstance(target, UUID) and target == follower_id:
        raise ValidationError("You cannot follow yourself")
    user = resolve_user(db, target)
    if user.id == follower_id:
        raise ValidationError("You cannot follow yourself")

    def _notify(_edge: Follow) -> None:
        record_notification(db, type_=NotificationType.FOLLOW, sender_id=follower_id, receiver_id=user.id)

    outcome = set_membership(
        db,
        FOLLOW_EDGE,
        actor_id=follower_id,
        target_id=user.id,
        desired=desired,
        on_created=_notify,
    )
    if outcome.changed:
        logger.info("User %s %s %s", follower_id, "followed" if outcome.is_active else "unfollowed", user.id)
    message = f"You are now following {user.username}" if outcome.is_active else f"You unfollowed {user.username}"
    return ActionResult.ok(message, is_active=outcome.is_active, count=outcome.count)


@action_boundary("Failed to update follow. Please try again.")
def toggle_follow(db: Session, *, actor_id: UUID | None, target: UUID | str) -> ActionResult:
    """Follow ``target`` (id or username) if not yet followed, otherwise unfollow.

    ``count`` in the result is the target's follower total after the change.
    """

    return _set_follow(db, actor_id, target, None)


@action_boundary("Failed to follow user. Please try again.")
def follow_user(db: Session, *, actor_id: UUID | None, target: UUID | str) -> ActionResult:
    return _set_follow(db, actor_id, target, True)


@action_boundary("Failed to unfollow user. Please try again.")
def unfollow_user(db: Session, *, actor_id: UUID | None, target: UUID | str) -> ActionResult:
    return _set_follow(db, actor_id, target, False)


def _page_edges(
    db: Session,
    *,
    username: str,
    viewer_id: UUID | None,
    cursor: str | None,
    limit: int | None,
    followers: bool,
) -> Page[dict[str, Any]]:
    user = resolve_user(db, username)
    if followers:
        stmt = select(Follow).where(Follow.following_id == user.id)
        loader = joinedload(Follow.follower)
    else:
        stmt = select(Follow).where(Follow.follower_id == user.id)
        loader = joinedload(Follow.following)

    page = paginate(
        db,
        stmt,
        Follow,
        cursor=cursor,
        limit=limit,
        default_limit=FOLLOWS_PAGE_SIZE,
        options=(loader,),
    )
    people = [edge.follower if followers else edge.following for edge in page.items]
    followed = followed_ids(db, viewer_id, (person.id for person in people))
    return Page(
        items=[user_preview(person, following=person.id in followed) for person in people],
        next_cursor=page.next_cursor,
    )


def list_followers(
    db: Session,
    *,
    username: str,
    viewer_id: UUID | None = None,
    cursor: str | None = None,
    limit: int | None = None,
) -> Page[dict[str, Any]]:
    """Users following ``username``, most recent follow first. The cursor is a follow edge id."""

    return _page_edges(db, username=username, viewer_id=viewer_id, cursor=cursor, limit=limit, followers=True)


def list_following(
    db: Session,
    *,
    username: str,
    viewer_id: UUID | None = None,
    cursor: str | None = None,
    limit: int | None = None,
) -> Page[dict[str, Any]]:
    return _page_edges(db, username=username, viewer_id=viewer_id, cursor=cursor, limit=limit, followers=False)


__all__ = [
    "FOLLOW_EDGE",
    "FollowStats",
    "resolve_user",
    "is_following",
    "followed_ids",
    "user_preview",
    "get_follow_stats",
    "toggle_follow",
    "follow_user",
    "unfollow_user",
    "list_followers",
    "list_following",
]
