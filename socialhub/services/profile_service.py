"""Profile lookups, profile edits and user discovery."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import LIKE_ESCAPE, contains_pattern, unit_of_work
from ..models import Follow, Post, User
from ..schemas import ProfileUpdateRequest
from .auth_service import load_actor
from .follow_service import get_follow_stats, user_preview
from .results import ActionResult, NotFoundError, ValidationError, action_boundary

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


def get_profile(db: Session, *, username: str, viewer_id: UUID | None = None) -> dict[str, Any]:
    user = db.scalar(select(User).where(User.username == username))
    if user is None:
        raise NotFoundError("User not found")

    stats = get_follow_stats(db, user_id=user.id, viewer_id=viewer_id)
    post_count = db.scalar(select(func.count()).select_from(Post).where(Post.author_id == user.id)) or 0
    own_profile = viewer_id is not None and viewer_id == user.id

    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "email": user.email,
        "image": user.image,
        "bio": user.bio,
        "role": user.role,
        "created_at": user.created_at,
        "counts": {
            "posts": int(post_count),
            "followers": stats.followers_count,
            "following": stats.following_count,
        },
        "is_following": stats.is_following and not own_profile,
        "is_own_profile": own_profile,
    }


@action_boundary("Failed to update profile. Please try again.")
def update_profile(db: Session, *, actor_id: UUID | None, payload: ProfileUpdateRequest) -> ActionResult:
    """Apply the provided profile fields to the acting user."""

    user = load_actor(db, actor_id)
    changes = payload.model_dump(exclude_unset=True)

    username = changes.get("username")
    if username and username != user.username:
        taken = db.scalar(
            select(User.id).where(func.lower(User.username) == username.lower(), User.id != user.id)
        )
        if taken is not None:
            raise ValidationError(
                "This username is already taken",
                errors={"username": ["This username is already taken"]},
            )
        user.username = username
    if changes.get("name"):
        user.name = changes["name"]
    if "bio" in changes:
        user.bio = changes["bio"]
    if "image" in changes:
        user.image = str(changes["image"]) if changes["image"] is not None else None

    try:
        with unit_of_work(db):
            db.add(user)
    except IntegrityError as exc:
        raise ValidationError(
            "This username is already taken",
            errors={"username": ["This username is already taken"]},
        ) from exc

    logger.info("User %s updated profile", user.id)
    return ActionResult.ok("Profile updated successfully!", data=get_profile(db, username=user.username, viewer_id=user.id))


def search_users(db: Session, *, query: str | None, limit: int = 10) -> list[User]:
    """Case-insensitive match on username or display name; short queries return nothing."""

    term = (query or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        return []
    pattern = contains_pattern(term)
    stmt = (
        select(User)
        .where(
            or_(
                User.username.ilike(pattern, escape=LIKE_ESCAPE),
                User.name.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
        .order_by(User.username.asc())
        .limit(max(1, limit))
    )
    return list(db.scalars(stmt).all())


def suggested_users(db: Session, *, viewer_id: UUID | None = None, limit: int = 5) -> list[dict[str, Any]]:
    """Users the viewer does not follow yet, most-followed first."""

    follower_count = (
        select(func.count(Follow.id)).where(Follow.following_id == User.id).scalar_subquery()
    )
    stmt = select(User).order_by(follower_count.desc(), User.created_at.desc()).limit(max(1, limit))
    if viewer_id is not None:
        already_followed = select(Follow.following_id).where(Follow.follower_id == viewer_id)
        stmt = stmt.where(User.id != viewer_id, User.id.not_in(already_followed))
    return [user_preview(user, following=False) for user in db.scalars(stmt).all()]


__all__ = ["get_profile", "update_profile", "search_users", "suggested_users"]
