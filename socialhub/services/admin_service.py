"""Admin dashboard queries and role management."""
from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..constants import ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER, VALID_ROLES
from ..database import LIKE_ESCAPE, contains_pattern, unit_of_work
from ..models import Comment, Follow, Like, Post, User
from .auth_service import ensure_role, load_actor
from .results import ActionResult, ForbiddenError, NotFoundError, ValidationError, action_boundary

logger = logging.getLogger(__name__)

MAX_ADMIN_PAGE_SIZE = 100
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def require_admin(db: Session, actor_id: UUID | None) -> User:
    actor = load_actor(db, actor_id)
    ensure_role(actor, ROLE_ADMIN)
    return actor


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _count(db: Session, model: Any, since: datetime | None = None) -> int:
    stmt = select(func.count()).select_from(model)
    if since is not None:
        stmt = stmt.where(model.created_at >= since)
    return int(db.scalar(stmt) or 0)


def get_admin_stats(db: Session, *, actor_id: UUID | None, now: datetime | None = None) -> dict[str, int]:
    """Return totals and this month's additions for users, posts, likes and comments."""

    require_admin(db, actor_id)
    current = now or datetime.now(timezone.utc)
    start_of_month = current.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    return {
        "total_users": _count(db, User),
        "total_posts": _count(db, Post),
        "total_likes": _count(db, Like),
        "total_comments": _count(db, Comment),
        "new_users_this_month": _count(db, User, start_of_month),
        "new_posts_this_month": _count(db, Post, start_of_month),
        "new_likes_this_month": _count(db, Like, start_of_month),
        "new_comments_this_month": _count(db, Comment, start_of_month),
    }


def list_admin_users(
    db: Session,
    *,
    actor_id: UUID | None,
    page: int = 1,
    limit: int = 20,
    search: str | None = None,
) -> dict[str, Any]:
    """Offset-paginated user listing with per-user counts, newest accounts first."""

    require_admin(db, actor_id)
    safe_page = max(1, int(page or 1))
    safe_limit = max(1, min(int(limit or 20), MAX_ADMIN_PAGE_SIZE))

    criteria = []
    if search:
        pattern = contains_pattern(search.strip())
        criteria.append(
            or_(
                User.name.ilike(pattern, escape=LIKE_ESCAPE),
                User.username.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    post_count = select(func.count(Post.id)).where(Post.author_id == User.id).scalar_subquery()
    follower_count = select(func.count(Follow.id)).where(Follow.following_id == User.id).scalar_subquery()
    following_count = select(func.count(Follow.id)).where(Follow.follower_id == User.id).scalar_subquery()

    stmt = (
        select(User, post_count, follower_count, following_count)
        .where(*criteria)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset((safe_page - 1) * safe_limit)
        .limit(safe_limit)
    )
    total = int(db.scalar(select(func.count()).select_from(User).where(*criteria)) or 0)

    users = []
    for user, posts, followers, following in db.execute(stmt).all():
        users.append(
            {
                "id": user.id,
                "username": user.username,
                "name": user.name,
                "email": user.email,
                "image": user.image,
                "role": user.role,
                "created_at": user.created_at,
                "counts": {"posts": int(posts or 0), "followers": int(followers or 0), "following": int(following or 0)},
            }
        )

    return {
        "users": users,
        "total": total,
        "pages": math.ceil(total / safe_limit) if total else 0,
        "current_page": safe_page,
    }


@action_boundary("Failed to update user role")
def update_user_role(db: Session, *, actor_id: UUID | None, user_id: UUID, role: str) -> ActionResult:
    admin = require_admin(db, actor_id)
    normalized = (role or "").upper()
    if normalized not in VALID_ROLES:
        raise ValidationError("Invalid role", errors={"role": ["Invalid role"]})

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.id == admin.id and normalized != ROLE_ADMIN:
        raise ForbiddenError("You cannot remove your own admin role")

    with unit_of_work(db):
        user.role = normalized
    logger.info("Admin %s set role of %s to %s", admin.id, user.id, normalized)
    return ActionResult.ok("User role updated", data={"id": user.id, "role": user.role})


def user_growth(
    db: Session,
    *,
    actor_id: UUID | None,
    months: int = 6,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Sign-ups per calendar month (``YYYY-MM``) over the last ``months`` months, oldest first."""

    require_admin(db, actor_id)
    current = now or datetime.now(timezone.utc)
    year, month = current.year, current.month - max(1, months)
    while month <= 0:
        month += 12
        year -= 1
    cutoff = current.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)

    created = db.scalars(
        select(User.created_at).where(User.created_at >= cutoff).order_by(User.created_at.asc())
    ).all()
    buckets: Counter[str] = Counter(_as_utc(value).strftime("%Y-%m") for value in created)
    return [{"month": key, "users": buckets[key]} for key in sorted(buckets)]


def role_distribution(db: Session, *, actor_id: UUID | None) -> list[dict[str, Any]]:
    require_admin(db, actor_id)
    counts = dict(db.execute(select(User.role, func.count()).group_by(User.role)).all())
    return [
        {"name": "Admin", "value": int(counts.get(ROLE_ADMIN, 0))},
        {"name": "Moderator", "value": int(counts.get(ROLE_MODERATOR, 0))},
        {"name": "User", "value": int(counts.get(ROLE_USER, 0))},
    ]


def weekly_activity(db: Session, *, actor_id: UUID | None, now: datetime | None = None) -> list[dict[str, Any]]:
    """Posts, comments and likes per day for the last seven days, oldest day first."""

    require_admin(db, actor_id)
    current = now or datetime.now(timezone.utc)
    today = _as_utc(current).date()
    days: list[date] = [today - timedelta(days=offset) for offset in range(6, -1, -1)]
    start = datetime.combine(days[0], datetime.min.time(), tzinfo=timezone.utc)

    series: dict[str, Counter[date]] = {}
    for key, model in (("posts", Post), ("comments", Comment), ("likes", Like)):
        stamps = db.scalars(select(model.created_at).where(model.created_at >= start)).all()
        series[key] = Counter(_as_utc(value).date() for value in stamps)

    return [
        {
            "name": _WEEKDAYS[day.weekday()],
            "posts": series["posts"][day],
            "comments": series["comments"][day],
            "likes": series["likes"][day],
        }
        for day in days
    ]


__all__ = [
    "require_admin",
    "get_admin_stats",
    "list_admin_users",
    "update_user_role",
    "user_growth",
    "role_distribution",
    "weekly_activity",
]
