"""Explore page queries: popular posts, search and trending hashtags."""
from __future__ import annotations

import re
from collections import Counter
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload

from ..database import LIKE_ESCAPE, contains_pattern
from ..models import Like, Post, User
from .post_service import post_statement, serialize_post_row

EXPLORE_LIMIT = 20
SEARCH_USER_LIMIT = 5
TAG_SAMPLE_SIZE = 100
TAG_LIMIT = 8

_HASHTAG_RE = re.compile(r"#(\w+)", re.UNICODE)


def popular_posts(db: Session, *, category: str | None = None, viewer_id: UUID | None = None) -> list[dict[str, Any]]:
    """``trending`` ranks by likes then recency; any other category is a content keyword."""

    stmt = post_statement(viewer_id).options(joinedload(Post.author))
    if category and category != "trending":
        stmt = stmt.where(Post.content.ilike(contains_pattern(category), escape=LIKE_ESCAPE))

    if category == "trending":
        likes = select(func.count(Like.id)).where(Like.post_id == Post.id).scalar_subquery()
        stmt = stmt.order_by(likes.desc(), Post.created_at.desc(), Post.id.desc())
    else:
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc())

    return [serialize_post_row(row) for row in db.execute(stmt.limit(EXPLORE_LIMIT)).all()]


def search(db: Session, *, query: str | None, viewer_id: UUID | None = None) -> dict[str, list[Any]]:
    term = (query or "").strip()
    if not term:
        return {"posts": [], "users": []}
    pattern = contains_pattern(term)

    post_stmt = (
        post_statement(viewer_id)
        .where(Post.content.ilike(pattern, escape=LIKE_ESCAPE))
        .options(joinedload(Post.author))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(EXPLORE_LIMIT)
    )
    user_stmt = (
        select(User)
        .where(
            or_(
                User.name.ilike(pattern, escape=LIKE_ESCAPE),
                User.username.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
        .order_by(User.username.asc())
        .limit(SEARCH_USER_LIMIT)
    )
    return {
        "posts": [serialize_post_row(row) for row in db.execute(post_stmt).all()],
        "users": list(db.scalars(user_stmt).all()),
    }


def trending_tags(db: Session) -> list[dict[str, Any]]:
    """Count lowercase hashtags across the most recent posts."""

    contents = db.scalars(
        select(Post.content).order_by(Post.created_at.desc(), Post.id.desc()).limit(TAG_SAMPLE_SIZE)
    ).all()

    counter: Counter[str] = Counter()
    for content in contents:
        counter.update(tag.lower() for tag in _HASHTAG_RE.findall(content or ""))

    return [{"tag": tag, "count": count} for tag, count in counter.most_common(TAG_LIMIT)]


__all__ = ["popular_posts", "search", "trending_tags"]
