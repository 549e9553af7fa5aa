"""Business logic for posts, feeds and likes."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import Select, false, func, select
from sqlalchemy.orm import Session, joinedload

from ..constants import FEED_PAGE_SIZE
from ..database import unit_of_work
from ..models import Comment, Follow, Like, NotificationType, Post, User
from .auth_service import ensure_owner_or_role, load_actor, require_actor
from .notification_service import record_notification
from .pagination import Page, paginate
from .results import ActionResult, NotFoundError, ValidationError, action_boundary
from .toggles import EdgeSpec, set_membership

logger = logging.getLogger(__name__)

LIKE_EDGE = EdgeSpec(model=Like, actor_column="user_id", target_column="post_id")

MAX_POST_LENGTH = 2000


def post_statement(viewer_id: UUID | None) -> Select[Any]:
    """Select posts together with their like/comment totals and the viewer's like state."""

    like_count = select(func.count(Like.id)).where(Like.post_id == Post.id).scalar_subquery()
    comment_count = select(func.count(Comment.id)).where(Comment.post_id == Post.id).scalar_subquery()
    if viewer_id is not None:
        viewer_like = (
            select(func.count(Like.id)).where(Like.post_id == Post.id, Like.user_id == viewer_id).scalar_subquery()
        )
    else:
        viewer_like = false()
    return select(
        Post,
        like_count.label("like_count"),
        comment_count.label("comment_count"),
        viewer_like.label("viewer_like"),
    )


def serialize_post_row(row: Any) -> dict[str, Any]:
    post, like_count, comment_count, viewer_like = row
    return {
        "id": post.id,
        "content": post.content,
        "image": post.image,
        "created_at": post.created_at,
        "author": post.author,
        "like_count": int(like_count or 0),
        "comment_count": int(comment_count or 0),
        "is_liked": bool(viewer_like),
    }


def _page_posts(
    db: Session,
    statement: Select[Any],
    *,
    cursor: str | None,
    limit: int | None,
) -> Page[dict[str, Any]]:
    page = paginate(
        db,
        statement,
        Post,
        cursor=cursor,
        limit=limit,
        default_limit=FEED_PAGE_SIZE,
        options=(joinedload(Post.author),),
    )
    return page.map(serialize_post_row)


def _get_post_or_404(db: Session, post_id: UUID) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def _clean_content(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Post content is required", errors={"content": ["Post content is required"]})
    if len(text) > MAX_POST_LENGTH:
        raise ValidationError(
            "Post must be less than 2000 characters",
            errors={"content": ["Post must be less than 2000 characters"]},
        )
    return text


def get_post(db: Session, *, post_id: UUID, viewer_id: UUID | None = None) -> dict[str, Any]:
    row = db.execute(
        post_statement(viewer_id).where(Post.id == post_id).options(joinedload(Post.author))
    ).first()
    if row is None:
        raise NotFoundError("Post not found")
    return serialize_post_row(row)


@action_boundary("Failed to create post. Please try again.")
def create_post(db: Session, *, actor_id: UUID | None, content: str, image: str | None = None) -> ActionResult:
    """Create and persist a new post for the acting user."""

    author = load_actor(db, actor_id)
    text = _clean_content(content)
    post = Post(author_id=author.id, content=text, image=image or None)
    with unit_of_work(db):
        db.add(post)
    logger.info("User %s created post %s", author.id, post.id)
    return ActionResult.ok("Post created successfully!", data=get_post(db, post_id=post.id, viewer_id=author.id))


@action_boundary("Failed to delete post. Please try again.")
def delete_post(db: Session, *, actor_id: UUID | None, post_id: UUID) -> ActionResult:
    """Delete a post when the actor is its author or holds a moderating role."""

    actor = load_actor(db, actor_id)
    post = _get_post_or_404(db, post_id)
    ensure_owner_or_role(actor, post.author_id, message="You can only delete your own posts")
    with unit_of_work(db):
        db.delete(post)
    logger.info("User %s deleted post %s", actor.id, post_id)
    return ActionResult.ok("Post deleted successfully!")


def list_feed(
    db: Session,
    *,
    viewer_id: UUID | None = None,
    cursor: str | None = None,
    limit: int | None = None,
) -> Page[dict[str, Any]]:
    """Every post, newest first."""

    return _page_posts(db, post_statement(viewer_id), cursor=cursor, limit=limit)


def list_following_feed(
    db: Session,
    *,
    actor_id: UUID | None,
    cursor: str | None = None,
    limit: int | None = None,
) -> Page[dict[str, Any]]:
    """Posts by the authors the actor follows, plus the actor's own posts."""

    viewer_id = require_actor(actor_id)
    followed = select(Follow.following_id).where(Follow.follower_id == viewer_id)
    stmt = post_statement(viewer_id).where((Post.author_id.in_(followed)) | (Post.author_id == viewer_id))
    return _page_posts(db, stmt, cursor=cursor, limit=limit)


def list_user_posts(
    db: Session,
    *,
    username: str,
    viewer_id: UUID | None = None,
    cursor: str | None = None,
    limit: int | None = None,
) -> Page[dict[str, Any]]:
    author_id = db.scalar(select(User.id).where(User.username == username))
    if author_id is None:
        raise NotFoundError("User not found")
    stmt = post_statement(viewer_id).where(Post.author_id == author_id)
    return _page_posts(db, stmt, cursor=cursor, limit=limit)


def _set_like(db: Session, actor_id: UUID | None, post_id: UUID, desired: bool | None) -> ActionResult:
    liker_id = require_actor(actor_id)
    post = _get_post_or_404(db, post_id)

    def _notify(_edge: Like) -> None:
        record_notification(
            db,
            type_=NotificationType.LIKE,
            sender_id=liker_id,
            receiver_id=post.author_id,
            post_id=post.id,
        )

    outcome = set_membership(
        db,
        LIKE_EDGE,
        actor_id=liker_id,
        target_id=post.id,
        desired=desired,
        on_created=_notify,
    )
    message = "Post liked!" if outcome.is_active else "Post unliked!"
    return ActionResult.ok(message, is_active=outcome.is_active, count=outcome.count)


@action_boundary("Failed to toggle like. Please try again.")
def toggle_like(db: Session, *, actor_id: UUID | None, post_id: UUID) -> ActionResult:
    """Like the post when not yet liked, otherwise remove the like."""

    return _set_like(db, actor_id, post_id, None)


@action_boundary("Failed to like post. Please try again.")
def like_post(db: Session, *, actor_id: UUID | None, post_id: UUID) -> ActionResult:
    return _set_like(db, actor_id, post_id, True)


@action_boundary("Failed to unlike post. Please try again.")
def unlike_post(db: Session, *, actor_id: UUID | None, post_id: UUID) -> ActionResult:
    return _set_like(db, actor_id, post_id, False)


__all__ = [
    "LIKE_EDGE",
    "post_statement",
    "serialize_post_row",
    "get_post",
    "create_post",
    "delete_post",
    "list_feed",
    "list_following_feed",
    "list_user_posts",
    "toggle_like",
    "like_post",
    "unlike_post",
]
