"""Comments on posts, threaded one level deep."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ..constants import COMMENTS_PAGE_SIZE
from ..database import unit_of_work
from ..models import Comment, NotificationType, Post
from .auth_service import ensure_owner_or_role, load_actor
from .notification_service import record_notification
from .pagination import Page, paginate
from .results import ActionResult, NotFoundError, ValidationError, action_boundary

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 1000


def _serialize(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "content": comment.content,
        "parent_id": comment.parent_id,
        "created_at": comment.created_at,
        "author": comment.author,
        "replies": [],
    }


def _get_post_or_404(db: Session, post_id: UUID) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def list_comments(
    db: Session,
    *,
    post_id: UUID,
    cursor: str | None = None,
    limit: int | None = None,
) -> Page[dict[str, Any]]:
    """Return a page of top-level comments, newest first, each with all its replies."""

    _get_post_or_404(db, post_id)
    stmt = select(Comment).where(Comment.post_id == post_id, Comment.parent_id.is_(None))
    page = paginate(
        db,
        stmt,
        Comment,
        cursor=cursor,
        limit=limit,
        default_limit=COMMENTS_PAGE_SIZE,
        options=(joinedload(Comment.author),),
    )
    roots = [_serialize(comment) for comment in page.items]
    if not roots:
        return Page(items=[], next_cursor=page.next_cursor)

    nodes = {node["id"]: node for node in roots}
    replies = db.scalars(
        select(Comment)
        .where(Comment.parent_id.in_(list(nodes)))
        .options(joinedload(Comment.author))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    ).all()
    for reply in replies:
        nodes[reply.parent_id]["replies"].append(_serialize(reply))

    return Page(items=roots, next_cursor=page.next_cursor)


@action_boundary("Failed to add comment. Please try again.")
def create_comment(
    db: Session,
    *,
    actor_id: UUID | None,
    post_id: UUID,
    content: str,
    parent_id: UUID | None = None,
) -> ActionResult:
    """Add a comment or reply and notify the post author in the same transaction."""

    author = load_actor(db, actor_id)
    text = (content or "").strip()
    if not text:
        raise ValidationError("Comment cannot be empty", errors={"content": ["Comment cannot be empty"]})
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            "Comment must be less than 1000 characters",
            errors={"content": ["Comment must be less than 1000 characters"]},
        )

    post = _get_post_or_404(db, post_id)

    parent: Comment | None = None
    if parent_id is not None:
        parent = db.get(Comment, parent_id)
        if parent is None or parent.post_id != post.id:
            raise NotFoundError("Parent comment not found")
        # Threads stay one level deep
        if parent.parent_id is not None:
            parent = db.get(Comment, parent.parent_id)

    comment = Comment(post_id=post.id, author_id=author.id, content=text, parent_id=parent.id if parent else None)
    with unit_of_work(db):
        db.add(comment)
        db.flush()
        record_notification(
            db,
            type_=NotificationType.COMMENT,
            sender_id=author.id,
            receiver_id=post.author_id,
            post_id=post.id,
            comment_id=comment.id,
        )

    logger.info("User %s commented %s on post %s", author.id, comment.id, post.id)
    return ActionResult.ok("Comment added!", data=_serialize(comment))


@action_boundary("Failed to delete comment. Please try again.")
def delete_comment(db: Session, *, actor_id: UUID | None, comment_id: UUID) -> ActionResult:
    """Delete a comment (and its replies) when the actor owns it or moderates content."""

    actor = load_actor(db, actor_id)
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    ensure_owner_or_role(actor, comment.author_id, message="You can only delete your own comments")
    with unit_of_work(db):
        db.delete(comment)
    logger.info("User %s deleted comment %s", actor.id, comment_id)
    return ActionResult.ok("Comment deleted successfully!")


__all__ = ["list_comments", "create_comment", "delete_comment"]
