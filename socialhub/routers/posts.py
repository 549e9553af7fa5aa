"""Post, feed, like and comment API routes."""
from __future__ import annotations

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_session
from ..schemas import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    PostCreate,
    PostFeedResponse,
    PostResponse,
)
from ..services import (
    create_comment,
    create_post,
    delete_post,
    get_optional_actor_id,
    get_post,
    list_comments,
    list_feed,
    list_following_feed,
    toggle_like,
)
from .responses import action_response, page_response, read_or_raise

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostFeedResponse)
async def list_feed_endpoint(
    feed_type: Literal["all", "following"] = Query(default="all", alias="type"),
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> PostFeedResponse:
    if feed_type == "following":
        page = read_or_raise(lambda: list_following_feed(db, actor_id=actor_id, cursor=cursor, limit=limit))
    else:
        page = list_feed(db, viewer_id=actor_id, cursor=cursor, limit=limit)
    return page_response(page, PostFeedResponse, PostResponse)


@router.post("")
async def create_post_endpoint(
    payload: PostCreate,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    image = str(payload.image) if payload.image is not None else None
    result = create_post(db, actor_id=actor_id, content=payload.content, image=image)
    return action_response(result, PostResponse)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post_endpoint(
    post_id: UUID,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> PostResponse:
    post = read_or_raise(lambda: get_post(db, post_id=post_id, viewer_id=actor_id))
    return PostResponse.model_validate(post, from_attributes=True)


@router.delete("/{post_id}")
async def delete_post_endpoint(
    post_id: UUID,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(delete_post(db, actor_id=actor_id, post_id=post_id))


@router.post("/{post_id}/like")
async def toggle_like_endpoint(
    post_id: UUID,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(toggle_like(db, actor_id=actor_id, post_id=post_id))


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def list_comments_endpoint(
    post_id: UUID,
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    db: Session = Depends(get_session),
) -> CommentListResponse:
    page = read_or_raise(lambda: list_comments(db, post_id=post_id, cursor=cursor, limit=limit))
    return page_response(page, CommentListResponse, CommentResponse)


@router.post("/{post_id}/comments")
async def create_comment_endpoint(
    post_id: UUID,
    payload: CommentCreate,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    result = create_comment(
        db,
        actor_id=actor_id,
        post_id=post_id,
        content=payload.content,
        parent_id=payload.parent_id,
    )
    return action_response(result, CommentResponse)


__all__ = ["router"]
