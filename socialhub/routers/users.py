"""Profile, follow and user discovery routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_session
from ..schemas import (
    AuthorPreview,
    PostFeedResponse,
    PostResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    SuggestedUsersResponse,
    UserListResponse,
    UserPreview,
    UserSearchResponse,
)
from ..services import (
    get_optional_actor_id,
    get_profile,
    list_followers,
    list_following,
    list_user_posts,
    search_users,
    suggested_users,
    toggle_follow,
    update_profile,
)
from .responses import action_response, page_response, read_or_raise

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/search", response_model=UserSearchResponse)
async def search_users_endpoint(
    q: str | None = Query(default=None),
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_session),
) -> UserSearchResponse:
    users = search_users(db, query=q, limit=limit)
    return UserSearchResponse(items=[AuthorPreview.model_validate(user) for user in users])


@router.get("/suggested", response_model=SuggestedUsersResponse)
async def suggested_users_endpoint(
    limit: int = Query(default=5, ge=1, le=50),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> SuggestedUsersResponse:
    users = suggested_users(db, viewer_id=actor_id, limit=limit)
    return SuggestedUsersResponse(items=[UserPreview.model_validate(user) for user in users])


@router.patch("/me")
async def update_profile_endpoint(
    payload: ProfileUpdateRequest,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(update_profile(db, actor_id=actor_id, payload=payload), ProfileResponse)


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile_endpoint(
    username: str,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> ProfileResponse:
    profile = read_or_raise(lambda: get_profile(db, username=username, viewer_id=actor_id))
    return ProfileResponse.model_validate(profile)


@router.get("/{username}/posts", response_model=PostFeedResponse)
async def list_user_posts_endpoint(
    username: str,
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> PostFeedResponse:
    page = read_or_raise(
        lambda: list_user_posts(db, username=username, viewer_id=actor_id, cursor=cursor, limit=limit)
    )
    return page_response(page, PostFeedResponse, PostResponse)


@router.get("/{username}/followers", response_model=UserListResponse)
async def list_followers_endpoint(
    username: str,
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> UserListResponse:
    page = read_or_raise(
        lambda: list_followers(db, username=username, viewer_id=actor_id, cursor=cursor, limit=limit)
    )
    return page_response(page, UserListResponse, UserPreview)


@router.get("/{username}/following", response_model=UserListResponse)
async def list_following_endpoint(
    username: str,
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> UserListResponse:
    page = read_or_raise(
        lambda: list_following(db, username=username, viewer_id=actor_id, cursor=cursor, limit=limit)
    )
    return page_response(page, UserListResponse, UserPreview)


@router.post("/{username}/follow")
async def toggle_follow_endpoint(
    username: str,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(toggle_follow(db, actor_id=actor_id, target=username))


__all__ = ["router"]
