"""Explore and search routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_session
from ..schemas import AuthorPreview, PostListResponse, PostResponse, SearchResponse, TagCount, TagListResponse
from ..services import get_optional_actor_id, popular_posts, search, trending_tags

router = APIRouter(prefix="/explore", tags=["explore"])


@router.get("/popular", response_model=PostListResponse)
async def popular_endpoint(
    category: str | None = Query(default=None),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> PostListResponse:
    posts = popular_posts(db, category=category, viewer_id=actor_id)
    return PostListResponse(items=[PostResponse.model_validate(post, from_attributes=True) for post in posts])


@router.get("/search", response_model=SearchResponse)
async def search_endpoint(
    q: str | None = Query(default=None),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> SearchResponse:
    found = search(db, query=q, viewer_id=actor_id)
    return SearchResponse(
        posts=[PostResponse.model_validate(post, from_attributes=True) for post in found["posts"]],
        users=[AuthorPreview.model_validate(user) for user in found["users"]],
    )


@router.get("/tags", response_model=TagListResponse)
async def tags_endpoint(db: Session = Depends(get_session)) -> TagListResponse:
    return TagListResponse(tags=[TagCount(**entry) for entry in trending_tags(db)])


__all__ = ["router"]
