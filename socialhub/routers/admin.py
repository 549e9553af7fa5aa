"""Admin dashboard routes. Every endpoint requires the ADMIN role."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_session
from ..schemas import (
    ActivityDay,
    AdminStatsResponse,
    AdminUserListResponse,
    GrowthPoint,
    RoleShare,
    RoleUpdateRequest,
)
from ..services import (
    get_admin_stats,
    get_optional_actor_id,
    list_admin_users,
    role_distribution,
    update_user_role,
    user_growth,
    weekly_activity,
)
from .responses import action_response, read_or_raise

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStatsResponse)
async def stats_endpoint(
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> AdminStatsResponse:
    return AdminStatsResponse(**read_or_raise(lambda: get_admin_stats(db, actor_id=actor_id)))


@router.get("/users", response_model=AdminUserListResponse)
async def users_endpoint(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    search: str | None = Query(default=None),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> AdminUserListResponse:
    listing = read_or_raise(
        lambda: list_admin_users(db, actor_id=actor_id, page=page, limit=limit, search=search)
    )
    return AdminUserListResponse.model_validate(listing)


@router.patch("/users/{user_id}/role")
async def update_role_endpoint(
    user_id: UUID,
    payload: RoleUpdateRequest,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(update_user_role(db, actor_id=actor_id, user_id=user_id, role=payload.role))


@router.get("/growth", response_model=list[GrowthPoint])
async def growth_endpoint(
    months: int = Query(default=6, ge=1, le=24),
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> list[GrowthPoint]:
    points = read_or_raise(lambda: user_growth(db, actor_id=actor_id, months=months))
    return [GrowthPoint(**point) for point in points]


@router.get("/roles", response_model=list[RoleShare])
async def roles_endpoint(
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> list[RoleShare]:
    return [RoleShare(**share) for share in read_or_raise(lambda: role_distribution(db, actor_id=actor_id))]


@router.get("/activity", response_model=list[ActivityDay])
async def activity_endpoint(
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> list[ActivityDay]:
    return [ActivityDay(**day) for day in read_or_raise(lambda: weekly_activity(db, actor_id=actor_id))]


__all__ = ["router"]
