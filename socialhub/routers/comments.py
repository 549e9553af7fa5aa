"""Comment routes addressed by comment id."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_session
from ..services import delete_comment, get_optional_actor_id
from .responses import action_response

router = APIRouter(prefix="/comments", tags=["comments"])


@router.delete("/{comment_id}")
async def delete_comment_endpoint(
    comment_id: UUID,
    actor_id: UUID | None = Depends(get_optional_actor_id),
    db: Session = Depends(get_session),
) -> JSONResponse:
    return action_response(delete_comment(db, actor_id=actor_id, comment_id=comment_id))


__all__ = ["router"]
