"""Envelopes shared by list and mutation endpoints."""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class CursorPage(BaseModel, Generic[T]):
    """One page of a newest-first list plus the cursor for the next one."""

    items: list[T] = Field(default_factory=list)
    next_cursor: str | None = None


class ActionResponse(BaseModel):
    """Structured result of a mutation."""

    success: bool
    message: str | None = None
    is_active: bool | None = None
    count: int | None = None
    errors: dict[str, list[str]] | None = None
    data: Any = None


__all__ = ["CursorPage", "ActionResponse"]
