"""Cursor pagination shared by every list endpoint.

Lists are ordered newest first (``created_at DESC, id DESC``). A cursor is the
id of the last item the caller has already seen; the next page starts strictly
after it. Ties on ``created_at`` are broken by ``id`` so the traversal stays
deterministic when several rows share a timestamp.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, and_, or_
from sqlalchemy.orm import Session

from ..config import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    next_cursor: str | None = None

    def map(self, func: Callable[[T], R]) -> "Page[R]":
        return Page(items=[func(item) for item in self.items], next_cursor=self.next_cursor)


def normalize_limit(limit: int | None, *, default: int | None = None) -> int:
    """Clamp ``limit`` into ``[1, MAX_PAGE_SIZE]`` falling back to ``default``."""

    settings = get_settings()
    fallback = default or settings.default_page_size
    if limit is None:
        return min(fallback, settings.max_page_size)
    return max(1, min(int(limit), settings.max_page_size))


def parse_cursor(cursor: str | UUID | None) -> UUID | None:
    if cursor is None or isinstance(cursor, UUID):
        return cursor
    stripped = cursor.strip()
    if not stripped:
        return None
    return UUID(stripped)


def paginate(
    db: Session,
    statement: Select[Any],
    model: Any,
    *,
    cursor: str | UUID | None = None,
    limit: int | None = None,
    default_limit: int | None = None,
    options: Sequence[Any] = (),
) -> Page[Any]:
    """Return one page of ``statement`` ordered newest first.

    ``statement`` must select ``model`` as its first column (extra columns are
    allowed and are returned as rows) and must not carry its own ordering or
    limit. ``model`` has to expose ``id`` and ``created_at``. Loader
    ``options`` are applied to the page query only.

    A cursor that is malformed or not part of the filtered collection yields
    an empty page with no continuation.
    """

    page_size = normalize_limit(limit, default=default_limit)
    created_col = model.created_at
    id_col = model.id

    if cursor is not None:
        try:
            cursor_id = parse_cursor(cursor)
        except ValueError:
            logger.debug("Ignoring malformed cursor %r", cursor)
            return Page()
        if cursor_id is not None:
            anchor_stmt = statement.with_only_columns(created_col).where(id_col == cursor_id)
            anchor_created = db.scalar(anchor_stmt)
            if anchor_created is None:
                return Page()
            statement = statement.where(
                or_(
                    created_col < anchor_created,
                    and_(created_col == anchor_created, id_col < cursor_id),
                )
            )

    if options:
        statement = statement.options(*options)
    statement = statement.order_by(created_col.desc(), id_col.desc()).limit(page_size + 1)
    # selected_columns expands a lone entity into its table columns
    has_columns = len(statement.column_descriptions) > 1
    rows = list(db.execute(statement).all() if has_columns else db.scalars(statement).all())

    next_cursor: str | None = None
    if len(rows) > page_size:
        rows = rows[:page_size]
        last = rows[-1][0] if has_columns else rows[-1]
        next_cursor = str(last.id)

    return Page(items=rows, next_cursor=next_cursor)


__all__ = ["Page", "paginate", "normalize_limit", "parse_cursor"]
