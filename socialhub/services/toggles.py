"""Membership toggling for unique (actor, target) edge tables such as likes and follows."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import unit_of_work

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EdgeSpec:
    """Describes one edge table: which column holds the actor and which the target."""

    model: Any
    actor_column: str
    target_column: str

    def actor_col(self):
        return getattr(self.model, self.actor_column)

    def target_col(self):
        return getattr(self.model, self.target_column)


@dataclass(frozen=True, slots=True)
class ToggleOutcome:
    is_active: bool
    count: int
    changed: bool


def _find_edge(db: Session, spec: EdgeSpec, actor_id: UUID, target_id: UUID) -> Any | None:
    return db.scalar(select(spec.model).where(spec.actor_col() == actor_id, spec.target_col() == target_id))


def count_edges(db: Session, spec: EdgeSpec, target_id: UUID) -> int:
    """Re-read the exact edge total for ``target_id``."""

    return int(db.scalar(select(func.count()).select_from(spec.model).where(spec.target_col() == target_id)) or 0)


def set_membership(
    db: Session,
    spec: EdgeSpec,
    *,
    actor_id: UUID,
    target_id: UUID,
    desired: bool | None = None,
    on_created: Callable[[Any], None] | None = None,
) -> ToggleOutcome:
    """Flip (``desired=None``) or force the membership of ``actor_id`` on ``target_id``.

    ``on_created`` runs inside the same transaction as the edge insert, after
    the edge has been flushed, and is where side-effect rows (notifications)
    are staged. A unique-constraint violation from a concurrent insert means
    the edge already exists: the transaction is rolled back and the outcome
    reports the active state without a second side effect.
    """

    existing = _find_edge(db, spec, actor_id, target_id)
    changed = False

    if existing is not None and desired is not True:
        with unit_of_work(db):
            db.delete(existing)
        changed = True
        is_active = False
    elif existing is None and desired is not False:
        try:
            with unit_of_work(db):
                edge = spec.model(**{spec.actor_column: actor_id, spec.target_column: target_id})
                db.add(edge)
                db.flush()
                if on_created is not None:
                    on_created(edge)
        except IntegrityError:
            if _find_edge(db, spec, actor_id, target_id) is None:
                raise
            logger.info(
                "Concurrent %s insert for actor=%s target=%s; keeping existing edge",
                spec.model.__tablename__,
                actor_id,
                target_id,
            )
            is_active = True
        else:
            changed = True
            is_active = True
    else:
        is_active = existing is not None

    return ToggleOutcome(is_active=is_active, count=count_edges(db, spec, target_id), changed=changed)


__all__ = ["EdgeSpec", "ToggleOutcome", "set_membership", "count_edges"]
