"""Utility helpers shared across ORM models."""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp.

    Set on the Python side so rows inserted within the same second keep a
    distinct, microsecond-resolution ordering on every backend.
    """

    return datetime.now(timezone.utc)


__all__ = ["utcnow"]
