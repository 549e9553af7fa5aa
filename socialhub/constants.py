"""Project-wide constant values."""
from __future__ import annotations

ROLE_USER = "USER"
ROLE_MODERATOR = "MODERATOR"
ROLE_ADMIN = "ADMIN"

VALID_ROLES = frozenset({ROLE_USER, ROLE_MODERATOR, ROLE_ADMIN})

# Roles allowed to remove content they do not own
CONTENT_MODERATOR_ROLES = frozenset({ROLE_ADMIN, ROLE_MODERATOR})

FEED_PAGE_SIZE = 10
COMMENTS_PAGE_SIZE = 10
FOLLOWS_PAGE_SIZE = 20
NOTIFICATIONS_PAGE_SIZE = 20

__all__ = [
    "ROLE_USER",
    "ROLE_MODERATOR",
    "ROLE_ADMIN",
    "VALID_ROLES",
    "CONTENT_MODERATOR_ROLES",
    "FEED_PAGE_SIZE",
    "COMMENTS_PAGE_SIZE",
    "FOLLOWS_PAGE_SIZE",
    "NOTIFICATIONS_PAGE_SIZE",
]
