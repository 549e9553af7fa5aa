"""Aggregate router exports."""
from .admin import router as admin_router
from .auth import router as auth_router
from .comments import router as comments_router
from .explore import router as explore_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "comments_router",
    "explore_router",
    "notifications_router",
    "posts_router",
    "users_router",
]
