"""Convenience exports for ORM models."""
from .follow import Follow
from .notification import Notification, NotificationType
from .post import Comment, Like, Post
from .user import User

__all__ = [
    "Comment",
    "Follow",
    "Like",
    "Notification",
    "NotificationType",
    "Post",
    "User",
]
