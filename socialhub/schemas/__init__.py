"""Convenience exports for schema layer."""
from .admin import (
    ActivityDay,
    AdminStatsResponse,
    AdminUserListResponse,
    AdminUserSummary,
    GrowthPoint,
    RoleShare,
    RoleUpdateRequest,
)
from .auth import AuthResponse, LoginRequest, RegisterRequest
from .common import ActionResponse, CursorPage
from .explore import PostListResponse, SearchResponse, TagCount, TagListResponse
from .notifications import ContentExcerpt, NotificationListResponse, NotificationResponse, UnreadCountResponse
from .posts import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    PostCreate,
    PostFeedResponse,
    PostResponse,
)
from .users import (
    AuthorPreview,
    ProfileCounts,
    ProfileResponse,
    ProfileUpdateRequest,
    SuggestedUsersResponse,
    UserListResponse,
    UserPreview,
    UserSearchResponse,
)

__all__ = [
    "ActionResponse",
    "ActivityDay",
    "AdminStatsResponse",
    "AdminUserListResponse",
    "AdminUserSummary",
    "AuthResponse",
    "AuthorPreview",
    "CommentCreate",
    "CommentListResponse",
    "CommentResponse",
    "ContentExcerpt",
    "CursorPage",
    "GrowthPoint",
    "LoginRequest",
    "NotificationListResponse",
    "NotificationResponse",
    "PostCreate",
    "PostFeedResponse",
    "PostListResponse",
    "PostResponse",
    "ProfileCounts",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "RoleShare",
    "RoleUpdateRequest",
    "SearchResponse",
    "SuggestedUsersResponse",
    "TagCount",
    "TagListResponse",
    "UnreadCountResponse",
    "UserListResponse",
    "UserPreview",
    "UserSearchResponse",
]
