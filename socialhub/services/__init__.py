"""Convenience exports for service layer."""
from .admin_service import (
    get_admin_stats,
    list_admin_users,
    role_distribution,
    update_user_role,
    user_growth,
    weekly_activity,
)
from .auth_service import (
    authenticate_user,
    create_access_token,
    decode_access_token,
    ensure_owner_or_role,
    get_current_user,
    get_optional_actor_id,
    get_optional_user,
    load_actor,
    register_user,
    require_actor,
    require_roles,
)
from .comment_service import create_comment, delete_comment, list_comments
from .explore_service import popular_posts, search, trending_tags
from .follow_service import (
    FollowStats,
    follow_user,
    get_follow_stats,
    is_following,
    list_followers,
    list_following,
    toggle_follow,
    unfollow_user,
)
from .notification_service import (
    NotificationType,
    count_unread,
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
    record_notification,
)
from .pagination import Page, normalize_limit, paginate
from .post_service import (
    create_post,
    delete_post,
    get_post,
    like_post,
    list_feed,
    list_following_feed,
    list_user_posts,
    toggle_like,
    unlike_post,
)
from .profile_service import get_profile, search_users, suggested_users, update_profile
from .results import (
    ActionError,
    ActionResult,
    ConflictError,
    ErrorKind,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
    action_boundary,
    http_error,
    run_action,
)
from .toggles import EdgeSpec, ToggleOutcome, count_edges, set_membership

__all__ = [
    "ActionError",
    "ActionResult",
    "ConflictError",
    "EdgeSpec",
    "ErrorKind",
    "FollowStats",
    "ForbiddenError",
    "NotFoundError",
    "NotificationType",
    "Page",
    "ToggleOutcome",
    "UnauthenticatedError",
    "ValidationError",
    "action_boundary",
    "authenticate_user",
    "count_edges",
    "count_unread",
    "create_access_token",
    "create_comment",
    "create_post",
    "decode_access_token",
    "delete_comment",
    "delete_notification",
    "delete_post",
    "ensure_owner_or_role",
    "follow_user",
    "get_admin_stats",
    "get_current_user",
    "get_follow_stats",
    "get_optional_actor_id",
    "get_optional_user",
    "get_post",
    "get_profile",
    "http_error",
    "is_following",
    "like_post",
    "list_admin_users",
    "list_comments",
    "list_feed",
    "list_followers",
    "list_following",
    "list_following_feed",
    "list_notifications",
    "list_user_posts",
    "load_actor",
    "mark_all_read",
    "mark_read",
    "normalize_limit",
    "paginate",
    "popular_posts",
    "record_notification",
    "register_user",
    "require_actor",
    "require_roles",
    "role_distribution",
    "run_action",
    "search",
    "search_users",
    "set_membership",
    "suggested_users",
    "toggle_follow",
    "toggle_like",
    "unfollow_user",
    "unlike_post",
    "update_profile",
    "update_user_role",
    "user_growth",
    "weekly_activity",
]
