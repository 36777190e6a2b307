"""Domain entities exposed by the application."""

from .notification import (
    DEFAULT_NOTIFICATION_TYPE,
    BroadcastResult,
    Notification,
    NotificationAudience,
    NotificationPage,
    NotificationPageMeta,
    NotificationStatusFilter,
    NotificationSummary,
)
from .realtime import ConnectionIdentity
from .role import Role
from .user import ADMIN_ROLE_ALIAS, MEMBER_ROLE_ALIAS, User

__all__ = [
    "ADMIN_ROLE_ALIAS",
    "BroadcastResult",
    "ConnectionIdentity",
    "DEFAULT_NOTIFICATION_TYPE",
    "MEMBER_ROLE_ALIAS",
    "Notification",
    "NotificationAudience",
    "NotificationPage",
    "NotificationPageMeta",
    "NotificationStatusFilter",
    "NotificationSummary",
    "Role",
    "User",
]
