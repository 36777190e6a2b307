from .auth import Token
from .notification import (
    BroadcastResultRead,
    MarkAllReadResponse,
    NotificationBroadcastRequest,
    NotificationListMeta,
    NotificationListResponse,
    NotificationRead,
    NotificationSendRequest,
    NotificationSummaryRead,
)

__all__ = [
    "BroadcastResultRead",
    "MarkAllReadResponse",
    "NotificationBroadcastRequest",
    "NotificationListMeta",
    "NotificationListResponse",
    "NotificationRead",
    "NotificationSendRequest",
    "NotificationSummaryRead",
    "Token",
]
