"""Realtime transport: room membership, event routing and notification pushes."""

from .manager import RealtimeConnection, RoomConnectionManager
from .publisher import NotificationPublisher, serialize_notification
from .rooms import (
    AUTH_ERROR_EVENT,
    FRIEND_CHAT_READY_EVENT,
    FRIEND_CHAT_TYPING_EVENT,
    NOTIFICATION_EVENT,
    SUPPORT_ADMINS_ROOM,
    VALIDATION_ERROR_EVENT,
    inbox_room,
    support_admin_room,
    support_user_room,
    thread_room,
)
from .router import Handshake, RealtimeRoomRouter, TokenVerifier

__all__ = [
    "AUTH_ERROR_EVENT",
    "FRIEND_CHAT_READY_EVENT",
    "FRIEND_CHAT_TYPING_EVENT",
    "Handshake",
    "NOTIFICATION_EVENT",
    "NotificationPublisher",
    "RealtimeConnection",
    "RealtimeRoomRouter",
    "RoomConnectionManager",
    "SUPPORT_ADMINS_ROOM",
    "TokenVerifier",
    "VALIDATION_ERROR_EVENT",
    "inbox_room",
    "serialize_notification",
    "support_admin_room",
    "support_user_room",
    "thread_room",
]
