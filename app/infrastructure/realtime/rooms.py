"""Logical room names and realtime event names."""

from __future__ import annotations

NOTIFICATION_EVENT = "notification"
AUTH_ERROR_EVENT = "auth-error"
VALIDATION_ERROR_EVENT = "validation-error"
FRIEND_CHAT_READY_EVENT = "friend-chat:ready"
FRIEND_CHAT_JOIN_THREAD_EVENT = "friend-chat:join-thread"
FRIEND_CHAT_LEAVE_THREAD_EVENT = "friend-chat:leave-thread"
FRIEND_CHAT_TYPING_EVENT = "friend-chat:typing"
SUPPORT_CHAT_JOIN_EVENT = "support-chat:join"
SUPPORT_CHAT_LEAVE_EVENT = "support-chat:leave"
SUPPORT_CHAT_JOIN_ADMIN_EVENT = "support-chat:join-admin"

SUPPORT_ADMINS_ROOM = "support:admins"


def inbox_room(user_id: int | str) -> str:
    return f"inbox:{user_id}"


def thread_room(thread_id: str) -> str:
    return f"thread:{thread_id}"


def support_user_room(user_id: str) -> str:
    return f"support:user:{user_id}"


def support_admin_room(admin_id: str) -> str:
    return f"support:admin:{admin_id}"


def is_identity_room(room: str) -> bool:
    """Return ``True`` for rooms joined on behalf of a verified identity."""

    return room.startswith(("inbox:", "thread:"))
