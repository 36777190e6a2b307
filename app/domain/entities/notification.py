"""Domain entities describing persisted user notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_NOTIFICATION_TYPE = "system"


class NotificationAudience(str, Enum):
    """Who a notification is addressed to."""

    SINGLE_USER = "user"
    ALL_USERS = "all_users"


class NotificationStatusFilter(str, Enum):
    """Read-state filter applied when listing notifications."""

    ALL = "all"
    READ = "read"
    UNREAD = "unread"

    @classmethod
    def parse(cls, value: "str | NotificationStatusFilter | None") -> "NotificationStatusFilter":
        """Return the filter for ``value``, falling back to :attr:`ALL`."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.ALL

    def is_read_condition(self) -> bool | None:
        """Return the ``is_read`` value this filter selects, ``None`` for all."""

        if self is NotificationStatusFilter.READ:
            return True
        if self is NotificationStatusFilter.UNREAD:
            return False
        return None


@dataclass
class Notification:
    """Message delivered to exactly one user.

    Only ``is_read`` and ``read_at`` ever change after creation, and only in the
    unread to read direction.
    """

    id: int | None
    user_id: int
    title: str
    message: str
    type: str = DEFAULT_NOTIFICATION_TYPE
    payload: Any | None = None
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class NotificationPageMeta:
    page: int
    limit: int
    total: int
    total_pages: int
    unread_count: int


@dataclass(frozen=True)
class NotificationPage:
    """One page of a user's notifications."""

    items: list[Notification]
    meta: NotificationPageMeta


@dataclass(frozen=True)
class NotificationSummary:
    """Unread counters and latest activity for a user's inbox."""

    total: int
    unread: int
    latest_notification: Notification | None
    latest_unread_at: datetime | None

    @property
    def has_unread(self) -> bool:
        return self.unread > 0


@dataclass(frozen=True)
class BroadcastResult:
    """Outcome of an all-users send."""

    sent_to: int
    persisted: int


__all__ = [
    "BroadcastResult",
    "DEFAULT_NOTIFICATION_TYPE",
    "Notification",
    "NotificationAudience",
    "NotificationPage",
    "NotificationPageMeta",
    "NotificationStatusFilter",
    "NotificationSummary",
]
