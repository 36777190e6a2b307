"""Paginated listing, read-state transitions and inbox summaries."""

from __future__ import annotations

import math

from sqlalchemy.orm import Session

from app.domain.entities import (
    Notification,
    NotificationPage,
    NotificationPageMeta,
    NotificationStatusFilter,
    NotificationSummary,
)
from app.domain.exceptions import InvalidIdentifierError
from app.infrastructure.repositories import NotificationRepository
from app.utils import normalize_identifier, now_in_app_timezone

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MIN_LIMIT = 5
MAX_LIMIT = 100


def clamp_page(page: int | None) -> int:
    if page is None:
        return DEFAULT_PAGE
    return max(DEFAULT_PAGE, page)


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return min(MAX_LIMIT, max(MIN_LIMIT, limit))


class NotificationReadStateService:
    """Queries and read-state transitions scoped to a single user's inbox."""

    def __init__(self, session: Session) -> None:
        self.notifications = NotificationRepository(session)

    def list_for_user(
        self,
        user_id: int | str,
        *,
        page: int | None = None,
        limit: int | None = None,
        status: NotificationStatusFilter | str | None = None,
    ) -> NotificationPage:
        """Return one page of notifications, newest first.

        ``unread_count`` always reflects the user's whole inbox, whatever
        ``status`` filter is applied to the items.
        """

        owner_id = _resolve(user_id, "user")
        page, limit = clamp_page(page), clamp_limit(limit)
        is_read = NotificationStatusFilter.parse(status).is_read_condition()

        items = self.notifications.list_for_user(
            owner_id, is_read=is_read, offset=(page - 1) * limit, limit=limit
        )
        total = self.notifications.count_for_user(owner_id, is_read=is_read)
        unread_count = self.notifications.count_for_user(owner_id, is_read=False)

        return NotificationPage(
            items=items,
            meta=NotificationPageMeta(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit) if total > 0 else 1,
                unread_count=unread_count,
            ),
        )

    def mark_as_read(
        self, user_id: int | str, notification_id: int | str
    ) -> Notification | None:
        """Mark one notification as read; ``None`` when it is not the user's."""

        owner_id = _resolve(user_id, "user")
        resolved_id = _resolve(notification_id, "notification")
        return self.notifications.mark_as_read(
            resolved_id, user_id=owner_id, read_at=now_in_app_timezone()
        )

    def mark_all_as_read(self, user_id: int | str) -> int:
        """Mark every unread notification as read and return how many changed."""

        owner_id = _resolve(user_id, "user")
        return self.notifications.mark_all_as_read(owner_id, read_at=now_in_app_timezone())

    def get_summary(self, user_id: int | str) -> NotificationSummary:
        owner_id = _resolve(user_id, "user")
        latest_unread = self.notifications.get_latest_for_user(owner_id, is_read=False)
        return NotificationSummary(
            total=self.notifications.count_for_user(owner_id),
            unread=self.notifications.count_for_user(owner_id, is_read=False),
            latest_notification=self.notifications.get_latest_for_user(owner_id),
            latest_unread_at=latest_unread.created_at if latest_unread else None,
        )


def _resolve(value: int | str, kind: str) -> int:
    identifier = normalize_identifier(value)
    if identifier is None:
        raise InvalidIdentifierError(f"Invalid {kind} identifier")
    return identifier


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_PAGE",
    "MAX_LIMIT",
    "MIN_LIMIT",
    "NotificationReadStateService",
    "clamp_limit",
    "clamp_page",
]
