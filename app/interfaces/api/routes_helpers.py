"""Helper utilities shared across API route handlers."""

from __future__ import annotations

from app.domain.entities import Notification, NotificationSummary, User
from app.interfaces.api.schemas import NotificationRead, NotificationSummaryRead


def resolve_inbox_owner(current_user: User, requested_user_id: str | None) -> int | str:
    """Return whose inbox a request reads.

    Administrators may inspect another user's inbox through ``requested_user_id``;
    for everybody else the parameter is ignored.
    """

    if requested_user_id is not None and current_user.is_admin():
        return requested_user_id
    return current_user.id


def notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


def summary_to_schema(summary: NotificationSummary) -> NotificationSummaryRead:
    latest = summary.latest_notification
    return NotificationSummaryRead(
        total=summary.total,
        unread=summary.unread,
        has_unread=summary.has_unread,
        latest_notification=notification_to_schema(latest) if latest else None,
        latest_unread_at=summary.latest_unread_at,
    )
