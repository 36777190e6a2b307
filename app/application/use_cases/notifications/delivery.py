"""Create notification rows and push them to connected recipients."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    DEFAULT_NOTIFICATION_TYPE,
    MEMBER_ROLE_ALIAS,
    BroadcastResult,
    Notification,
    NotificationAudience,
)
from app.domain.exceptions import InvalidNotificationRequest
from app.infrastructure.realtime import NotificationPublisher
from app.infrastructure.repositories import NotificationRepository, UserRepository
from app.utils import normalize_identifier, now_in_app_timezone

logger = logging.getLogger(__name__)


class NotificationDeliveryService:
    """Persist notifications for one user or for every member, then push them.

    Rows are always written before any push is scheduled. Existing rows are
    never modified. A storage failure is logged and reported as ``None``.
    """

    def __init__(
        self,
        session: Session,
        publisher: NotificationPublisher,
        *,
        broadcast_role_alias: str = MEMBER_ROLE_ALIAS,
    ) -> None:
        self.session = session
        self.publisher = publisher
        self.broadcast_role_alias = broadcast_role_alias
        self.notifications = NotificationRepository(session)
        self.users = UserRepository(session)

    def send(
        self,
        *,
        audience: NotificationAudience | str,
        title: str,
        message: str,
        target_id: int | str | None = None,
        type: str | None = None,
        payload: Any | None = None,
    ) -> Notification | BroadcastResult | None:
        """Deliver a notification to ``audience``.

        Returns the stored row for a single user, a :class:`BroadcastResult`
        for all users and ``None`` when persistence failed. Raises
        :class:`InvalidNotificationRequest` before writing anything when the
        request is malformed.
        """

        resolved_audience = _parse_audience(audience)
        title, message = _require_text(title, "title"), _require_text(message, "message")
        notification_type = (type or "").strip() or DEFAULT_NOTIFICATION_TYPE

        if resolved_audience is NotificationAudience.SINGLE_USER:
            user_id = normalize_identifier(target_id)
            if user_id is None:
                raise InvalidNotificationRequest("A valid target user is required")
            if not self.users.exists(user_id):
                raise InvalidNotificationRequest("Target user not found")
            return self._send_to_user(user_id, notification_type, title, message, payload)

        return self._send_to_members(notification_type, title, message, payload)

    def broadcast(
        self,
        *,
        title: str,
        message: str,
        type: str | None = None,
        payload: Any | None = None,
    ) -> BroadcastResult | None:
        """Deliver a notification to every member; shorthand for ``send``."""

        return self.send(
            audience=NotificationAudience.ALL_USERS,
            title=title,
            message=message,
            type=type,
            payload=payload,
        )

    def _send_to_user(
        self,
        user_id: int,
        notification_type: str,
        title: str,
        message: str,
        payload: Any | None,
    ) -> Notification | None:
        notification = Notification(
            id=None,
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            payload=payload,
            created_at=now_in_app_timezone(),
        )
        try:
            saved = self.notifications.create(notification)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to persist notification for user %s", user_id)
            return None

        self.publisher.dispatch(saved)
        return saved

    def _send_to_members(
        self,
        notification_type: str,
        title: str,
        message: str,
        payload: Any | None,
    ) -> BroadcastResult | None:
        created_at = now_in_app_timezone()
        try:
            recipients = self.users.list_ids_by_role_alias(self.broadcast_role_alias)
            if not recipients:
                return BroadcastResult(sent_to=0, persisted=0)
            saved = self.notifications.create_many(
                [
                    Notification(
                        id=None,
                        user_id=recipient_id,
                        type=notification_type,
                        title=title,
                        message=message,
                        payload=payload,
                        created_at=created_at,
                    )
                    for recipient_id in recipients
                ]
            )
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception(
                "Failed to persist broadcast notification for role %s",
                self.broadcast_role_alias,
            )
            return None

        logger.info(
            "Broadcast notification %r stored for %d recipients", title, len(saved)
        )
        self.publisher.dispatch_many(saved)
        return BroadcastResult(sent_to=len(saved), persisted=len(saved))


def _parse_audience(value: NotificationAudience | str) -> NotificationAudience:
    try:
        return NotificationAudience(value)
    except ValueError as exc:
        raise InvalidNotificationRequest(f"Unsupported audience: {value!r}") from exc


def _require_text(value: str | None, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidNotificationRequest(f"The {field_name} must be a non-empty string")
    return value


__all__ = ["NotificationDeliveryService"]
