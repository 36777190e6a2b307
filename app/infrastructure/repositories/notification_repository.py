"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Query, Session

from app.domain.entities import DEFAULT_NOTIFICATION_TYPE, Notification
from app.infrastructure.models import NotificationModel
from app.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone


class NotificationRepository:
    """Provide storage operations for :class:`Notification` objects.

    Every read and write is scoped by an equality filter on ``user_id`` and,
    optionally, ``is_read``.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        model = self._to_model(notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def create_many(self, notifications: Sequence[Notification]) -> list[Notification]:
        """Insert ``notifications`` in a single unit of work."""

        models = [self._to_model(notification) for notification in notifications]
        if not models:
            return []
        self.session.add_all(models)
        self.session.flush()
        saved = [self._to_entity(model) for model in models]
        self.session.commit()
        return saved

    def list_for_user(
        self,
        user_id: int,
        *,
        is_read: bool | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Notification]:
        query = self._scoped(user_id, is_read=is_read).order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_for_user(self, user_id: int, *, is_read: bool | None = None) -> int:
        return self._scoped(user_id, is_read=is_read).count()

    def get_latest_for_user(
        self, user_id: int, *, is_read: bool | None = None
    ) -> Notification | None:
        model = (
            self._scoped(user_id, is_read=is_read)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .first()
        )
        return self._to_entity(model) if model else None

    def get_for_user(self, notification_id: int, *, user_id: int) -> Notification | None:
        model = (
            self._scoped(user_id).filter(NotificationModel.id == notification_id).first()
        )
        return self._to_entity(model) if model else None

    def mark_as_read(
        self, notification_id: int, *, user_id: int, read_at: datetime | None = None
    ) -> Notification | None:
        """Flag one notification as read and return it.

        The update only touches unread rows, so ``read_at`` keeps the value of
        the first transition. ``None`` is returned when the notification does
        not exist or belongs to another user.
        """

        stamp = ensure_app_naive_datetime(read_at or now_in_app_timezone())
        self._scoped(user_id, is_read=False).filter(
            NotificationModel.id == notification_id
        ).update(
            {NotificationModel.is_read: True, NotificationModel.read_at: stamp},
            synchronize_session=False,
        )
        self.session.commit()
        return self.get_for_user(notification_id, user_id=user_id)

    def mark_all_as_read(self, user_id: int, *, read_at: datetime | None = None) -> int:
        """Flag every unread notification of ``user_id`` and return the row count."""

        stamp = ensure_app_naive_datetime(read_at or now_in_app_timezone())
        updated = self._scoped(user_id, is_read=False).update(
            {NotificationModel.is_read: True, NotificationModel.read_at: stamp},
            synchronize_session=False,
        )
        self.session.commit()
        return int(updated or 0)

    def _scoped(self, user_id: int, *, is_read: bool | None = None) -> Query:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(is_read))
        return query

    @staticmethod
    def _to_model(notification: Notification) -> NotificationModel:
        return NotificationModel(
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            payload=notification.payload,
            is_read=notification.is_read,
            read_at=ensure_app_naive_datetime(notification.read_at),
            created_at=ensure_app_naive_datetime(
                notification.created_at or now_in_app_timezone()
            ),
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=model.type or DEFAULT_NOTIFICATION_TYPE,
            title=model.title,
            message=model.message,
            payload=model.payload,
            is_read=bool(model.is_read),
            read_at=ensure_app_timezone(model.read_at),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
