"""Push persisted notifications to their recipients' inbox rooms."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from anyio import from_thread

from app.domain.entities import Notification

from .rooms import NOTIFICATION_EVENT
from .router import RealtimeRoomRouter

logger = logging.getLogger(__name__)

PushMessage = tuple[int, dict[str, Any]]


class NotificationPublisher:
    """Serialize notifications and schedule their delivery.

    Delivery is best effort and fire-and-forget: callers only wait for the
    pushes to be scheduled on the event loop, never for socket writes.
    Failures are logged and never reach the caller, since clients reconcile
    through the persisted store.
    """

    def __init__(self, router: RealtimeRoomRouter) -> None:
        self._router = router
        self._pending: set[asyncio.Task[None]] = set()

    def dispatch(self, notification: Notification) -> None:
        """Schedule ``notification`` to be pushed to its owner."""

        self.dispatch_many([notification])

    def dispatch_many(self, notifications: Iterable[Notification]) -> None:
        """Schedule one push per notification, each to its own owner."""

        messages = [
            (notification.user_id, serialize_notification(notification))
            for notification in notifications
        ]
        if not messages:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self._schedule_from_thread(messages)
        else:
            self._schedule(messages)

    def _schedule(self, messages: Sequence[PushMessage]) -> None:
        loop = asyncio.get_running_loop()
        for user_id, message in messages:
            task = loop.create_task(self._deliver(user_id, message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    def _schedule_from_thread(self, messages: Sequence[PushMessage]) -> None:
        # One hop to the loop for the whole batch; the pushes run as tasks there.
        try:
            from_thread.run_sync(self._schedule, messages)
        except RuntimeError:
            logger.warning(
                "No event loop reachable to push %d notification(s)", len(messages)
            )

    async def _deliver(self, user_id: int, message: dict[str, Any]) -> None:
        try:
            await self._router.emit_to_user(user_id, NOTIFICATION_EVENT, message)
        except Exception:
            logger.warning(
                "Push of notification %s to user %s failed",
                message.get("id"),
                user_id,
                exc_info=True,
            )


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the realtime payload representation for ``notification``."""

    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "payload": notification.payload,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
    }


__all__ = ["NotificationPublisher", "serialize_notification"]
