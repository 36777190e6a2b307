"""Notification delivery and inbox read-state use cases."""

from .delivery import NotificationDeliveryService
from .read_state import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MIN_LIMIT,
    NotificationReadStateService,
    clamp_limit,
    clamp_page,
)

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "MIN_LIMIT",
    "NotificationDeliveryService",
    "NotificationReadStateService",
    "clamp_limit",
    "clamp_page",
]
