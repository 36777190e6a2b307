"""Aggregate application use cases."""

from .notifications import NotificationDeliveryService, NotificationReadStateService
from .users import authenticate_user, create_user, record_login

__all__ = [
    "NotificationDeliveryService",
    "NotificationReadStateService",
    "authenticate_user",
    "create_user",
    "record_login",
]
