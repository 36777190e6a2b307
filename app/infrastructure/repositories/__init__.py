"""Repository implementations for infrastructure layer."""

from .role_repository import RoleRepository
from .user_repository import UserRepository
from .notification_repository import NotificationRepository

__all__ = [
    "NotificationRepository",
    "RoleRepository",
    "UserRepository",
]
