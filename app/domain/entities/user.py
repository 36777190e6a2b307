"""Domain entity representing a community member account."""

from dataclasses import dataclass
from datetime import datetime

from .role import Role

ADMIN_ROLE_ALIAS = "admin"
MEMBER_ROLE_ALIAS = "member"


@dataclass
class User:
    """Core attributes describing an application user."""

    id: int | None
    role: Role
    name: str
    email: str
    password: str
    is_active: bool = True
    deleted: bool = False
    created_at: datetime | None = None
    last_login: datetime | None = None

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role alias matches ``alias``."""

        return self.role.alias.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ADMIN_ROLE_ALIAS)


__all__ = ["ADMIN_ROLE_ALIAS", "MEMBER_ROLE_ALIAS", "User"]
