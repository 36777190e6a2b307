"""Use case for creating users."""

from sqlalchemy.orm import Session

from app.domain.entities import MEMBER_ROLE_ALIAS, User
from app.infrastructure.repositories import RoleRepository, UserRepository
from app.infrastructure.security import get_password_hash
from app.utils import now_in_app_timezone


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    role_alias: str = MEMBER_ROLE_ALIAS,
) -> User:
    """Create a new user ensuring unique email addresses.

    The role is created on first use so a fresh database can be seeded.
    """

    repository = UserRepository(session)
    normalized_email = email.strip().lower()
    if repository.get_by_email(normalized_email):
        raise ValueError("The email address is already registered")
    if not password:
        raise ValueError("A password is required")

    role = RoleRepository(session).ensure(role_alias)
    user = User(
        id=None,
        role=role,
        name=name,
        email=normalized_email,
        password=get_password_hash(password),
        created_at=now_in_app_timezone(),
    )
    return repository.create(user)
