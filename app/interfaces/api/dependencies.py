"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    NotificationDeliveryService,
    NotificationReadStateService,
)
from app.config import get_settings
from app.domain.entities import User
from app.infrastructure.database import get_db
from app.infrastructure.realtime import NotificationPublisher
from app.infrastructure.repositories import UserRepository
from app.infrastructure.security import decode_access_token
from app.utils import normalize_identifier

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def _credentials_error(detail: str = "Invalid credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str, db: Session) -> User:
    """Resolve the authenticated user for the provided token."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _credentials_error() from exc

    user_id = normalize_identifier(payload.get("sub"))
    if user_id is None:
        raise _credentials_error()

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _credentials_error("User not found")
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(token, db)


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user is active."""

    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    return current_user


def require_admin(current_user: User = Depends(get_current_active_user)) -> User:
    """Ensure the authenticated user has administrator privileges."""

    if not current_user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized",
        )
    return current_user


def get_notification_publisher(request: Request) -> NotificationPublisher:
    return request.app.state.notification_publisher


def get_delivery_service(
    db: Session = Depends(get_db),
    publisher: NotificationPublisher = Depends(get_notification_publisher),
) -> NotificationDeliveryService:
    return NotificationDeliveryService(
        db, publisher, broadcast_role_alias=get_settings().broadcast_role_alias
    )


def get_read_state_service(db: Session = Depends(get_db)) -> NotificationReadStateService:
    return NotificationReadStateService(db)
