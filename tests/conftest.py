"""Shared fixtures: a throw-away SQLite database, users and tokens."""

from __future__ import annotations

import os
import tempfile
from datetime import timedelta
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="fresh_community_")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["REALTIME_HANDSHAKE_TIMEOUT_SECONDS"] = "1"

from app.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from app.domain.entities import ADMIN_ROLE_ALIAS, MEMBER_ROLE_ALIAS, Notification  # noqa: E402
from app.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from app.infrastructure.models import RoleModel, UserModel  # noqa: E402
from app.infrastructure.repositories import NotificationRepository  # noqa: E402
from app.infrastructure.security import create_access_token  # noqa: E402
from app.utils import now_in_app_timezone  # noqa: E402


class RecordingPublisher:
    """Stand-in publisher that records what would have been pushed."""

    def __init__(self) -> None:
        self.dispatched: list[Notification] = []

    def dispatch(self, notification: Notification) -> None:
        self.dispatched.append(notification)

    def dispatch_many(self, notifications) -> None:
        for notification in notifications:
            self.dispatch(notification)


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure the test database starts from a clean state for each test."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db_session):
    """Insert a user with the given role alias and return its id."""

    counter = {"value": 0}

    def _make_user(role_alias: str = MEMBER_ROLE_ALIAS, *, deleted: bool = False, is_active: bool = True) -> int:
        role = db_session.query(RoleModel).filter_by(alias=role_alias).first()
        if role is None:
            role = RoleModel(name=role_alias.capitalize(), alias=role_alias)
            db_session.add(role)
            db_session.commit()
            db_session.refresh(role)

        counter["value"] += 1
        user = UserModel(
            role_id=role.id,
            name=f"{role_alias} {counter['value']}",
            email=f"{role_alias}{counter['value']}@example.com",
            password="not-a-real-hash",
            is_active=is_active,
            deleted=deleted,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user.id

    return _make_user


@pytest.fixture()
def make_notifications(db_session):
    """Insert ``count`` notifications for ``user_id``, oldest first, one minute apart."""

    def _make_notifications(user_id: int, count: int, *, read: int = 0) -> list[Notification]:
        start = now_in_app_timezone() - timedelta(hours=count)
        repository = NotificationRepository(db_session)
        created = []
        for index in range(count):
            is_read = index < read
            created.append(
                repository.create(
                    Notification(
                        id=None,
                        user_id=user_id,
                        title=f"Title {index + 1}",
                        message=f"Message {index + 1}",
                        is_read=is_read,
                        read_at=start if is_read else None,
                        created_at=start + timedelta(minutes=index),
                    )
                )
            )
        return created

    return _make_notifications


@pytest.fixture()
def token_for():
    def _token_for(user_id: int, role: str = MEMBER_ROLE_ALIAS) -> str:
        return create_access_token(user_id, role)

    return _token_for


@pytest.fixture()
def admin_headers(make_user, token_for):
    admin_id = make_user(ADMIN_ROLE_ALIAS)
    return {"Authorization": f"Bearer {token_for(admin_id, ADMIN_ROLE_ALIAS)}"}


@pytest.fixture()
def client():
    """Return a test client bound to a clean application instance."""

    from fastapi.testclient import TestClient

    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def publisher():
    return RecordingPublisher()
