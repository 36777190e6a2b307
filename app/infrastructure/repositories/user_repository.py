"""Persistence layer for user data."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.domain.entities import Role, User
from app.infrastructure.models import RoleModel, UserModel
from app.utils import ensure_app_naive_datetime, ensure_app_timezone


class UserRepository:
    """Directory of user accounts used for authentication and fan-out."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self._get_model(id=user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = self._get_model(email=email)
        return self._to_entity(model) if model else None

    def exists(self, user_id: int) -> bool:
        query = (
            self.session.query(UserModel.id)
            .filter(UserModel.id == user_id)
            .filter(UserModel.deleted.is_(False))
        )
        return query.first() is not None

    def create(self, user: User) -> User:
        model = UserModel(
            role_id=user.role.id,
            name=user.name,
            email=user.email,
            password=user.password,
            is_active=user.is_active,
            deleted=user.deleted,
            created_at=ensure_app_naive_datetime(user.created_at),
            last_login=ensure_app_naive_datetime(user.last_login),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def record_login(self, user_id: int, when: datetime) -> None:
        model = self._get_model(id=user_id)
        if model is None:
            return
        model.last_login = ensure_app_naive_datetime(when)
        self.session.add(model)
        self.session.commit()

    def list_ids_by_role_alias(self, alias: str) -> list[int]:
        """Return the ids of every non-deleted user holding role ``alias``."""

        query = (
            self.session.query(UserModel.id)
            .join(RoleModel, UserModel.role_id == RoleModel.id)
            .filter(UserModel.deleted.is_(False))
            .filter(func.lower(RoleModel.alias) == alias.lower())
            .order_by(UserModel.id)
        )
        return [user_id for (user_id,) in query.all()]

    def _get_model(self, **filters) -> UserModel | None:
        query = (
            self.session.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter(UserModel.deleted.is_(False))
        )
        return query.filter_by(**filters).first()

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        if model.role is None:
            msg = "User role is not set"
            raise ValueError(msg)
        return User(
            id=model.id,
            role=Role(id=model.role.id, name=model.role.name, alias=model.role.alias),
            name=model.name,
            email=model.email,
            password=model.password,
            is_active=model.is_active,
            deleted=model.deleted,
            created_at=ensure_app_timezone(model.created_at),
            last_login=ensure_app_timezone(model.last_login),
        )


__all__ = ["UserRepository"]
