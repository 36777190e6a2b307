"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import NotificationAudience


class NotificationSendRequest(BaseModel):
    """Admin request to deliver a notification to one user or every member."""

    model_config = ConfigDict(populate_by_name=True)

    audience: str = Field(..., description='Either "user" or "all_users"')
    target_id: int | str | None = Field(default=None, alias="targetId")
    type: str | None = Field(default=None, max_length=50)
    title: str = Field(..., max_length=200)
    message: str
    payload: Any | None = None


class NotificationBroadcastRequest(BaseModel):
    """Admin request to deliver a notification to every member."""

    audience: str = NotificationAudience.ALL_USERS.value
    type: str | None = Field(default=None, max_length=50)
    title: str = Field(..., max_length=200)
    message: str
    payload: Any | None = None


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: str
    title: str
    message: str
    payload: Any | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime


class BroadcastResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sent_to: int
    persisted: int


class NotificationListMeta(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    page: int
    limit: int
    total: int
    total_pages: int
    unread_count: int


class NotificationListResponse(BaseModel):
    items: list[NotificationRead]
    meta: NotificationListMeta


class NotificationSummaryRead(BaseModel):
    """Inbox counters for the authenticated user."""

    total: int
    unread: int
    has_unread: bool
    latest_notification: NotificationRead | None = None
    latest_unread_at: datetime | None = None


class MarkAllReadResponse(BaseModel):
    updated: int


__all__ = [
    "BroadcastResultRead",
    "MarkAllReadResponse",
    "NotificationBroadcastRequest",
    "NotificationListMeta",
    "NotificationListResponse",
    "NotificationRead",
    "NotificationSendRequest",
    "NotificationSummaryRead",
]
