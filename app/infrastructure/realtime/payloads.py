"""Validation models for events sent by realtime clients."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ClientPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class SupportChatRoomPayload(_ClientPayload):
    """Body of ``support-chat:join`` and ``support-chat:leave``."""

    user_id: str = Field(..., alias="userId", min_length=1)


class SupportChatAdminPayload(_ClientPayload):
    """Body of ``support-chat:join-admin``."""

    admin_id: str | None = Field(default=None, alias="adminId", min_length=1)


class FriendChatThreadPayload(_ClientPayload):
    """Body of the friend-chat thread events; extra keys are relayed untouched."""

    model_config = ConfigDict(extra="allow")

    thread_id: str = Field(..., alias="threadId", min_length=1)


__all__ = [
    "FriendChatThreadPayload",
    "SupportChatAdminPayload",
    "SupportChatRoomPayload",
]
