"""Authenticate realtime connections and route their room events."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from app.domain.entities import ConnectionIdentity
from app.utils import normalize_identifier

from .manager import RealtimeConnection, RoomConnectionManager
from .payloads import (
    FriendChatThreadPayload,
    SupportChatAdminPayload,
    SupportChatRoomPayload,
)
from .rooms import (
    AUTH_ERROR_EVENT,
    FRIEND_CHAT_JOIN_THREAD_EVENT,
    FRIEND_CHAT_LEAVE_THREAD_EVENT,
    FRIEND_CHAT_READY_EVENT,
    FRIEND_CHAT_TYPING_EVENT,
    SUPPORT_ADMINS_ROOM,
    SUPPORT_CHAT_JOIN_ADMIN_EVENT,
    SUPPORT_CHAT_JOIN_EVENT,
    SUPPORT_CHAT_LEAVE_EVENT,
    VALIDATION_ERROR_EVENT,
    inbox_room,
    is_identity_room,
    support_admin_room,
    support_user_room,
    thread_room,
)

logger = logging.getLogger(__name__)

TokenVerifier = Callable[[str], Mapping[str, Any]]
EventHandler = Callable[[RealtimeConnection, Any], Awaitable[None]]

_BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Handshake:
    """Authentication metadata presented when a client connects."""

    auth: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)

    def token(self) -> str | None:
        """Return the identity token, looking at auth, query then header."""

        candidates = (
            self.auth.get("token"),
            self.query.get("token"),
            self._bearer_token(),
        )
        for candidate in candidates:
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return None

    def _bearer_token(self) -> str | None:
        header = self.headers.get("authorization") or self.headers.get("Authorization")
        if not header or not header.lower().startswith(_BEARER_PREFIX):
            return None
        return header[len(_BEARER_PREFIX):]


class RealtimeRoomRouter:
    """Bind connections to identities and manage their room memberships.

    Verified connections join their ``inbox:<user_id>`` room on connect.
    Unauthenticated connections stay open but may only use the support-chat
    events; friend-chat events from them are ignored.
    """

    def __init__(self, manager: RoomConnectionManager, verify_token: TokenVerifier) -> None:
        self.manager = manager
        self._verify_token = verify_token
        self._handlers: dict[str, EventHandler] = {
            SUPPORT_CHAT_JOIN_EVENT: self._on_support_join,
            SUPPORT_CHAT_LEAVE_EVENT: self._on_support_leave,
            SUPPORT_CHAT_JOIN_ADMIN_EVENT: self._on_support_join_admin,
            FRIEND_CHAT_JOIN_THREAD_EVENT: self._on_join_thread,
            FRIEND_CHAT_LEAVE_THREAD_EVENT: self._on_leave_thread,
            FRIEND_CHAT_TYPING_EVENT: self._on_typing,
        }

    def authenticate(self, handshake: Handshake) -> ConnectionIdentity | None:
        token = handshake.token()
        if token is None:
            return None
        try:
            claims = self._verify_token(token)
        except ValueError:
            logger.info("Rejected realtime token: verification failed")
            return None

        user_id = normalize_identifier(claims.get("sub"))
        if user_id is None:
            logger.info("Rejected realtime token: missing subject")
            return None
        role = claims.get("role")
        return ConnectionIdentity(user_id=user_id, role=role if isinstance(role, str) else None)

    async def connect(
        self, connection: RealtimeConnection, handshake: Handshake
    ) -> ConnectionIdentity | None:
        """Bind ``connection`` to the identity carried by ``handshake``.

        May be called again on a live connection to re-authenticate; inbox and
        thread memberships of a previous identity are dropped when it changes.
        """

        identity = self.authenticate(handshake)
        previous = connection.identity
        if previous is not None and previous != identity:
            self._release_identity_rooms(connection)
            connection.identity = None

        if identity is None:
            logger.info("Realtime connection %s is unauthenticated", connection.id)
            await connection.send(AUTH_ERROR_EVENT, {"message": "Authentication failed"})
            return None

        connection.identity = identity
        self.manager.join(connection, inbox_room(identity.user_id))
        logger.info(
            "Realtime connection %s bound to user %s", connection.id, identity.user_id
        )
        await connection.send(
            FRIEND_CHAT_READY_EVENT, {"user_id": identity.user_id, "role": identity.role}
        )
        return identity

    def _release_identity_rooms(self, connection: RealtimeConnection) -> None:
        for room in list(connection.rooms):
            if is_identity_room(room):
                self.manager.leave(connection, room)

    def disconnect(self, connection: RealtimeConnection) -> None:
        self.manager.disconnect(connection)
        logger.info("Realtime connection %s closed", connection.id)

    async def handle_event(
        self, connection: RealtimeConnection, event_type: str, data: Any
    ) -> None:
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.debug("Ignoring unknown realtime event %r from %s", event_type, connection.id)
            return
        await handler(connection, data)

    async def emit_to_room(self, room: str, event_type: str, data: Any) -> int:
        return await self.manager.emit_to_room(room, event_type, data)

    async def emit_to_user(self, user_id: int, event_type: str, data: Any) -> int:
        return await self.emit_to_room(inbox_room(user_id), event_type, data)

    async def _on_support_join(self, connection: RealtimeConnection, data: Any) -> None:
        # Any connection may join any user's support room; admin tooling relies on it.
        payload = await self._validate(connection, SUPPORT_CHAT_JOIN_EVENT, SupportChatRoomPayload, data)
        if payload is not None:
            self.manager.join(connection, support_user_room(payload.user_id))

    async def _on_support_leave(self, connection: RealtimeConnection, data: Any) -> None:
        payload = await self._validate(connection, SUPPORT_CHAT_LEAVE_EVENT, SupportChatRoomPayload, data)
        if payload is not None:
            self.manager.leave(connection, support_user_room(payload.user_id))

    async def _on_support_join_admin(self, connection: RealtimeConnection, data: Any) -> None:
        payload = await self._validate(
            connection, SUPPORT_CHAT_JOIN_ADMIN_EVENT, SupportChatAdminPayload, data
        )
        if payload is None:
            return
        self.manager.join(connection, SUPPORT_ADMINS_ROOM)
        if payload.admin_id:
            self.manager.join(connection, support_admin_room(payload.admin_id))

    async def _on_join_thread(self, connection: RealtimeConnection, data: Any) -> None:
        if not connection.is_authenticated:
            return
        payload = await self._validate(
            connection, FRIEND_CHAT_JOIN_THREAD_EVENT, FriendChatThreadPayload, data
        )
        if payload is not None:
            self.manager.join(connection, thread_room(payload.thread_id))

    async def _on_leave_thread(self, connection: RealtimeConnection, data: Any) -> None:
        if not connection.is_authenticated:
            return
        payload = await self._validate(
            connection, FRIEND_CHAT_LEAVE_THREAD_EVENT, FriendChatThreadPayload, data
        )
        if payload is not None:
            self.manager.leave(connection, thread_room(payload.thread_id))

    async def _on_typing(self, connection: RealtimeConnection, data: Any) -> None:
        if connection.identity is None:
            return
        payload = await self._validate(
            connection, FRIEND_CHAT_TYPING_EVENT, FriendChatThreadPayload, data
        )
        if payload is None:
            return
        relayed = {**data, "user_id": connection.identity.user_id}
        await self.manager.emit_to_room(
            thread_room(payload.thread_id), FRIEND_CHAT_TYPING_EVENT, relayed, skip=connection
        )

    async def _validate(
        self,
        connection: RealtimeConnection,
        event_type: str,
        schema: type[BaseModel],
        data: Any,
    ) -> Any:
        try:
            return schema.model_validate({} if data is None else data)
        except ValidationError as exc:
            errors = [
                {"loc": [str(part) for part in error["loc"]], "msg": error["msg"]}
                for error in exc.errors()
            ]
            logger.warning("%s validation failed: %s", event_type, errors)
            await connection.send(VALIDATION_ERROR_EVENT, {"event": event_type, "errors": errors})
            return None


__all__ = ["Handshake", "RealtimeRoomRouter", "TokenVerifier"]
