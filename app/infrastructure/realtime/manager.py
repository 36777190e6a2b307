"""Room membership for realtime websocket connections."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set
from uuid import uuid4

from fastapi import WebSocket

from app.domain.entities import ConnectionIdentity

logger = logging.getLogger(__name__)


class RealtimeConnection:
    """A connected websocket client and the rooms it belongs to."""

    def __init__(self, websocket: WebSocket, connection_id: str | None = None) -> None:
        self.websocket = websocket
        self.id = connection_id or uuid4().hex
        self.identity: ConnectionIdentity | None = None
        self.rooms: Set[str] = set()

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    async def send(self, event_type: str, data: Any) -> None:
        await self.websocket.send_json({"type": event_type, "data": data})

    def __repr__(self) -> str:
        user_id = self.identity.user_id if self.identity else None
        return f"RealtimeConnection(id={self.id!r}, user_id={user_id!r})"


class RoomConnectionManager:
    """Track which connections joined which logical rooms."""

    def __init__(self) -> None:
        self._rooms: DefaultDict[str, Set[RealtimeConnection]] = defaultdict(set)

    def join(self, connection: RealtimeConnection, room: str) -> None:
        self._rooms[room].add(connection)
        connection.rooms.add(room)

    def leave(self, connection: RealtimeConnection, room: str) -> None:
        connection.rooms.discard(room)
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(connection)
        if not members:
            self._rooms.pop(room, None)

    def disconnect(self, connection: RealtimeConnection) -> None:
        """Remove ``connection`` from every room it joined."""

        for room in list(connection.rooms):
            self.leave(connection, room)

    def members(self, room: str) -> set[RealtimeConnection]:
        return set(self._rooms.get(room, set()))

    async def emit_to_room(
        self,
        room: str,
        event_type: str,
        data: Any,
        *,
        skip: RealtimeConnection | None = None,
    ) -> int:
        """Send an event to every member of ``room`` and return the delivery count.

        Members whose socket fails are dropped from all rooms.
        """

        delivered = 0
        for connection in list(self._rooms.get(room, set())):
            if connection is skip:
                continue
            try:
                await connection.send(event_type, data)
            except Exception:
                logger.warning(
                    "Dropping connection %s from room %s after a failed send",
                    connection.id,
                    room,
                    exc_info=True,
                )
                self.disconnect(connection)
            else:
                delivered += 1
        return delivered


__all__ = ["RealtimeConnection", "RoomConnectionManager"]
