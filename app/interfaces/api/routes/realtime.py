"""Websocket endpoint for inbox pushes, chat rooms and typing relays."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.config import get_settings
from app.infrastructure.realtime import Handshake, RealtimeConnection, RealtimeRoomRouter

router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)

CONNECT_FRAME = "connect"


@router.websocket("/ws")
async def realtime_websocket(websocket: WebSocket) -> None:
    """Bidirectional event stream.

    A token in the ``token`` query parameter or an ``Authorization: Bearer``
    header binds the connection as soon as it is accepted. Otherwise the first
    frame may be ``{"type": "connect", "data": {"token": ...}}``. A connect
    frame sent later re-authenticates the connection.
    """

    room_router: RealtimeRoomRouter = websocket.app.state.room_router
    await websocket.accept()
    connection = RealtimeConnection(websocket)

    try:
        transport = Handshake(query=dict(websocket.query_params), headers=websocket.headers)
        if transport.token() is not None:
            await room_router.connect(connection, transport)
        else:
            first = await _wait_for_first_frame(websocket)
            if _is_connect_frame(first):
                await _reauthenticate(room_router, connection, websocket, first)
            else:
                await room_router.connect(connection, transport)
                await _dispatch(room_router, connection, first)

        while True:
            frame = await _receive_frame(websocket)
            if _is_connect_frame(frame):
                await _reauthenticate(room_router, connection, websocket, frame)
            else:
                await _dispatch(room_router, connection, frame)
    except WebSocketDisconnect:
        pass
    finally:
        room_router.disconnect(connection)


async def _receive_frame(websocket: WebSocket) -> Any:
    """Return the next JSON frame, or ``None`` for binary or malformed frames."""

    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))

    text = message.get("text")
    if text is None:
        logger.debug("Ignoring non-text realtime frame")
        return None
    try:
        return json.loads(text)
    except ValueError:
        logger.debug("Ignoring malformed realtime frame")
        return None


async def _wait_for_first_frame(websocket: WebSocket) -> Any:
    timeout = get_settings().realtime_handshake_timeout_seconds
    try:
        return await asyncio.wait_for(_receive_frame(websocket), timeout=timeout)
    except asyncio.TimeoutError:
        return None


def _is_connect_frame(frame: Any) -> bool:
    return isinstance(frame, dict) and frame.get("type") == CONNECT_FRAME


async def _reauthenticate(
    room_router: RealtimeRoomRouter,
    connection: RealtimeConnection,
    websocket: WebSocket,
    frame: dict[str, Any],
) -> None:
    auth = frame.get("data")
    handshake = Handshake(
        auth=auth if isinstance(auth, dict) else {},
        query=dict(websocket.query_params),
        headers=websocket.headers,
    )
    await room_router.connect(connection, handshake)


async def _dispatch(
    room_router: RealtimeRoomRouter, connection: RealtimeConnection, message: Any
) -> None:
    if not isinstance(message, dict):
        return
    event_type = message.get("type")
    if not isinstance(event_type, str):
        return
    if event_type == "ping":
        await connection.send("pong", None)
        return
    await room_router.handle_event(connection, event_type, message.get("data"))
