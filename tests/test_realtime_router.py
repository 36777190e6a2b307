"""Tests for realtime handshakes, room routing and notification pushes."""

from __future__ import annotations

from datetime import datetime, timezone

import anyio
import pytest
from anyio import to_thread

from app.domain.entities import Notification
from app.infrastructure.realtime import (
    AUTH_ERROR_EVENT,
    FRIEND_CHAT_READY_EVENT,
    FRIEND_CHAT_TYPING_EVENT,
    NOTIFICATION_EVENT,
    SUPPORT_ADMINS_ROOM,
    VALIDATION_ERROR_EVENT,
    Handshake,
    NotificationPublisher,
    RealtimeConnection,
    RealtimeRoomRouter,
    RoomConnectionManager,
    inbox_room,
    support_admin_room,
    support_user_room,
    thread_room,
)
from app.infrastructure.security import decode_access_token

pytestmark = pytest.mark.anyio


class FakeWebSocket:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send_json(self, message: dict) -> None:
        self.sent.append(message)

    def events(self, event_type: str) -> list:
        return [message["data"] for message in self.sent if message["type"] == event_type]


class BrokenWebSocket(FakeWebSocket):
    async def send_json(self, message: dict) -> None:
        raise RuntimeError("socket closed")


@pytest.fixture()
def manager():
    return RoomConnectionManager()


@pytest.fixture()
def router(manager):
    return RealtimeRoomRouter(manager, verify_token=decode_access_token)


def _connection() -> RealtimeConnection:
    return RealtimeConnection(FakeWebSocket())


async def _authenticated(router, token) -> RealtimeConnection:
    connection = _connection()
    await router.connect(connection, Handshake(auth={"token": token}))
    return connection


def test_token_sources_follow_priority_order():
    handshake = Handshake(
        auth={"token": "from-auth"},
        query={"token": "from-query"},
        headers={"authorization": "Bearer from-header"},
    )
    assert handshake.token() == "from-auth"
    assert Handshake(query={"token": "from-query"}, headers={"authorization": "Bearer h"}).token() == "from-query"
    assert Handshake(headers={"Authorization": "Bearer from-header"}).token() == "from-header"
    assert Handshake(auth={"token": "  "}, headers={"authorization": "Basic abc"}).token() is None


async def test_verified_connection_joins_inbox_and_gets_ready(router, manager, token_for):
    connection = await _authenticated(router, token_for(7))

    assert connection.identity.user_id == 7
    assert connection in manager.members(inbox_room(7))
    assert connection.websocket.events(FRIEND_CHAT_READY_EVENT) == [{"user_id": 7, "role": "member"}]


@pytest.mark.parametrize("handshake", [Handshake(), Handshake(query={"token": "garbage"})])
async def test_unverified_connection_gets_auth_error_and_no_inbox(router, manager, handshake):
    connection = _connection()

    assert await router.connect(connection, handshake) is None

    assert connection.identity is None
    assert len(connection.websocket.events(AUTH_ERROR_EVENT)) == 1
    assert connection.rooms == set()


async def test_unauthenticated_connection_never_receives_inbox_pushes(router, token_for):
    anonymous = _connection()
    await router.connect(anonymous, Handshake())
    owner = await _authenticated(router, token_for(3))

    delivered = await router.emit_to_user(3, NOTIFICATION_EVENT, {"id": 1})

    assert delivered == 1
    assert owner.websocket.events(NOTIFICATION_EVENT) == [{"id": 1}]
    assert anonymous.websocket.events(NOTIFICATION_EVENT) == []


async def test_support_rooms_accept_any_connection(router, manager):
    connection = _connection()
    await router.connect(connection, Handshake())

    await router.handle_event(connection, "support-chat:join", {"userId": "42"})
    assert connection in manager.members(support_user_room("42"))

    await router.handle_event(connection, "support-chat:leave", {"user_id": "42"})
    assert connection not in manager.members(support_user_room("42"))


async def test_admin_join_uses_shared_and_personal_rooms(router, manager):
    shared_only, personal = _connection(), _connection()

    await router.handle_event(shared_only, "support-chat:join-admin", None)
    await router.handle_event(personal, "support-chat:join-admin", {"adminId": "9"})

    assert manager.members(SUPPORT_ADMINS_ROOM) == {shared_only, personal}
    assert manager.members(support_admin_room("9")) == {personal}


@pytest.mark.parametrize("payload", [{}, {"userId": ""}, {"userId": 5}, "not-an-object"])
async def test_malformed_support_payload_reports_validation_error(router, manager, payload):
    connection = _connection()

    await router.handle_event(connection, "support-chat:join", payload)

    (error,) = connection.websocket.events(VALIDATION_ERROR_EVENT)
    assert error["event"] == "support-chat:join"
    assert error["errors"]
    assert connection.rooms == set()


async def test_thread_events_are_ignored_without_identity(router, manager):
    connection = _connection()
    await router.connect(connection, Handshake())

    await router.handle_event(connection, "friend-chat:join-thread", {"threadId": "t1"})
    await router.handle_event(connection, "friend-chat:typing", {"threadId": "t1"})

    assert manager.members(thread_room("t1")) == set()
    assert connection.websocket.events(VALIDATION_ERROR_EVENT) == []


async def test_typing_is_relayed_to_other_thread_members(router, manager, token_for):
    sender = await _authenticated(router, token_for(1))
    peer = await _authenticated(router, token_for(2))
    for connection in (sender, peer):
        await router.handle_event(connection, "friend-chat:join-thread", {"threadId": "t1"})

    await router.handle_event(sender, "friend-chat:typing", {"threadId": "t1", "isTyping": True})

    assert peer.websocket.events(FRIEND_CHAT_TYPING_EVENT) == [
        {"threadId": "t1", "isTyping": True, "user_id": 1}
    ]
    assert sender.websocket.events(FRIEND_CHAT_TYPING_EVENT) == []

    await router.handle_event(peer, "friend-chat:leave-thread", {"threadId": "t1"})
    assert manager.members(thread_room("t1")) == {sender}


async def test_disconnect_tears_down_every_membership(router, manager, token_for):
    connection = await _authenticated(router, token_for(4))
    await router.handle_event(connection, "friend-chat:join-thread", {"threadId": "t9"})
    await router.handle_event(connection, "support-chat:join", {"userId": "4"})

    router.disconnect(connection)

    assert connection.rooms == set()
    assert manager.members(inbox_room(4)) == set()
    assert manager.members(thread_room("t9")) == set()


async def test_failed_socket_is_dropped_without_affecting_others(manager):
    healthy, broken = _connection(), RealtimeConnection(BrokenWebSocket())
    for connection in (healthy, broken):
        manager.join(connection, "inbox:1")

    delivered = await manager.emit_to_room("inbox:1", NOTIFICATION_EVENT, {"id": 1})

    assert delivered == 1
    assert manager.members("inbox:1") == {healthy}


async def test_unknown_events_are_ignored(router):
    connection = _connection()

    await router.handle_event(connection, "posts:like", {"postId": "1"})

    assert connection.websocket.sent == []


async def test_publisher_pushes_each_recipient_independently(router, token_for):
    first = await _authenticated(router, token_for(1))
    second = await _authenticated(router, token_for(2))
    created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    publisher = NotificationPublisher(router)

    async def flaky_emit(user_id, event_type, data):
        if user_id == 1:
            raise RuntimeError("transport unavailable")
        return await RealtimeRoomRouter.emit_to_user(router, user_id, event_type, data)

    router.emit_to_user = flaky_emit
    publisher.dispatch_many(
        [
            Notification(id=10, user_id=1, title="T", message="M", created_at=created_at),
            Notification(id=11, user_id=2, title="T", message="M", created_at=created_at),
        ]
    )
    for task in list(publisher._pending):
        await task

    assert first.websocket.events(NOTIFICATION_EVENT) == []
    assert second.websocket.events(NOTIFICATION_EVENT) == [
        {
            "id": 11,
            "type": "system",
            "title": "T",
            "message": "M",
            "payload": None,
            "created_at": "2026-01-01T00:00:00+00:00",
        }
    ]


async def test_reconnecting_with_another_identity_moves_inbox(router, manager, token_for):
    connection = await _authenticated(router, token_for(1))
    await router.handle_event(connection, "friend-chat:join-thread", {"threadId": "t1"})
    await router.handle_event(connection, "support-chat:join", {"userId": "1"})

    await router.connect(connection, Handshake(auth={"token": token_for(2)}))

    assert connection.identity.user_id == 2
    assert manager.members(inbox_room(1)) == set()
    assert manager.members(thread_room("t1")) == set()
    assert manager.members(inbox_room(2)) == {connection}
    assert connection in manager.members(support_user_room("1"))


async def test_failed_reauthentication_unbinds_the_connection(router, manager, token_for):
    connection = await _authenticated(router, token_for(1))

    await router.connect(connection, Handshake(auth={"token": "garbage"}))

    assert connection.identity is None
    assert manager.members(inbox_room(1)) == set()
    assert len(connection.websocket.events(AUTH_ERROR_EVENT)) == 1


async def test_dispatch_from_worker_thread_does_not_wait_for_delivery(router, token_for):
    recipient = await _authenticated(router, token_for(5))
    publisher = NotificationPublisher(router)
    release = anyio.Event()

    async def gated_emit(user_id, event_type, data):
        await release.wait()
        return await RealtimeRoomRouter.emit_to_user(router, user_id, event_type, data)

    router.emit_to_user = gated_emit
    notification = Notification(
        id=20, user_id=5, title="T", message="M", created_at=datetime(2026, 1, 1, tzinfo=timezone.utc)
    )

    with anyio.fail_after(5):
        await to_thread.run_sync(publisher.dispatch_many, [notification])

    assert recipient.websocket.events(NOTIFICATION_EVENT) == []
    release.set()
    for task in list(publisher._pending):
        await task
    assert [item["id"] for item in recipient.websocket.events(NOTIFICATION_EVENT)] == [20]
