"""HTTP tests for the notification endpoints."""

from __future__ import annotations

import pytest

from app.domain.entities import ADMIN_ROLE_ALIAS


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def member(make_user, token_for):
    user_id = make_user()
    return user_id, _auth(token_for(user_id))


def test_admin_sends_to_single_user(client, admin_headers, member) -> None:
    user_id, headers = member

    response = client.post(
        "/notifications/send",
        json={
            "audience": "user",
            "targetId": str(user_id),
            "title": "Welcome",
            "message": "Hello there",
            "payload": {"link": "/feed"},
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == user_id
    assert body["type"] == "system"
    assert body["payload"] == {"link": "/feed"}
    assert body["is_read"] is False
    assert body["read_at"] is None

    inbox = client.get("/notifications/", headers=headers).json()
    assert [item["id"] for item in inbox["items"]] == [body["id"]]
    assert inbox["meta"]["unread_count"] == 1


def test_broadcast_reaches_every_member(client, admin_headers, make_user) -> None:
    make_user()
    make_user()
    make_user(deleted=True)

    response = client.post(
        "/notifications/send",
        json={"audience": "all_users", "title": "Maintenance", "message": "Tonight"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"sent_to": 2, "persisted": 2}

    broadcast = client.post(
        "/notifications/broadcast",
        json={"title": "Again", "message": "Tomorrow"},
        headers=admin_headers,
    )
    assert broadcast.status_code == 200
    assert broadcast.json() == {"sent_to": 2, "persisted": 2}


def test_broadcast_endpoint_rejects_single_audience(client, admin_headers) -> None:
    response = client.post(
        "/notifications/broadcast",
        json={"audience": "user", "title": "T", "message": "M"},
        headers=admin_headers,
    )

    assert response.status_code == 400


@pytest.mark.parametrize(
    "body",
    [
        {"audience": "user", "title": "T", "message": "M"},
        {"audience": "user", "targetId": "abc", "title": "T", "message": "M"},
        {"audience": "user", "targetId": 999, "title": "T", "message": "M"},
        {"audience": "all_users", "title": "   ", "message": "M"},
        {"audience": "all_users", "title": "", "message": "M"},
        {"audience": "everyone", "title": "T", "message": "M"},
    ],
)
def test_invalid_send_requests_are_rejected(client, admin_headers, body) -> None:
    response = client.post("/notifications/send", json=body, headers=admin_headers)

    assert response.status_code == 400


@pytest.mark.parametrize(
    "body",
    [
        {"audience": "all_users", "message": "M"},
        {"audience": "all_users", "title": "T", "message": ["M"]},
    ],
)
def test_malformed_send_bodies_fail_validation(client, admin_headers, body) -> None:
    response = client.post("/notifications/send", json=body, headers=admin_headers)

    assert response.status_code == 422


def test_members_cannot_send(client, member) -> None:
    _, headers = member

    response = client.post(
        "/notifications/send",
        json={"audience": "all_users", "title": "T", "message": "M"},
        headers=headers,
    )

    assert response.status_code == 403


def test_inbox_requires_a_valid_token(client) -> None:
    assert client.get("/notifications/").status_code == 401
    assert client.get("/notifications/", headers=_auth("not-a-token")).status_code == 401


def test_listing_clamps_and_filters(client, member, make_notifications) -> None:
    user_id, headers = member
    make_notifications(user_id, 12, read=4)

    response = client.get(
        "/notifications/", params={"page": 0, "limit": 1000}, headers=headers
    )
    meta = response.json()["meta"]
    assert meta == {"page": 1, "limit": 100, "total": 12, "total_pages": 1, "unread_count": 8}

    unread = client.get(
        "/notifications/", params={"status": "unread", "limit": 5}, headers=headers
    ).json()
    assert unread["meta"]["total"] == 8
    assert unread["meta"]["total_pages"] == 2
    assert unread["meta"]["unread_count"] == 8
    assert [item["title"] for item in unread["items"]] == [
        "Title 12",
        "Title 11",
        "Title 10",
        "Title 9",
        "Title 8",
    ]

    read = client.get("/notifications/", params={"status": "read"}, headers=headers).json()
    assert read["meta"]["total"] == 4
    assert read["meta"]["unread_count"] == 8


def test_mark_as_read_is_idempotent(client, member, make_notifications) -> None:
    user_id, headers = member
    (notification,) = make_notifications(user_id, 1)

    first = client.patch(f"/notifications/{notification.id}/read", headers=headers)
    second = client.patch(f"/notifications/{notification.id}/read", headers=headers)

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["is_read"] is True
    assert first.json()["read_at"] == second.json()["read_at"]


def test_mark_as_read_hides_foreign_notifications(
    client, member, make_user, make_notifications
) -> None:
    _, headers = member
    other = make_user()
    (foreign,) = make_notifications(other, 1)

    assert client.patch(f"/notifications/{foreign.id}/read", headers=headers).status_code == 404
    assert client.patch("/notifications/424242/read", headers=headers).status_code == 404
    assert client.patch("/notifications/abc/read", headers=headers).status_code == 400


def test_read_all_then_summary(client, member, make_notifications) -> None:
    user_id, headers = member
    make_notifications(user_id, 7, read=2)

    response = client.patch("/notifications/read-all", headers=headers)
    assert response.json() == {"updated": 5}

    summary = client.get("/notifications/summary", headers=headers).json()
    assert summary["total"] == 7
    assert summary["unread"] == 0
    assert summary["has_unread"] is False
    assert summary["latest_notification"]["title"] == "Title 7"
    assert summary["latest_unread_at"] is None

    assert client.patch("/notifications/read-all", headers=headers).json() == {"updated": 0}


def test_admin_may_inspect_another_inbox(
    client, member, make_user, token_for, make_notifications
) -> None:
    user_id, headers = member
    make_notifications(user_id, 3)
    admin_id = make_user(ADMIN_ROLE_ALIAS)
    admin_headers = _auth(token_for(admin_id, ADMIN_ROLE_ALIAS))

    as_admin = client.get(
        "/notifications/summary", params={"user_id": user_id}, headers=admin_headers
    ).json()
    assert as_admin["total"] == 3

    other = make_user()
    as_member = client.get(
        "/notifications/summary", params={"user_id": other}, headers=headers
    ).json()
    assert as_member["total"] == 3

    listed = client.get(
        "/notifications/", params={"user_id": user_id}, headers=admin_headers
    ).json()
    assert listed["meta"]["total"] == 3


def test_inactive_user_is_refused(client, make_user, token_for) -> None:
    user_id = make_user(is_active=False)

    response = client.get("/notifications/summary", headers=_auth(token_for(user_id)))

    assert response.status_code == 400
