from __future__ import annotations

import json
import uuid

import httpx
import pytest

from src.timeharbor.timeharbor.core.enums import DevicePlatform, NotificationType
from src.timeharbor.timeharbor.core.exceptions import NotFoundError, ValidationError
from src.timeharbor.timeharbor.notifications.model import PushMessage, PushResult
from src.timeharbor.timeharbor.notifications.push import FcmPushSender, LoggingPushSender, build_fcm_message


def _message():
    return PushMessage(
        title="Hello",
        body="World",
        type=NotificationType.TICKET_ASSIGNED,
        data={"ticketId": "t-1", "count": 3, "missing": None},
    )


def test_notify_user_stores_without_device(container, signup, push_sender):
    bob, _ = signup("bob@example.com")

    delivered = container.notification_service.notify_user(bob.id, _message())

    assert delivered is False
    assert push_sender.sent == []
    stored = container.notifications_repo.for_user(bob.id)
    assert [n.title for n in stored] == ["Hello"]


def test_notify_user_pushes_to_registered_device(container, signup, push_sender):
    bob, _ = signup("bob@example.com")
    container.auth_service.register_device(bob.id, fcm_token="device-1", platform="ios")

    assert container.notification_service.notify_user(bob.id, _message()) is True
    token, message, platform = push_sender.sent[0]
    assert token == "device-1"
    assert message.title == "Hello"
    assert platform == DevicePlatform.IOS


def test_invalid_device_token_is_cleared(container, signup, push_sender):
    bob, _ = signup("bob@example.com")
    container.auth_service.register_device(bob.id, fcm_token="stale", platform="android")
    push_sender.result = PushResult(delivered=False, invalid_token=True, error="UNREGISTERED")

    container.notification_service.notify_user(bob.id, _message())

    assert container.users_repo.get_by_id(bob.id).fcm_token is None


def test_notify_users_counts_and_dedupes(container, signup):
    bob, _ = signup("bob@example.com")
    carol, _ = signup("carol@example.com")
    container.auth_service.register_device(bob.id, fcm_token="device-1", platform="ios")

    result = container.notification_service.notify_users([bob.id, carol.id, bob.id], _message())

    assert result == {"success": 1, "failed": 1}


def test_inbox_paging_and_read_state(container, signup):
    bob, _ = signup("bob@example.com")
    svc = container.notification_service
    for i in range(3):
        svc.notify_user(bob.id, PushMessage(title=f"n{i}", body="b"))

    page = svc.list_page(bob.id, page=1, limit=2)
    assert [n.title for n in page.notifications] == ["n2", "n1"]
    assert (page.total, page.total_pages) == (3, 2)

    first = page.notifications[0]
    assert svc.mark_read(bob.id, first.id).is_read
    assert svc.mark_all_read(bob.id) == 2

    with pytest.raises(ValidationError, match="Invalid Notification ID"):
        svc.mark_read(bob.id, "not-a-uuid")
    with pytest.raises(NotFoundError):
        svc.mark_read(bob.id, str(uuid.uuid4()))


def test_notifications_are_private(container, signup):
    bob, _ = signup("bob@example.com")
    carol, _ = signup("carol@example.com")
    container.notification_service.notify_user(bob.id, _message())
    note = container.notifications_repo.for_user(bob.id)[0]

    with pytest.raises(NotFoundError):
        container.notification_service.delete(carol.id, note.id)
    with pytest.raises(ValidationError, match="non-empty array"):
        container.notification_service.delete_many(carol.id, [])


def test_build_fcm_message_stringifies_data():
    payload = build_fcm_message("device-1", _message())["message"]

    assert payload["token"] == "device-1"
    assert payload["data"] == {"ticketId": "t-1", "count": "3", "missing": "", "type": "ticket_assigned"}
    assert payload["android"]["priority"] == "high"
    assert payload["apns"]["payload"]["aps"]["sound"] == "default"


def test_fcm_sender_success_and_unregistered():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = json.loads(request.content)
        if body["message"]["token"] == "good":
            return httpx.Response(200, json={"name": "projects/p/messages/1"})
        return httpx.Response(
            404,
            json={"error": {"status": "NOT_FOUND", "details": [{"errorCode": "UNREGISTERED"}]}},
        )

    sender = FcmPushSender(
        project_id="demo",
        access_token="secret",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )

    assert sender.send("good", _message()) == PushResult(delivered=True)
    failed = sender.send("bad", _message())
    assert failed.invalid_token
    assert failed.error == "UNREGISTERED"

    assert seen[0].url == "https://fcm.googleapis.com/v1/projects/demo/messages:send"
    assert seen[0].headers["Authorization"] == "Bearer secret"


def test_fcm_sender_network_error_is_not_fatal():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    sender = FcmPushSender(
        project_id="demo",
        access_token="secret",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )

    result = sender.send("good", _message())
    assert not result.delivered
    assert not result.invalid_token


def test_logging_sender_never_delivers():
    assert LoggingPushSender().send("device-1", _message()).delivered is False


def test_notification_routes(client, container, signup):
    bob, headers = signup("bob@example.com")
    for i in range(2):
        container.notification_service.notify_user(bob.id, PushMessage(title=f"n{i}", body="b"))
    ids = [n.id for n in container.notifications_repo.for_user(bob.id)]

    listed = client.get("/notifications?limit=1", headers=headers).get_json()
    assert listed["total"] == 2
    assert listed["totalPages"] == 2
    assert listed["notifications"][0]["title"] == "n1"

    read = client.patch(f"/notifications/{ids[0]}/read", headers=headers)
    assert read.status_code == 200
    assert read.get_json()["read_at"] is not None

    assert client.patch("/notifications/read-all", headers=headers).get_json()["count"] == 1

    bad = client.patch("/notifications/xyz/read", headers=headers)
    assert bad.status_code == 400

    removed = client.delete("/notifications", json={"ids": ids}, headers=headers)
    assert removed.get_json() == {"count": 2}


def _fcm_sender(handler):
    return FcmPushSender(
        project_id="demo",
        access_token="secret",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_fcm_sender_plain_string_error_is_not_fatal():
    sender = _fcm_sender(lambda request: httpx.Response(503, json={"error": "Service Unavailable"}))

    result = sender.send("good", _message())

    assert not result.delivered
    assert not result.invalid_token
    assert result.error == "Service Unavailable"


def test_fcm_sender_tolerates_unparseable_bodies():
    ok = _fcm_sender(lambda request: httpx.Response(200, content=b""))
    assert ok.send("good", _message()) == PushResult(delivered=True)

    html = _fcm_sender(lambda request: httpx.Response(502, content=b"<html>bad gateway</html>"))
    result = html.send("good", _message())
    assert not result.delivered
    assert result.error == "502"


def test_push_failure_does_not_fail_the_request(client, container, signup, push_sender):
    alice, alice_headers = signup("alice@example.com", "Alice")
    bob, _ = signup("bob@example.com", "Bob")
    team = container.team_service.create_team(alice, name="Core")
    container.team_service.join_team(bob, code=team.code)
    container.auth_service.register_device(bob.id, fcm_token="device-1", platform="ios")

    def explode(token, message, *, platform=None):
        raise RuntimeError("push backend down")

    push_sender.send = explode
    ticket_id = str(uuid.uuid4())
    body = {"id": ticket_id, "title": "Fix login", "assignedTo": bob.id}

    created = client.post(f"/teams/{team.id}/tickets", json=body, headers=alice_headers)

    assert created.status_code == 201
    assert created.get_json()["id"] == ticket_id
    stored = container.notifications_repo.for_user(bob.id)
    assert stored[-1].type == NotificationType.TICKET_ASSIGNED.value
    assert container.notification_service.notify_user(bob.id, _message()) is False
