"""Tests for the notification service REST API."""
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from notification_server.store import ledger
from services.notification_service.app import app


@pytest.fixture
def client():
    ledger._scheduled.clear()
    ledger.delivered.clear()
    # Entering the client runs the lifespan, which registers the channels.
    with TestClient(app) as test_client:
        yield test_client
    ledger._scheduled.clear()


def _payload(identifier: str, hours: int = 1, channel: str = "assignments") -> dict:
    return {
        "identifier": identifier,
        "content": {"title": "Quiz Due Soon", "body": "Quiz 1 is due in 1 hour.", "data": {"kind": "due"}},
        "fire_time": (datetime.now() + timedelta(hours=hours)).replace(microsecond=0).isoformat(),
        "channel": channel,
    }


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "notification-service"}


def test_channels_registered_on_startup(client) -> None:
    assert set(ledger.channels) == {"default", "assignments", "daily-digest"}


def test_schedule_list_and_get(client) -> None:
    assert client.post("/notifications", json=_payload("later", hours=3)).status_code == 201
    assert client.post("/notifications", json=_payload("sooner", hours=1)).status_code == 201

    listed = client.get("/notifications").json()
    assert [n["identifier"] for n in listed] == ["sooner", "later"]

    one = client.get("/notifications/later").json()
    assert one["content"]["data"] == {"kind": "due"}
    assert one["channel"] == "assignments"


def test_schedule_replaces_same_identifier(client) -> None:
    client.post("/notifications", json=_payload("slot", hours=1))
    client.post("/notifications", json=_payload("slot", hours=5))

    listed = client.get("/notifications").json()
    assert len(listed) == 1
    assert listed[0]["identifier"] == "slot"


def test_unknown_channel_is_rejected(client) -> None:
    response = client.post("/notifications", json=_payload("x", channel="nope"))

    assert response.status_code == 404
    assert len(ledger) == 0


def test_empty_identifier_is_rejected(client) -> None:
    assert client.post("/notifications", json=_payload("")).status_code == 422


def test_missing_notification_is_404(client) -> None:
    assert client.get("/notifications/missing").status_code == 404


def test_cancel_one(client) -> None:
    client.post("/notifications", json=_payload("slot"))

    assert client.delete("/notifications/slot").json() == {"cancelled": 1}
    assert client.delete("/notifications/slot").json() == {"cancelled": 0}
    assert client.get("/notifications").json() == []


def test_cancel_all(client) -> None:
    for name in ("a", "b", "c"):
        client.post("/notifications", json=_payload(name))

    assert client.delete("/notifications").json() == {"cancelled": 3}
    assert len(ledger) == 0


def test_register_channels(client) -> None:
    response = client.put("/channels", json={"channels": [
        {"id": "labs", "name": "Labs", "importance": "low"},
    ]})

    assert response.json() == {"channels": ["assignments", "daily-digest", "default", "labs"]}
    assert client.post("/notifications", json=_payload("x", channel="labs")).status_code == 201
