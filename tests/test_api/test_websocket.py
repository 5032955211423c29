"""Tests for the notification WebSocket."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from garage_parts.main import create_app
from garage_parts.models import NotificationType
from garage_parts.services.desk import PartsDesk


@pytest.fixture
def client(desk: PartsDesk) -> Generator[TestClient, None, None]:
    """Client sharing one event loop between HTTP calls and sockets."""
    with TestClient(create_app(desk)) as test_client:
        yield test_client


def test_connect_sends_unread_backlog_oldest_first(client: TestClient, desk: PartsDesk) -> None:
    first = desk.notifications.emit(NotificationType.PRICE_ALERT, "first")
    second = desk.notifications.emit(NotificationType.ORDER_SENT, "second")
    desk.notifications.mark_read(
        desk.notifications.emit(NotificationType.ORDER_SENT, "already read").notification_id
    )

    with client.websocket_connect("/ws/notifications") as websocket:
        hello = websocket.receive_json()
        assert hello["type"] == "connected"
        assert hello["unread"] == 2

        backlog = [websocket.receive_json(), websocket.receive_json()]
        assert [m["notification"]["notification_id"] for m in backlog] == [
            first.notification_id,
            second.notification_id,
        ]


def test_ping_pong(client: TestClient) -> None:
    with client.websocket_connect("/ws/notifications") as websocket:
        websocket.receive_json()

        websocket.send_json({"type": "ping"})

        assert websocket.receive_json() == {"type": "pong"}


def test_mark_read_over_socket(client: TestClient, desk: PartsDesk) -> None:
    notification = desk.notifications.emit(NotificationType.ORDER_SENT, "sent")

    with client.websocket_connect("/ws/notifications") as websocket:
        websocket.receive_json()
        websocket.receive_json()

        websocket.send_json({"type": "mark_read", "notification_id": notification.notification_id})
        ack = websocket.receive_json()

        assert ack == {
            "type": "ack",
            "notification_id": notification.notification_id,
            "read": True,
        }
        assert desk.notifications.unread_count() == 0

        websocket.send_json({"type": "mark_read", "notification_id": "NOTIF-missing"})
        assert websocket.receive_json()["type"] == "error"


def test_invalid_message(client: TestClient) -> None:
    with client.websocket_connect("/ws/notifications") as websocket:
        websocket.receive_json()

        websocket.send_text("not json")
        error = websocket.receive_json()

        assert error["type"] == "error"
        assert error["message"] == "Invalid message format"


def test_live_notifications_are_pushed(client: TestClient) -> None:
    """Test that an order sent by a sweep reaches a connected client."""
    with client.websocket_connect("/ws/notifications") as websocket:
        websocket.receive_json()

        response = client.post("/api/v1/reordering/sweep")
        assert response.status_code == 200

        message = websocket.receive_json()
        assert message["type"] == "notification"
        assert message["notification"]["type"] == "order-sent"
