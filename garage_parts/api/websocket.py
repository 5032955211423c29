"""WebSocket feed of staff notifications."""

import asyncio
import json
from typing import Any
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from garage_parts.errors import NotFoundError
from garage_parts.models.notification import Notification
from garage_parts.state.notifications import NotificationCenter
from garage_parts.utils.logging import get_logger

logger = get_logger(__name__)


class WebSocketMessage(BaseModel):
    """WebSocket message format."""

    type: str  # "mark_read", "ping"
    notification_id: str | None = None
    metadata: dict[str, Any] = {}


class ConnectionManager:
    """Manages WebSocket connections."""

    def __init__(self) -> None:
        self.active_connections: dict[str, WebSocket] = {}

    async def connect(self, connection_id: str, websocket: WebSocket) -> None:
        """Accept and register a WebSocket connection."""
        await websocket.accept()
        self.active_connections[connection_id] = websocket
        logger.info("websocket_connected", connection_id=connection_id)

    def disconnect(self, connection_id: str) -> None:
        """Remove a WebSocket connection."""
        if connection_id in self.active_connections:
            del self.active_connections[connection_id]
            logger.info("websocket_disconnected", connection_id=connection_id)

    async def send_notification(self, connection_id: str, notification: Notification) -> None:
        """Send one notification to a specific connection."""
        websocket = self.active_connections.get(connection_id)
        if websocket is not None:
            await websocket.send_json(
                {"type": "notification", "notification": notification.model_dump(mode="json")}
            )


# Global connection manager
manager = ConnectionManager()


async def handle_notification_stream(
    websocket: WebSocket,
    notifications: NotificationCenter,
) -> None:
    """
    Stream notifications to a client.

    Unread notifications are sent first, oldest first, then new ones as
    they are emitted. The client may send ``mark_read`` and ``ping``.

    Args:
        websocket: WebSocket connection
        notifications: Notification feed to stream
    """
    connection_id = uuid4().hex

    await manager.connect(connection_id, websocket)
    await websocket.send_json(
        {
            "type": "connected",
            "connection_id": connection_id,
            "unread": notifications.unread_count(),
        }
    )

    # Snapshot and subscribe together so nothing is missed or sent twice
    backlog = notifications.get_notifications(unread_only=True)
    queue = notifications.subscribe()

    async def forward() -> None:
        while True:
            notification = await queue.get()
            await manager.send_notification(connection_id, notification)

    sender: asyncio.Task | None = None

    try:
        for notification in reversed(backlog):
            await manager.send_notification(connection_id, notification)

        sender = asyncio.create_task(forward())

        while True:
            data = await websocket.receive_text()

            try:
                ws_message = WebSocketMessage(**json.loads(data))

                if ws_message.type == "mark_read" and ws_message.notification_id:
                    notification = notifications.mark_read(ws_message.notification_id)
                    await websocket.send_json(
                        {
                            "type": "ack",
                            "notification_id": notification.notification_id,
                            "read": notification.read,
                        }
                    )

                elif ws_message.type == "ping":
                    await websocket.send_json({"type": "pong"})

            except (ValidationError, json.JSONDecodeError) as e:
                await websocket.send_json(
                    {
                        "type": "error",
                        "message": "Invalid message format",
                        "details": str(e),
                    }
                )

            except NotFoundError as e:
                await websocket.send_json({"type": "error", "message": str(e)})

    except WebSocketDisconnect:
        logger.info("websocket_client_disconnected", connection_id=connection_id)

    except Exception as e:
        logger.error("websocket_error", connection_id=connection_id, error=str(e))

    finally:
        if sender is not None:
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
        notifications.unsubscribe(queue)
        manager.disconnect(connection_id)
