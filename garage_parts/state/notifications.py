"""Append-only notification feed with live subscribers."""

import asyncio
from datetime import datetime
from typing import Any

from garage_parts.errors import NotFoundError
from garage_parts.models.notification import Notification, NotificationType
from garage_parts.models.reorder import Priority
from garage_parts.utils.logging import ServiceLogger


class NotificationCenter:
    """Stores staff notifications and fans them out to subscribers."""

    def __init__(self) -> None:
        self.logger = ServiceLogger("notifications")
        self._notifications: list[Notification] = []
        self._subscribers: set[asyncio.Queue[Notification]] = set()

    def emit(
        self,
        notification_type: NotificationType,
        message: str,
        priority: Priority = Priority.MEDIUM,
        requires_action: bool = False,
        **payload: Any,
    ) -> Notification:
        """Record a notification and push it to every subscriber."""
        notification = Notification(
            type=notification_type,
            message=message,
            priority=priority,
            requires_action=requires_action,
            payload=payload,
        )
        self._notifications.append(notification)

        for queue in self._subscribers:
            queue.put_nowait(notification)

        self.logger.log_notification(
            notification_type=notification_type.value,
            notification_id=notification.notification_id,
            priority=priority.value,
        )
        return notification

    def get_notifications(
        self,
        unread_only: bool = False,
        notification_type: NotificationType | None = None,
    ) -> list[Notification]:
        """Get notifications, newest first."""
        return [
            n
            for n in reversed(self._notifications)
            if (not unread_only or not n.read)
            and (notification_type is None or n.type == notification_type)
        ]

    def get_notification(self, notification_id: str) -> Notification | None:
        """Look up a notification by id."""
        for notification in self._notifications:
            if notification.notification_id == notification_id:
                return notification
        return None

    def mark_read(self, notification_id: str) -> Notification:
        """Flag a notification as read."""
        notification = self.get_notification(notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)

        if not notification.read:
            notification.read = True
            notification.read_at = datetime.utcnow()
        return notification

    def unread_count(self) -> int:
        """Number of unread notifications."""
        return sum(1 for n in self._notifications if not n.read)

    def subscribe(self) -> asyncio.Queue[Notification]:
        """Open a live feed of new notifications."""
        queue: asyncio.Queue[Notification] = asyncio.Queue()
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[Notification]) -> None:
        """Close a live feed."""
        self._subscribers.discard(queue)
