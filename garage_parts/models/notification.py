"""Notification models."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from garage_parts.models.reorder import Priority


class NotificationType(str, Enum):
    """Kinds of notifications raised by the service."""

    REORDER_NEEDED = "reorder-needed"
    ORDER_SENT = "order-sent"
    ORDER_CONFIRMED = "order-confirmed"
    ORDER_RECEIVED = "order-received"
    ORDER_CANCELLED = "order-cancelled"
    PRICE_ALERT = "price-alert"
    LOW_STOCK_MANUAL = "low-stock-manual"
    PRICE_UPDATE = "price-update"


class Notification(BaseModel):
    """Staff-facing notification."""

    notification_id: str = Field(default_factory=lambda: f"NOTIF-{uuid4().hex[:12].upper()}")
    type: NotificationType
    message: str
    priority: Priority = Priority.MEDIUM
    payload: dict[str, Any] = Field(default_factory=dict)
    requires_action: bool = False
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    read: bool = False
    read_at: datetime | None = None
