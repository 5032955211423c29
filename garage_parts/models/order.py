"""Purchase order models."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field

from garage_parts.models.reorder import Priority
from garage_parts.models.supplier import SupplierSnapshot
from garage_parts.models.timestamps import UtcDatetime


class OrderStatus(str, Enum):
    """Purchase order status progression."""

    PENDING = "pending"
    SENT = "sent"
    CONFIRMED = "confirmed"
    PARTIALLY_RECEIVED = "partially-received"
    RECEIVED = "received"
    CANCELLED = "cancelled"


OUTSTANDING_STATUSES = frozenset(
    {
        OrderStatus.PENDING,
        OrderStatus.SENT,
        OrderStatus.CONFIRMED,
        OrderStatus.PARTIALLY_RECEIVED,
    }
)


class OrderType(str, Enum):
    """How the order was raised."""

    AUTOMATIC = "automatic"
    MANUAL = "manual"


class OrderEvent(BaseModel):
    """One status change in an order's history."""

    from_status: OrderStatus | None
    to_status: OrderStatus
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    note: str | None = None


def new_order_id() -> str:
    """Generate a purchase order number."""
    stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")
    return f"PO-{stamp}-{uuid4().hex[:6].upper()}"


class PurchaseOrder(BaseModel):
    """Purchase order placed with a supplier."""

    order_id: str = Field(default_factory=new_order_id)
    part_id: str
    part_name: str
    quantity: int = Field(ge=1)
    unit_price: int = Field(ge=0)
    total_price: int = Field(ge=0)
    supplier: SupplierSnapshot
    order_type: OrderType
    priority: Priority = Priority.MEDIUM
    status: OrderStatus = OrderStatus.PENDING

    # Timing
    created_at: datetime = Field(default_factory=datetime.utcnow)
    sent_at: datetime | None = None
    expected_delivery: datetime
    confirmed_at: datetime | None = None
    confirmed_delivery: datetime | None = None
    received_at: datetime | None = None
    cancelled_at: datetime | None = None

    # Supplier confirmation and receipt
    supplier_reference: str | None = None
    received_quantity: int = Field(default=0, ge=0)
    cancel_reason: str | None = None

    approved_by: str | None = None
    history: list[OrderEvent] = Field(default_factory=list)

    @computed_field
    @property
    def is_complete(self) -> bool:
        """Check if the full quantity has arrived."""
        return self.received_quantity >= self.quantity

    @property
    def is_outstanding(self) -> bool:
        """Check if the order still blocks a new order for the part."""
        return self.status in OUTSTANDING_STATUSES

    @property
    def remaining_quantity(self) -> int:
        """Units still expected from the supplier."""
        return max(0, self.quantity - self.received_quantity)


class PlaceOrderRequest(BaseModel):
    """Manual order placed by staff."""

    part_id: str
    quantity: int = Field(ge=1)
    supplier_id: str
    approved_by: str


class ConfirmOrderRequest(BaseModel):
    """Supplier confirmation details."""

    supplier_reference: str
    expected_delivery: UtcDatetime | None = None


class ReceiveOrderRequest(BaseModel):
    """Goods received against an order."""

    received_quantity: int = Field(ge=1)
    received_date: UtcDatetime | None = None


class CancelOrderRequest(BaseModel):
    """Order cancellation."""

    reason: str = "cancelled"
