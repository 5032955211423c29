"""Purchase order lifecycle tracking."""

from datetime import datetime, timedelta

from garage_parts.errors import InvalidTransitionError, NotFoundError, OutstandingOrderError
from garage_parts.models.notification import NotificationType
from garage_parts.models.order import OrderEvent, OrderStatus, OrderType, PurchaseOrder
from garage_parts.models.part import Part
from garage_parts.models.reorder import Priority
from garage_parts.models.supplier import Supplier, SupplierSnapshot
from garage_parts.state.inventory import InventoryStore
from garage_parts.state.notifications import NotificationCenter
from garage_parts.state.workflow import OrderTransitions
from garage_parts.utils.logging import ServiceLogger


class OrderTracker:
    """
    Owns every purchase order and moves it through its lifecycle.

    At most one order per part is outstanding at any time. The outstanding
    index is checked and updated without suspending, so callers that await
    a supplier quote before creating an order still cannot double-order.
    """

    def __init__(self, inventory: InventoryStore, notifications: NotificationCenter):
        self.inventory = inventory
        self.notifications = notifications
        self.logger = ServiceLogger("orders")
        self._orders: dict[str, PurchaseOrder] = {}
        self._outstanding: dict[str, str] = {}  # part_id -> order_id

    def create(
        self,
        part: Part,
        supplier: Supplier,
        quantity: int,
        unit_price: int,
        order_type: OrderType,
        priority: Priority = Priority.MEDIUM,
        approved_by: str | None = None,
    ) -> PurchaseOrder:
        """
        Create a pending purchase order.

        Raises:
            OutstandingOrderError: The part already has an outstanding order
        """
        existing = self._outstanding.get(part.part_id)
        if existing is not None:
            raise OutstandingOrderError(part.part_id, existing)

        now = datetime.utcnow()
        order = PurchaseOrder(
            part_id=part.part_id,
            part_name=part.name,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
            supplier=SupplierSnapshot(
                supplier_id=supplier.supplier_id,
                name=supplier.name,
                delivery_time=supplier.delivery_time,
            ),
            order_type=order_type,
            priority=priority,
            created_at=now,
            expected_delivery=now + timedelta(hours=supplier.delivery_hours),
            approved_by=approved_by,
        )
        order.history.append(OrderEvent(from_status=None, to_status=OrderStatus.PENDING))

        self._orders[order.order_id] = order
        self._outstanding[part.part_id] = order.order_id

        self.logger.log_transition(
            order.order_id,
            None,
            OrderStatus.PENDING.value,
            part_id=part.part_id,
            quantity=quantity,
            order_type=order_type.value,
        )
        return order

    def send(self, order_id: str) -> PurchaseOrder:
        """Send a pending order to its supplier."""
        order = self.require_order(order_id)
        self._transition(order, OrderStatus.SENT)
        order.sent_at = datetime.utcnow()

        self.notifications.emit(
            NotificationType.ORDER_SENT,
            f"Purchase order {order.order_id} sent to {order.supplier.name}",
            priority=order.priority,
            order_id=order.order_id,
            part_id=order.part_id,
            part_name=order.part_name,
            quantity=order.quantity,
            total_price=order.total_price,
            supplier_id=order.supplier.supplier_id,
            supplier_name=order.supplier.name,
            order_type=order.order_type.value,
            expected_delivery=order.expected_delivery.isoformat(),
        )
        return order

    def confirm(
        self,
        order_id: str,
        supplier_reference: str,
        expected_delivery: datetime | None = None,
    ) -> PurchaseOrder:
        """Record the supplier's confirmation of a sent order."""
        order = self.require_order(order_id)
        self._transition(order, OrderStatus.CONFIRMED, note=supplier_reference)

        order.confirmed_at = datetime.utcnow()
        order.supplier_reference = supplier_reference
        order.confirmed_delivery = expected_delivery or order.expected_delivery

        self.notifications.emit(
            NotificationType.ORDER_CONFIRMED,
            f"Order {order.order_id} confirmed by supplier",
            priority=order.priority,
            order_id=order.order_id,
            part_id=order.part_id,
            supplier_reference=supplier_reference,
            confirmed_delivery=order.confirmed_delivery.isoformat(),
        )
        return order

    async def receive(
        self,
        order_id: str,
        received_quantity: int,
        received_date: datetime | None = None,
    ) -> PurchaseOrder:
        """
        Book goods delivered against a confirmed order.

        Stock grows by exactly ``received_quantity`` at the order's unit
        price. Short deliveries leave the order partially received and
        still outstanding; later deliveries accumulate.

        Raises:
            NotFoundError: Unknown order
            InvalidTransitionError: Order not confirmed or partially received
        """
        if received_quantity <= 0:
            raise ValueError("Received quantity must be positive")

        order = self.require_order(order_id)
        total_received = order.received_quantity + received_quantity
        to_status = (
            OrderStatus.RECEIVED
            if total_received >= order.quantity
            else OrderStatus.PARTIALLY_RECEIVED
        )

        # Commit the order state before suspending on the stock lock
        received_at = received_date or datetime.utcnow()
        self._transition(order, to_status, note=f"{received_quantity} received")
        order.received_quantity = total_received
        order.received_at = received_at

        await self.inventory.receive_stock(
            order.part_id,
            received_quantity,
            order.unit_price,
            received_at=received_at,
        )

        self.notifications.emit(
            NotificationType.ORDER_RECEIVED,
            f"Order {order.order_id} received: {order.received_quantity}/{order.quantity} units",
            priority=order.priority,
            order_id=order.order_id,
            part_id=order.part_id,
            part_name=order.part_name,
            received_quantity=received_quantity,
            total_received=order.received_quantity,
            is_complete=order.is_complete,
        )
        return order

    def cancel(self, order_id: str, reason: str = "cancelled") -> PurchaseOrder:
        """Cancel an order that has not started arriving."""
        order = self.require_order(order_id)
        self._transition(order, OrderStatus.CANCELLED, note=reason)

        order.cancelled_at = datetime.utcnow()
        order.cancel_reason = reason

        self.notifications.emit(
            NotificationType.ORDER_CANCELLED,
            f"Order {order.order_id} cancelled: {reason}",
            priority=order.priority,
            order_id=order.order_id,
            part_id=order.part_id,
            reason=reason,
        )
        return order

    def get_order(self, order_id: str) -> PurchaseOrder | None:
        return self._orders.get(order_id)

    def require_order(self, order_id: str) -> PurchaseOrder:
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def has_outstanding(self, part_id: str) -> bool:
        """Check if the part has an order that is not yet received or cancelled."""
        return part_id in self._outstanding

    def outstanding_for(self, part_id: str) -> PurchaseOrder | None:
        order_id = self._outstanding.get(part_id)
        return self._orders.get(order_id) if order_id else None

    def list_outstanding(self) -> list[PurchaseOrder]:
        return [self._orders[order_id] for order_id in self._outstanding.values()]

    def all_orders(self) -> list[PurchaseOrder]:
        return list(self._orders.values())

    def get_order_history(self, limit: int | None = 50) -> list[PurchaseOrder]:
        """Orders newest first."""
        orders = sorted(
            reversed(list(self._orders.values())), key=lambda o: o.created_at, reverse=True
        )
        return orders[:limit] if limit is not None else orders

    def _transition(
        self,
        order: PurchaseOrder,
        to_status: OrderStatus,
        note: str | None = None,
    ) -> None:
        from_status = order.status
        if not OrderTransitions.can_transition(from_status, to_status):
            raise InvalidTransitionError(order.order_id, from_status.value, to_status.value)

        order.status = to_status
        order.history.append(OrderEvent(from_status=from_status, to_status=to_status, note=note))

        if not order.is_outstanding and self._outstanding.get(order.part_id) == order.order_id:
            del self._outstanding[order.part_id]

        self.logger.log_transition(
            order.order_id,
            from_status.value,
            to_status.value,
            part_id=order.part_id,
        )
