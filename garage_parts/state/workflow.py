"""Purchase order state machine."""

from garage_parts.models.order import OrderStatus


class OrderTransitions:
    """Valid purchase order status transitions."""

    TRANSITIONS = {
        OrderStatus.PENDING: [
            OrderStatus.SENT,
            OrderStatus.CANCELLED,
        ],
        OrderStatus.SENT: [
            OrderStatus.CONFIRMED,
            OrderStatus.CANCELLED,
        ],
        OrderStatus.CONFIRMED: [
            OrderStatus.PARTIALLY_RECEIVED,
            OrderStatus.RECEIVED,
            OrderStatus.CANCELLED,
        ],
        OrderStatus.PARTIALLY_RECEIVED: [
            OrderStatus.PARTIALLY_RECEIVED,  # Another short delivery
            OrderStatus.RECEIVED,
        ],
        OrderStatus.RECEIVED: [],
        OrderStatus.CANCELLED: [],
    }

    @classmethod
    def can_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """Check if a status transition is valid."""
        return to_status in cls.TRANSITIONS.get(from_status, [])

    @classmethod
    def is_terminal(cls, status: OrderStatus) -> bool:
        """Check if no further transitions are possible."""
        return not cls.TRANSITIONS.get(status)
