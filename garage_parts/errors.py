"""Exception types raised by the parts services."""


class PartsServiceError(Exception):
    """Base class for all service errors."""


class NotFoundError(PartsServiceError):
    """An unknown part, order, supplier, rule or invoice was referenced."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")


class InvalidTransitionError(PartsServiceError):
    """A purchase order was asked to make a transition its state forbids."""

    def __init__(self, order_id: str, from_status: str, to_status: str):
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Order {order_id} cannot move from '{from_status}' to '{to_status}'"
        )


class PolicyViolationError(PartsServiceError):
    """An action would break a purchasing policy, such as a price ceiling."""


class OutstandingOrderError(PolicyViolationError):
    """A purchase order is already outstanding for the part."""

    def __init__(self, part_id: str, order_id: str):
        self.part_id = part_id
        self.order_id = order_id
        super().__init__(f"Part {part_id} already has outstanding order {order_id}")


class InvalidRuleError(PartsServiceError):
    """A reorder rule is inconsistent with the part or supplier catalog."""


class SupplierUnavailableError(PartsServiceError):
    """Supplier quotes could not be fetched in time. Safe to retry."""

    def __init__(self, part_id: str, timeout: float):
        self.part_id = part_id
        self.timeout = timeout
        super().__init__(f"Supplier quotes for {part_id} timed out after {timeout}s")
