"""In-memory state stores."""

from garage_parts.state.inventory import InventoryStore
from garage_parts.state.notifications import NotificationCenter
from garage_parts.state.suppliers import SupplierRegistry
from garage_parts.state.workflow import OrderTransitions

__all__ = ["InventoryStore", "NotificationCenter", "SupplierRegistry", "OrderTransitions"]
