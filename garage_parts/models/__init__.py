"""Data models for the parts service."""

from garage_parts.models.notification import Notification, NotificationType
from garage_parts.models.order import (
    OUTSTANDING_STATUSES,
    CancelOrderRequest,
    ConfirmOrderRequest,
    OrderEvent,
    OrderStatus,
    OrderType,
    PlaceOrderRequest,
    PurchaseOrder,
    ReceiveOrderRequest,
)
from garage_parts.models.part import InventoryStatus, Part, StockStatus, stock_status
from garage_parts.models.reorder import (
    PartSweepResult,
    Priority,
    ReorderingReport,
    ReorderOutcome,
    ReorderRule,
    ReorderRuleUpdate,
    SweepReport,
)
from garage_parts.models.supplier import (
    DeliveryTime,
    PriceQuote,
    Supplier,
    SupplierComparison,
    SupplierSnapshot,
    SupplierStatus,
)
from garage_parts.models.usage import (
    Invoice,
    InvoiceLine,
    InvoicePaymentUpdate,
    PartUsageLine,
    PaymentStatus,
    ServicePartInput,
    ServiceRecord,
    ServiceUsageResult,
    UsageRecord,
    VehicleInfo,
    WarrantyItem,
)

__all__ = [
    # Parts
    "Part",
    "StockStatus",
    "InventoryStatus",
    "stock_status",
    # Suppliers
    "Supplier",
    "SupplierStatus",
    "SupplierSnapshot",
    "DeliveryTime",
    "PriceQuote",
    "SupplierComparison",
    # Reordering
    "ReorderRule",
    "ReorderRuleUpdate",
    "Priority",
    "ReorderOutcome",
    "PartSweepResult",
    "SweepReport",
    "ReorderingReport",
    # Orders
    "PurchaseOrder",
    "OrderStatus",
    "OrderType",
    "OrderEvent",
    "OUTSTANDING_STATUSES",
    "PlaceOrderRequest",
    "ConfirmOrderRequest",
    "ReceiveOrderRequest",
    "CancelOrderRequest",
    # Usage
    "VehicleInfo",
    "ServiceRecord",
    "ServicePartInput",
    "PartUsageLine",
    "UsageRecord",
    "Invoice",
    "InvoiceLine",
    "PaymentStatus",
    "InvoicePaymentUpdate",
    "ServiceUsageResult",
    "WarrantyItem",
    # Notifications
    "Notification",
    "NotificationType",
]
