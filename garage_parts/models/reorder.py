"""Reorder rule and sweep models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Priority(str, Enum):
    """Reorder priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReorderRule(BaseModel):
    """Per-part reorder policy."""

    part_id: str
    min_stock: int = Field(ge=0)
    reorder_quantity: int = Field(gt=0)
    preferred_supplier_id: str
    max_price: int = Field(ge=0, description="Highest acceptable unit price")
    priority: Priority = Priority.MEDIUM
    auto_reorder: bool = True


class ReorderRuleUpdate(BaseModel):
    """Partial update to an existing rule."""

    min_stock: int | None = Field(default=None, ge=0)
    reorder_quantity: int | None = Field(default=None, gt=0)
    preferred_supplier_id: str | None = None
    max_price: int | None = Field(default=None, ge=0)
    priority: Priority | None = None
    auto_reorder: bool | None = None


class ReorderOutcome(str, Enum):
    """What a sweep decided for one part."""

    ORDER_SENT = "order-sent"
    PRICE_ALERT = "price-alert"
    MANUAL_APPROVAL = "manual-approval"
    ALREADY_ORDERED = "already-ordered"
    NO_QUOTE = "no-quote"
    FAILED = "failed"


class PartSweepResult(BaseModel):
    """Sweep decision for a part at or below its reorder point."""

    part_id: str
    current_stock: int
    min_stock: int
    outcome: ReorderOutcome
    order_id: str | None = None
    quoted_price: int | None = None
    error: str | None = None


class SweepReport(BaseModel):
    """Result of one reorder sweep."""

    sweep_id: str
    started_at: datetime
    finished_at: datetime | None = None
    parts_checked: int = 0
    results: list[PartSweepResult] = Field(default_factory=list)
    trace: dict[str, Any] = Field(default_factory=dict)

    def count(self, outcome: ReorderOutcome) -> int:
        """Number of parts that ended with the given outcome."""
        return sum(1 for result in self.results if result.outcome == outcome)

    @property
    def orders_created(self) -> list[str]:
        """Order ids placed by the sweep itself."""
        return [
            r.order_id
            for r in self.results
            if r.outcome == ReorderOutcome.ORDER_SENT and r.order_id is not None
        ]


class ReorderingReport(BaseModel):
    """Purchase order activity over a trailing window."""

    days: int
    total_orders: int
    automatic_orders: int
    manual_orders: int
    total_value: int
    average_order_value: float
    orders_by_status: dict[str, int]
    orders_by_supplier: dict[str, int]
    orders_by_priority: dict[str, int]
