"""In-memory inventory store with per-part write serialization."""

import asyncio
from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from garage_parts.errors import NotFoundError
from garage_parts.models.notification import NotificationType
from garage_parts.models.part import InventoryStatus, Part, StockStatus
from garage_parts.models.reorder import Priority
from garage_parts.state.notifications import NotificationCenter
from garage_parts.utils.logging import get_logger
from garage_parts.utils.money import round_minor

logger = get_logger(__name__)


class InventoryStore:
    """
    Stock levels and costing for every stocked part.

    Parts are never removed. All stock writes for one part go through that
    part's lock, so concurrent consumption and receipts apply in issue order.
    """

    def __init__(self, notifications: NotificationCenter | None = None):
        self.notifications = notifications
        self._parts: dict[str, Part] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def add_part(self, part: Part) -> Part:
        """Add a part to the catalog."""
        self._parts[part.part_id] = part
        return part

    def get_part(self, part_id: str) -> Part | None:
        """Look up a part."""
        return self._parts.get(part_id)

    def require_part(self, part_id: str) -> Part:
        """Look up a part that must exist."""
        part = self._parts.get(part_id)
        if part is None:
            raise NotFoundError("Part", part_id)
        return part

    def list_parts(self) -> list[Part]:
        """All parts in catalog order."""
        return list(self._parts.values())

    async def mutate_stock(self, part_id: str, delta: int) -> Part:
        """
        Apply a stock delta.

        Args:
            part_id: Part to adjust
            delta: Units to add (positive) or remove (negative)

        Returns:
            The updated part; stock never drops below zero
        """
        part = self.require_part(part_id)

        async with self._locks[part_id]:
            self._apply_delta(part, delta)

        logger.debug(
            "stock_mutated",
            part_id=part_id,
            delta=delta,
            current_stock=part.current_stock,
            status=part.status.value,
        )
        return part

    async def record_consumption(
        self,
        part_id: str,
        quantity: int,
        reason: str = "consumption",
    ) -> Part:
        """
        Record units leaving stock.

        Emits a reorder-needed notification when the part drops to or
        below its minimum.
        """
        if quantity <= 0:
            raise ValueError("Consumed quantity must be positive")

        part = self.require_part(part_id)

        async with self._locks[part_id]:
            previous = self._apply_delta(part, -quantity)
            crossed_min = previous > part.min_stock >= part.current_stock

        logger.info(
            "stock_consumed",
            part_id=part_id,
            quantity=quantity,
            reason=reason,
            current_stock=part.current_stock,
        )

        if crossed_min:
            self._notify_reorder_needed(part)

        return part

    async def receive_stock(
        self,
        part_id: str,
        quantity: int,
        unit_cost: int,
        received_at: datetime | None = None,
    ) -> Part:
        """
        Book received goods and re-average the unit cost.

        The new average weights the existing stock at the old cost and the
        received units at their purchase cost.
        """
        if quantity <= 0:
            raise ValueError("Received quantity must be positive")

        part = self.require_part(part_id)

        async with self._locks[part_id]:
            old_stock = part.current_stock
            new_stock = old_stock + quantity
            total_value = old_stock * part.avg_cost + quantity * unit_cost

            part.current_stock = new_stock
            part.avg_cost = round_minor(Decimal(total_value) / new_stock)
            part.last_restocked = received_at or datetime.utcnow()
            part.last_updated = datetime.utcnow()

        logger.info(
            "stock_received",
            part_id=part_id,
            quantity=quantity,
            unit_cost=unit_cost,
            current_stock=part.current_stock,
            avg_cost=part.avg_cost,
        )
        return part

    def get_low_stock_parts(self) -> list[Part]:
        """Parts that are not comfortably in stock."""
        return [p for p in self._parts.values() if p.status != StockStatus.IN_STOCK]

    def get_inventory_status(self) -> InventoryStatus:
        """Counts by status and total stock value."""
        items = self.list_parts()

        counts = {status: 0 for status in StockStatus}
        for item in items:
            counts[item.status] += 1

        return InventoryStatus(
            total_items=len(items),
            in_stock=counts[StockStatus.IN_STOCK],
            low_stock=counts[StockStatus.LOW_STOCK],
            critical=counts[StockStatus.CRITICAL],
            out_of_stock=counts[StockStatus.OUT_OF_STOCK],
            total_value=sum(item.stock_value for item in items),
            items=items,
        )

    def _apply_delta(self, part: Part, delta: int) -> int:
        """Adjust stock in place, clamped at zero, and return the previous level. Hold the part lock."""
        previous = part.current_stock
        part.current_stock = max(0, previous + delta)
        part.last_updated = datetime.utcnow()
        return previous

    def _notify_reorder_needed(self, part: Part) -> None:
        if self.notifications is None:
            return

        severity = "critical" if part.current_stock == 0 else "warning"
        self.notifications.emit(
            NotificationType.REORDER_NEEDED,
            f"{part.name} is at {part.current_stock} {part.unit.lower()} "
            f"(minimum {part.min_stock})",
            priority=Priority.HIGH if part.current_stock == 0 else Priority.MEDIUM,
            part_id=part.part_id,
            part_name=part.name,
            current_stock=part.current_stock,
            min_stock=part.min_stock,
            severity=severity,
        )
