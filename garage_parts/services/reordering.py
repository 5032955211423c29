"""Automated reordering monitor."""

import asyncio
from datetime import datetime, timedelta
from uuid import uuid4

from garage_parts.config import Settings, get_settings
from garage_parts.errors import OutstandingOrderError, PolicyViolationError
from garage_parts.models.notification import NotificationType
from garage_parts.models.order import OrderType, PurchaseOrder
from garage_parts.models.part import Part
from garage_parts.models.reorder import (
    PartSweepResult,
    Priority,
    ReorderingReport,
    ReorderOutcome,
    ReorderRule,
    SweepReport,
)
from garage_parts.services.orders import OrderTracker
from garage_parts.services.pricing import PricingService
from garage_parts.services.rules import ReorderRuleEngine
from garage_parts.state.inventory import InventoryStore
from garage_parts.state.notifications import NotificationCenter
from garage_parts.state.suppliers import SupplierRegistry
from garage_parts.utils.logging import ServiceLogger, get_logger
from garage_parts.utils.scheduling import PeriodicTask
from garage_parts.utils.tracing import SweepTracer

logger = get_logger(__name__)


class ReorderingService:
    """
    Periodically checks stock against reorder rules and raises purchase orders.

    For every part at or below its rule's reorder point that has nothing on
    order, a sweep either:
    - orders ``reorder_quantity`` from the preferred supplier and sends it
    - raises a price alert when the quote exceeds the rule's max price
    - asks for manual approval when the rule disables auto-reorder
    """

    def __init__(
        self,
        inventory: InventoryStore,
        suppliers: SupplierRegistry,
        rules: ReorderRuleEngine,
        orders: OrderTracker,
        pricing: PricingService,
        notifications: NotificationCenter,
        settings: Settings | None = None,
    ):
        self.inventory = inventory
        self.suppliers = suppliers
        self.rules = rules
        self.orders = orders
        self.pricing = pricing
        self.notifications = notifications
        self.settings = settings or get_settings()
        self.logger = ServiceLogger("reordering")

        self._sweep_lock = asyncio.Lock()
        self._monitor = PeriodicTask(
            "reorder-monitor",
            self.run_sweep,
            self.settings.reorder_check_interval_seconds,
        )
        self.last_sweep: SweepReport | None = None

    @property
    def is_monitoring(self) -> bool:
        return self._monitor.is_running

    def start_monitoring(self) -> None:
        """Start periodic sweeps, running the first one right away."""
        self._monitor.start()

    async def stop_monitoring(self) -> None:
        await self._monitor.stop()

    async def run_sweep(self) -> SweepReport | None:
        """
        Check every ruled part once.

        Returns:
            The sweep report, or None if another sweep was still running
        """
        if self._sweep_lock.locked():
            logger.warning("sweep_skipped", reason="sweep already in progress")
            return None

        async with self._sweep_lock:
            sweep_id = f"SWEEP-{uuid4().hex[:8].upper()}"
            tracer = SweepTracer(sweep_id)
            report = SweepReport(sweep_id=sweep_id, started_at=datetime.utcnow())

            logger.info("sweep_started", sweep_id=sweep_id, rules=len(self.rules.list_rules()))

            for rule in self.rules.list_rules():
                part = self.inventory.get_part(rule.part_id)
                if part is None:
                    continue

                report.parts_checked += 1
                if part.current_stock > rule.min_stock:
                    continue

                try:
                    result = await self._process_candidate(part, rule, tracer)
                except Exception as e:
                    # A failure on one part must not stop the sweep
                    self.logger.log_error(str(e), part_id=part.part_id, sweep_id=sweep_id)
                    tracer.add_event("failed", part.part_id, error=str(e))
                    result = PartSweepResult(
                        part_id=part.part_id,
                        current_stock=part.current_stock,
                        min_stock=rule.min_stock,
                        outcome=ReorderOutcome.FAILED,
                        error=str(e),
                    )
                report.results.append(result)

            report.finished_at = datetime.utcnow()
            report.trace = tracer.get_trace_summary()
            self.last_sweep = report

            logger.info(
                "sweep_completed",
                sweep_id=sweep_id,
                parts_checked=report.parts_checked,
                candidates=len(report.results),
                orders_created=len(report.orders_created),
                price_alerts=report.count(ReorderOutcome.PRICE_ALERT),
                manual_approvals=report.count(ReorderOutcome.MANUAL_APPROVAL),
                failed=report.count(ReorderOutcome.FAILED),
            )
            return report

    async def reorder_part(self, part_id: str) -> PurchaseOrder | None:
        """
        Run the automatic reorder path for one part.

        Returns:
            The sent order, or None if the preferred supplier gave no quote

        Raises:
            NotFoundError: Unknown part or no rule for it
            PolicyViolationError: Quote above the rule's max price
            OutstandingOrderError: The part already has an order outstanding
        """
        part = self.inventory.require_part(part_id)
        rule = self.rules.require_rule(part_id)
        tracer = SweepTracer(f"PART-{uuid4().hex[:8].upper()}")
        _, order = await self._auto_reorder(part, rule, tracer)
        return order

    async def place_order(
        self,
        part_id: str,
        quantity: int,
        supplier_id: str,
        approved_by: str,
    ) -> PurchaseOrder:
        """
        Place a staff-approved order at the supplier's current price.

        The rule's max price does not apply; the outstanding-order guard does.
        """
        part = self.inventory.require_part(part_id)
        supplier = self.suppliers.require_supplier(supplier_id)

        outstanding = self.orders.outstanding_for(part_id)
        if outstanding is not None:
            raise OutstandingOrderError(part_id, outstanding.order_id)

        quote = await self.pricing.get_supplier_quote(part_id, supplier_id)
        if quote is None:
            raise PolicyViolationError(f"{supplier.name} does not quote {part.name}")

        rule = self.rules.get_rule(part_id)
        order = self.orders.create(
            part,
            supplier,
            quantity=quantity,
            unit_price=quote.price,
            order_type=OrderType.MANUAL,
            priority=rule.priority if rule else Priority.MEDIUM,
            approved_by=approved_by,
        )
        self.orders.send(order.order_id)

        self.logger.log_operation(
            "manual_order",
            order_id=order.order_id,
            part_id=part_id,
            quantity=quantity,
            unit_price=quote.price,
            approved_by=approved_by,
        )
        return order

    def get_reordering_report(self, days: int = 30) -> ReorderingReport:
        """Order activity created within the last ``days`` days."""
        cutoff = datetime.utcnow() - timedelta(days=days)
        recent = [o for o in self.orders.all_orders() if o.created_at >= cutoff]

        by_status: dict[str, int] = {}
        by_supplier: dict[str, int] = {}
        by_priority: dict[str, int] = {}
        for order in recent:
            by_status[order.status.value] = by_status.get(order.status.value, 0) + 1
            by_supplier[order.supplier.name] = by_supplier.get(order.supplier.name, 0) + 1
            by_priority[order.priority.value] = by_priority.get(order.priority.value, 0) + 1

        total_value = sum(o.total_price for o in recent)
        return ReorderingReport(
            days=days,
            total_orders=len(recent),
            automatic_orders=sum(1 for o in recent if o.order_type == OrderType.AUTOMATIC),
            manual_orders=sum(1 for o in recent if o.order_type == OrderType.MANUAL),
            total_value=total_value,
            average_order_value=total_value / len(recent) if recent else 0.0,
            orders_by_status=by_status,
            orders_by_supplier=by_supplier,
            orders_by_priority=by_priority,
        )

    async def _process_candidate(
        self,
        part: Part,
        rule: ReorderRule,
        tracer: SweepTracer,
    ) -> PartSweepResult:
        result = PartSweepResult(
            part_id=part.part_id,
            current_stock=part.current_stock,
            min_stock=rule.min_stock,
            outcome=ReorderOutcome.ALREADY_ORDERED,
        )

        outstanding = self.orders.outstanding_for(part.part_id)
        if outstanding is not None:
            tracer.add_event("already_ordered", part.part_id, order_id=outstanding.order_id)
            result.order_id = outstanding.order_id
            return result

        if not rule.auto_reorder:
            self._notify_manual_approval(part, rule)
            tracer.add_event("manual_approval", part.part_id)
            result.outcome = ReorderOutcome.MANUAL_APPROVAL
            return result

        try:
            quote_price, order = await self._auto_reorder(part, rule, tracer)
        except OutstandingOrderError as e:
            # Ordered by someone else while the quote was in flight
            result.order_id = e.order_id
            return result
        except PolicyViolationError as e:
            result.outcome = ReorderOutcome.PRICE_ALERT
            result.error = str(e)
            return result

        result.quoted_price = quote_price
        if order is None:
            result.outcome = ReorderOutcome.NO_QUOTE
        else:
            result.outcome = ReorderOutcome.ORDER_SENT
            result.order_id = order.order_id
        return result

    async def _auto_reorder(
        self,
        part: Part,
        rule: ReorderRule,
        tracer: SweepTracer,
    ) -> tuple[int | None, PurchaseOrder | None]:
        with tracer.trace_operation(
            "quote_fetched", part.part_id, supplier_id=rule.preferred_supplier_id
        ):
            quote = await self.pricing.get_supplier_quote(part.part_id, rule.preferred_supplier_id)

        if quote is None:
            logger.warning(
                "preferred_supplier_no_quote",
                part_id=part.part_id,
                supplier_id=rule.preferred_supplier_id,
            )
            tracer.add_event("no_quote", part.part_id)
            return None, None

        if quote.price > rule.max_price:
            self._notify_price_alert(part, rule, quote.price, quote.supplier_name)
            tracer.add_event("price_alert", part.part_id, price=quote.price, max_price=rule.max_price)
            raise PolicyViolationError(
                f"Quote {quote.price} for {part.part_id} exceeds max price {rule.max_price}"
            )

        # Re-checks the outstanding guard; nothing may suspend between here and send
        supplier = self.suppliers.require_supplier(rule.preferred_supplier_id)
        order = self.orders.create(
            part,
            supplier,
            quantity=rule.reorder_quantity,
            unit_price=quote.price,
            order_type=OrderType.AUTOMATIC,
            priority=rule.priority,
            approved_by="system",
        )
        self.orders.send(order.order_id)

        tracer.add_event("order_sent", part.part_id, order_id=order.order_id, price=quote.price)
        logger.info(
            "automatic_reorder_created",
            order_id=order.order_id,
            part_id=part.part_id,
            quantity=order.quantity,
            unit_price=quote.price,
        )
        return quote.price, order

    def _notify_price_alert(self, part: Part, rule: ReorderRule, price: int, supplier_name: str) -> None:
        logger.warning(
            "price_alert",
            part_id=part.part_id,
            price=price,
            max_price=rule.max_price,
            supplier=supplier_name,
        )
        self.notifications.emit(
            NotificationType.PRICE_ALERT,
            f"Price alert: {part.name} from {supplier_name} ({price}) "
            f"exceeds maximum price ({rule.max_price})",
            priority=Priority.HIGH,
            requires_action=True,
            part_id=part.part_id,
            part_name=part.name,
            current_price=price,
            max_price=rule.max_price,
            supplier=supplier_name,
        )

    def _notify_manual_approval(self, part: Part, rule: ReorderRule) -> None:
        self.notifications.emit(
            NotificationType.LOW_STOCK_MANUAL,
            f"{part.name} is low in stock ({part.current_stock} {part.unit.lower()}). "
            f"Manual reorder required.",
            priority=rule.priority,
            requires_action=True,
            part_id=part.part_id,
            part_name=part.name,
            current_stock=part.current_stock,
            min_stock=rule.min_stock,
        )
