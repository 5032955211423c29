"""Tests for the automated reordering monitor."""

import asyncio

import pytest

from garage_parts.errors import NotFoundError, OutstandingOrderError, PolicyViolationError
from garage_parts.models import (
    NotificationType,
    OrderStatus,
    OrderType,
    Priority,
    ReorderOutcome,
)
from garage_parts.services.desk import PartsDesk


@pytest.mark.asyncio
async def test_sweep_orders_within_max_price(desk: PartsDesk, quote_source) -> None:
    """Test that a low part quoted at 900 against a max of 1000 is ordered and sent."""
    quote_source.set_price("OIL-001", "SUP-1", 900)

    report = await desk.reordering.run_sweep()

    assert report is not None
    assert report.parts_checked == 1
    assert report.count(ReorderOutcome.ORDER_SENT) == 1
    assert len(report.orders_created) == 1

    order = desk.orders.require_order(report.orders_created[0])
    assert order.status == OrderStatus.SENT
    assert order.quantity == 50
    assert order.unit_price == 900
    assert order.order_type == OrderType.AUTOMATIC
    assert order.approved_by == "system"

    sent = desk.notifications.get_notifications(notification_type=NotificationType.ORDER_SENT)
    assert len(sent) == 1
    assert desk.reordering.last_sweep is report


@pytest.mark.asyncio
async def test_sweep_orders_at_exactly_max_price(desk: PartsDesk, quote_source) -> None:
    quote_source.set_price("OIL-001", "SUP-1", 1000)

    report = await desk.reordering.run_sweep()

    assert report.count(ReorderOutcome.ORDER_SENT) == 1


@pytest.mark.asyncio
async def test_sweep_raises_price_alert_above_max_price(desk: PartsDesk, quote_source) -> None:
    """Test that a quote of 1200 against a max of 1000 alerts instead of ordering."""
    quote_source.set_price("OIL-001", "SUP-1", 1200)

    report = await desk.reordering.run_sweep()

    assert report.orders_created == []
    assert report.results[0].outcome == ReorderOutcome.PRICE_ALERT
    assert desk.orders.all_orders() == []

    alerts = desk.notifications.get_notifications(notification_type=NotificationType.PRICE_ALERT)
    assert len(alerts) == 1
    assert alerts[0].priority == Priority.HIGH
    assert alerts[0].requires_action is True
    assert alerts[0].payload["current_price"] == 1200
    assert alerts[0].payload["max_price"] == 1000


@pytest.mark.asyncio
async def test_sweep_asks_for_manual_approval(desk: PartsDesk) -> None:
    desk.rules.update_rule("OIL-001", auto_reorder=False)

    report = await desk.reordering.run_sweep()

    assert report.results[0].outcome == ReorderOutcome.MANUAL_APPROVAL
    assert desk.orders.all_orders() == []

    manual = desk.notifications.get_notifications(
        notification_type=NotificationType.LOW_STOCK_MANUAL
    )
    assert len(manual) == 1
    assert manual[0].requires_action is True


@pytest.mark.asyncio
async def test_sweep_skips_parts_above_reorder_point(desk: PartsDesk, quote_source) -> None:
    await desk.inventory.mutate_stock("OIL-001", 20)

    report = await desk.reordering.run_sweep()

    assert report.parts_checked == 1
    assert report.results == []
    assert quote_source.calls == 0


@pytest.mark.asyncio
async def test_sweep_triggers_at_reorder_point(desk: PartsDesk) -> None:
    """Test that stock equal to the rule's minimum is reordered."""
    await desk.inventory.mutate_stock("OIL-001", 5)

    report = await desk.reordering.run_sweep()

    assert report.count(ReorderOutcome.ORDER_SENT) == 1


@pytest.mark.asyncio
async def test_repeated_sweeps_do_not_duplicate_orders(desk: PartsDesk) -> None:
    first = await desk.reordering.run_sweep()
    second = await desk.reordering.run_sweep()

    assert second.results[0].outcome == ReorderOutcome.ALREADY_ORDERED
    assert second.results[0].order_id == first.orders_created[0]
    assert second.orders_created == []
    assert len(desk.orders.all_orders()) == 1


@pytest.mark.asyncio
async def test_failed_part_does_not_stop_sweep(desk: PartsDesk, quote_source) -> None:
    """Test that a supplier timeout marks the part failed and the sweep completes."""
    quote_source.delay = 0.5
    desk.pricing.settings.supplier_timeout_seconds = 0.01

    report = await desk.reordering.run_sweep()

    assert report.results[0].outcome == ReorderOutcome.FAILED
    assert "timed out" in report.results[0].error
    assert report.finished_at is not None
    assert report.trace["total_events"] >= 1


@pytest.mark.asyncio
async def test_overlapping_sweep_is_skipped(desk: PartsDesk, quote_source) -> None:
    quote_source.delay = 0.05

    first, second = await asyncio.gather(
        desk.reordering.run_sweep(),
        desk.reordering.run_sweep(),
    )

    assert first is not None
    assert second is None
    assert len(desk.orders.all_orders()) == 1


@pytest.mark.asyncio
async def test_manual_order_during_quote_is_not_duplicated(
    desk: PartsDesk, quote_source
) -> None:
    """Test that a sweep and a manual order racing on one part yield a single order."""
    quote_source.delay = 0.05

    report, manual = await asyncio.gather(
        desk.reordering.run_sweep(),
        desk.reordering.place_order("OIL-001", 10, "SUP-1", approved_by="alice"),
        return_exceptions=True,
    )

    assert len(desk.orders.all_orders()) == 1
    if isinstance(manual, OutstandingOrderError):
        assert report.results[0].outcome == ReorderOutcome.ORDER_SENT
    else:
        assert report.results[0].outcome == ReorderOutcome.ALREADY_ORDERED
        assert report.results[0].order_id == manual.order_id


@pytest.mark.asyncio
async def test_start_and_stop_are_idempotent(desk: PartsDesk) -> None:
    desk.reordering.start_monitoring()
    desk.reordering.start_monitoring()
    assert desk.reordering.is_monitoring

    # Let the immediate first sweep run
    await asyncio.sleep(0.05)

    await desk.reordering.stop_monitoring()
    await desk.reordering.stop_monitoring()
    assert not desk.reordering.is_monitoring
    assert desk.reordering.last_sweep is not None
    assert len(desk.orders.all_orders()) == 1


@pytest.mark.asyncio
async def test_reorder_part_directly(desk: PartsDesk, quote_source) -> None:
    order = await desk.reordering.reorder_part("OIL-001")
    assert order.status == OrderStatus.SENT

    with pytest.raises(OutstandingOrderError):
        await desk.reordering.reorder_part("OIL-001")

    with pytest.raises(NotFoundError):
        await desk.reordering.reorder_part("missing")


@pytest.mark.asyncio
async def test_reorder_part_above_max_price(desk: PartsDesk, quote_source) -> None:
    quote_source.set_price("OIL-001", "SUP-1", 1200)

    with pytest.raises(PolicyViolationError):
        await desk.reordering.reorder_part("OIL-001")


@pytest.mark.asyncio
async def test_place_order_ignores_max_price(desk: PartsDesk, quote_source) -> None:
    """Test that staff orders go through above the rule's max price."""
    quote_source.set_price("OIL-001", "SUP-1", 1500)

    order = await desk.reordering.place_order("OIL-001", 12, "SUP-1", approved_by="alice")

    assert order.order_type == OrderType.MANUAL
    assert order.status == OrderStatus.SENT
    assert order.unit_price == 1500
    assert order.total_price == 18000
    assert order.approved_by == "alice"
    assert order.priority == Priority.MEDIUM

    with pytest.raises(OutstandingOrderError):
        await desk.reordering.place_order("OIL-001", 1, "SUP-1", approved_by="bob")


@pytest.mark.asyncio
async def test_place_order_from_supplier_without_quote(
    seeded_desk: PartsDesk, quote_source
) -> None:
    # Oil filter is not carried by supplier-3
    with pytest.raises(PolicyViolationError):
        await seeded_desk.reordering.place_order("part-2", 5, "supplier-3", approved_by="alice")

    assert seeded_desk.orders.all_orders() == []


@pytest.mark.asyncio
async def test_reordering_report(desk: PartsDesk, quote_source) -> None:
    quote_source.set_price("OIL-001", "SUP-1", 900)
    await desk.reordering.run_sweep()

    report = desk.reordering.get_reordering_report(days=30)

    assert report.total_orders == 1
    assert report.automatic_orders == 1
    assert report.manual_orders == 0
    assert report.total_value == 45000
    assert report.average_order_value == 45000
    assert report.orders_by_status == {"sent": 1}
    assert report.orders_by_supplier == {"Test Supplier": 1}
    assert report.orders_by_priority == {"medium": 1}


@pytest.mark.asyncio
async def test_seeded_sweep(seeded_desk: PartsDesk, quote_source) -> None:
    """Test the demo catalog: two critical parts within price are ordered."""
    quote_source.set_price("part-2", "supplier-1", 450)
    quote_source.set_price("part-3", "supplier-1", 900)

    report = await seeded_desk.reordering.run_sweep()

    assert report.parts_checked == 6
    assert {r.part_id for r in report.results} == {"part-2", "part-3"}
    assert report.count(ReorderOutcome.ORDER_SENT) == 2
