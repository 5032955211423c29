"""Tests for service usage, invoices and warranties."""

from datetime import datetime
from decimal import Decimal

import pytest

from garage_parts.errors import NotFoundError
from garage_parts.models import (
    NotificationType,
    PaymentStatus,
    ServicePartInput,
    ServiceRecord,
    VehicleInfo,
)
from garage_parts.services import add_months, parse_warranty_period
from garage_parts.services.desk import PartsDesk


def make_record(
    service_id: str = "SRV-100",
    parts: list[ServicePartInput] | None = None,
    **overrides,
) -> ServiceRecord:
    if parts is None:
        parts = [ServicePartInput(part_id="OIL-001", quantity=2, installed_by="Tech-007")]

    values = {
        "service_id": service_id,
        "customer_id": "CUST-100",
        "customer_name": "Dana Reyes",
        "vehicle_info": VehicleInfo(make="Honda", model="City", year="2018"),
        "service_type": "Oil Change",
        "service_date": datetime(2024, 1, 15),
        "parts_used": parts,
        "labor_cost": 1000,
    }
    values.update(overrides)
    return ServiceRecord(**values)


@pytest.mark.parametrize(
    "period, months",
    [
        ("6 months", 6),
        ("1 month", 1),
        ("2 years", 24),
        ("1 Year", 12),
        ("90 days", 12),
        ("lifetime", 12),
    ],
)
def test_parse_warranty_period(period: str, months: int) -> None:
    assert parse_warranty_period(period) == months


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (datetime(2024, 1, 15), 12, datetime(2025, 1, 15)),
        (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
        (datetime(2023, 1, 31), 1, datetime(2023, 2, 28)),
        (datetime(2024, 11, 15), 3, datetime(2025, 2, 15)),
    ],
)
def test_add_months_clamps_to_month_end(start: datetime, months: int, expected: datetime) -> None:
    assert add_months(start, months) == expected


@pytest.mark.asyncio
async def test_record_usage_consumes_stock_and_invoices(desk: PartsDesk) -> None:
    """Test labor 1000 plus two units at the 900 average cost."""
    result = await desk.usage.record_service_usage(make_record())

    usage = result.usage
    assert result.duplicate is False
    assert usage.total_parts_cost == 1800
    assert usage.total_service_cost == 2800
    assert usage.technician == "Tech-007"
    assert desk.inventory.require_part("OIL-001").current_stock == 3

    invoice = result.invoice
    assert invoice.invoice_id == "INV-SRV-100"
    assert [line.type for line in invoice.items] == ["labor", "part"]
    assert invoice.subtotal == 2800
    assert invoice.tax_amount == Decimal("420.00")
    assert invoice.total == Decimal("3220.00")
    assert invoice.payment_status == PaymentStatus.PENDING
    assert (invoice.due_date - invoice.issued_at).days == 30
    assert desk.usage.get_invoice("INV-SRV-100") is invoice


@pytest.mark.asyncio
async def test_reported_unit_cost_overrides_average(desk: PartsDesk) -> None:
    parts = [ServicePartInput(part_id="OIL-001", quantity=1, unit_cost=1250)]

    result = await desk.usage.record_service_usage(make_record(parts=parts))

    assert result.usage.parts_used[0].total_cost == 1250
    assert result.usage.technician == "Unknown"


@pytest.mark.asyncio
async def test_resubmitted_service_is_not_consumed_twice(desk: PartsDesk) -> None:
    """Test that recording the same service id twice changes nothing the second time."""
    first = await desk.usage.record_service_usage(make_record())
    second = await desk.usage.record_service_usage(make_record())

    assert second.duplicate is True
    assert second.usage.usage_id == first.usage.usage_id
    assert desk.inventory.require_part("OIL-001").current_stock == 3
    assert len(desk.usage.list_usage()) == 1
    assert len(desk.usage.list_invoices()) == 1


@pytest.mark.asyncio
async def test_unknown_part_records_nothing(desk: PartsDesk) -> None:
    parts = [
        ServicePartInput(part_id="OIL-001", quantity=1),
        ServicePartInput(part_id="missing", quantity=1),
    ]

    with pytest.raises(NotFoundError):
        await desk.usage.record_service_usage(make_record(parts=parts))

    assert desk.inventory.require_part("OIL-001").current_stock == 5
    assert desk.usage.list_usage() == []
    assert desk.usage.get_service_record("SRV-100") is None


@pytest.mark.asyncio
async def test_consumption_below_minimum_raises_reorder_notice(seeded_desk: PartsDesk) -> None:
    parts = [ServicePartInput(part_id="part-1", quantity=5)]

    await seeded_desk.usage.record_service_usage(
        make_record(parts=parts, service_type="Brake Service")
    )

    notices = seeded_desk.notifications.get_notifications(
        notification_type=NotificationType.REORDER_NEEDED
    )
    assert [n.payload["part_id"] for n in notices] == ["part-1"]


def test_imported_history_leaves_stock_alone(seeded_desk: PartsDesk) -> None:
    """Test that demo history is invoiced but not consumed."""
    invoice = seeded_desk.usage.get_invoice("INV-SRV-001")

    # Labor 800 + oil 899 + filter 435
    assert invoice.subtotal == 2134
    assert invoice.tax_amount == Decimal("320.10")
    assert invoice.total == Decimal("2454.10")
    assert seeded_desk.inventory.require_part("part-3").current_stock == 2
    assert [r.service_id for r in seeded_desk.usage.list_service_records()] == [
        "SRV-002",
        "SRV-001",
    ]


def test_update_invoice_payment(seeded_desk: PartsDesk) -> None:
    paid_on = datetime(2024, 2, 1)

    invoice = seeded_desk.usage.update_invoice_payment(
        "INV-SRV-002", PaymentStatus.PAID, payment_date=paid_on
    )

    assert invoice.payment_status == PaymentStatus.PAID
    assert invoice.payment_date == paid_on

    with pytest.raises(NotFoundError):
        seeded_desk.usage.update_invoice_payment("INV-missing", PaymentStatus.PAID)


@pytest.mark.asyncio
async def test_warranty_expiry_and_days_remaining(desk: PartsDesk) -> None:
    parts = [
        ServicePartInput(part_id="OIL-001", quantity=1, warranty_period="12 months"),
    ]
    result = await desk.usage.record_service_usage(make_record(parts=parts))

    (expired,) = desk.usage.warranty_items([result.usage], now=datetime(2026, 10, 19))
    assert expired.warranty_expiry == datetime(2025, 1, 15)
    assert expired.is_active is False
    assert expired.days_remaining == 0

    (active,) = desk.usage.warranty_items([result.usage], now=datetime(2024, 12, 15))
    assert active.is_active is True
    assert active.days_remaining == 31


@pytest.mark.asyncio
async def test_parts_without_warranty_are_skipped(desk: PartsDesk) -> None:
    parts = [ServicePartInput(part_id="OIL-001", quantity=1, warranty_period="N/A")]
    result = await desk.usage.record_service_usage(make_record(parts=parts))

    assert desk.usage.warranty_items([result.usage]) == []


def test_customer_parts_history(seeded_desk: PartsDesk) -> None:
    history = seeded_desk.usage.get_customer_parts_history("CUST-002")

    assert history["total_services"] == 1
    assert history["total_parts_used"] == 2
    # Labor 1500 + pads 2400 + fluid 299
    assert history["total_spent"] == 4199
    assert [p["part_id"] for p in history["parts_breakdown"]] == ["part-1", "part-6"]
    # Pads 12 months, fluid 2 years
    assert [w.part_id for w in history["warranty_items"]] == ["part-1", "part-6"]
    assert history["warranty_items"][1].warranty_expiry == datetime(2026, 1, 16)


def test_unknown_customer_has_empty_history(seeded_desk: PartsDesk) -> None:
    history = seeded_desk.usage.get_customer_parts_history("CUST-404")

    assert history["total_services"] == 0
    assert history["parts_breakdown"] == []
    assert history["warranty_items"] == []
