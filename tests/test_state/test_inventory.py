"""Tests for the inventory store."""

import asyncio

import pytest

from garage_parts.errors import NotFoundError
from garage_parts.models import NotificationType, Part, StockStatus, stock_status
from garage_parts.services.desk import PartsDesk
from garage_parts.state import InventoryStore, NotificationCenter


def make_part(**overrides) -> Part:
    values = {
        "part_id": "P-1",
        "name": "Oil Filter",
        "part_number": "OF-1",
        "category": "Filters",
        "current_stock": 10,
        "min_stock": 10,
        "max_stock": 40,
        "avg_cost": 100,
    }
    values.update(overrides)
    return Part(**values)


@pytest.mark.parametrize(
    "current, minimum, expected",
    [
        (0, 10, StockStatus.OUT_OF_STOCK),
        (9, 10, StockStatus.CRITICAL),
        (10, 10, StockStatus.LOW_STOCK),
        (14, 10, StockStatus.LOW_STOCK),
        (15, 10, StockStatus.IN_STOCK),
    ],
)
def test_stock_status_buckets(current: int, minimum: int, expected: StockStatus) -> None:
    """Test status buckets at each boundary."""
    assert stock_status(current, minimum) == expected


def test_status_follows_stock_level() -> None:
    """Test that the computed status tracks the current stock."""
    part = make_part(current_stock=20)
    assert part.status == StockStatus.IN_STOCK

    part.current_stock = 0
    assert part.status == StockStatus.OUT_OF_STOCK
    assert part.model_dump()["status"] == StockStatus.OUT_OF_STOCK


def test_part_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        make_part(min_stock=50, max_stock=40)


@pytest.mark.asyncio
async def test_receive_stock_weighted_average_cost() -> None:
    """Test 10 units at 100 plus 10 units at 200 averages to 150."""
    store = InventoryStore()
    store.add_part(make_part(current_stock=10, avg_cost=100))

    part = await store.receive_stock("P-1", 10, 200)

    assert part.current_stock == 20
    assert part.avg_cost == 150
    assert part.last_restocked is not None


@pytest.mark.asyncio
async def test_receive_stock_rounds_half_up() -> None:
    store = InventoryStore()
    store.add_part(make_part(current_stock=1, avg_cost=100))

    # (100 + 101) / 2 = 100.5
    part = await store.receive_stock("P-1", 1, 101)

    assert part.avg_cost == 101


@pytest.mark.asyncio
async def test_receive_into_empty_stock_takes_purchase_cost() -> None:
    store = InventoryStore()
    store.add_part(make_part(current_stock=0, avg_cost=100))

    part = await store.receive_stock("P-1", 5, 130)

    assert part.avg_cost == 130


@pytest.mark.asyncio
async def test_mutate_stock_clamps_at_zero() -> None:
    """Test that stock never goes negative."""
    store = InventoryStore()
    store.add_part(make_part(current_stock=3))

    part = await store.mutate_stock("P-1", -10)

    assert part.current_stock == 0
    assert part.status == StockStatus.OUT_OF_STOCK


@pytest.mark.asyncio
async def test_unknown_part_raises_not_found() -> None:
    store = InventoryStore()

    with pytest.raises(NotFoundError):
        await store.mutate_stock("missing", 1)

    assert store.get_part("missing") is None


@pytest.mark.asyncio
async def test_consumption_emits_reorder_needed_when_crossing_minimum() -> None:
    """Test that one notification is raised when stock reaches the minimum."""
    notifications = NotificationCenter()
    store = InventoryStore(notifications)
    store.add_part(make_part(current_stock=12, min_stock=10))

    await store.record_consumption("P-1", 2)
    await store.record_consumption("P-1", 1)

    reorder = notifications.get_notifications(notification_type=NotificationType.REORDER_NEEDED)
    assert len(reorder) == 1
    assert reorder[0].payload["current_stock"] == 10
    assert reorder[0].payload["severity"] == "warning"


@pytest.mark.asyncio
async def test_concurrent_consumption_notifies_once() -> None:
    """Test that consumptions queued on a busy part raise a single reorder notice."""
    notifications = NotificationCenter()
    store = InventoryStore(notifications)
    store.add_part(make_part(current_stock=12, min_stock=10))

    async with store._locks["P-1"]:
        tasks = [asyncio.create_task(store.record_consumption("P-1", 1)) for _ in range(5)]
        await asyncio.sleep(0)

    await asyncio.gather(*tasks)

    assert store.require_part("P-1").current_stock == 7
    reorder = notifications.get_notifications(notification_type=NotificationType.REORDER_NEEDED)
    assert len(reorder) == 1
    assert reorder[0].payload["current_stock"] == 10


@pytest.mark.asyncio
async def test_consumption_requires_positive_quantity() -> None:
    store = InventoryStore()
    store.add_part(make_part())

    with pytest.raises(ValueError):
        await store.record_consumption("P-1", 0)


@pytest.mark.asyncio
async def test_concurrent_mutations_are_all_applied() -> None:
    """Test that concurrent writes to one part do not lose updates."""
    store = InventoryStore()
    store.add_part(make_part(current_stock=100))

    await asyncio.gather(*(store.mutate_stock("P-1", -1) for _ in range(30)))
    await asyncio.gather(*(store.receive_stock("P-1", 2, 100) for _ in range(5)))

    assert store.require_part("P-1").current_stock == 80


def test_inventory_status_counts(seeded_desk: PartsDesk) -> None:
    """Test status counts over the demo catalog."""
    status = seeded_desk.inventory.get_inventory_status()

    assert status.total_items == 6
    assert status.in_stock + status.low_stock + status.critical + status.out_of_stock == 6
    # Oil filter 8 < 15 and engine oil 2 < 20
    assert status.critical == 2
    assert status.total_value == sum(p.current_stock * p.avg_cost for p in status.items)


def test_low_stock_parts_excludes_in_stock(seeded_desk: PartsDesk) -> None:
    low = seeded_desk.inventory.get_low_stock_parts()

    assert {p.part_id for p in low} >= {"part-2", "part-3"}
    assert all(p.status != StockStatus.IN_STOCK for p in low)
