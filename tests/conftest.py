"""Pytest configuration and fixtures."""

import asyncio
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from garage_parts.config import Settings
from garage_parts.main import create_app
from garage_parts.models import (
    DeliveryTime,
    Part,
    PriceQuote,
    ReorderRule,
    Supplier,
)
from garage_parts.services.desk import PartsDesk


class FixedQuoteSource:
    """Quote source with prices set by the test."""

    def __init__(self, availability: int = 50, delay: float = 0.0):
        self.prices: dict[tuple[str, str], int] = {}
        self.availability = availability
        self.delay = delay
        self.calls = 0

    def set_price(self, part_id: str, supplier_id: str, price: int) -> None:
        self.prices[(part_id, supplier_id)] = price

    async def fetch_quotes(self, part: Part, suppliers: list[Supplier]) -> list[PriceQuote]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)

        return [
            PriceQuote(
                supplier_id=supplier.supplier_id,
                supplier_name=supplier.name,
                price=self.prices.get((part.part_id, supplier.supplier_id), part.avg_cost),
                availability=self.availability,
                delivery_time=supplier.delivery_time,
            )
            for supplier in suppliers
        ]


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment's .env file."""
    values = {
        "monitor_autostart": False,
        "seed_demo_data": False,
        "supplier_latency_ms": 0,
        "price_refresh_interval_seconds": 0,
        "random_seed": 42,
        "log_format": "text",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return make_settings()


@pytest.fixture
def quote_source() -> FixedQuoteSource:
    return FixedQuoteSource()


@pytest.fixture
def bare_desk(settings: Settings, quote_source: FixedQuoteSource) -> PartsDesk:
    """A desk with no catalog loaded."""
    return PartsDesk(settings, quote_source=quote_source)


@pytest.fixture
def seeded_desk(quote_source: FixedQuoteSource) -> PartsDesk:
    """A desk with the demo catalog loaded."""
    return PartsDesk(make_settings(seed_demo_data=True), quote_source=quote_source)


# Sample data fixtures


@pytest.fixture
def sample_supplier() -> Supplier:
    """Create a sample supplier."""
    return Supplier(
        supplier_id="SUP-1",
        name="Test Supplier",
        delivery_time=DeliveryTime.TWO_HOURS,
        reliability=0.9,
        price_multiplier=1.0,
    )


@pytest.fixture
def sample_part() -> Part:
    """Create a part below its reorder point."""
    return Part(
        part_id="OIL-001",
        name="Engine Oil (5W-30)",
        part_number="OIL-5W30-001",
        category="Fluids",
        current_stock=5,
        min_stock=10,
        max_stock=60,
        unit="Quarts",
        avg_cost=900,
        supplier_ids=["SUP-1"],
        compatibility=["Universal"],
    )


@pytest.fixture
def sample_rule() -> ReorderRule:
    """Create an auto-reorder rule for the sample part."""
    return ReorderRule(
        part_id="OIL-001",
        min_stock=10,
        reorder_quantity=50,
        preferred_supplier_id="SUP-1",
        max_price=1000,
    )


@pytest.fixture
def desk(
    bare_desk: PartsDesk,
    sample_supplier: Supplier,
    sample_part: Part,
    sample_rule: ReorderRule,
) -> PartsDesk:
    """A desk stocking one low part with an auto-reorder rule."""
    bare_desk.suppliers.register(sample_supplier)
    bare_desk.inventory.add_part(sample_part)
    bare_desk.rules.upsert_rule(sample_rule)
    return bare_desk


@pytest_asyncio.fixture
async def test_client(desk: PartsDesk) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    app = create_app(desk)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
