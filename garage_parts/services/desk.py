"""Wires the parts services together and owns their background tasks."""

import random
from typing import Any

from garage_parts import seed
from garage_parts.config import Settings, get_settings
from garage_parts.services.analytics import PartsAnalytics
from garage_parts.services.orders import OrderTracker
from garage_parts.services.pricing import PricingService, PricingSimulator, QuoteSource
from garage_parts.services.reordering import ReorderingService
from garage_parts.services.rules import ReorderRuleEngine
from garage_parts.services.usage import UsageTracker
from garage_parts.state.inventory import InventoryStore
from garage_parts.state.notifications import NotificationCenter
from garage_parts.state.suppliers import SupplierRegistry
from garage_parts.utils.logging import get_logger
from garage_parts.utils.scheduling import PeriodicTask

logger = get_logger(__name__)

DEMAND_WINDOW_DAYS = 7


class PartsDesk:
    """
    The parts department: every store and service, built once per process.

    Args:
        settings: Configuration; defaults to the cached environment settings
        quote_source: Supplier price feed; defaults to the simulator
        rng: Random source for the simulator
    """

    def __init__(
        self,
        settings: Settings | None = None,
        quote_source: QuoteSource | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or get_settings()

        if quote_source is None:
            quote_source = PricingSimulator(
                rng=rng or random.Random(self.settings.random_seed),
                variation=self.settings.price_variation,
                latency_seconds=self.settings.supplier_latency_ms / 1000,
            )

        self.notifications = NotificationCenter()
        self.inventory = InventoryStore(self.notifications)
        self.suppliers = SupplierRegistry()
        self.rules = ReorderRuleEngine(self.inventory, self.suppliers)
        self.orders = OrderTracker(self.inventory, self.notifications)
        self.pricing = PricingService(
            self.inventory,
            self.suppliers,
            quote_source,
            self.notifications,
            self.settings,
            service_parts=seed.SERVICE_PART_MAP,
        )
        self.reordering = ReorderingService(
            self.inventory,
            self.suppliers,
            self.rules,
            self.orders,
            self.pricing,
            self.notifications,
            self.settings,
        )
        self.usage = UsageTracker(self.inventory, self.settings)
        self.analytics = PartsAnalytics(self.inventory, self.suppliers, self.usage, self.orders)

        self._price_refresher: PeriodicTask | None = None
        if self.settings.price_refresh_interval_seconds > 0:
            self._price_refresher = PeriodicTask(
                "price-refresh",
                self.pricing.refresh_prices,
                self.settings.price_refresh_interval_seconds,
            )

        if self.settings.seed_demo_data:
            self.seed()

    def seed(self) -> None:
        """Load the demo suppliers, parts, rules and service history."""
        for supplier in seed.build_suppliers():
            self.suppliers.register(supplier)

        parts = seed.build_parts()
        for part in parts:
            self.inventory.add_part(part)

        for rule in seed.build_rules(parts):
            self.rules.upsert_rule(rule)

        self.usage.import_history(seed.sample_service_records())

        logger.info(
            "demo_data_seeded",
            suppliers=len(self.suppliers.list_suppliers()),
            parts=len(parts),
            rules=len(self.rules.list_rules()),
        )

    async def startup(self) -> None:
        """Start the background monitors enabled by configuration."""
        if self.settings.monitor_autostart:
            self.reordering.start_monitoring()
            if self._price_refresher is not None:
                self._price_refresher.start()
        logger.info("parts_desk_started", monitoring=self.reordering.is_monitoring)

    async def shutdown(self) -> None:
        await self.reordering.stop_monitoring()
        if self._price_refresher is not None:
            await self._price_refresher.stop()
        logger.info("parts_desk_stopped")

    def get_dynamic_pricing(self, part_id: str) -> dict[str, Any]:
        """Dynamic price using last week's demand for the part."""
        recent = self.analytics.recent_usage_count(part_id, DEMAND_WINDOW_DAYS)
        return self.pricing.get_dynamic_pricing(part_id, recent)
