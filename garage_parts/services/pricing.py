"""Supplier quote simulation and pricing views."""

import asyncio
import random
from datetime import datetime
from typing import Any, Protocol

from garage_parts.config import Settings, get_settings
from garage_parts.errors import SupplierUnavailableError
from garage_parts.models.notification import NotificationType
from garage_parts.models.part import Part
from garage_parts.models.reorder import Priority
from garage_parts.models.supplier import (
    DELIVERY_SCORES,
    PriceQuote,
    Supplier,
    SupplierComparison,
)
from garage_parts.models.usage import VehicleInfo
from garage_parts.state.inventory import InventoryStore
from garage_parts.state.notifications import NotificationCenter
from garage_parts.state.suppliers import SupplierRegistry
from garage_parts.utils.logging import ServiceLogger
from garage_parts.utils.money import round_minor

# Price at which a quote's price factor bottoms out
SCORE_PRICE_CEILING = 5000

HIGH_DEMAND_USES = 5


class QuoteSource(Protocol):
    """Anything that can quote a part from a set of suppliers."""

    async def fetch_quotes(self, part: Part, suppliers: list[Supplier]) -> list[PriceQuote]:
        ...


class PricingSimulator:
    """
    Simulated supplier price feed.

    Each supplier quotes the part's average cost with a random swing of up
    to ``variation`` either way, scaled by its price multiplier. A supplier
    has stock with probability equal to its reliability.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        variation: float = 0.10,
        latency_seconds: float = 0.0,
    ):
        self.rng = rng or random.Random()
        self.variation = variation
        self.latency_seconds = latency_seconds

    async def fetch_quotes(self, part: Part, suppliers: list[Supplier]) -> list[PriceQuote]:
        quotes = []
        for supplier in suppliers:
            if self.latency_seconds:
                await asyncio.sleep(self.latency_seconds)

            swing = self.rng.uniform(-self.variation, self.variation)
            price = round_minor(part.avg_cost * (1 + swing) * supplier.price_multiplier)

            quotes.append(
                PriceQuote(
                    supplier_id=supplier.supplier_id,
                    supplier_name=supplier.name,
                    price=price,
                    availability=self._availability(supplier),
                    delivery_time=supplier.delivery_time,
                )
            )
        return quotes

    def _availability(self, supplier: Supplier) -> int:
        if self.rng.random() < supplier.reliability:
            return self.rng.randint(10, 59)
        return 0


class PricingService:
    """
    Supplier quotes and the pricing views built on them.

    Responsibilities:
    - Fetch and cache quotes from active suppliers
    - Rank suppliers for a part
    - Price parts for service intake
    """

    def __init__(
        self,
        inventory: InventoryStore,
        suppliers: SupplierRegistry,
        source: QuoteSource,
        notifications: NotificationCenter,
        settings: Settings | None = None,
        service_parts: dict[str, list[str]] | None = None,
    ):
        self.inventory = inventory
        self.suppliers = suppliers
        self.source = source
        self.notifications = notifications
        self.settings = settings or get_settings()
        self.service_parts = service_parts or {}
        self.logger = ServiceLogger("pricing")
        self._price_cache: dict[str, dict[str, Any]] = {}

    async def fetch_supplier_prices(self, part_id: str) -> list[PriceQuote]:
        """
        Quote a part from every active supplier that carries it.

        Args:
            part_id: Part to quote

        Returns:
            Quotes sorted by ascending price

        Raises:
            NotFoundError: Unknown part
            SupplierUnavailableError: Suppliers did not answer in time
        """
        part = self.inventory.require_part(part_id)
        suppliers = self.suppliers.active_for(part.supplier_ids)
        timeout = self.settings.supplier_timeout_seconds

        try:
            quotes = await asyncio.wait_for(
                self.source.fetch_quotes(part, suppliers),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            self.logger.log_error("supplier_timeout", part_id=part_id, timeout=timeout)
            raise SupplierUnavailableError(part_id, timeout)

        quotes = sorted(quotes, key=lambda q: q.price)
        self._price_cache[part_id] = {"prices": quotes, "last_updated": datetime.utcnow()}
        return quotes

    async def get_supplier_quote(self, part_id: str, supplier_id: str) -> PriceQuote | None:
        """Current quote from one supplier, if it quotes the part at all."""
        for quote in await self.fetch_supplier_prices(part_id):
            if quote.supplier_id == supplier_id:
                return quote
        return None

    def cached_prices(self, part_id: str) -> list[PriceQuote]:
        """Last fetched quotes for a part."""
        entry = self._price_cache.get(part_id)
        return entry["prices"] if entry else []

    async def refresh_prices(self, notify: bool = False) -> list[dict[str, Any]]:
        """
        Refresh the price cache for every part.

        Parts whose suppliers fail to answer keep their previous cache entry.
        """
        updates = []
        for part in self.inventory.list_parts():
            try:
                quotes = await self.fetch_supplier_prices(part.part_id)
            except SupplierUnavailableError as e:
                self.logger.log_error(str(e), part_id=part.part_id, action="refresh_prices")
                continue

            updates.append(
                {
                    "part_id": part.part_id,
                    "part_name": part.name,
                    "old_price": part.avg_cost,
                    "new_price": quotes[0].price if quotes else part.avg_cost,
                    "suppliers": len(quotes),
                }
            )

        self.logger.log_operation("refresh_prices", parts_updated=len(updates))

        if notify:
            self.notifications.emit(
                NotificationType.PRICE_UPDATE,
                f"Updated prices for {len(updates)} parts",
                priority=Priority.LOW,
                updated_parts=len(updates),
            )
        return updates

    @staticmethod
    def calculate_supplier_score(quote: PriceQuote, supplier: Supplier) -> float:
        """Weighted score of price (40%), reliability (35%) and delivery speed (25%)."""
        price_score = max(0.0, 1 - quote.price / SCORE_PRICE_CEILING)
        delivery_score = DELIVERY_SCORES.get(supplier.delivery_time, 0.5)
        score = price_score * 0.40 + supplier.reliability * 0.35 + delivery_score * 0.25
        return round(score, 2)

    async def get_supplier_comparison(self, part_id: str) -> dict[str, Any]:
        """Quotes for a part ranked best first."""
        part = self.inventory.require_part(part_id)
        quotes = await self.fetch_supplier_prices(part_id)

        ranked = []
        for quote in quotes:
            supplier = self.suppliers.require_supplier(quote.supplier_id)
            ranked.append(
                SupplierComparison(
                    quote=quote,
                    supplier=supplier,
                    score=self.calculate_supplier_score(quote, supplier),
                )
            )
        ranked.sort(key=lambda c: c.score, reverse=True)

        return {"part_id": part_id, "part_name": part.name, "suppliers": ranked}

    def get_dynamic_pricing(self, part_id: str, recent_usage_count: int = 0) -> dict[str, Any]:
        """
        Adjust a part's price for stock pressure and demand.

        Args:
            part_id: Part to price
            recent_usage_count: Times the part was used in the last 7 days

        Returns:
            Base and adjusted price with the factors applied
        """
        part = self.inventory.require_part(part_id)

        multiplier = 1.0
        if part.current_stock == 0:
            multiplier += 0.20
        elif part.current_stock < part.min_stock:
            multiplier += 0.10
        elif part.current_stock > part.max_stock * 0.8:
            multiplier -= 0.05

        high_demand = recent_usage_count > HIGH_DEMAND_USES
        if high_demand:
            multiplier += 0.05

        multiplier = round(multiplier, 2)
        return {
            "part_id": part_id,
            "base_price": part.avg_cost,
            "adjusted_price": round_minor(part.avg_cost * multiplier),
            "price_multiplier": multiplier,
            "factors": {
                "stock_level": "low" if part.current_stock < part.min_stock else "normal",
                "demand": "high" if high_demand else "normal",
            },
        }

    @staticmethod
    def compatibility_score(part: Part, vehicle: VehicleInfo) -> float:
        """How well a part fits a vehicle, from 0 to 1."""
        score = 0.0
        if vehicle.description in part.compatibility:
            score += 1.0
        elif vehicle.make in part.compatibility:
            score += 0.8
        elif "Universal" in part.compatibility:
            score += 0.6

        if vehicle.year and vehicle.year.strip().isdigit():
            year = int(vehicle.year)
            if year >= 2015:
                score += 0.1
            if year <= 2010:
                score -= 0.1

        return round(min(1.0, max(0.0, score)), 2)

    async def get_realtime_pricing(
        self,
        part_ids: list[str],
        vehicle: VehicleInfo,
    ) -> list[dict[str, Any]]:
        """Priced part cards for service intake, best fit first. Unknown ids are skipped."""
        cards = []
        for part_id in part_ids:
            part = self.inventory.get_part(part_id)
            if part is None:
                continue

            quotes = await self.fetch_supplier_prices(part_id)
            score = self.compatibility_score(part, vehicle)
            best = quotes[0] if quotes else None

            cards.append(
                {
                    "part_id": part_id,
                    "name": part.name,
                    "part_number": part.part_number,
                    "description": f"{part.category} - Compatible with {vehicle.description}",
                    "category": part.category,
                    "warranty": f"{self.settings.default_warranty_months} months",
                    "current_stock": part.current_stock,
                    "availability": (
                        "in-stock" if sum(q.availability for q in quotes) > 0 else "out-of-stock"
                    ),
                    "price": best.price if best else part.avg_cost,
                    "original_price": part.avg_cost,
                    "discount": max(0, part.avg_cost - best.price) if best else 0,
                    "suppliers": quotes,
                    "compatibility_score": score,
                    "is_recommended": score > 0.8,
                    "estimated_delivery": best.delivery_time.value if best else "next-day",
                    "last_updated": datetime.utcnow(),
                }
            )

        return sorted(cards, key=lambda c: c["compatibility_score"], reverse=True)

    async def get_service_parts(
        self,
        service_type: str,
        vehicle: VehicleInfo,
    ) -> list[dict[str, Any]]:
        """Priced parts commonly needed for a service type."""
        return await self.get_realtime_pricing(self.service_parts.get(service_type, []), vehicle)

    def get_parts_recommendations(
        self,
        service_type: str,
        vehicle_description: str,
    ) -> list[dict[str, Any]]:
        """Parts for a service type that fit the described vehicle."""
        recommendations = []
        for part_id in self.service_parts.get(service_type, []):
            part = self.inventory.get_part(part_id)
            if part is None or not part.is_compatible_with(vehicle_description):
                continue

            recommendations.append(
                {
                    **part.model_dump(),
                    "recommended": True,
                    "reason": f"Commonly needed for {service_type}",
                    "availability": "Available" if part.current_stock > 0 else "Out of Stock",
                    "estimated_cost": part.avg_cost,
                }
            )
        return recommendations
