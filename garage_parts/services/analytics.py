"""Read-side projections over usage and purchase orders."""

import math
from datetime import datetime, timedelta
from typing import Any

from garage_parts.models.order import OrderStatus
from garage_parts.models.usage import UsageRecord
from garage_parts.services.orders import OrderTracker
from garage_parts.services.usage import UsageTracker
from garage_parts.state.inventory import InventoryStore
from garage_parts.state.suppliers import SupplierRegistry


class PartsAnalytics:
    """
    Aggregates recomputed on every call.

    Nothing here is cached or stored, so figures always agree with the
    underlying usage and order records.
    """

    def __init__(
        self,
        inventory: InventoryStore,
        suppliers: SupplierRegistry,
        usage: UsageTracker,
        orders: OrderTracker,
    ):
        self.inventory = inventory
        self.suppliers = suppliers
        self.usage = usage
        self.orders = orders

    def _recent(self, days: int) -> list[UsageRecord]:
        return self.usage.list_usage(since=datetime.utcnow() - timedelta(days=days))

    def top_parts(self, days: int = 30, limit: int = 5) -> list[dict[str, Any]]:
        """Most used parts by quantity within the window."""
        totals: dict[str, dict[str, Any]] = {}
        for usage in self._recent(days):
            for line in usage.parts_used:
                entry = totals.setdefault(
                    line.part_id,
                    {
                        "part_id": line.part_id,
                        "name": line.name,
                        "part_number": line.part_number,
                        "total_quantity": 0,
                        "total_cost": 0,
                        "usage_count": 0,
                    },
                )
                entry["total_quantity"] += line.quantity
                entry["total_cost"] += line.total_cost
                entry["usage_count"] += 1

        ranked = sorted(totals.values(), key=lambda e: e["total_quantity"], reverse=True)
        return ranked[:limit]

    def usage_by_category(self, days: int = 30) -> list[dict[str, Any]]:
        categories: dict[str, int] = {}
        for usage in self._recent(days):
            for line in usage.parts_used:
                part = self.inventory.get_part(line.part_id)
                if part is None:
                    continue
                categories[part.category] = categories.get(part.category, 0) + line.quantity

        return [{"category": c, "quantity": q} for c, q in categories.items()]

    def cost_trend(self, days: int = 30) -> list[dict[str, Any]]:
        """Parts cost per service day, oldest first."""
        daily: dict[str, int] = {}
        for usage in self._recent(days):
            day = usage.service_date.date().isoformat()
            daily[day] = daily.get(day, 0) + usage.total_parts_cost

        return [{"date": day, "cost": daily[day]} for day in sorted(daily)]

    def supplier_performance(self) -> list[dict[str, Any]]:
        """
        Order statistics per supplier.

        Rates are fractions between 0 and 1. Delivery days are measured from
        order creation to final receipt, rounded up, and averaged over
        completed orders.
        """
        performance: dict[str, dict[str, Any]] = {}
        delivery_days: dict[str, list[int]] = {}

        for order in self.orders.all_orders():
            supplier_id = order.supplier.supplier_id
            stats = performance.setdefault(
                supplier_id,
                {
                    "supplier_id": supplier_id,
                    "name": order.supplier.name,
                    "total_orders": 0,
                    "completed_orders": 0,
                    "total_value": 0,
                    "on_time_deliveries": 0,
                },
            )
            stats["total_orders"] += 1
            stats["total_value"] += order.total_price

            if order.status != OrderStatus.RECEIVED:
                continue

            stats["completed_orders"] += 1
            if order.received_at is not None:
                elapsed = (order.received_at - order.created_at).total_seconds() / 86400
                delivery_days.setdefault(supplier_id, []).append(max(0, math.ceil(elapsed)))
                if order.received_at <= order.expected_delivery:
                    stats["on_time_deliveries"] += 1

        results = []
        for supplier_id, stats in performance.items():
            days = delivery_days.get(supplier_id, [])
            supplier = self.suppliers.get_supplier(supplier_id)
            completed = stats["completed_orders"]
            results.append(
                {
                    **stats,
                    "reliability": supplier.reliability if supplier else None,
                    "average_delivery_days": sum(days) / len(days) if days else 0.0,
                    "completion_rate": completed / stats["total_orders"],
                    "on_time_rate": stats["on_time_deliveries"] / completed if completed else 0.0,
                }
            )
        return results

    def usage_analytics(self, days: int = 30) -> dict[str, Any]:
        """Service and parts totals, breakdowns and the ten most used parts."""
        recent = self._recent(days)
        total_services = len(recent)
        total_parts_used = sum(u.parts_quantity for u in recent)
        total_parts_cost = sum(u.total_parts_cost for u in recent)

        service_types: dict[str, dict[str, int]] = {}
        technicians: dict[str, dict[str, int]] = {}
        for usage in recent:
            service = service_types.setdefault(
                usage.service_type, {"count": 0, "total_cost": 0, "total_parts": 0}
            )
            service["count"] += 1
            service["total_cost"] += usage.total_service_cost
            service["total_parts"] += len(usage.parts_used)

            tech = technicians.setdefault(
                usage.technician,
                {"services_completed": 0, "total_revenue": 0, "parts_installed": 0},
            )
            tech["services_completed"] += 1
            tech["total_revenue"] += usage.total_service_cost
            tech["parts_installed"] += len(usage.parts_used)

        return {
            "days": days,
            "total_services": total_services,
            "total_parts_used": total_parts_used,
            "total_parts_cost": total_parts_cost,
            "total_service_cost": sum(u.total_service_cost for u in recent),
            "average_parts_per_service": (
                total_parts_used / total_services if total_services else 0.0
            ),
            "average_parts_cost_per_service": (
                total_parts_cost / total_services if total_services else 0.0
            ),
            "most_used_parts": self.top_parts(days, limit=10),
            "usage_by_category": self.usage_by_category(days),
            "cost_trend": self.cost_trend(days),
            "service_type_breakdown": service_types,
            "technician_performance": technicians,
        }

    def usage_trends(self, days: int = 30) -> list[dict[str, Any]]:
        """One entry per calendar day for the last ``days`` days, today included."""
        today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        usages = self.usage.list_usage()

        trends = []
        for offset in range(days - 1, -1, -1):
            start = today - timedelta(days=offset)
            end = start + timedelta(days=1)
            day_usage = [u for u in usages if start <= u.service_date < end]
            trends.append(
                {
                    "date": start.date().isoformat(),
                    "services": len(day_usage),
                    "parts_used": sum(u.parts_quantity for u in day_usage),
                    "revenue": sum(u.total_service_cost for u in day_usage),
                }
            )
        return trends

    def recent_usage_count(self, part_id: str, days: int = 7) -> int:
        """Number of services in the window that used the part."""
        return sum(
            1
            for usage in self._recent(days)
            if any(line.part_id == part_id for line in usage.parts_used)
        )
