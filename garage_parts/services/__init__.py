"""Parts department services."""

from garage_parts.services.analytics import PartsAnalytics
from garage_parts.services.desk import PartsDesk
from garage_parts.services.orders import OrderTracker
from garage_parts.services.pricing import PricingService, PricingSimulator, QuoteSource
from garage_parts.services.reordering import ReorderingService
from garage_parts.services.rules import ReorderRuleEngine
from garage_parts.services.usage import UsageTracker, add_months, parse_warranty_period

__all__ = [
    "PartsAnalytics",
    "PartsDesk",
    "OrderTracker",
    "PricingService",
    "PricingSimulator",
    "QuoteSource",
    "ReorderingService",
    "ReorderRuleEngine",
    "UsageTracker",
    "add_months",
    "parse_warranty_period",
]
