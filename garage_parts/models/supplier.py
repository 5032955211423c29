"""Supplier and quote models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class DeliveryTime(str, Enum):
    """Supplier delivery windows."""

    SAME_DAY = "same-day"
    TWO_HOURS = "2h"
    FOUR_HOURS = "4h"
    NEXT_DAY = "next-day"


DELIVERY_HOURS = {
    DeliveryTime.SAME_DAY: 8,
    DeliveryTime.TWO_HOURS: 2,
    DeliveryTime.FOUR_HOURS: 4,
    DeliveryTime.NEXT_DAY: 24,
}

DELIVERY_SCORES = {
    DeliveryTime.SAME_DAY: 1.0,
    DeliveryTime.TWO_HOURS: 0.9,
    DeliveryTime.FOUR_HOURS: 0.7,
    DeliveryTime.NEXT_DAY: 0.5,
}


class SupplierStatus(str, Enum):
    """Supplier availability."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Supplier(BaseModel):
    """Parts supplier profile."""

    supplier_id: str
    name: str
    api_endpoint: str | None = None
    delivery_time: DeliveryTime = DeliveryTime.NEXT_DAY
    reliability: float = Field(default=0.9, ge=0, le=1)
    price_multiplier: float = Field(default=1.0, gt=0)
    status: SupplierStatus = SupplierStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        """Check if the supplier takes orders."""
        return self.status == SupplierStatus.ACTIVE

    @property
    def delivery_hours(self) -> int:
        """Hours from order to expected delivery."""
        return DELIVERY_HOURS[self.delivery_time]


class SupplierSnapshot(BaseModel):
    """Supplier details captured on a purchase order."""

    supplier_id: str
    name: str
    delivery_time: DeliveryTime


class PriceQuote(BaseModel):
    """One supplier's price and availability for a part."""

    supplier_id: str
    supplier_name: str
    price: int = Field(ge=0)
    availability: int = Field(default=0, ge=0)
    delivery_time: DeliveryTime
    last_updated: datetime = Field(default_factory=datetime.utcnow)


class SupplierComparison(BaseModel):
    """A quote ranked by price, reliability and delivery speed."""

    quote: PriceQuote
    supplier: Supplier
    score: float
