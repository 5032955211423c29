"""Inventory part models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field, model_validator


class StockStatus(str, Enum):
    """Stock level buckets."""

    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    CRITICAL = "critical"
    OUT_OF_STOCK = "out-of-stock"


def stock_status(current_stock: int, min_stock: int) -> StockStatus:
    """Bucket a stock level against its minimum."""
    if current_stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if current_stock < min_stock:
        return StockStatus.CRITICAL
    if current_stock < min_stock * 1.5:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class Part(BaseModel):
    """Stocked part with levels and costing."""

    part_id: str
    name: str
    part_number: str
    category: str
    current_stock: int = Field(ge=0)
    min_stock: int = Field(ge=0)
    max_stock: int = Field(ge=0)
    unit: str = "Units"
    avg_cost: int = Field(ge=0, description="Average unit cost in minor units")
    supplier_ids: list[str] = Field(default_factory=list)
    compatibility: list[str] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=datetime.utcnow)
    last_restocked: datetime | None = None

    @model_validator(mode="after")
    def check_stock_bounds(self) -> "Part":
        """Reject inverted stock bounds."""
        if self.min_stock > self.max_stock:
            raise ValueError(
                f"min_stock ({self.min_stock}) exceeds max_stock ({self.max_stock})"
            )
        return self

    @computed_field
    @property
    def status(self) -> StockStatus:
        """Current stock bucket."""
        return stock_status(self.current_stock, self.min_stock)

    @property
    def stock_value(self) -> int:
        """Value of the stock on hand."""
        return self.current_stock * self.avg_cost

    def is_compatible_with(self, vehicle_description: str) -> bool:
        """Check if the part fits a free-text vehicle description."""
        return any(
            compat == "Universal" or compat in vehicle_description
            for compat in self.compatibility
        )


class InventoryStatus(BaseModel):
    """Snapshot of the whole inventory."""

    total_items: int
    in_stock: int
    low_stock: int
    critical: int
    out_of_stock: int
    total_value: int
    items: list[Part]
