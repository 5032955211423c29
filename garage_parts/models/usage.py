"""Service usage, invoice and warranty models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from garage_parts.models.timestamps import UtcDatetime


class VehicleInfo(BaseModel):
    """Customer vehicle details."""

    make: str
    model: str
    year: str | None = None
    plate_number: str | None = None

    @property
    def description(self) -> str:
        """Make and model as a single string."""
        return f"{self.make} {self.model}"


class ServicePartInput(BaseModel):
    """A part line as reported by the technician."""

    part_id: str
    quantity: int = Field(ge=1)
    unit_cost: int | None = Field(default=None, ge=0)
    supplier: str | None = None
    installed_by: str | None = None
    warranty_period: str | None = "12 months"


class ServiceRecord(BaseModel):
    """Completed service job submitted for usage tracking."""

    service_id: str
    customer_id: str
    customer_name: str
    vehicle_info: VehicleInfo
    service_type: str
    service_date: UtcDatetime = Field(default_factory=datetime.utcnow)
    parts_used: list[ServicePartInput] = Field(default_factory=list)
    labor_cost: int = Field(default=0, ge=0)


class PartUsageLine(BaseModel):
    """A part consumed by a service, priced at consumption time."""

    model_config = ConfigDict(frozen=True)

    part_id: str
    name: str
    part_number: str
    quantity: int = Field(ge=1)
    unit_cost: int = Field(ge=0)
    total_cost: int = Field(ge=0)
    supplier: str | None = None
    installed_by: str | None = None
    warranty_period: str | None = None


def new_usage_id() -> str:
    """Generate a usage entry id."""
    return f"USAGE-{uuid4().hex[:12].upper()}"


class UsageRecord(BaseModel):
    """Append-only record of the parts consumed by one service."""

    model_config = ConfigDict(frozen=True)

    usage_id: str = Field(default_factory=new_usage_id)
    service_id: str
    customer_id: str
    customer_name: str
    vehicle_info: VehicleInfo
    service_type: str
    service_date: datetime
    parts_used: tuple[PartUsageLine, ...] = ()
    labor_cost: int = 0
    total_parts_cost: int = 0
    total_service_cost: int = 0
    technician: str = "Unknown"
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @property
    def parts_quantity(self) -> int:
        """Total units of parts consumed."""
        return sum(line.quantity for line in self.parts_used)


class PaymentStatus(str, Enum):
    """Invoice payment states."""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class InvoiceLine(BaseModel):
    """One billable line."""

    type: str  # "labor" or "part"
    description: str
    quantity: int
    unit_price: int
    total_price: int
    part_id: str | None = None
    supplier: str | None = None
    warranty: str | None = None
    taxable: bool = True


class Invoice(BaseModel):
    """Invoice derived from a service usage record."""

    invoice_id: str
    service_id: str
    customer_id: str
    customer_name: str
    vehicle_info: VehicleInfo
    service_date: datetime
    issued_at: datetime = Field(default_factory=datetime.utcnow)
    items: list[InvoiceLine] = Field(default_factory=list)
    subtotal: int = 0
    tax_rate: Decimal = Decimal("0.15")
    tax_amount: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    payment_status: PaymentStatus = PaymentStatus.PENDING
    due_date: datetime
    payment_date: datetime | None = None


class InvoicePaymentUpdate(BaseModel):
    """Payment status change for an invoice."""

    payment_status: PaymentStatus
    payment_date: UtcDatetime | None = None


class ServiceUsageResult(BaseModel):
    """Outcome of recording a service's parts usage."""

    usage: UsageRecord
    invoice: Invoice
    duplicate: bool = False


class WarrantyItem(BaseModel):
    """Warranty coverage for an installed part."""

    part_id: str
    name: str
    part_number: str
    service_id: str
    service_date: datetime
    warranty_period: str
    warranty_expiry: datetime
    is_active: bool
    days_remaining: int
