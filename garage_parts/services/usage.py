"""Parts consumed per service, invoices and warranty coverage."""

import calendar
import math
import re
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from garage_parts.config import Settings, get_settings
from garage_parts.errors import NotFoundError
from garage_parts.models.usage import (
    Invoice,
    InvoiceLine,
    PartUsageLine,
    PaymentStatus,
    ServiceRecord,
    ServiceUsageResult,
    UsageRecord,
    WarrantyItem,
)
from garage_parts.state.inventory import InventoryStore
from garage_parts.utils.logging import ServiceLogger
from garage_parts.utils.money import apply_rate

NO_WARRANTY = "N/A"


def parse_warranty_period(period: str, default_months: int = 12) -> int:
    """
    Convert a warranty period such as "6 months" or "2 years" to months.

    Anything without a recognisable number and unit gets ``default_months``.
    """
    text = period.lower()
    match = re.search(r"\d+", text)
    if match is None:
        return default_months

    amount = int(match.group())
    if "year" in text:
        return amount * 12
    if "month" in text:
        return amount
    return default_months


def add_months(value: datetime, months: int) -> datetime:
    """Shift a date by whole months, clamping the day to the target month's end."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


class UsageTracker:
    """
    Records the parts each service consumed and derives invoices from them.

    Recording is idempotent per service id: submitting the same service
    twice returns the first result and leaves stock untouched.
    """

    def __init__(self, inventory: InventoryStore, settings: Settings | None = None):
        self.inventory = inventory
        self.settings = settings or get_settings()
        self.logger = ServiceLogger("usage")
        self._records: dict[str, ServiceRecord] = {}
        self._usage: list[UsageRecord] = []
        self._results: dict[str, ServiceUsageResult] = {}
        self._invoices: dict[str, Invoice] = {}

    async def record_service_usage(self, record: ServiceRecord) -> ServiceUsageResult:
        """
        Record a completed service, consume its parts and issue the invoice.

        Args:
            record: The service and the parts it used

        Returns:
            The usage entry and invoice

        Raises:
            NotFoundError: A part line names an unknown part; nothing is recorded
        """
        existing = self._results.get(record.service_id)
        if existing is not None:
            self.logger.log_operation("duplicate_service_usage", service_id=record.service_id)
            return existing.model_copy(update={"duplicate": True})

        # Stored before any await so a concurrent resubmission sees it
        result = self._store(record)

        for line in result.usage.parts_used:
            await self.inventory.record_consumption(
                line.part_id,
                line.quantity,
                reason=f"service {record.service_id}",
            )

        self.logger.log_operation(
            "record_service_usage",
            service_id=record.service_id,
            parts=len(result.usage.parts_used),
            total_service_cost=result.usage.total_service_cost,
        )
        return result

    def import_history(self, records: list[ServiceRecord]) -> list[ServiceUsageResult]:
        """Load past services without touching stock. Already known services are skipped."""
        results = []
        for record in records:
            if record.service_id in self._results:
                continue
            results.append(self._store(record))
        return results

    def generate_invoice(self, usage: UsageRecord) -> Invoice:
        """Build the invoice for a usage entry: one labor line plus one line per part."""
        items = [
            InvoiceLine(
                type="labor",
                description=f"{usage.service_type} - Labor",
                quantity=1,
                unit_price=usage.labor_cost,
                total_price=usage.labor_cost,
            )
        ]
        for line in usage.parts_used:
            items.append(
                InvoiceLine(
                    type="part",
                    part_id=line.part_id,
                    description=f"{line.name} ({line.part_number})",
                    quantity=line.quantity,
                    unit_price=line.unit_cost,
                    total_price=line.total_cost,
                    supplier=line.supplier,
                    warranty=line.warranty_period,
                )
            )

        subtotal = sum(item.total_price for item in items)
        tax_rate = self.settings.tax_rate
        tax_amount = apply_rate(subtotal, tax_rate)
        issued_at = datetime.utcnow()

        return Invoice(
            invoice_id=f"INV-{usage.service_id}",
            service_id=usage.service_id,
            customer_id=usage.customer_id,
            customer_name=usage.customer_name,
            vehicle_info=usage.vehicle_info,
            service_date=usage.service_date,
            issued_at=issued_at,
            items=items,
            subtotal=subtotal,
            tax_rate=tax_rate,
            tax_amount=tax_amount,
            total=Decimal(subtotal) + tax_amount,
            due_date=issued_at + timedelta(days=self.settings.invoice_due_days),
        )

    def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def list_invoices(self) -> list[Invoice]:
        """Invoices, most recent service first."""
        return sorted(self._invoices.values(), key=lambda i: i.service_date, reverse=True)

    def update_invoice_payment(
        self,
        invoice_id: str,
        payment_status: PaymentStatus,
        payment_date: datetime | None = None,
    ) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        invoice.payment_status = payment_status
        invoice.payment_date = payment_date or datetime.utcnow()

        self.logger.log_operation(
            "update_invoice_payment",
            invoice_id=invoice_id,
            payment_status=payment_status.value,
        )
        return invoice

    def get_service_record(self, service_id: str) -> ServiceRecord | None:
        return self._records.get(service_id)

    def list_service_records(self) -> list[ServiceRecord]:
        return sorted(self._records.values(), key=lambda r: r.service_date, reverse=True)

    def list_usage(self, since: datetime | None = None) -> list[UsageRecord]:
        """Usage entries in recording order, optionally only services on or after ``since``."""
        if since is None:
            return list(self._usage)
        return [u for u in self._usage if u.service_date >= since]

    def warranty_items(
        self,
        usages: list[UsageRecord],
        now: datetime | None = None,
    ) -> list[WarrantyItem]:
        """Warranty coverage of the parts installed by the given services, soonest expiry first."""
        now = now or datetime.utcnow()
        items = []

        for usage in usages:
            for line in usage.parts_used:
                if not line.warranty_period or line.warranty_period == NO_WARRANTY:
                    continue

                months = parse_warranty_period(
                    line.warranty_period, self.settings.default_warranty_months
                )
                expiry = add_months(usage.service_date, months)
                remaining = (expiry - now).total_seconds() / 86400

                items.append(
                    WarrantyItem(
                        part_id=line.part_id,
                        name=line.name,
                        part_number=line.part_number,
                        service_id=usage.service_id,
                        service_date=usage.service_date,
                        warranty_period=line.warranty_period,
                        warranty_expiry=expiry,
                        is_active=expiry > now,
                        days_remaining=max(0, math.ceil(remaining)),
                    )
                )

        return sorted(items, key=lambda w: w.warranty_expiry)

    def get_customer_parts_history(self, customer_id: str) -> dict[str, Any]:
        """Everything a customer's vehicles have had fitted, with live warranties."""
        usages = sorted(
            (u for u in self._usage if u.customer_id == customer_id),
            key=lambda u: u.service_date,
            reverse=True,
        )

        breakdown: dict[str, dict[str, Any]] = {}
        for usage in usages:
            for line in usage.parts_used:
                entry = breakdown.setdefault(
                    line.part_id,
                    {
                        "part_id": line.part_id,
                        "name": line.name,
                        "part_number": line.part_number,
                        "total_quantity": 0,
                        "total_cost": 0,
                        "last_used": None,
                        "services": [],
                    },
                )
                entry["total_quantity"] += line.quantity
                entry["total_cost"] += line.total_cost
                if entry["last_used"] is None or usage.service_date > entry["last_used"]:
                    entry["last_used"] = usage.service_date
                entry["services"].append(
                    {
                        "service_id": usage.service_id,
                        "date": usage.service_date,
                        "service_type": usage.service_type,
                        "quantity": line.quantity,
                        "cost": line.total_cost,
                    }
                )

        return {
            "customer_id": customer_id,
            "total_services": len(usages),
            "total_parts_used": sum(u.parts_quantity for u in usages),
            "total_spent": sum(u.total_service_cost for u in usages),
            "services": usages,
            "parts_breakdown": sorted(
                breakdown.values(), key=lambda p: p["total_cost"], reverse=True
            ),
            "warranty_items": self.warranty_items(usages),
        }

    def _store(self, record: ServiceRecord) -> ServiceUsageResult:
        usage = self._build_usage(record)
        result = ServiceUsageResult(usage=usage, invoice=self.generate_invoice(usage))

        self._records[record.service_id] = record
        self._usage.append(usage)
        self._results[record.service_id] = result
        self._invoices[result.invoice.invoice_id] = result.invoice
        return result

    def _build_usage(self, record: ServiceRecord) -> UsageRecord:
        # Resolve every part up front so an unknown id records nothing
        parts = [self.inventory.require_part(line.part_id) for line in record.parts_used]

        lines = []
        for part, line in zip(parts, record.parts_used):
            unit_cost = line.unit_cost if line.unit_cost is not None else part.avg_cost
            lines.append(
                PartUsageLine(
                    part_id=part.part_id,
                    name=part.name,
                    part_number=part.part_number,
                    quantity=line.quantity,
                    unit_cost=unit_cost,
                    total_cost=unit_cost * line.quantity,
                    supplier=line.supplier,
                    installed_by=line.installed_by,
                    warranty_period=line.warranty_period,
                )
            )

        total_parts_cost = sum(line.total_cost for line in lines)
        technician = next((line.installed_by for line in lines if line.installed_by), "Unknown")

        return UsageRecord(
            service_id=record.service_id,
            customer_id=record.customer_id,
            customer_name=record.customer_name,
            vehicle_info=record.vehicle_info,
            service_type=record.service_type,
            service_date=record.service_date,
            parts_used=tuple(lines),
            labor_cost=record.labor_cost,
            total_parts_cost=total_parts_cost,
            total_service_cost=record.labor_cost + total_parts_cost,
            technician=technician,
        )
