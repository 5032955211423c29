"""HTTP routes for the parts department."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, Field

from garage_parts.models import (
    CancelOrderRequest,
    ConfirmOrderRequest,
    InventoryStatus,
    Invoice,
    InvoicePaymentUpdate,
    Notification,
    NotificationType,
    Part,
    PlaceOrderRequest,
    PriceQuote,
    PurchaseOrder,
    ReceiveOrderRequest,
    ReorderingReport,
    ReorderRule,
    ReorderRuleUpdate,
    ServiceRecord,
    ServiceUsageResult,
    Supplier,
    SweepReport,
    VehicleInfo,
)
from garage_parts.services.desk import PartsDesk
from garage_parts.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


# Request/Response Models


class ConsumeStockRequest(BaseModel):
    """Units taken from stock outside a recorded service."""

    quantity: int = Field(ge=1)
    reason: str = "consumption"


class RealtimePricingRequest(BaseModel):
    """Parts to price for a vehicle."""

    part_ids: list[str]
    vehicle: VehicleInfo


class ServicePartsRequest(BaseModel):
    """Service type to price parts for."""

    service_type: str
    vehicle: VehicleInfo


class MonitoringStatusResponse(BaseModel):
    """Reorder monitor state."""

    monitoring: bool
    check_interval_seconds: float
    last_sweep: SweepReport | None = None


# Dependency to get the parts desk


def get_desk(request: Request) -> PartsDesk:
    """Get the parts desk owned by the application."""
    return request.app.state.desk


# Inventory


@router.get("/inventory", response_model=InventoryStatus)
async def get_inventory(desk: PartsDesk = Depends(get_desk)) -> InventoryStatus:
    """Stock levels and status counts for every part."""
    return desk.inventory.get_inventory_status()


@router.get("/inventory/low-stock", response_model=list[Part])
async def get_low_stock(desk: PartsDesk = Depends(get_desk)) -> list[Part]:
    return desk.inventory.get_low_stock_parts()


@router.get("/inventory/{part_id}")
async def get_part(part_id: str, desk: PartsDesk = Depends(get_desk)) -> dict[str, Any]:
    """A part with its last known supplier prices."""
    part = desk.inventory.require_part(part_id)
    return {
        **part.model_dump(mode="json"),
        "prices": [q.model_dump(mode="json") for q in desk.pricing.cached_prices(part_id)],
    }


@router.post("/inventory/{part_id}/consume", response_model=Part)
async def consume_stock(
    part_id: str,
    request: ConsumeStockRequest,
    desk: PartsDesk = Depends(get_desk),
) -> Part:
    """Take units out of stock."""
    return await desk.inventory.record_consumption(part_id, request.quantity, request.reason)


# Suppliers and pricing


@router.get("/suppliers", response_model=list[Supplier])
async def list_suppliers(desk: PartsDesk = Depends(get_desk)) -> list[Supplier]:
    return desk.suppliers.list_suppliers()


@router.get("/suppliers/performance")
async def supplier_performance(desk: PartsDesk = Depends(get_desk)) -> list[dict[str, Any]]:
    return desk.analytics.supplier_performance()


@router.get("/pricing/{part_id}/quotes", response_model=list[PriceQuote])
async def get_quotes(part_id: str, desk: PartsDesk = Depends(get_desk)) -> list[PriceQuote]:
    """Live quotes from every active supplier, cheapest first."""
    return await desk.pricing.fetch_supplier_prices(part_id)


@router.get("/pricing/{part_id}/comparison")
async def get_supplier_comparison(
    part_id: str,
    desk: PartsDesk = Depends(get_desk),
) -> dict[str, Any]:
    return await desk.pricing.get_supplier_comparison(part_id)


@router.get("/pricing/{part_id}/dynamic")
async def get_dynamic_pricing(part_id: str, desk: PartsDesk = Depends(get_desk)) -> dict[str, Any]:
    return desk.get_dynamic_pricing(part_id)


@router.post("/pricing/refresh")
async def refresh_prices(desk: PartsDesk = Depends(get_desk)) -> list[dict[str, Any]]:
    """Refresh every part's price cache now."""
    return await desk.pricing.refresh_prices(notify=True)


@router.post("/pricing/realtime")
async def get_realtime_pricing(
    request: RealtimePricingRequest,
    desk: PartsDesk = Depends(get_desk),
) -> list[dict[str, Any]]:
    return await desk.pricing.get_realtime_pricing(request.part_ids, request.vehicle)


@router.post("/pricing/service-parts")
async def get_service_parts(
    request: ServicePartsRequest,
    desk: PartsDesk = Depends(get_desk),
) -> list[dict[str, Any]]:
    return await desk.pricing.get_service_parts(request.service_type, request.vehicle)


@router.get("/pricing/recommendations")
async def get_parts_recommendations(
    service_type: str,
    vehicle: str,
    desk: PartsDesk = Depends(get_desk),
) -> list[dict[str, Any]]:
    """Parts for a service type that fit a free-text vehicle description."""
    return desk.pricing.get_parts_recommendations(service_type, vehicle)


# Reorder rules


@router.get("/rules", response_model=list[ReorderRule])
async def list_rules(desk: PartsDesk = Depends(get_desk)) -> list[ReorderRule]:
    return desk.rules.list_rules()


@router.get("/rules/{part_id}", response_model=ReorderRule)
async def get_rule(part_id: str, desk: PartsDesk = Depends(get_desk)) -> ReorderRule:
    return desk.rules.require_rule(part_id)


@router.put("/rules/{part_id}", response_model=ReorderRule)
async def put_rule(
    part_id: str,
    rule: ReorderRule,
    desk: PartsDesk = Depends(get_desk),
) -> ReorderRule:
    """Create or replace a part's reorder rule."""
    if rule.part_id != part_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Rule part_id does not match the path",
        )
    return desk.rules.upsert_rule(rule)


@router.patch("/rules/{part_id}", response_model=ReorderRule)
async def patch_rule(
    part_id: str,
    update: ReorderRuleUpdate,
    desk: PartsDesk = Depends(get_desk),
) -> ReorderRule:
    return desk.rules.update_rule(part_id, **update.model_dump(exclude_unset=True))


@router.delete("/rules/{part_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(part_id: str, desk: PartsDesk = Depends(get_desk)) -> Response:
    if not desk.rules.delete_rule(part_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Reorder rule {part_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Purchase orders


@router.get("/orders", response_model=list[PurchaseOrder])
async def get_order_history(
    limit: int | None = None,
    desk: PartsDesk = Depends(get_desk),
) -> list[PurchaseOrder]:
    """Orders newest first."""
    return desk.orders.get_order_history(limit or desk.settings.order_history_limit)


@router.get("/orders/outstanding", response_model=list[PurchaseOrder])
async def list_outstanding(desk: PartsDesk = Depends(get_desk)) -> list[PurchaseOrder]:
    return desk.orders.list_outstanding()


@router.get("/orders/{order_id}", response_model=PurchaseOrder)
async def get_order(order_id: str, desk: PartsDesk = Depends(get_desk)) -> PurchaseOrder:
    return desk.orders.require_order(order_id)


@router.post("/orders", response_model=PurchaseOrder, status_code=status.HTTP_201_CREATED)
async def place_order(
    request: PlaceOrderRequest,
    desk: PartsDesk = Depends(get_desk),
) -> PurchaseOrder:
    """
    Place a staff-approved order.

    The order goes to the supplier straight away at its current quote.
    """
    order = await desk.reordering.place_order(
        request.part_id,
        request.quantity,
        request.supplier_id,
        request.approved_by,
    )

    logger.info(
        "manual_order_placed",
        order_id=order.order_id,
        part_id=order.part_id,
        approved_by=request.approved_by,
    )
    return order


@router.post("/orders/{order_id}/confirm", response_model=PurchaseOrder)
async def confirm_order(
    order_id: str,
    request: ConfirmOrderRequest,
    desk: PartsDesk = Depends(get_desk),
) -> PurchaseOrder:
    return desk.orders.confirm(order_id, request.supplier_reference, request.expected_delivery)


@router.post("/orders/{order_id}/receive", response_model=PurchaseOrder)
async def receive_order(
    order_id: str,
    request: ReceiveOrderRequest,
    desk: PartsDesk = Depends(get_desk),
) -> PurchaseOrder:
    return await desk.orders.receive(order_id, request.received_quantity, request.received_date)


@router.post("/orders/{order_id}/cancel", response_model=PurchaseOrder)
async def cancel_order(
    order_id: str,
    request: CancelOrderRequest = CancelOrderRequest(),
    desk: PartsDesk = Depends(get_desk),
) -> PurchaseOrder:
    return desk.orders.cancel(order_id, request.reason)


# Reordering monitor


@router.get("/reordering/status", response_model=MonitoringStatusResponse)
async def get_monitoring_status(desk: PartsDesk = Depends(get_desk)) -> MonitoringStatusResponse:
    return MonitoringStatusResponse(
        monitoring=desk.reordering.is_monitoring,
        check_interval_seconds=desk.settings.reorder_check_interval_seconds,
        last_sweep=desk.reordering.last_sweep,
    )


@router.post("/reordering/start", response_model=MonitoringStatusResponse)
async def start_monitoring(desk: PartsDesk = Depends(get_desk)) -> MonitoringStatusResponse:
    desk.reordering.start_monitoring()
    return await get_monitoring_status(desk)


@router.post("/reordering/stop", response_model=MonitoringStatusResponse)
async def stop_monitoring(desk: PartsDesk = Depends(get_desk)) -> MonitoringStatusResponse:
    await desk.reordering.stop_monitoring()
    return await get_monitoring_status(desk)


@router.post("/reordering/sweep", response_model=SweepReport)
async def run_sweep(desk: PartsDesk = Depends(get_desk)) -> SweepReport:
    """Run a reorder sweep now."""
    report = await desk.reordering.run_sweep()
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A reorder sweep is already in progress",
        )
    return report


@router.post("/reordering/parts/{part_id}", response_model=PurchaseOrder | None)
async def reorder_part(part_id: str, desk: PartsDesk = Depends(get_desk)) -> PurchaseOrder | None:
    """Reorder one part through its rule, as a sweep would."""
    return await desk.reordering.reorder_part(part_id)


@router.get("/reordering/report", response_model=ReorderingReport)
async def get_reordering_report(
    days: int = 30,
    desk: PartsDesk = Depends(get_desk),
) -> ReorderingReport:
    return desk.reordering.get_reordering_report(days)


# Notifications


@router.get("/notifications", response_model=list[Notification])
async def get_notifications(
    unread_only: bool = False,
    notification_type: NotificationType | None = Query(default=None, alias="type"),
    desk: PartsDesk = Depends(get_desk),
) -> list[Notification]:
    return desk.notifications.get_notifications(
        unread_only=unread_only,
        notification_type=notification_type,
    )


@router.get("/notifications/unread-count")
async def get_unread_count(desk: PartsDesk = Depends(get_desk)) -> dict[str, int]:
    return {"unread": desk.notifications.unread_count()}


@router.post("/notifications/{notification_id}/read", response_model=Notification)
async def mark_notification_read(
    notification_id: str,
    desk: PartsDesk = Depends(get_desk),
) -> Notification:
    return desk.notifications.mark_read(notification_id)


# Service usage and invoices


@router.post(
    "/services/usage",
    response_model=ServiceUsageResult,
    status_code=status.HTTP_201_CREATED,
)
async def record_service_usage(
    record: ServiceRecord,
    desk: PartsDesk = Depends(get_desk),
) -> ServiceUsageResult:
    """
    Record the parts a completed service used.

    Resubmitting a service returns the original result with ``duplicate`` set.
    """
    return await desk.usage.record_service_usage(record)


@router.get("/services", response_model=list[ServiceRecord])
async def list_service_records(desk: PartsDesk = Depends(get_desk)) -> list[ServiceRecord]:
    return desk.usage.list_service_records()


@router.get("/services/{service_id}", response_model=ServiceRecord)
async def get_service_record(service_id: str, desk: PartsDesk = Depends(get_desk)) -> ServiceRecord:
    record = desk.usage.get_service_record(service_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Service {service_id} not found",
        )
    return record


@router.get("/invoices", response_model=list[Invoice])
async def list_invoices(desk: PartsDesk = Depends(get_desk)) -> list[Invoice]:
    return desk.usage.list_invoices()


@router.get("/invoices/{invoice_id}", response_model=Invoice)
async def get_invoice(invoice_id: str, desk: PartsDesk = Depends(get_desk)) -> Invoice:
    return desk.usage.get_invoice(invoice_id)


@router.patch("/invoices/{invoice_id}/payment", response_model=Invoice)
async def update_invoice_payment(
    invoice_id: str,
    update: InvoicePaymentUpdate,
    desk: PartsDesk = Depends(get_desk),
) -> Invoice:
    return desk.usage.update_invoice_payment(invoice_id, update.payment_status, update.payment_date)


@router.get("/customers/{customer_id}/parts-history")
async def get_customer_parts_history(
    customer_id: str,
    desk: PartsDesk = Depends(get_desk),
) -> dict[str, Any]:
    return desk.usage.get_customer_parts_history(customer_id)


# Analytics


@router.get("/analytics/usage")
async def get_usage_analytics(
    days: int | None = None,
    desk: PartsDesk = Depends(get_desk),
) -> dict[str, Any]:
    return desk.analytics.usage_analytics(days or desk.settings.analytics_window_days)


@router.get("/analytics/trends")
async def get_usage_trends(
    days: int | None = None,
    desk: PartsDesk = Depends(get_desk),
) -> list[dict[str, Any]]:
    return desk.analytics.usage_trends(days or desk.settings.analytics_window_days)


@router.get("/analytics/top-parts")
async def get_top_parts(
    days: int | None = None,
    limit: int = 5,
    desk: PartsDesk = Depends(get_desk),
) -> list[dict[str, Any]]:
    return desk.analytics.top_parts(days or desk.settings.analytics_window_days, limit)
