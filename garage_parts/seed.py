"""Demo catalog: suppliers, parts, reorder rules and past services."""

import math
from datetime import datetime

from garage_parts.models.part import Part
from garage_parts.models.reorder import Priority, ReorderRule
from garage_parts.models.supplier import DeliveryTime, Supplier
from garage_parts.models.usage import ServicePartInput, ServiceRecord, VehicleInfo

# Parts commonly needed per service type
SERVICE_PART_MAP: dict[str, list[str]] = {
    "Oil Change": ["part-2", "part-3"],
    "Brake Service": ["part-1", "part-6"],
    "Regular Maintenance": ["part-2", "part-3", "part-5"],
    "Engine Diagnostic": ["part-4"],
    "Transmission Service": ["part-3"],
    "Cooling System": ["part-3"],
    "Electrical Repair": ["part-4"],
    "Suspension Repair": ["part-1"],
    "Full Service": ["part-1", "part-2", "part-3", "part-4", "part-5"],
}

# part_id -> (max_price, priority, auto_reorder)
RULE_POLICIES: dict[str, tuple[int, Priority, bool]] = {
    "part-1": (2500, Priority.MEDIUM, True),
    "part-2": (500, Priority.HIGH, True),
    "part-3": (1000, Priority.HIGH, True),
    "part-4": (3000, Priority.LOW, False),
    "part-5": (1500, Priority.MEDIUM, True),
    "part-6": (350, Priority.MEDIUM, True),
}


def build_suppliers() -> list[Supplier]:
    return [
        Supplier(
            supplier_id="supplier-1",
            name="NAPA Auto Parts",
            api_endpoint="https://api.napaparts.com",
            delivery_time=DeliveryTime.SAME_DAY,
            reliability=0.95,
            price_multiplier=1.0,
        ),
        Supplier(
            supplier_id="supplier-2",
            name="AutoZone",
            api_endpoint="https://api.autozone.com",
            delivery_time=DeliveryTime.TWO_HOURS,
            reliability=0.92,
            price_multiplier=0.95,
        ),
        Supplier(
            supplier_id="supplier-3",
            name="Local Supplier",
            api_endpoint="https://api.localsupplier.com",
            delivery_time=DeliveryTime.FOUR_HOURS,
            reliability=0.88,
            price_multiplier=0.90,
        ),
    ]


def build_parts() -> list[Part]:
    return [
        Part(
            part_id="part-1",
            name="Brake Pads - Front",
            part_number="BP-HONDA-CITY-F",
            category="Brakes",
            current_stock=15,
            min_stock=10,
            max_stock=50,
            unit="Sets",
            avg_cost=2400,
            supplier_ids=["supplier-1", "supplier-2", "supplier-3"],
            compatibility=["Honda City", "Honda Civic"],
        ),
        Part(
            part_id="part-2",
            name="Engine Oil Filter",
            part_number="OF-HONDA-CITY",
            category="Filters",
            current_stock=8,
            min_stock=15,
            max_stock=40,
            unit="Units",
            avg_cost=435,
            supplier_ids=["supplier-1", "supplier-2"],
            compatibility=["Honda City", "Honda Accord"],
        ),
        Part(
            part_id="part-3",
            name="Engine Oil (5W-30)",
            part_number="OIL-5W30-001",
            category="Fluids",
            current_stock=2,
            min_stock=20,
            max_stock=100,
            unit="Quarts",
            avg_cost=899,
            supplier_ids=["supplier-1", "supplier-2", "supplier-3"],
            compatibility=["Universal"],
        ),
        Part(
            part_id="part-4",
            name="Spark Plugs (Set of 4)",
            part_number="SP-SET4-005",
            category="Ignition",
            current_stock=25,
            min_stock=10,
            max_stock=60,
            unit="Sets",
            avg_cost=2499,
            supplier_ids=["supplier-1", "supplier-3"],
            compatibility=["Honda City", "Honda Civic", "Honda Accord"],
        ),
        Part(
            part_id="part-5",
            name="Air Filter",
            part_number="AF-STD-003",
            category="Filters",
            current_stock=12,
            min_stock=8,
            max_stock=30,
            unit="Units",
            avg_cost=1299,
            supplier_ids=["supplier-2", "supplier-3"],
            compatibility=["Honda City"],
        ),
        Part(
            part_id="part-6",
            name="Brake Fluid",
            part_number="DOT4-500ML",
            category="Fluids",
            current_stock=12,
            min_stock=8,
            max_stock=30,
            unit="Bottles",
            avg_cost=299,
            supplier_ids=["supplier-1", "supplier-2"],
            compatibility=["Universal"],
        ),
    ]


def build_rules(parts: list[Part]) -> list[ReorderRule]:
    """One rule per part, reordering 70% of the gap between min and max stock."""
    rules = []
    for part in parts:
        max_price, priority, auto_reorder = RULE_POLICIES[part.part_id]
        rules.append(
            ReorderRule(
                part_id=part.part_id,
                min_stock=part.min_stock,
                reorder_quantity=math.ceil((part.max_stock - part.min_stock) * 0.7),
                preferred_supplier_id=part.supplier_ids[0],
                max_price=max_price,
                priority=priority,
                auto_reorder=auto_reorder,
            )
        )
    return rules


def sample_service_records() -> list[ServiceRecord]:
    return [
        ServiceRecord(
            service_id="SRV-001",
            customer_id="CUST-001",
            customer_name="John Smith",
            vehicle_info=VehicleInfo(
                make="Toyota", model="Camry", year="2020", plate_number="ABC-123"
            ),
            service_type="Oil Change",
            service_date=datetime(2024, 1, 15),
            parts_used=[
                ServicePartInput(
                    part_id="part-3",
                    quantity=1,
                    unit_cost=899,
                    supplier="Castrol",
                    installed_by="Tech-001",
                    warranty_period="6 months",
                ),
                ServicePartInput(
                    part_id="part-2",
                    quantity=1,
                    unit_cost=435,
                    supplier="Mann Filter",
                    installed_by="Tech-001",
                    warranty_period="6 months",
                ),
            ],
            labor_cost=800,
        ),
        ServiceRecord(
            service_id="SRV-002",
            customer_id="CUST-002",
            customer_name="Sarah Johnson",
            vehicle_info=VehicleInfo(
                make="BMW", model="X3", year="2019", plate_number="XYZ-789"
            ),
            service_type="Brake Service",
            service_date=datetime(2024, 1, 16),
            parts_used=[
                ServicePartInput(
                    part_id="part-1",
                    quantity=1,
                    unit_cost=2400,
                    supplier="Bosch",
                    installed_by="Tech-002",
                    warranty_period="12 months",
                ),
                ServicePartInput(
                    part_id="part-6",
                    quantity=1,
                    unit_cost=299,
                    supplier="Motul",
                    installed_by="Tech-002",
                    warranty_period="2 years",
                ),
            ],
            labor_cost=1500,
        ),
    ]
