"""In-memory supplier registry."""

from garage_parts.errors import NotFoundError
from garage_parts.models.supplier import Supplier


class SupplierRegistry:
    """Holds supplier profiles keyed by id."""

    def __init__(self) -> None:
        self._suppliers: dict[str, Supplier] = {}

    def register(self, supplier: Supplier) -> Supplier:
        """Add a supplier to the registry."""
        self._suppliers[supplier.supplier_id] = supplier
        return supplier

    def get_supplier(self, supplier_id: str) -> Supplier | None:
        """Look up a supplier."""
        return self._suppliers.get(supplier_id)

    def require_supplier(self, supplier_id: str) -> Supplier:
        """Look up a supplier that must exist."""
        supplier = self._suppliers.get(supplier_id)
        if supplier is None:
            raise NotFoundError("Supplier", supplier_id)
        return supplier

    def list_suppliers(self) -> list[Supplier]:
        """All registered suppliers."""
        return list(self._suppliers.values())

    def active_for(self, supplier_ids: list[str]) -> list[Supplier]:
        """Active suppliers among the given ids, in the given order."""
        suppliers = []
        for supplier_id in supplier_ids:
            supplier = self._suppliers.get(supplier_id)
            if supplier and supplier.is_active:
                suppliers.append(supplier)
        return suppliers
