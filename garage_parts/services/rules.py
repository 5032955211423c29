"""Per-part reorder rules."""

from typing import Any

from garage_parts.errors import InvalidRuleError, NotFoundError
from garage_parts.models.reorder import ReorderRule
from garage_parts.state.inventory import InventoryStore
from garage_parts.state.suppliers import SupplierRegistry
from garage_parts.utils.logging import ServiceLogger


class ReorderRuleEngine:
    """Holds at most one reorder rule per part and keeps them consistent with the catalog."""

    def __init__(self, inventory: InventoryStore, suppliers: SupplierRegistry):
        self.inventory = inventory
        self.suppliers = suppliers
        self.logger = ServiceLogger("rules")
        self._rules: dict[str, ReorderRule] = {}

    def get_rule(self, part_id: str) -> ReorderRule | None:
        return self._rules.get(part_id)

    def require_rule(self, part_id: str) -> ReorderRule:
        rule = self._rules.get(part_id)
        if rule is None:
            raise NotFoundError("Reorder rule", part_id)
        return rule

    def list_rules(self) -> list[ReorderRule]:
        return list(self._rules.values())

    def upsert_rule(self, rule: ReorderRule) -> ReorderRule:
        """
        Add or replace the rule for a part.

        Raises:
            NotFoundError: Unknown part
            InvalidRuleError: Reorder point above the part's maximum, or an
                unregistered preferred supplier
        """
        part = self.inventory.require_part(rule.part_id)

        if rule.min_stock > part.max_stock:
            raise InvalidRuleError(
                f"Rule min_stock {rule.min_stock} exceeds max_stock {part.max_stock} "
                f"for part {part.part_id}"
            )
        if self.suppliers.get_supplier(rule.preferred_supplier_id) is None:
            raise InvalidRuleError(
                f"Preferred supplier {rule.preferred_supplier_id} is not registered"
            )

        self._rules[rule.part_id] = rule
        self.logger.log_operation(
            "upsert_rule",
            part_id=rule.part_id,
            min_stock=rule.min_stock,
            reorder_quantity=rule.reorder_quantity,
            auto_reorder=rule.auto_reorder,
        )
        return rule

    def update_rule(self, part_id: str, **changes: Any) -> ReorderRule:
        """Apply a partial update to an existing rule. ``None`` values are ignored."""
        current = self.require_rule(part_id)
        updates = {key: value for key, value in changes.items() if value is not None}

        # Re-validate through the model so field constraints still hold
        updated = ReorderRule.model_validate({**current.model_dump(), **updates, "part_id": part_id})
        return self.upsert_rule(updated)

    def delete_rule(self, part_id: str) -> bool:
        """Remove a part's rule. Returns whether one existed."""
        removed = self._rules.pop(part_id, None) is not None
        if removed:
            self.logger.log_operation("delete_rule", part_id=part_id)
        return removed
