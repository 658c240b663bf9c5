"""Order aggregate: a sales order with its lines.

State Machine:
    PENDING → VALIDATED → INVOICED → CANCELLED
    PENDING → CANCELLED
    VALIDATED → CANCELLED

The order total is always the sum of its line totals and each line total is
quantity × unit price. ``status`` and ``total_amount`` of the order and
``unit_price`` of a line are tracked: every change to an existing order
raises one ``FieldChanged`` event per field.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from backoffice.domain import backoffice
from backoffice.order.events import (
    FieldChanged,
    OrderCancelled,
    OrderDetailsRevised,
    OrderFulfillmentAssigned,
    OrderFulfillmentReleased,
    OrderInvoiced,
    OrderLineAdded,
    OrderLineQuantityChanged,
    OrderLineRemoved,
    OrderPlaced,
    OrderValidated,
)
from backoffice.shared.references import generate_reference


class OrderStatus(Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    INVOICED = "invoiced"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.VALIDATED, OrderStatus.CANCELLED},
    OrderStatus.VALIDATED: {OrderStatus.INVOICED, OrderStatus.CANCELLED},
    OrderStatus.INVOICED: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),  # Terminal
}

_REVISABLE_FIELDS = ("notes", "status", "total_amount", "fulfillment_id", "customer_id")


def _money(value) -> Decimal:
    return Decimal(str(value or 0))


@backoffice.entity(part_of="Order")
class OrderLine:
    """A product line: ``total_price`` is kept equal to quantity × unit price."""

    name = String(required=True, max_length=255)
    sku = String(max_length=100)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    def recalculate(self) -> None:
        self.total_price = float(_money(self.quantity) * _money(self.unit_price))


@backoffice.aggregate
class Order:
    account_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    fulfillment_id = Identifier()
    reference = String(required=True, max_length=50)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    total_amount = Float(default=0.0)
    notes = Text()
    lines = HasMany(OrderLine)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, account_id, customer_id, reference=None, notes=None, lines=None):
        """Create a pending order, generating ``ORD-YYYYMMDD-XXXXXXXX`` when no reference is given.

        Args:
            lines: optional list of dicts with name, quantity, unit_price, sku.
        """
        now = datetime.now(UTC)
        reference = (reference or "").strip() or generate_reference("ORD", now)
        order = cls(
            account_id=str(account_id),
            customer_id=str(customer_id),
            reference=reference,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for line_data in lines or []:
            order._build_line(**line_data)
        order.total_amount = order.calculate_total()

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                account_id=str(order.account_id),
                customer_id=str(order.customer_id),
                reference=order.reference,
                status=order.status,
                total_amount=order.total_amount,
                lines_count=order.lines_count(),
                total_quantity=order.total_quantity(),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Tracking helpers
    # -------------------------------------------------------------------
    def _record_change(self, resource_type: str, resource_id, field_name: str, old_value, new_value) -> None:
        self.raise_(
            FieldChanged(
                order_id=str(self.id),
                account_id=str(self.account_id),
                resource_type=resource_type,
                resource_id=str(resource_id),
                field_name=field_name,
                old_value=json.dumps(old_value),
                new_value=json.dumps(new_value),
                changed_at=datetime.now(UTC),
            )
        )

    def _set_tracked(self, field_name: str, value) -> bool:
        previous = getattr(self, field_name)
        if previous == value:
            return False
        setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)
        self._record_change("Order", self.id, field_name, previous, value)
        return True

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING.value

    def is_validated(self) -> bool:
        return self.status == OrderStatus.VALIDATED.value

    def is_invoiced(self) -> bool:
        return self.status == OrderStatus.INVOICED.value

    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED.value

    def validate_order(self) -> None:
        """Accept a pending order."""
        self._assert_can_transition(OrderStatus.VALIDATED)
        self._set_tracked("status", OrderStatus.VALIDATED.value)
        self.raise_(
            OrderValidated(
                order_id=str(self.id),
                account_id=str(self.account_id),
                validated_at=self.updated_at,
            )
        )

    def mark_invoiced(self) -> None:
        self._assert_can_transition(OrderStatus.INVOICED)
        self._set_tracked("status", OrderStatus.INVOICED.value)
        self.raise_(
            OrderInvoiced(
                order_id=str(self.id),
                account_id=str(self.account_id),
                invoiced_at=self.updated_at,
            )
        )

    def cancel(self) -> None:
        """Move to cancelled. Credit notes and audit entries are the caller's concern."""
        previous = self.status
        self._assert_can_transition(OrderStatus.CANCELLED)
        self._set_tracked("status", OrderStatus.CANCELLED.value)
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                account_id=str(self.account_id),
                previous_status=previous,
                cancelled_at=self.updated_at,
            )
        )

    # -------------------------------------------------------------------
    # Direct edits
    # -------------------------------------------------------------------
    def revise(self, **attributes) -> None:
        """Overwrite order attributes without going through a transition.

        Tracked fields still raise ``FieldChanged``. ``status`` must be one of
        the known statuses.
        """
        unknown = set(attributes) - set(_REVISABLE_FIELDS)
        if unknown:
            raise ValidationError({field: ["cannot be revised"] for field in sorted(unknown)})

        if "status" in attributes and attributes["status"] not in {s.value for s in OrderStatus}:
            raise ValidationError({"status": ["is not included in the list"]})

        if "total_amount" in attributes:
            self._set_tracked("total_amount", attributes["total_amount"])
        if "status" in attributes:
            self._set_tracked("status", attributes["status"])

        if "fulfillment_id" in attributes:
            if attributes["fulfillment_id"]:
                self.assign_fulfillment(attributes["fulfillment_id"])
            else:
                self.release_fulfillment()

        details_changed = False
        for field_name in ("notes", "customer_id"):
            if field_name in attributes and getattr(self, field_name) != attributes[field_name]:
                if field_name == "customer_id" and not attributes[field_name]:
                    raise ValidationError({"customer_id": ["must exist"]})
                setattr(self, field_name, attributes[field_name])
                details_changed = True
        if details_changed:
            self.updated_at = datetime.now(UTC)
            self.raise_(
                OrderDetailsRevised(
                    order_id=str(self.id),
                    customer_id=str(self.customer_id),
                    notes=self.notes,
                    revised_at=self.updated_at,
                )
            )

    def assign_fulfillment(self, fulfillment_id) -> None:
        if self.fulfillment_id and str(self.fulfillment_id) == str(fulfillment_id):
            return
        now = datetime.now(UTC)
        self.fulfillment_id = str(fulfillment_id)
        self.updated_at = now
        self.raise_(
            OrderFulfillmentAssigned(
                order_id=str(self.id),
                fulfillment_id=str(fulfillment_id),
                assigned_at=now,
            )
        )

    def release_fulfillment(self) -> None:
        if not self.fulfillment_id:
            return
        now = datetime.now(UTC)
        released = str(self.fulfillment_id)
        self.fulfillment_id = None
        self.updated_at = now
        self.raise_(
            OrderFulfillmentReleased(
                order_id=str(self.id),
                fulfillment_id=released,
                released_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def _build_line(self, name, quantity, unit_price, sku=None) -> OrderLine:
        now = datetime.now(UTC)
        line = OrderLine(
            name=(name or "").strip() or None,
            sku=sku,
            quantity=quantity,
            unit_price=unit_price,
            created_at=now,
            updated_at=now,
        )
        line.recalculate()
        self.add_lines(line)
        return line

    def _find_line(self, line_id) -> OrderLine:
        line = next((candidate for candidate in self.lines if str(candidate.id) == str(line_id)), None)
        if line is None:
            raise ValidationError({"line_id": ["Line not found"]})
        return line

    def calculate_total(self) -> float:
        return float(sum((_money(line.total_price) for line in self.lines), Decimal("0")))

    def update_total(self) -> None:
        self._set_tracked("total_amount", self.calculate_total())

    def is_empty(self) -> bool:
        return not self.lines

    def lines_count(self) -> int:
        return len(self.lines)

    def total_quantity(self) -> int:
        return sum(line.quantity or 0 for line in self.lines)

    def lines_by_sku(self, sku: str) -> list:
        return [line for line in self.lines if line.sku == sku]

    def lines_expensive_first(self) -> list:
        return sorted(self.lines, key=lambda line: line.total_price or 0.0, reverse=True)

    def add_line(self, name, quantity, unit_price, sku=None) -> OrderLine:
        line = self._build_line(name=name, quantity=quantity, unit_price=unit_price, sku=sku)
        self.update_total()
        self.raise_(
            OrderLineAdded(
                order_id=str(self.id),
                line_id=str(line.id),
                name=line.name,
                sku=line.sku,
                quantity=line.quantity,
                unit_price=line.unit_price,
                lines_count=self.lines_count(),
                total_quantity=self.total_quantity(),
                total_amount=self.total_amount,
            )
        )
        return line

    def _change_quantity(self, line: OrderLine, quantity: int) -> None:
        previous = line.quantity
        line.quantity = quantity
        line.recalculate()
        line.updated_at = datetime.now(UTC)
        self.update_total()
        self.raise_(
            OrderLineQuantityChanged(
                order_id=str(self.id),
                line_id=str(line.id),
                previous_quantity=previous,
                quantity=quantity,
                lines_count=self.lines_count(),
                total_quantity=self.total_quantity(),
                total_amount=self.total_amount,
            )
        )

    def increase_line_quantity(self, line_id, amount: int = 1) -> None:
        line = self._find_line(line_id)
        self._change_quantity(line, line.quantity + amount)

    def decrease_line_quantity(self, line_id, amount: int = 1) -> None:
        """Lower the quantity; the line goes away once it would drop to zero or below."""
        line = self._find_line(line_id)
        remaining = line.quantity - amount
        if remaining <= 0:
            self.remove_line(line_id)
        else:
            self._change_quantity(line, remaining)

    def change_line_price(self, line_id, unit_price) -> None:
        line = self._find_line(line_id)
        previous = line.unit_price
        if previous == unit_price:
            return
        line.unit_price = unit_price
        line.recalculate()
        line.updated_at = datetime.now(UTC)
        self._record_change("OrderLine", line.id, "unit_price", previous, unit_price)
        self.update_total()

    def remove_line(self, line_id) -> None:
        line = self._find_line(line_id)
        self.remove_lines(line)
        self.update_total()
        self.raise_(
            OrderLineRemoved(
                order_id=str(self.id),
                line_id=str(line_id),
                lines_count=self.lines_count(),
                total_quantity=self.total_quantity(),
                total_amount=self.total_amount,
            )
        )
