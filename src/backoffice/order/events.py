"""Domain events for the Order aggregate.

``FieldChanged`` is raised once per tracked attribute that changes on an
existing order or one of its lines. It feeds the account audit trail.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from backoffice.domain import backoffice


@backoffice.event(part_of="Order")
class OrderPlaced:
    """A new order was recorded for a customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    account_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reference = String(required=True)
    status = String(required=True)
    total_amount = Float(default=0.0)
    lines_count = Integer(default=0)
    total_quantity = Integer(default=0)
    placed_at = DateTime(required=True)


@backoffice.event(part_of="Order")
class FieldChanged:
    """A tracked field changed value.

    ``old_value`` and ``new_value`` hold JSON so numbers and strings keep
    their type on the way to the audit trail.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    account_id = Identifier(required=True)
    resource_type = String(required=True)  # "Order" or "OrderLine"
    resource_id = Identifier(required=True)
    field_name = String(required=True)
    old_value = Text()
    new_value = Text()
    changed_at = DateTime(required=True)


@backoffice.event(part_of="Order")
class OrderLineAdded:
    __version__ = 1

    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    name = String(required=True)
    sku = String()
    quantity = Integer(required=True)
    unit_price = Float(required=True)
    lines_count = Integer(required=True)
    total_quantity = Integer(required=True)
    total_amount = Float(required=True)


@backoffice.event(part_of="Order")
class OrderLineQuantityChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    quantity = Integer(required=True)
    lines_count = Integer(required=True)
    total_quantity = Integer(required=True)
    total_amount = Float(required=True)


@backoffice.event(part_of="Order")
class OrderLineRemoved:
    __version__ = 1

    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    lines_count = Integer(required=True)
    total_quantity = Integer(required=True)
    total_amount = Float(required=True)


@backoffice.event(part_of="Order")
class OrderValidated:
    __version__ = 1

    order_id = Identifier(required=True)
    account_id = Identifier(required=True)
    validated_at = DateTime(required=True)


@backoffice.event(part_of="Order")
class OrderInvoiced:
    __version__ = 1

    order_id = Identifier(required=True)
    account_id = Identifier(required=True)
    invoiced_at = DateTime(required=True)


@backoffice.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled. ``previous_status`` tells which path was taken."""

    __version__ = 1

    order_id = Identifier(required=True)
    account_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)


@backoffice.event(part_of="Order")
class OrderFulfillmentAssigned:
    __version__ = 1

    order_id = Identifier(required=True)
    fulfillment_id = Identifier(required=True)
    assigned_at = DateTime(required=True)


@backoffice.event(part_of="Order")
class OrderFulfillmentReleased:
    """The order no longer points at a fulfillment."""

    __version__ = 1

    order_id = Identifier(required=True)
    fulfillment_id = Identifier(required=True)
    released_at = DateTime(required=True)


@backoffice.event(part_of="Order")
class OrderDetailsRevised:
    """Notes or the customer reference were edited directly."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    notes = Text()
    revised_at = DateTime(required=True)
