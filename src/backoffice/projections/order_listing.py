"""Order listing: the flat read model behind the paginated orders index.

One row per order, carrying the customer name and the fulfillment status so
the index never has to load the Order aggregate or walk associations.
"""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from backoffice.customer.customer import Customer
from backoffice.customer.events import CustomerContactUpdated
from backoffice.domain import backoffice
from backoffice.fulfillment.events import (
    FulfillmentCancelled,
    FulfillmentDelivered,
    FulfillmentProcessingStarted,
    FulfillmentShipped,
)
from backoffice.fulfillment.fulfillment import Fulfillment, FulfillmentStatus
from backoffice.order.events import (
    FieldChanged,
    OrderDetailsRevised,
    OrderFulfillmentAssigned,
    OrderFulfillmentReleased,
    OrderLineAdded,
    OrderLineQuantityChanged,
    OrderLineRemoved,
    OrderPlaced,
)
from backoffice.order.order import Order
from backoffice.shared.records import fetch_all, fetch_by_id

# Listing columns that mirror a tracked Order field
_MIRRORED_FIELDS = ("status", "total_amount")


@backoffice.projection
class OrderListing:
    order_id = Identifier(identifier=True, required=True)
    account_id = Identifier(required=True)
    reference = String(required=True, max_length=50)
    customer_id = Identifier()
    customer_name = String(max_length=255)
    status = String(required=True, max_length=20)
    total_amount = Float(default=0.0)
    lines_count = Integer(default=0)
    total_quantity = Integer(default=0)
    fulfillment_id = Identifier()
    fulfillment_status = String(max_length=20)
    created_at = DateTime()
    updated_at = DateTime()


def _customer_name(customer_id) -> str | None:
    customer = fetch_by_id(Customer, customer_id)
    return customer.person_name().full_name() if customer is not None else None


def _fulfillment_status(fulfillment_id) -> str | None:
    fulfillment = fetch_by_id(Fulfillment, fulfillment_id)
    return fulfillment.status if fulfillment is not None else None


def _update_fulfillment_rows(fulfillment_id, status: str) -> None:
    repo = current_domain.repository_for(OrderListing)
    for row in fetch_all(OrderListing, fulfillment_id=str(fulfillment_id)):
        row.fulfillment_status = status
        repo.add(row)


def _refresh_line_totals(event) -> None:
    repo = current_domain.repository_for(OrderListing)
    row = repo.get(event.order_id)
    row.lines_count = event.lines_count
    row.total_quantity = event.total_quantity
    row.total_amount = event.total_amount
    repo.add(row)


@backoffice.projector(projector_for=OrderListing, aggregates=[Order, Customer, Fulfillment])
class OrderListingProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderListing).add(
            OrderListing(
                order_id=event.order_id,
                account_id=event.account_id,
                reference=event.reference,
                customer_id=event.customer_id,
                customer_name=_customer_name(event.customer_id),
                status=event.status,
                total_amount=event.total_amount,
                lines_count=event.lines_count,
                total_quantity=event.total_quantity,
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    @on(FieldChanged)
    def on_field_changed(self, event):
        if event.resource_type != "Order" or event.field_name not in _MIRRORED_FIELDS:
            return
        repo = current_domain.repository_for(OrderListing)
        row = repo.get(event.order_id)
        setattr(row, event.field_name, json.loads(event.new_value))
        row.updated_at = event.changed_at
        repo.add(row)

    @on(OrderLineAdded)
    def on_line_added(self, event):
        _refresh_line_totals(event)

    @on(OrderLineQuantityChanged)
    def on_line_quantity_changed(self, event):
        _refresh_line_totals(event)

    @on(OrderLineRemoved)
    def on_line_removed(self, event):
        _refresh_line_totals(event)

    @on(OrderDetailsRevised)
    def on_details_revised(self, event):
        repo = current_domain.repository_for(OrderListing)
        row = repo.get(event.order_id)
        if str(row.customer_id) != str(event.customer_id):
            row.customer_id = event.customer_id
            row.customer_name = _customer_name(event.customer_id)
        row.updated_at = event.revised_at
        repo.add(row)

    @on(OrderFulfillmentAssigned)
    def on_fulfillment_assigned(self, event):
        repo = current_domain.repository_for(OrderListing)
        row = repo.get(event.order_id)
        row.fulfillment_id = event.fulfillment_id
        row.fulfillment_status = _fulfillment_status(event.fulfillment_id)
        repo.add(row)

    @on(OrderFulfillmentReleased)
    def on_fulfillment_released(self, event):
        repo = current_domain.repository_for(OrderListing)
        row = repo.get(event.order_id)
        row.fulfillment_id = None
        row.fulfillment_status = None
        repo.add(row)

    @on(CustomerContactUpdated)
    def on_customer_contact_updated(self, event):
        changed = json.loads(event.changed_fields)
        if "first_name" not in changed and "last_name" not in changed:
            return
        name = _customer_name(event.customer_id)
        repo = current_domain.repository_for(OrderListing)
        for row in fetch_all(OrderListing, customer_id=str(event.customer_id)):
            row.customer_name = name
            repo.add(row)

    @on(FulfillmentProcessingStarted)
    def on_fulfillment_processing(self, event):
        _update_fulfillment_rows(event.fulfillment_id, FulfillmentStatus.PROCESSING.value)

    @on(FulfillmentShipped)
    def on_fulfillment_shipped(self, event):
        _update_fulfillment_rows(event.fulfillment_id, FulfillmentStatus.SHIPPED.value)

    @on(FulfillmentDelivered)
    def on_fulfillment_delivered(self, event):
        _update_fulfillment_rows(event.fulfillment_id, FulfillmentStatus.DELIVERED.value)

    @on(FulfillmentCancelled)
    def on_fulfillment_cancelled(self, event):
        _update_fulfillment_rows(event.fulfillment_id, FulfillmentStatus.CANCELLED.value)
