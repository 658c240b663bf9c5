"""Deleting an order: command and handler.

The order's lines go with it, and so do its invoices.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.invoice.lookups import invoices_for_order
from backoffice.order.order import Order
from backoffice.projections.order_listing import OrderListing
from backoffice.shared.records import delete, fetch_by_id
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@backoffice.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)


def destroy_order(order: Order) -> None:
    """Delete an order together with its lines, its invoices and its listing row."""
    for line in list(order.lines):
        delete(line)
    for invoice in invoices_for_order(order.id):
        delete(invoice)
    listing = fetch_by_id(OrderListing, order.id)
    if listing is not None:
        delete(listing)
    delete(order)
    logger.info("order.deleted", order_id=str(order.id), reference=order.reference)


@backoffice.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        destroy_order(order)
