"""Deleting a fulfillment: command and handler.

Orders shipped through the fulfillment are kept and simply detached.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.order.lookups import orders_for_fulfillment
from backoffice.order.order import Order
from backoffice.shared.records import delete


@backoffice.command(part_of="Fulfillment")
class DeleteFulfillment:
    fulfillment_id = Identifier(required=True)


def destroy_fulfillment(fulfillment: Fulfillment) -> int:
    """Delete the fulfillment after detaching its orders; returns how many were detached."""
    order_repo = current_domain.repository_for(Order)
    orders = orders_for_fulfillment(fulfillment.id)
    for order in orders:
        order.release_fulfillment()
        order_repo.add(order)
    delete(fulfillment)
    return len(orders)


@backoffice.command_handler(part_of=Fulfillment)
class DeleteFulfillmentHandler:
    @handle(DeleteFulfillment)
    def delete_fulfillment(self, command):
        fulfillment = current_domain.repository_for(Fulfillment).get(command.fulfillment_id)
        return destroy_fulfillment(fulfillment)
