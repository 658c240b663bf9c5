"""Confirming delivery: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.fulfillment.fulfillment import Fulfillment, FulfillmentStatus


@backoffice.command(part_of="Fulfillment")
class DeliverFulfillment:
    fulfillment_id = Identifier(required=True)


@backoffice.command_handler(part_of=Fulfillment)
class DeliverFulfillmentHandler:
    @handle(DeliverFulfillment)
    def deliver_fulfillment(self, command):
        """Only shipped fulfillments can be delivered; returns False otherwise."""
        repo = current_domain.repository_for(Fulfillment)
        fulfillment = repo.get(command.fulfillment_id)
        if fulfillment.status != FulfillmentStatus.SHIPPED.value:
            return False
        fulfillment.deliver()
        repo.add(fulfillment)
        return True
