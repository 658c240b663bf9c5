"""Cancelling a fulfillment: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.fulfillment.fulfillment import Fulfillment


@backoffice.command(part_of="Fulfillment")
class CancelFulfillment:
    fulfillment_id = Identifier(required=True)


@backoffice.command_handler(part_of=Fulfillment)
class CancelFulfillmentHandler:
    @handle(CancelFulfillment)
    def cancel_fulfillment(self, command):
        """Delivered shipments cannot be cancelled: returns False for them."""
        repo = current_domain.repository_for(Fulfillment)
        fulfillment = repo.get(command.fulfillment_id)
        if fulfillment.is_delivered():
            return False
        fulfillment.cancel()
        repo.add(fulfillment)
        return True
