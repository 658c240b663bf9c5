"""Starting to prepare a shipment: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.fulfillment.fulfillment import Fulfillment, FulfillmentStatus


@backoffice.command(part_of="Fulfillment")
class StartProcessing:
    fulfillment_id = Identifier(required=True)


@backoffice.command_handler(part_of=Fulfillment)
class StartProcessingHandler:
    @handle(StartProcessing)
    def start_processing(self, command):
        repo = current_domain.repository_for(Fulfillment)
        fulfillment = repo.get(command.fulfillment_id)
        if fulfillment.status != FulfillmentStatus.PENDING.value:
            return False
        fulfillment.start_processing()
        repo.add(fulfillment)
        return True
