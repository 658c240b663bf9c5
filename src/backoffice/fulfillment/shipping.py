"""Shipping a fulfillment: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.fulfillment.lookups import tracking_number_taken
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@backoffice.command(part_of="Fulfillment")
class ShipFulfillment:
    fulfillment_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)
    carrier = String(max_length=50)


@backoffice.command_handler(part_of=Fulfillment)
class ShipFulfillmentHandler:
    @handle(ShipFulfillment)
    def ship_fulfillment(self, command):
        """Returns False unless the fulfillment is pending or processing."""
        repo = current_domain.repository_for(Fulfillment)
        fulfillment = repo.get(command.fulfillment_id)
        if not fulfillment.can_ship():
            return False

        tracking_number = command.tracking_number.strip()
        if tracking_number_taken(tracking_number, exclude_id=fulfillment.id):
            raise ValidationError({"tracking_number": ["has already been taken"]})

        fulfillment.ship(tracking_number, carrier=command.carrier)
        repo.add(fulfillment)
        logger.info(
            "fulfillment.shipped",
            fulfillment_id=str(fulfillment.id),
            carrier=fulfillment.carrier,
            tracking_number=fulfillment.tracking_number,
        )
        return True
