"""Creating a fulfillment: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.order.order import Order
from backoffice.shared.records import fetch_by_id


@backoffice.command(part_of="Fulfillment")
class CreateFulfillment:
    account_id = Identifier(required=True)
    fulfillment_service_id = Identifier(required=True)
    order_id = Identifier()  # optional order to attach right away


@backoffice.command_handler(part_of=Fulfillment)
class CreateFulfillmentHandler:
    @handle(CreateFulfillment)
    def create_fulfillment(self, command):
        service = fetch_by_id(FulfillmentService, command.fulfillment_service_id)
        if service is None or str(service.account_id) != str(command.account_id):
            raise ValidationError({"fulfillment_service_id": ["must belong to the account"]})
        if not service.active:
            raise ValidationError({"fulfillment_service_id": ["is inactive"]})

        order = None
        if command.order_id:
            order = fetch_by_id(Order, command.order_id)
            if order is None or str(order.account_id) != str(command.account_id):
                raise ValidationError({"order_id": ["must belong to the account"]})

        fulfillment = Fulfillment.create(
            account_id=command.account_id,
            fulfillment_service_id=command.fulfillment_service_id,
        )
        current_domain.repository_for(Fulfillment).add(fulfillment)

        if order is not None:
            order.assign_fulfillment(fulfillment.id)
            current_domain.repository_for(Order).add(order)
        return str(fulfillment.id)
