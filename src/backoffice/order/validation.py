"""Validating a pending order: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.order.order import Order


@backoffice.command(part_of="Order")
class ValidateOrder:
    order_id = Identifier(required=True)


@backoffice.command_handler(part_of=Order)
class ValidateOrderHandler:
    @handle(ValidateOrder)
    def validate_order(self, command):
        """Returns False, changing nothing, unless the order is pending."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not order.is_pending():
            return False
        order.validate_order()
        repo.add(order)
        return True
