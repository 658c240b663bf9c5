"""Invoicing a validated order: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.invoice.creation import InvoiceCreation
from backoffice.invoice.invoice import InvoiceKind
from backoffice.order.order import Order
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@backoffice.command(part_of="Order")
class InvoiceOrder:
    order_id = Identifier(required=True)


@backoffice.command_handler(part_of=Order)
class InvoiceOrderHandler:
    @handle(InvoiceOrder)
    def invoice_order(self, command):
        """Returns the new invoice id, or None when the order cannot be invoiced."""
        order = current_domain.repository_for(Order).get(command.order_id)
        service = InvoiceCreation.call(order=order, kind=InvoiceKind.DEBIT.value)
        if not service.successful:
            logger.info("order.invoice.refused", order_id=str(order.id), reason=service.error.message)
            return None
        return str(service.result.id)
