"""Order cancellation: service, command and handler.

How an order is cancelled depends on how far it got:

- invoiced orders get a credit note, which also cancels them;
- validated orders go through ``OrderCancellation``, which records
  ``order.cancelled`` in the audit trail in the same unit of work;
- pending orders are simply marked cancelled.
"""

from protean import UnitOfWork, handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.audit.trail import log_event
from backoffice.domain import backoffice
from backoffice.invoice.creation import InvoiceCreation
from backoffice.invoice.invoice import InvoiceKind
from backoffice.order.order import Order
from backoffice.shared.service import Service
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class OrderCancellation(Service):
    """Cancel ``order`` and log ``order.cancelled``; ``result`` is True on success."""

    order: Order

    def perform(self):
        if self.order.is_cancelled():
            return False

        try:
            with UnitOfWork():
                self.order.cancel()
                current_domain.repository_for(Order).add(self.order)
                log_event(self.order.account_id, "Order", self.order.id, "order.cancelled")
        except ValidationError as exc:
            self.append_error("invalid_record", str(exc.messages))
            return False

        logger.info("order.cancelled", order_id=str(self.order.id), reference=self.order.reference)
        return True


@backoffice.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)


@backoffice.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        """Returns False when the order was already cancelled or could not be cancelled."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if order.is_cancelled():
            return False
        if order.is_invoiced():
            return InvoiceCreation.call(order=order, kind=InvoiceKind.CREDIT.value).successful
        if order.is_validated():
            return OrderCancellation.call(order=order).result

        order.cancel()
        repo.add(order)
        return True
