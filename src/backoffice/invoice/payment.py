"""Recording an invoice payment: command and handler."""

from protean import handle
from protean.fields import Date, Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.invoice.invoice import Invoice
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@backoffice.command(part_of="Invoice")
class MarkInvoicePaid:
    invoice_id = Identifier(required=True)
    paid_date = Date()  # defaults to today


@backoffice.command_handler(part_of=Invoice)
class MarkInvoicePaidHandler:
    @handle(MarkInvoicePaid)
    def mark_invoice_paid(self, command):
        """Only sent invoices can be paid; returns False otherwise."""
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        if not invoice.is_sent():
            return False
        invoice.mark_as_paid(command.paid_date)
        repo.add(invoice)
        logger.info("invoice.paid", invoice_id=str(invoice.id), total_amount=invoice.total_amount)
        return True
