"""Sending an invoice to the customer: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.invoice.invoice import Invoice


@backoffice.command(part_of="Invoice")
class SendInvoice:
    invoice_id = Identifier(required=True)


@backoffice.command_handler(part_of=Invoice)
class SendInvoiceHandler:
    @handle(SendInvoice)
    def send_invoice(self, command):
        """Returns False, leaving the invoice untouched, unless it is a draft."""
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        if not invoice.is_draft():
            return False
        invoice.send_to_customer()
        repo.add(invoice)
        return True
