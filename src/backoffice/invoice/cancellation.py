"""Invoice cancellation: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.invoice.invoice import Invoice


@backoffice.command(part_of="Invoice")
class CancelInvoice:
    invoice_id = Identifier(required=True)


@backoffice.command_handler(part_of=Invoice)
class CancelInvoiceHandler:
    @handle(CancelInvoice)
    def cancel_invoice(self, command):
        """Paid invoices stay paid: returns False for them."""
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        if invoice.is_paid():
            return False
        invoice.cancel()
        repo.add(invoice)
        return True
