"""Correcting invoice amounts: command and handler."""

from protean import handle
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.invoice.invoice import Invoice


@backoffice.command(part_of="Invoice")
class ReviseInvoiceAmounts:
    invoice_id = Identifier(required=True)
    amount = Float(min_value=0.0)
    tax_amount = Float()


@backoffice.command_handler(part_of=Invoice)
class ReviseInvoiceAmountsHandler:
    @handle(ReviseInvoiceAmounts)
    def revise_invoice_amounts(self, command):
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        invoice.revise_amounts(amount=command.amount, tax_amount=command.tax_amount)
        repo.add(invoice)
        return invoice.total_amount
