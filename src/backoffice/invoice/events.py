"""Domain events for the Invoice aggregate."""

from protean.fields import Date, DateTime, Float, Identifier, String

from backoffice.domain import backoffice


@backoffice.event(part_of="Invoice")
class InvoiceCreated:
    """A draft invoice (debit) or credit note was created for an order."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    account_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier()
    number = String(required=True)
    kind = String(required=True)
    amount = Float(required=True)
    total_amount = Float(required=True)
    created_at = DateTime(required=True)


@backoffice.event(part_of="Invoice")
class InvoiceSent:
    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    number = String(required=True)
    issued_at = Date(required=True)
    due_at = Date(required=True)


@backoffice.event(part_of="Invoice")
class InvoicePaid:
    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier()
    total_amount = Float(required=True)
    paid_at = Date(required=True)


@backoffice.event(part_of="Invoice")
class InvoiceCancelled:
    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)


@backoffice.event(part_of="Invoice")
class InvoiceAmountsRevised:
    __version__ = 1

    invoice_id = Identifier(required=True)
    amount = Float(required=True)
    tax_amount = Float(required=True)
    total_amount = Float(required=True)
