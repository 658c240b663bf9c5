"""Invoice creation service: bills an order or issues a credit note."""

from protean import UnitOfWork
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from backoffice.audit.trail import log_event
from backoffice.invoice.invoice import Invoice, InvoiceKind, generate_number
from backoffice.invoice.lookups import debit_invoice_for, number_taken
from backoffice.order.order import Order
from backoffice.shared.service import Service
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class InvoiceCreation(Service):
    """Create a draft invoice for ``order``.

    ``kind="debit"`` bills a validated order that has no invoice yet and
    moves it to invoiced. ``kind="credit"`` issues a credit note for an
    invoiced order and cancels it. Both log ``invoice.<kind>.created`` to
    the audit trail. ``result`` is the new invoice, or ``None`` with an
    entry in ``errors``.
    """

    order: Order
    kind: str = InvoiceKind.DEBIT.value

    def perform(self):
        try:
            kind = InvoiceKind(self.kind)
        except ValueError:
            self.append_error("invalid_kind", f"Unknown invoice kind: {self.kind!r}")
            return None

        if not self._order_accepts(kind):
            return None

        try:
            with UnitOfWork():
                invoice = Invoice.draft(
                    account_id=self.order.account_id,
                    order_id=self.order.id,
                    customer_id=self.order.customer_id,
                    amount=self.order.total_amount or 0.0,
                    tax_amount=0.0,
                    kind=kind.value,
                    number=self._unique_number(kind),
                )
                current_domain.repository_for(Invoice).add(invoice)

                if kind is InvoiceKind.CREDIT:
                    self.order.cancel()
                else:
                    self.order.mark_invoiced()
                current_domain.repository_for(Order).add(self.order)

                log_event(
                    self.order.account_id,
                    "Invoice",
                    invoice.id,
                    f"invoice.{kind.value}.created",
                )
        except ValidationError as exc:
            self.append_error("invalid_record", str(exc.messages))
            return None

        logger.info(
            "invoice.created",
            invoice_id=str(invoice.id),
            number=invoice.number,
            kind=kind.value,
            order_id=str(self.order.id),
        )
        self.append_message(f"Invoice {invoice.number} created")
        if self.has_callback("created"):
            self.call_back("created", invoice)
        return invoice

    def _order_accepts(self, kind: InvoiceKind) -> bool:
        if kind is InvoiceKind.CREDIT:
            if not self.order.is_invoiced():
                self.append_error("invalid_status", "Only invoiced orders can be credited")
                return False
            return True

        if not self.order.is_validated():
            self.append_error("invalid_status", "Only validated orders can be invoiced")
            return False
        if debit_invoice_for(self.order.id) is not None:
            self.append_error("already_invoiced", f"Order {self.order.reference} already has an invoice")
            return False
        return True

    @staticmethod
    def _unique_number(kind: InvoiceKind) -> str:
        number = generate_number(kind)
        while number_taken(number):
            number = generate_number(kind)
        return number
