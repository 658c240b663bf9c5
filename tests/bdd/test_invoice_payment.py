"""BDD tests for sending, paying and correcting invoices."""

from datetime import UTC, datetime, timedelta

from backoffice.account.lookups import total_revenue
from backoffice.invoice.amounts import ReviseInvoiceAmounts
from backoffice.invoice.cancellation import CancelInvoice
from backoffice.invoice.invoice import Invoice
from backoffice.invoice.payment import MarkInvoicePaid
from backoffice.invoice.sending import SendInvoice
from backoffice.order.invoicing import InvoiceOrder
from backoffice.order.validation import ValidateOrder
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/invoice_payment.feature")


def _invoice(invoice_id):
    return current_domain.repository_for(Invoice).get(invoice_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an invoiced order", target_fixture="invoice_id")
def invoiced_order(process, place_order):
    order_id = place_order()
    process(ValidateOrder(order_id=order_id))
    return process(InvoiceOrder(order_id=order_id))


@given("the invoice has been sent")
def invoice_sent(process, invoice_id):
    process(SendInvoice(invoice_id=invoice_id))


@given("the invoice has been paid")
def invoice_paid(process, invoice_id):
    process(MarkInvoicePaid(invoice_id=invoice_id))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the invoice is sent")
def send_invoice(send, invoice_id):
    send(SendInvoice, invoice_id=invoice_id)


@when("the invoice is paid")
def pay_invoice(send, invoice_id):
    send(MarkInvoicePaid, invoice_id=invoice_id)


@when("the invoice is cancelled")
def cancel_invoice(send, invoice_id):
    send(CancelInvoice, invoice_id=invoice_id)


@when(parsers.cfparse("the invoice amounts are set to {amount:f} plus {tax:f} tax"))
def revise_amounts(send, invoice_id, amount, tax):
    send(ReviseInvoiceAmounts, invoice_id=invoice_id, amount=amount, tax_amount=tax)


@when(parsers.cfparse("the invoice amount is set to {amount:f}"))
def revise_amount(send, invoice_id, amount):
    send(ReviseInvoiceAmounts, invoice_id=invoice_id, amount=amount)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the invoice is due in {days:d} days"))
def due_in(invoice_id, days):
    assert _invoice(invoice_id).due_at == datetime.now(UTC).date() + timedelta(days=days)


@then(parsers.cfparse("the account revenue is {amount:f}"))
def account_revenue(account_id, amount):
    assert total_revenue(account_id) == amount


@then(parsers.cfparse("the invoice total is {amount:f}"))
def invoice_total(invoice_id, amount):
    assert _invoice(invoice_id).total_amount == amount
