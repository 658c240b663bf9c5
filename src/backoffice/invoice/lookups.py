"""Invoice reads shared by handlers, queries and presenters."""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

from backoffice.invoice.invoice import Invoice, InvoiceKind, InvoiceStatus
from backoffice.shared.records import fetch_all, fetch_first


def _today(today: date | None) -> date:
    return today or datetime.now(UTC).date()


def invoices_for_order(order_id) -> list:
    return fetch_all(Invoice, order_id=str(order_id))


def debit_invoice_for(order_id):
    """The invoice billing an order, ignoring credit notes."""
    return fetch_first(Invoice, order_id=str(order_id), kind=InvoiceKind.DEBIT.value)


def number_taken(number: str) -> bool:
    return fetch_first(Invoice, number=number) is not None


def paid_invoices(**scope) -> list:
    """Paid invoices within a scope such as ``account_id=...`` or ``customer_id=...``."""
    filters = {key: str(value) for key, value in scope.items()}
    return fetch_all(Invoice, status=InvoiceStatus.PAID.value, **filters)


def total_paid_amount(**scope) -> float:
    return float(sum((Decimal(str(i.total_amount or 0)) for i in paid_invoices(**scope)), Decimal("0")))


def total_revenue(account_id) -> float:
    return total_paid_amount(account_id=account_id)


def total_spent(customer_id) -> float:
    return total_paid_amount(customer_id=customer_id)


def recent(account_id) -> list:
    invoices = fetch_all(Invoice, account_id=str(account_id))
    return sorted(invoices, key=lambda i: i.created_at or datetime.min.replace(tzinfo=UTC), reverse=True)


def overdue(account_id, today: date | None = None) -> list:
    """Sent invoices whose due date has passed."""
    today = _today(today)
    sent = fetch_all(Invoice, account_id=str(account_id), status=InvoiceStatus.SENT.value)
    return [i for i in sent if i.due_at is not None and i.due_at < today]


def due_soon(account_id, days: int = 7, today: date | None = None) -> list:
    """Sent invoices falling due between today and ``days`` days from now, inclusive."""
    today = _today(today)
    horizon = today + timedelta(days=days)
    sent = fetch_all(Invoice, account_id=str(account_id), status=InvoiceStatus.SENT.value)
    return [i for i in sent if i.due_at is not None and today <= i.due_at <= horizon]
