"""Invoice display values."""

from datetime import date

from backoffice.customer.customer import Customer
from backoffice.order.order import Order
from backoffice.presenters.base import Presenter, build_status_tables, content_tag, format_currency, format_date
from backoffice.presenters.customer import CustomerPresenter
from backoffice.shared.records import fetch_by_id

DUE_SOON_DAYS = 7

_STATUS_NAMES, _STATUS_BADGES = build_status_tables(
    {
        "draft": {"name": "Draft", "badge": "badge-secondary"},
        "sent": {"name": "Sent", "badge": "badge-info"},
        "paid": {"name": "Paid", "badge": "badge-success"},
        "cancelled": {"name": "Cancelled", "badge": "badge-danger"},
    }
)


def due_status(invoice, today: date | None = None) -> tuple[str, str] | None:
    """Label and CSS class describing when a sent invoice falls due.

    ``None`` unless the invoice is sent and has a due date.
    """
    if invoice.due_at is None or not invoice.is_sent():
        return None
    if invoice.is_overdue(today):
        return f"Overdue ({invoice.days_overdue(today)} days)", "text-danger"
    days = invoice.days_until_due(today)
    if days <= DUE_SOON_DAYS:
        return f"Due soon ({days} days)", "text-warning"
    return f"{days} days remaining", "text-muted"


class InvoicePresenter(Presenter):
    STATUS_NAMES = _STATUS_NAMES
    STATUS_BADGES = _STATUS_BADGES

    def _order(self):
        return fetch_by_id(Order, self.record.order_id)

    def due_status(self, today: date | None = None) -> str | None:
        status = due_status(self.record, today)
        if status is None:
            return None
        label, css_class = status
        return content_tag("span", label, css_class)

    def customer_name(self) -> str | None:
        order = self._order()
        customer_id = self.record.customer_id or (order.customer_id if order is not None else None)
        customer = fetch_by_id(Customer, customer_id)
        return CustomerPresenter(customer).display_name() if customer is not None else None

    def order_reference(self) -> str | None:
        order = self._order()
        return order.reference if order is not None else None

    def amount_formatted(self) -> str | None:
        return format_currency(self.record.amount)

    def tax_amount_formatted(self) -> str:
        return format_currency(self.record.tax_amount if self.record.tax_amount is not None else 0)

    def total_amount_formatted(self) -> str | None:
        return format_currency(self.record.total_amount)

    def issued_at_formatted(self) -> str | None:
        return format_date(self.record.issued_at)

    def due_at_formatted(self) -> str | None:
        return format_date(self.record.due_at)

    def paid_at_formatted(self) -> str | None:
        return format_date(self.record.paid_at)

    def summary(self, today: date | None = None) -> dict:
        status = due_status(self.record, today)
        return {
            "id": str(self.record.id),
            "number": self.record.number,
            "kind": self.record.kind,
            "status": self.record.status,
            "status_name": self.status_name(),
            "status_badge": self.status_badge(),
            "order_reference": self.order_reference(),
            "customer_name": self.customer_name(),
            "amount_formatted": self.amount_formatted(),
            "tax_amount_formatted": self.tax_amount_formatted(),
            "total_amount_formatted": self.total_amount_formatted(),
            "issued_at_formatted": self.issued_at_formatted(),
            "due_at_formatted": self.due_at_formatted(),
            "paid_at_formatted": self.paid_at_formatted(),
            "due_status": status[0] if status else None,
        }
