"""Invoice aggregate: the billing document of an order.

Invoices come in two kinds. A debit invoice bills a validated order. A
credit note (number prefix ``CN``) offsets the bill when an invoiced order
is cancelled. Both start as drafts.

State Machine:
    DRAFT → SENT → PAID
    DRAFT → CANCELLED
    SENT → CANCELLED
"""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, Identifier, String

from backoffice.domain import backoffice
from backoffice.invoice.events import (
    InvoiceAmountsRevised,
    InvoiceCancelled,
    InvoiceCreated,
    InvoicePaid,
    InvoiceSent,
)
from backoffice.shared.references import generate_reference

PAYMENT_TERMS_DAYS = 30


class InvoiceStatus(Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


class InvoiceKind(Enum):
    DEBIT = "debit"
    CREDIT = "credit"


_NUMBER_PREFIXES = {
    InvoiceKind.DEBIT: "INV",
    InvoiceKind.CREDIT: "CN",
}

_VALID_TRANSITIONS = {
    InvoiceStatus.DRAFT: {InvoiceStatus.SENT, InvoiceStatus.CANCELLED},
    InvoiceStatus.SENT: {InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
    InvoiceStatus.PAID: set(),  # Terminal
    InvoiceStatus.CANCELLED: set(),  # Terminal
}


def _total(amount, tax_amount) -> float:
    return float(Decimal(str(amount or 0)) + Decimal(str(tax_amount or 0)))


def generate_number(kind: InvoiceKind, at: datetime | None = None) -> str:
    return generate_reference(_NUMBER_PREFIXES[kind], at)


@backoffice.aggregate
class Invoice:
    account_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier()
    number = String(required=True, max_length=50)
    kind = String(choices=InvoiceKind, default=InvoiceKind.DEBIT.value)
    status = String(
        choices=InvoiceStatus,
        default=InvoiceStatus.DRAFT.value,
    )
    amount = Float(required=True, min_value=0.0)
    tax_amount = Float(default=0.0)
    total_amount = Float(default=0.0)
    issued_at = Date()
    due_at = Date()
    paid_at = Date()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_include_tax(self):
        if self.total_amount != _total(self.amount, self.tax_amount):
            raise ValidationError({"total_amount": ["must equal amount plus tax"]})

    @classmethod
    def draft(cls, account_id, order_id, customer_id, amount, tax_amount=0.0, kind=InvoiceKind.DEBIT.value, number=None):
        """Create a draft invoice; ``total_amount`` is derived."""
        now = datetime.now(UTC)
        kind = InvoiceKind(kind)
        invoice = cls(
            account_id=str(account_id),
            order_id=str(order_id),
            customer_id=str(customer_id) if customer_id else None,
            number=number or generate_number(kind, now),
            kind=kind.value,
            amount=amount or 0.0,
            tax_amount=tax_amount or 0.0,
            total_amount=_total(amount, tax_amount),
            created_at=now,
            updated_at=now,
        )
        invoice.raise_(
            InvoiceCreated(
                invoice_id=str(invoice.id),
                account_id=str(invoice.account_id),
                order_id=str(invoice.order_id),
                customer_id=invoice.customer_id,
                number=invoice.number,
                kind=invoice.kind,
                amount=invoice.amount,
                total_amount=invoice.total_amount,
                created_at=now,
            )
        )
        return invoice

    def _assert_can_transition(self, target_status: InvoiceStatus) -> None:
        current = InvoiceStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def is_draft(self) -> bool:
        return self.status == InvoiceStatus.DRAFT.value

    def is_sent(self) -> bool:
        return self.status == InvoiceStatus.SENT.value

    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID.value

    def is_cancelled(self) -> bool:
        return self.status == InvoiceStatus.CANCELLED.value

    def is_credit_note(self) -> bool:
        return self.kind == InvoiceKind.CREDIT.value

    def send_to_customer(self, today: date | None = None) -> None:
        """Issue the draft today with payment due after the standard terms."""
        self._assert_can_transition(InvoiceStatus.SENT)
        today = today or datetime.now(UTC).date()
        self.status = InvoiceStatus.SENT.value
        self.issued_at = today
        self.due_at = today + timedelta(days=PAYMENT_TERMS_DAYS)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            InvoiceSent(
                invoice_id=str(self.id),
                order_id=str(self.order_id),
                number=self.number,
                issued_at=self.issued_at,
                due_at=self.due_at,
            )
        )

    def mark_as_paid(self, paid_date: date | None = None) -> None:
        self._assert_can_transition(InvoiceStatus.PAID)
        self.status = InvoiceStatus.PAID.value
        self.paid_at = paid_date or datetime.now(UTC).date()
        self.updated_at = datetime.now(UTC)
        self.raise_(
            InvoicePaid(
                invoice_id=str(self.id),
                order_id=str(self.order_id),
                customer_id=self.customer_id,
                total_amount=self.total_amount,
                paid_at=self.paid_at,
            )
        )

    def cancel(self) -> None:
        """Cancel unless paid. Cancelling twice changes nothing."""
        if self.is_cancelled():
            return
        previous = self.status
        self._assert_can_transition(InvoiceStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = InvoiceStatus.CANCELLED.value
        self.updated_at = now
        self.raise_(
            InvoiceCancelled(
                invoice_id=str(self.id),
                order_id=str(self.order_id),
                previous_status=previous,
                cancelled_at=now,
            )
        )

    def revise_amounts(self, amount=None, tax_amount=None) -> None:
        """Change amount and/or tax; the total follows."""
        amount = self.amount if amount is None else amount
        tax_amount = self.tax_amount if tax_amount is None else tax_amount
        if amount < 0:
            raise ValidationError({"amount": ["must be greater than or equal to 0"]})
        with atomic_change(self):
            self.amount = amount
            self.tax_amount = tax_amount
            self.total_amount = _total(amount, tax_amount)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            InvoiceAmountsRevised(
                invoice_id=str(self.id),
                amount=self.amount,
                tax_amount=self.tax_amount,
                total_amount=self.total_amount,
            )
        )

    # -------------------------------------------------------------------
    # Due dates
    # -------------------------------------------------------------------
    def is_overdue(self, today: date | None = None) -> bool:
        today = today or datetime.now(UTC).date()
        return self.is_sent() and self.due_at is not None and self.due_at < today

    def days_until_due(self, today: date | None = None) -> int | None:
        if self.due_at is None:
            return None
        today = today or datetime.now(UTC).date()
        return (self.due_at - today).days

    def days_overdue(self, today: date | None = None) -> int:
        today = today or datetime.now(UTC).date()
        if not self.is_overdue(today):
            return 0
        return (today - self.due_at).days
