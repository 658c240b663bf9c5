"""Invoice reports: receivables aging, payment follow-up and revenue."""

from collections import defaultdict
from datetime import timedelta
from decimal import Decimal

from backoffice.customer.customer import Customer
from backoffice.invoice.invoice import Invoice, InvoiceStatus
from backoffice.queries.base import PERIODS, ApplicationQuery, GroupedQuery, resolve_period, safe_average, total_of, within

# Days overdue per bucket, both ends inclusive; ``None`` leaves the bucket open-ended
AGING_BUCKETS = {
    "current": (None, 0),
    "days_1_30": (1, 30),
    "days_31_60": (31, 60),
    "days_61_90": (61, 90),
    "over_90": (91, None),
}

DUE_SOON_DAYS = 7


def _sent(invoices) -> list:
    return [i for i in invoices if i.status == InvoiceStatus.SENT.value and i.due_at is not None]


def _paid(invoices) -> list:
    return [i for i in invoices if i.status == InvoiceStatus.PAID.value]


def _by_due_date(invoices) -> list:
    return sorted(invoices, key=lambda i: i.due_at)


class AgingReportQuery(ApplicationQuery):
    """Sent invoices grouped by how many days past due they are.

    ``current`` holds the ones not yet past due.
    """

    model = Invoice

    def results(self) -> list:
        return _sent(self.relation)

    def _days_overdue(self, invoice) -> int:
        return (self.today - invoice.due_at).days

    def invoices_in_range(self, low, high) -> list:
        found = []
        for invoice in self.results():
            days = self._days_overdue(invoice)
            if low is not None and days < low:
                continue
            if high is not None and days > high:
                continue
            found.append(invoice)
        return found

    def report(self) -> dict:
        report = {}
        for bucket, (low, high) in AGING_BUCKETS.items():
            invoices = self.invoices_in_range(low, high)
            report[bucket] = {"count": len(invoices), "total_amount": total_of(invoices, "total_amount"), "invoices": invoices}
        return report

    def summary(self) -> dict:
        return {
            bucket: {key: value for key, value in entry.items() if key != "invoices"}
            for bucket, entry in self.report().items()
        }

    def current(self) -> list:
        return self.invoices_in_range(*AGING_BUCKETS["current"])

    def overdue_1_30(self) -> list:
        return self.invoices_in_range(*AGING_BUCKETS["days_1_30"])

    def overdue_31_60(self) -> list:
        return self.invoices_in_range(*AGING_BUCKETS["days_31_60"])

    def overdue_61_90(self) -> list:
        return self.invoices_in_range(*AGING_BUCKETS["days_61_90"])

    def overdue_over_90(self) -> list:
        return self.invoices_in_range(*AGING_BUCKETS["over_90"])

    def total_overdue_amount(self) -> float:
        return total_of(self.invoices_in_range(1, None), "total_amount")


class InvoicesNeedingFollowUpQuery(GroupedQuery, ApplicationQuery):
    """Sent invoices to chase, by priority.

    critical: more than 60 days overdue; high: 30 to 60; medium: 1 to 29;
    low: due within the next week.
    """

    model = Invoice
    GROUPS = {
        "critical": "critical",
        "high": "high_priority",
        "medium": "medium_priority",
        "low": "low_priority",
    }

    def results(self) -> list:
        return self.records_in_groups()

    def grouped_by_priority(self) -> dict:
        return self.grouped()

    def _due_between(self, first, last) -> list:
        """Sent invoices due between two dates, both inclusive; ``None`` is open-ended."""
        found = [
            i
            for i in _sent(self.relation)
            if (first is None or i.due_at >= first) and (last is None or i.due_at <= last)
        ]
        return _by_due_date(found)

    def critical(self) -> list:
        return self._due_between(None, self.today - timedelta(days=61))

    def high_priority(self) -> list:
        return self._due_between(self.today - timedelta(days=60), self.today - timedelta(days=30))

    def medium_priority(self) -> list:
        return self._due_between(self.today - timedelta(days=29), self.today - timedelta(days=1))

    def low_priority(self) -> list:
        return self._due_between(self.today, self.today + timedelta(days=DUE_SOON_DAYS))

    def due_today(self) -> list:
        return self._due_between(self.today, self.today)

    def due_tomorrow(self) -> list:
        tomorrow = self.today + timedelta(days=1)
        return self._due_between(tomorrow, tomorrow)

    def due_this_week(self) -> list:
        sunday = self.today + timedelta(days=6 - self.today.weekday())
        return self._due_between(self.today, sunday)

    def _overdue(self) -> list:
        return self._due_between(None, self.today - timedelta(days=1))

    def stats(self) -> dict:
        overdue = self._overdue()
        return {
            "total_overdue": len(overdue),
            "total_overdue_amount": total_of(overdue, "total_amount"),
            "due_this_week": len(self.due_this_week()),
            "critical_count": len(self.critical()),
            "average_days_overdue": safe_average(overdue, lambda i: (self.today - i.due_at).days, precision=1),
        }


class RevenueQuery(ApplicationQuery):
    """Paid invoices, optionally those paid within a period.

    An unrecognised period name leaves the paid invoices unfiltered.
    """

    model = Invoice

    def __init__(self, account_id=None, relation=None, now=None, period=None):
        super().__init__(account_id, relation, now)
        self.period = period

    def results(self) -> list:
        paid = _paid(self.relation)
        if self.period is None or (isinstance(self.period, str) and self.period not in PERIODS):
            return paid
        period_range = resolve_period(self.period, self.now)
        return [i for i in paid if within(i.paid_at, period_range)]

    def total(self) -> float:
        return total_of(self.results(), "total_amount")

    def total_excluding_tax(self) -> float:
        return total_of(self.results(), "amount")

    def total_tax(self) -> float:
        return total_of(self.results(), "tax_amount")

    def _paid_in_year(self, year: int | None) -> list:
        year = year or self.today.year
        return [i for i in _paid(self.relation) if i.paid_at and i.paid_at.year == year]

    def _sum_by(self, invoices, key) -> dict:
        sums = defaultdict(Decimal)
        for invoice in invoices:
            sums[key(invoice)] += Decimal(str(invoice.total_amount or 0))
        return {group: float(total) for group, total in sorted(sums.items())}

    def by_month(self, year: int | None = None) -> dict:
        """Paid totals keyed ``"01"`` to ``"12"``; months without payments are absent."""
        return self._sum_by(self._paid_in_year(year), lambda i: f"{i.paid_at.month:02d}")

    def by_quarter(self, year: int | None = None) -> dict:
        return self._sum_by(self._paid_in_year(year), lambda i: (i.paid_at.month - 1) // 3 + 1)

    def comparison(self, current_period, previous_period) -> dict:
        current = RevenueQuery(self.account_id, self._relation, self.now, period=current_period).total()
        previous = RevenueQuery(self.account_id, self._relation, self.now, period=previous_period).total()
        if previous == 0:
            growth = 100.0 if current > 0 else 0.0
        else:
            growth = round((current - previous) / previous * 100, 2)
        return {
            "current": current,
            "previous": previous,
            "difference": current - previous,
            "growth_percentage": growth,
        }

    def average_invoice_value(self) -> float:
        return safe_average(self.results(), lambda i: i.total_amount)

    def by_customer(self, limit: int = 10) -> list[dict]:
        """Customers ranked by what they paid, across all time."""
        customers = {str(c.id): c for c in self.records(Customer)}
        totals = self._sum_by([i for i in _paid(self.relation) if str(i.customer_id) in customers], lambda i: str(i.customer_id))
        ranked = sorted(totals.items(), key=lambda pair: pair[1], reverse=True)[:limit]
        return [
            {
                "customer_id": customer_id,
                "first_name": customers[customer_id].first_name,
                "last_name": customers[customer_id].last_name,
                "total": total,
            }
            for customer_id, total in ranked
        ]
