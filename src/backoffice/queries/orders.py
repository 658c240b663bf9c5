"""Order reports: dashboard, filtering, follow-up and revenue."""

from collections import Counter, defaultdict
from decimal import Decimal

from backoffice.customer.customer import Customer
from backoffice.invoice.invoice import Invoice, InvoiceKind, InvoiceStatus
from backoffice.order.order import Order, OrderStatus
from backoffice.queries.base import (
    ApplicationQuery,
    GroupedQuery,
    filter_by_date_range,
    nulls_first,
    resolve_period,
    safe_average,
    total_of,
    within,
)

PENDING_THRESHOLD_DAYS = 3
VALIDATED_THRESHOLD_DAYS = 7
TOP_CUSTOMERS_LIMIT = 5

_PERIOD_KEYS = {
    "day": lambda d: d.strftime("%Y-%m-%d"),
    "week": lambda d: d.strftime("%Y-%W"),
    "month": lambda d: d.strftime("%Y-%m"),
    "quarter": lambda d: f"{d.year}-Q{(d.month - 1) // 3 + 1}",
    "year": lambda d: d.strftime("%Y"),
}


class _WithInvoices:
    """Lazily indexes the account's invoices by order."""

    _invoices = None

    @property
    def invoices_by_order(self) -> dict:
        if self._invoices is None:
            self._invoices = defaultdict(list)
            for invoice in self.records(Invoice):
                self._invoices[str(invoice.order_id)].append(invoice)
        return self._invoices

    def invoice_for(self, order):
        """The debit invoice billing ``order``, if any."""
        return next(
            (i for i in self.invoices_by_order.get(str(order.id), []) if i.kind == InvoiceKind.DEBIT.value),
            None,
        )

    def paid_invoice_for(self, order):
        invoice = self.invoice_for(order)
        return invoice if invoice is not None and invoice.status == InvoiceStatus.PAID.value else None


def _with_status(orders, status: OrderStatus) -> list:
    return [o for o in orders if o.status == status.value]


class OrderDashboardQuery(_WithInvoices, ApplicationQuery):
    """Orders placed within a period (default today), newest first."""

    model = Order

    def __init__(self, account_id=None, relation=None, now=None, period="today"):
        super().__init__(account_id, relation, now)
        self.period = period

    def results(self) -> list:
        period_range = resolve_period(self.period, self.now)
        orders = [o for o in self.relation if within(o.created_at, period_range)]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def recent(self, limit: int = 10) -> list:
        return self.results()[:limit]

    def stats(self) -> dict:
        orders = self.results()
        paid = [invoice for invoice in (self.paid_invoice_for(o) for o in orders) if invoice is not None]
        return {
            "total_orders": len(orders),
            "total_revenue": total_of(paid, "total_amount"),
            "average_order_value": safe_average(orders, lambda o: o.total_amount),
            "orders_by_status": dict(Counter(o.status for o in orders)),
            "top_customers": self._top_customers(orders),
        }

    def _top_customers(self, orders) -> list[dict]:
        customers = {str(c.id): c for c in self.records(Customer)}
        counts = Counter(str(o.customer_id) for o in orders if str(o.customer_id) in customers)
        return [
            {
                "customer_id": customer_id,
                "first_name": customers[customer_id].first_name,
                "last_name": customers[customer_id].last_name,
                "orders_count": count,
            }
            for customer_id, count in counts.most_common(TOP_CUSTOMERS_LIMIT)
        ]


class OrderFilterQuery(_WithInvoices, ApplicationQuery):
    """Orders matching a set of optional filters.

    Filters: ``status`` (one or a list), ``customer_id``, ``from_date``,
    ``to_date``, ``min_amount``, ``max_amount``, ``reference`` (substring),
    ``has_invoice``, ``has_fulfillment``, ``sort_by`` and ``sort_dir``.
    """

    model = Order

    def __init__(self, account_id=None, relation=None, now=None, filters: dict | None = None):
        super().__init__(account_id, relation, now)
        self.filters = dict(filters or {})

    def results(self) -> list:
        orders = self.relation
        orders = self._filter_by_status(orders)
        if self.filters.get("customer_id"):
            orders = [o for o in orders if str(o.customer_id) == str(self.filters["customer_id"])]
        orders = filter_by_date_range(orders, self.filters.get("from_date"), self.filters.get("to_date"))
        orders = self._filter_by_amount(orders)
        if self.filters.get("reference"):
            needle = self.filters["reference"].lower()
            orders = [o for o in orders if needle in (o.reference or "").lower()]
        orders = self._filter_by_invoice(orders)
        if self.filters.get("has_fulfillment") is not None:
            wanted = bool(self.filters["has_fulfillment"])
            orders = [o for o in orders if bool(o.fulfillment_id) == wanted]
        return self._sort(orders)

    def _filter_by_status(self, orders) -> list:
        statuses = self.filters.get("status")
        if not statuses:
            return orders
        if isinstance(statuses, str):
            statuses = [statuses]
        return [o for o in orders if o.status in statuses]

    def _filter_by_amount(self, orders) -> list:
        min_amount = self.filters.get("min_amount")
        max_amount = self.filters.get("max_amount")
        if min_amount is not None:
            orders = [o for o in orders if (o.total_amount or 0) >= float(min_amount)]
        if max_amount is not None:
            orders = [o for o in orders if (o.total_amount or 0) <= float(max_amount)]
        return orders

    def _filter_by_invoice(self, orders) -> list:
        has_invoice = self.filters.get("has_invoice")
        if has_invoice is None:
            return orders
        return [o for o in orders if bool(self.invoices_by_order.get(str(o.id))) == bool(has_invoice)]

    def _sort(self, orders) -> list:
        sort_by = self.filters.get("sort_by") or "created_at"
        descending = (self.filters.get("sort_dir") or "desc") == "desc"
        return sorted(orders, key=lambda o: nulls_first(getattr(o, sort_by)), reverse=descending)


class OrdersNeedingAttentionQuery(_WithInvoices, GroupedQuery, ApplicationQuery):
    """Orders stalled somewhere between placement and shipment."""

    model = Order
    GROUPS = {
        "pending_too_long": "pending_too_long",
        "validated_not_invoiced": "validated_not_invoiced",
        "invoiced_overdue": "invoiced_with_overdue_payment",
        "awaiting_shipment": "awaiting_shipment",
    }

    def results(self) -> list:
        return self.records_in_groups()

    def pending_too_long(self) -> list:
        cutoff = self.days_ago(PENDING_THRESHOLD_DAYS)
        return [o for o in _with_status(self.relation, OrderStatus.PENDING) if o.created_at and o.created_at < cutoff]

    def validated_not_invoiced(self) -> list:
        cutoff = self.days_ago(VALIDATED_THRESHOLD_DAYS)
        return [
            o
            for o in _with_status(self.relation, OrderStatus.VALIDATED)
            if self.invoice_for(o) is None and o.created_at and o.created_at < cutoff
        ]

    def invoiced_with_overdue_payment(self) -> list:
        found = []
        for order in _with_status(self.relation, OrderStatus.INVOICED):
            invoice = self.invoice_for(order)
            if invoice is not None and invoice.is_sent() and invoice.due_at and invoice.due_at < self.today:
                found.append(order)
        return found

    def awaiting_shipment(self) -> list:
        """Paid but not yet handed to a fulfillment."""
        return [
            o
            for o in _with_status(self.relation, OrderStatus.INVOICED)
            if self.paid_invoice_for(o) is not None and not o.fulfillment_id
        ]


class OrdersWithRevenueQuery(_WithInvoices, ApplicationQuery):
    """Orders whose invoice has been paid, with the amount and payment date."""

    model = Order

    def results(self) -> list[dict]:
        rows = []
        for order in self.relation:
            invoice = self.paid_invoice_for(order)
            if invoice is not None:
                rows.append({"order": order, "invoice_total": invoice.total_amount, "payment_date": invoice.paid_at})
        return rows

    def total_revenue(self) -> float:
        return float(sum((Decimal(str(row["invoice_total"] or 0)) for row in self.results()), Decimal("0")))

    def revenue_by_period(self, group_by: str = "month") -> dict:
        """Paid totals keyed by day, week, month, quarter or year of payment."""
        key = _PERIOD_KEYS.get(group_by, _PERIOD_KEYS["month"])
        sums = defaultdict(Decimal)
        for row in self.results():
            if row["payment_date"] is not None:
                sums[key(row["payment_date"])] += Decimal(str(row["invoice_total"] or 0))
        return {period: float(total) for period, total in sorted(sums.items())}

    def paid_orders_count(self) -> int:
        return len(self.results())

    def average_revenue(self) -> float:
        count = self.paid_orders_count()
        if not count:
            return 0
        return round(self.total_revenue() / count, 2)

    def top_products(self, limit: int = 10) -> dict:
        """Line names ranked by what they brought in on paid orders."""
        sums = defaultdict(Decimal)
        for row in self.results():
            for line in row["order"].lines:
                sums[line.name] += Decimal(str(line.total_price or 0))
        ranked = sorted(sums.items(), key=lambda pair: pair[1], reverse=True)[:limit]
        return {name: float(total) for name, total in ranked}
