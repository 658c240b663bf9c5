"""Customer reports: inactivity, search and top spenders."""

from collections import defaultdict
from decimal import Decimal

from backoffice.customer.customer import Customer
from backoffice.invoice.invoice import Invoice, InvoiceStatus
from backoffice.order.order import Order, OrderStatus
from backoffice.queries.base import (
    ApplicationQuery,
    GroupedQuery,
    filter_by_date_range,
    nulls_first,
    resolve_period,
    within,
)

DEFAULT_INACTIVE_DAYS = 90
ABANDONED_CART_DAYS = 7


class _CustomerIndex:
    """Orders and paid invoices of the account, keyed by customer."""

    def __init__(self, query: ApplicationQuery):
        self.orders = defaultdict(list)
        for order in query.records(Order):
            self.orders[str(order.customer_id)].append(order)
        self.paid = defaultdict(list)
        for invoice in query.records(Invoice):
            if invoice.status == InvoiceStatus.PAID.value and invoice.customer_id:
                self.paid[str(invoice.customer_id)].append(invoice)

    def orders_of(self, customer) -> list:
        return self.orders.get(str(customer.id), [])

    def orders_count(self, customer) -> int:
        return len(self.orders_of(customer))

    def paid_invoices_of(self, customer) -> list:
        return self.paid.get(str(customer.id), [])

    def total_spent(self, customer, invoices=None) -> float:
        invoices = self.paid_invoices_of(customer) if invoices is None else invoices
        return float(sum((Decimal(str(i.total_amount or 0)) for i in invoices), Decimal("0")))

    def last_ordered_at(self, customer):
        dates = [o.created_at for o in self.orders_of(customer) if o.created_at]
        return max(dates) if dates else None


class _WithCustomerIndex:
    _index = None

    @property
    def index(self) -> _CustomerIndex:
        if self._index is None:
            self._index = _CustomerIndex(self)
        return self._index


def _full_name_key(customer) -> str:
    return f"{customer.first_name or ''} {customer.last_name or ''}"


class InactiveCustomersQuery(_WithCustomerIndex, GroupedQuery, ApplicationQuery):
    """Customers who never ordered, or whose last order is older than the threshold.

    ``inactive_days`` defaults to 90.
    """

    model = Customer
    GROUPS = {
        "never_ordered": "never_ordered",
        "no_recent_orders": "no_recent_orders",
    }

    def __init__(self, account_id=None, relation=None, now=None, inactive_days: int = DEFAULT_INACTIVE_DAYS):
        super().__init__(account_id, relation, now)
        self.inactive_since = self.days_ago(inactive_days)

    def results(self) -> list:
        return self.records_in_groups()

    def never_ordered(self) -> list:
        return [c for c in self.relation if not self.index.orders_of(c)]

    def no_recent_orders(self) -> list:
        return self._last_order_before(self.inactive_since)

    def with_abandoned_carts(self) -> list:
        """Customers with a pending order older than a week."""
        cutoff = self.days_ago(ABANDONED_CART_DAYS)
        return [
            c
            for c in self.relation
            if any(
                o.status == OrderStatus.PENDING.value and o.created_at and o.created_at < cutoff
                for o in self.index.orders_of(c)
            )
        ]

    def stats(self) -> dict:
        return {
            "total_inactive": len(self.results()),
            "never_ordered": len(self.never_ordered()),
            "no_recent_orders": len(self.no_recent_orders()),
            "with_abandoned_carts": len(self.with_abandoned_carts()),
            "potential_revenue_lost": self.potential_revenue_lost(),
        }

    def segmented(self) -> dict:
        return {
            "inactive_30_60_days": self._last_order_between(self.days_ago(60), self.days_ago(30)),
            "inactive_60_90_days": self._last_order_between(self.days_ago(90), self.days_ago(60)),
            "inactive_90_180_days": self._last_order_between(self.days_ago(180), self.days_ago(90)),
            "inactive_over_180_days": self._last_order_before(self.days_ago(180)),
        }

    def potential_revenue_lost(self) -> float:
        """What inactive customers used to spend per order, summed."""
        total = Decimal("0")
        for customer in self.results():
            spent = Decimal(str(self.index.total_spent(customer)))
            total += spent / max(self.index.orders_count(customer), 1)
        return round(float(total), 2)

    def _last_order_before(self, cutoff) -> list:
        return [c for c in self.relation if (last := self.index.last_ordered_at(c)) is not None and last < cutoff]

    def _last_order_between(self, earliest, latest) -> list:
        return [
            c for c in self.relation if (last := self.index.last_ordered_at(c)) is not None and earliest <= last <= latest
        ]


class CustomerSearchQuery(_WithCustomerIndex, ApplicationQuery):
    """Text search and filters over customers.

    Params: ``q`` (name, email or phone), ``has_orders``, ``has_email``,
    ``min_spent``, ``max_spent``, ``from_date``, ``to_date``, ``sort_by``
    (``name``, ``orders_count`` or any field) and ``sort_dir``.
    """

    model = Customer

    def __init__(self, account_id=None, relation=None, now=None, params: dict | None = None):
        super().__init__(account_id, relation, now)
        self.params = dict(params or {})

    def results(self) -> list:
        customers = self.relation
        customers = self._search(customers)
        customers = self._filter_has_orders(customers)
        customers = self._filter_has_email(customers)
        customers = self._filter_total_spent(customers)
        customers = filter_by_date_range(customers, self.params.get("from_date"), self.params.get("to_date"))
        return self._sort(customers)

    def _search(self, customers) -> list:
        needle = (self.params.get("q") or "").strip().lower()
        if not needle:
            return customers
        return [
            c
            for c in customers
            if any(needle in (value or "").lower() for value in (c.first_name, c.last_name, c.email, c.phone))
        ]

    def _filter_has_orders(self, customers) -> list:
        has_orders = self.params.get("has_orders")
        if has_orders is None:
            return customers
        return [c for c in customers if bool(self.index.orders_of(c)) == bool(has_orders)]

    def _filter_has_email(self, customers) -> list:
        has_email = self.params.get("has_email")
        if has_email is None:
            return customers
        return [c for c in customers if bool(c.email) == bool(has_email)]

    def _filter_total_spent(self, customers) -> list:
        min_spent = self.params.get("min_spent")
        max_spent = self.params.get("max_spent")
        if min_spent is None and max_spent is None:
            return customers
        kept = []
        for customer in customers:
            # Customers without a paid invoice never match a spending filter
            if not self.index.paid_invoices_of(customer):
                continue
            spent = self.index.total_spent(customer)
            if min_spent is not None and spent < float(min_spent):
                continue
            if max_spent is not None and spent > float(max_spent):
                continue
            kept.append(customer)
        return kept

    def _sort(self, customers) -> list:
        sort_by = self.params.get("sort_by") or "created_at"
        descending = (self.params.get("sort_dir") or "desc") == "desc"
        if sort_by == "name":
            return sorted(customers, key=_full_name_key, reverse=descending)
        if sort_by == "orders_count":
            return sorted(customers, key=self.index.orders_count, reverse=descending)
        return sorted(customers, key=lambda c: nulls_first(getattr(c, sort_by)), reverse=descending)


class TopSpendersQuery(_WithCustomerIndex, ApplicationQuery):
    """Customers ranked by what they paid, optionally within a period of payment dates."""

    model = Customer

    def __init__(self, account_id=None, relation=None, now=None, limit: int = 10, period=None):
        super().__init__(account_id, relation, now)
        self.limit = limit
        self.period = period

    def _paid_in_period(self, customer) -> list:
        invoices = self.index.paid_invoices_of(customer)
        if self.period is None:
            return invoices
        period_range = resolve_period(self.period, self.now)
        return [i for i in invoices if within(i.paid_at, period_range)]

    def results(self) -> list:
        ranked = [(c, self.index.total_spent(c, self._paid_in_period(c))) for c in self.relation if self._paid_in_period(c)]
        ranked.sort(key=lambda pair: pair[1], reverse=True)
        return [customer for customer, _ in ranked[: self.limit]]

    def with_stats(self) -> list[dict]:
        stats = []
        for customer in self.results():
            invoices = self._paid_in_period(customer)
            total_spent = self.index.total_spent(customer, invoices)
            orders_count = len({str(i.order_id) for i in invoices})
            stats.append(
                {
                    "customer": customer,
                    "total_spent": total_spent,
                    "orders_count": orders_count,
                    "average_order_value": round(total_spent / orders_count, 2) if orders_count else 0,
                }
            )
        return stats

    def ids(self) -> list[str]:
        return [str(c.id) for c in self.results()]

    def revenue_percentage(self) -> float:
        """Share of all paid revenue coming from the top customers."""
        top_revenue = sum(self.index.total_spent(c, self._paid_in_period(c)) for c in self.results())
        total_revenue = sum(self.index.total_spent(c) for c in self.relation)
        if not total_revenue:
            return 0
        return round(top_revenue / total_revenue * 100, 2)
