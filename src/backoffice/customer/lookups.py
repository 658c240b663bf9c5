"""Customer reads."""

from backoffice.customer.customer import Customer
from backoffice.invoice.lookups import total_spent as _paid_total
from backoffice.order.lookups import orders_for_account, orders_for_customer
from backoffice.shared.records import fetch_all, fetch_first


def customers_for_account(account_id) -> list:
    return fetch_all(Customer, account_id=str(account_id))


def email_taken(account_id, email: str, exclude_id=None) -> bool:
    existing = fetch_first(Customer, account_id=str(account_id), email=email)
    return existing is not None and str(existing.id) != str(exclude_id)


def with_email(account_id) -> list:
    return [c for c in customers_for_account(account_id) if c.email]


def with_orders(account_id) -> list:
    ordering = {str(o.customer_id) for o in orders_for_account(account_id)}
    return [c for c in customers_for_account(account_id) if str(c.id) in ordering]


def by_name(account_id, fragment: str) -> list:
    """Customers whose first or last name contains ``fragment``, ignoring case."""
    needle = (fragment or "").strip().lower()
    return [
        c
        for c in customers_for_account(account_id)
        if needle in (c.first_name or "").lower() or needle in (c.last_name or "").lower()
    ]


def orders_count(customer_id) -> int:
    return len(orders_for_customer(customer_id))


def total_spent(customer_id) -> float:
    """Sum of the customer's paid invoice totals."""
    return _paid_total(customer_id)
