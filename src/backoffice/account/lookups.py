"""Account reads."""

from backoffice.account.account import Account
from backoffice.invoice.lookups import total_revenue as _paid_total
from backoffice.order import lookups as order_lookups
from backoffice.shared.records import fetch_all


def by_name(fragment: str) -> list:
    """Accounts whose name contains ``fragment``, ignoring case."""
    needle = (fragment or "").strip().lower()
    return [a for a in fetch_all(Account) if needle in (a.name or "").lower()]


def active_orders(account_id) -> list:
    return order_lookups.active(account_id)


def total_revenue(account_id) -> float:
    """Sum of the account's paid invoice totals."""
    return _paid_total(account_id)
