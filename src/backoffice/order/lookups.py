"""Order reads shared by handlers, queries and presenters."""

from datetime import UTC, datetime

from backoffice.invoice.invoice import Invoice
from backoffice.order.order import Order, OrderStatus
from backoffice.shared.records import fetch_all, fetch_first


def _newest_first(orders: list) -> list:
    return sorted(orders, key=lambda o: o.created_at or datetime.min.replace(tzinfo=UTC), reverse=True)


def reference_taken(account_id, reference: str) -> bool:
    return fetch_first(Order, account_id=str(account_id), reference=reference) is not None


def orders_for_account(account_id) -> list:
    return fetch_all(Order, account_id=str(account_id))


def orders_for_customer(customer_id) -> list:
    return fetch_all(Order, customer_id=str(customer_id))


def orders_for_fulfillment(fulfillment_id) -> list:
    return fetch_all(Order, fulfillment_id=str(fulfillment_id))


def recent(account_id) -> list:
    return _newest_first(orders_for_account(account_id))


def active(account_id) -> list:
    """Orders that are not cancelled."""
    return [o for o in orders_for_account(account_id) if o.status != OrderStatus.CANCELLED.value]


def with_status(account_id, status: str) -> list:
    return fetch_all(Order, account_id=str(account_id), status=OrderStatus(status).value)


def without_status(account_id, status: str) -> list:
    excluded = OrderStatus(status).value
    return [o for o in orders_for_account(account_id) if o.status != excluded]


def invoiced_order_ids(account_id) -> set[str]:
    return {str(i.order_id) for i in fetch_all(Invoice, account_id=str(account_id))}


def with_invoice(account_id) -> list:
    ids = invoiced_order_ids(account_id)
    return [o for o in orders_for_account(account_id) if str(o.id) in ids]


def without_invoice(account_id) -> list:
    ids = invoiced_order_ids(account_id)
    return [o for o in orders_for_account(account_id) if str(o.id) not in ids]
