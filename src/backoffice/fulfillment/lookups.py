"""Fulfillment reads shared by handlers, queries and presenters."""

from backoffice.fulfillment.fulfillment import COMPLETED_STATUSES, IN_TRANSIT_STATUSES, Fulfillment
from backoffice.shared.records import fetch_all, fetch_first


def fulfillments_for_account(account_id) -> list:
    return fetch_all(Fulfillment, account_id=str(account_id))


def fulfillments_for_service(fulfillment_service_id) -> list:
    return fetch_all(Fulfillment, fulfillment_service_id=str(fulfillment_service_id))


def tracking_number_taken(tracking_number: str, exclude_id=None) -> bool:
    existing = fetch_first(Fulfillment, tracking_number=tracking_number)
    return existing is not None and str(existing.id) != str(exclude_id)


def in_transit(account_id) -> list:
    return [f for f in fulfillments_for_account(account_id) if f.status in IN_TRANSIT_STATUSES]


def completed(account_id) -> list:
    return [f for f in fulfillments_for_account(account_id) if f.status in COMPLETED_STATUSES]


def active(account_id) -> list:
    """Neither delivered nor cancelled."""
    return [f for f in fulfillments_for_account(account_id) if f.status not in COMPLETED_STATUSES]
