"""FulfillmentService reads."""

from backoffice.fulfillment.lookups import fulfillments_for_service
from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.shared.records import fetch_all, fetch_first


def services_for_account(account_id) -> list:
    return fetch_all(FulfillmentService, account_id=str(account_id))


def active(account_id) -> list:
    return [s for s in services_for_account(account_id) if s.active]


def inactive(account_id) -> list:
    return [s for s in services_for_account(account_id) if not s.active]


def name_taken(account_id, name: str, exclude_id=None) -> bool:
    existing = fetch_first(FulfillmentService, account_id=str(account_id), name=name)
    return existing is not None and str(existing.id) != str(exclude_id)


def fulfillments_count(fulfillment_service_id) -> int:
    return len(fulfillments_for_service(fulfillment_service_id))
