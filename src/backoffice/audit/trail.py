"""Writing and reading an account's audit trail."""

from datetime import UTC, datetime, timedelta

from protean.utils.globals import current_domain

from backoffice.audit.account_event import AccountEvent
from backoffice.audit.resource import Resource, ResourceType
from backoffice.shared.records import delete, fetch_all, fetch_first
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


def resource_for(resource_type: str, record_id) -> Resource:
    """Find the Resource describing a record, creating it on first use."""
    name = f"{resource_type}#{record_id}"
    resource = fetch_first(Resource, name=name, resource_type=resource_type)
    if resource is None:
        resource = Resource.describe(resource_type, record_id)
        current_domain.repository_for(Resource).add(resource)
    return resource


def log_event(account_id, resource_type: str, record_id, event_type: str, payload: dict | None = None) -> AccountEvent:
    """Append one entry to the account's audit trail."""
    resource = resource_for(resource_type, record_id)
    event = AccountEvent.record(
        account_id=account_id,
        resource_id=resource.id,
        event_type=event_type,
        payload=payload,
    )
    current_domain.repository_for(AccountEvent).add(event)
    logger.info(
        "audit.event.logged",
        account_id=str(account_id),
        resource=resource.name,
        event_type=event_type,
    )
    return event


def _start_of_week(moment: datetime) -> datetime:
    day = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return day - timedelta(days=day.weekday())


def account_events(account_id, event_type: str | None = None, period: str | None = None, now: datetime | None = None):
    """Audit events of an account, most recent first.

    ``period`` narrows to ``"today"`` or ``"this_week"`` (Monday based).
    """
    filters = {"account_id": str(account_id)}
    if event_type:
        filters["event_type"] = event_type
    events = fetch_all(AccountEvent, **filters)

    now = now or datetime.now(UTC)
    if period == "today":
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        events = [e for e in events if e.created_at and start <= e.created_at < start + timedelta(days=1)]
    elif period == "this_week":
        start = _start_of_week(now)
        events = [e for e in events if e.created_at and start <= e.created_at < start + timedelta(days=7)]
    elif period is not None:
        raise ValueError(f"Unknown period: {period}")

    return sorted(events, key=lambda e: e.created_at or datetime.min.replace(tzinfo=UTC), reverse=True)


def events_for_record(resource_type: str, record_id) -> list:
    """Audit events attached to one record, oldest first."""
    resource = fetch_first(Resource, name=f"{resource_type}#{record_id}")
    if resource is None:
        return []
    events = fetch_all(AccountEvent, resource_id=str(resource.id))
    return sorted(events, key=lambda e: e.created_at or datetime.min.replace(tzinfo=UTC))


def resources_by_type(resource_type: str) -> list:
    return fetch_all(Resource, resource_type=ResourceType(resource_type).value)


def orders() -> list:
    return resources_by_type(ResourceType.ORDER.value)


def invoices() -> list:
    return resources_by_type(ResourceType.INVOICE.value)


def customers() -> list:
    return resources_by_type(ResourceType.CUSTOMER.value)


def fulfillments() -> list:
    return resources_by_type(ResourceType.FULFILLMENT.value)


def remove_resource(resource: Resource) -> None:
    """Delete a resource together with its audit events."""
    for event in fetch_all(AccountEvent, resource_id=str(resource.id)):
        delete(event)
    delete(resource)

