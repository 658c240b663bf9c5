"""Turns tracked field changes on orders and their lines into audit entries."""

import json
import re

from protean import handle

from backoffice.audit.account_event import AccountEvent
from backoffice.audit.trail import log_event
from backoffice.domain import backoffice
from backoffice.order.events import FieldChanged


def snake_case(name: str) -> str:
    """``OrderLine`` → ``order_line``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def change_event_type(resource_type: str, field_name: str) -> str:
    return f"{snake_case(resource_type)}.{field_name}.changed"


def _decode(value):
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@backoffice.event_handler(part_of=AccountEvent, stream_category="backoffice::order")
class FieldChangeAuditHandler:
    @handle(FieldChanged)
    def record_field_change(self, event: FieldChanged) -> None:
        log_event(
            account_id=event.account_id,
            resource_type=event.resource_type,
            record_id=event.resource_id,
            event_type=change_event_type(event.resource_type, event.field_name),
            payload={
                "field": event.field_name,
                "old_value": _decode(event.old_value),
                "new_value": _decode(event.new_value),
            },
        )
