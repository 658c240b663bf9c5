"""AccountEvent aggregate: one row of an account's audit trail."""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String, Text

from backoffice.domain import backoffice


@backoffice.aggregate
class AccountEvent:
    account_id = Identifier(required=True)
    resource_id = Identifier(required=True)
    event_type = String(required=True, max_length=255)
    payload = Text()  # JSON object
    created_at = DateTime()

    @classmethod
    def record(cls, account_id, resource_id, event_type: str, payload: dict | None = None):
        return cls(
            account_id=str(account_id),
            resource_id=str(resource_id),
            event_type=event_type,
            payload=json.dumps(payload, default=str) if payload is not None else None,
            created_at=datetime.now(UTC),
        )

    def parsed_payload(self) -> dict:
        """Decoded payload; ``{}`` when blank or not valid JSON."""
        if not self.payload or not self.payload.strip():
            return {}
        try:
            value = json.loads(self.payload)
        except json.JSONDecodeError:
            return {}
        return value if isinstance(value, dict) else {}
