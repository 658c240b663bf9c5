"""FulfillmentService aggregate: a carrier or logistics provider an account ships with."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String

from backoffice.domain import backoffice
from backoffice.fulfillment_service.events import (
    FulfillmentServiceActivated,
    FulfillmentServiceDeactivated,
    FulfillmentServiceRegistered,
    FulfillmentServiceRenamed,
)


def _clean_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError({"name": ["can't be blank"]})
    return name


@backoffice.aggregate
class FulfillmentService:
    account_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    provider = String(max_length=100)
    active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, account_id, name, provider=None, active=True):
        now = datetime.now(UTC)
        service = cls(
            account_id=str(account_id),
            name=_clean_name(name),
            provider=provider,
            active=active,
            created_at=now,
            updated_at=now,
        )
        service.raise_(
            FulfillmentServiceRegistered(
                fulfillment_service_id=str(service.id),
                account_id=str(service.account_id),
                name=service.name,
                provider=service.provider,
                registered_at=now,
            )
        )
        return service

    def activate(self) -> None:
        if self.active:
            return
        now = datetime.now(UTC)
        self.active = True
        self.updated_at = now
        self.raise_(FulfillmentServiceActivated(fulfillment_service_id=str(self.id), activated_at=now))

    def deactivate(self) -> None:
        if not self.active:
            return
        now = datetime.now(UTC)
        self.active = False
        self.updated_at = now
        self.raise_(FulfillmentServiceDeactivated(fulfillment_service_id=str(self.id), deactivated_at=now))

    def rename(self, name: str) -> None:
        name = _clean_name(name)
        if name == self.name:
            return
        now = datetime.now(UTC)
        self.name = name
        self.updated_at = now
        self.raise_(FulfillmentServiceRenamed(fulfillment_service_id=str(self.id), name=name, renamed_at=now))
