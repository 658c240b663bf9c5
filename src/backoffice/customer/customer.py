"""Customer aggregate: a buyer belonging to one account."""

import json
import re
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from backoffice.customer.events import CustomerContactUpdated, CustomerRegistered
from backoffice.domain import backoffice
from backoffice.shared.person_name import PersonName

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

_CONTACT_FIELDS = ("first_name", "last_name", "email", "phone", "address")


def _blank_to_none(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@backoffice.aggregate
class Customer:
    account_id = Identifier(required=True)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    email = String(max_length=254)
    phone = String(max_length=30)
    address = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def email_must_be_well_formed(self):
        if self.email and not EMAIL_PATTERN.match(self.email):
            raise ValidationError({"email": ["is invalid"]})

    @classmethod
    def register(cls, account_id, first_name=None, last_name=None, email=None, phone=None, address=None):
        now = datetime.now(UTC)
        customer = cls(
            account_id=str(account_id),
            first_name=_blank_to_none(first_name),
            last_name=_blank_to_none(last_name),
            email=_blank_to_none(email),
            phone=_blank_to_none(phone),
            address=_blank_to_none(address),
            created_at=now,
            updated_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=str(customer.id),
                account_id=str(customer.account_id),
                first_name=customer.first_name,
                last_name=customer.last_name,
                email=customer.email,
                registered_at=now,
            )
        )
        return customer

    def update_contact(self, **changes) -> list[str]:
        """Apply the given contact fields. An empty string clears a field.

        Returns the names of the fields whose value actually changed.
        """
        unknown = set(changes) - set(_CONTACT_FIELDS)
        if unknown:
            raise ValidationError({field: ["is not a contact field"] for field in sorted(unknown)})

        changed = []
        with atomic_change(self):
            for field in _CONTACT_FIELDS:
                if field not in changes:
                    continue
                value = _blank_to_none(changes[field])
                if getattr(self, field) != value:
                    setattr(self, field, value)
                    changed.append(field)

        if changed:
            now = datetime.now(UTC)
            self.updated_at = now
            self.raise_(
                CustomerContactUpdated(
                    customer_id=str(self.id),
                    account_id=str(self.account_id),
                    changed_fields=json.dumps(changed),
                    first_name=self.first_name,
                    last_name=self.last_name,
                    email=self.email,
                    updated_at=now,
                )
            )
        return changed

    def person_name(self) -> PersonName:
        return PersonName.of(self.first_name, self.last_name)
