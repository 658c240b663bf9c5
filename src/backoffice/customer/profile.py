"""Editing a customer's name and contact details: command and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from backoffice.customer.customer import Customer
from backoffice.customer.lookups import email_taken
from backoffice.domain import backoffice


@backoffice.command(part_of="Customer")
class UpdateCustomerContact:
    customer_id = Identifier(required=True)
    changes = Text(required=True)  # JSON object of contact fields


@backoffice.command_handler(part_of=Customer)
class UpdateCustomerContactHandler:
    @handle(UpdateCustomerContact)
    def update_customer_contact(self, command):
        """Returns the list of fields that changed."""
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        changes = json.loads(command.changes)

        email = (changes.get("email") or "").strip()
        if email and email_taken(customer.account_id, email, exclude_id=customer.id):
            raise ValidationError({"email": ["has already been taken"]})

        changed = customer.update_contact(**changes)
        if changed:
            repo.add(customer)
        return changed
