"""Direct order edits and fulfillment assignment: commands and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from backoffice.customer.customer import Customer
from backoffice.domain import backoffice
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.order.order import Order
from backoffice.shared.records import fetch_by_id


@backoffice.command(part_of="Order")
class ReviseOrder:
    order_id = Identifier(required=True)
    changes = Text(required=True)  # JSON object: notes, status, total_amount, customer_id, fulfillment_id


@backoffice.command(part_of="Order")
class AssignFulfillment:
    order_id = Identifier(required=True)
    fulfillment_id = Identifier(required=True)


@backoffice.command(part_of="Order")
class ReleaseFulfillment:
    order_id = Identifier(required=True)


def _ensure_same_account(element_cls, identifier, account_id, field_name: str) -> None:
    record = fetch_by_id(element_cls, identifier)
    if record is None or str(record.account_id) != str(account_id):
        raise ValidationError({field_name: ["must belong to the account"]})


@backoffice.command_handler(part_of=Order)
class OrderRevisionHandler:
    @handle(ReviseOrder)
    def revise_order(self, command):
        changes = json.loads(command.changes) if isinstance(command.changes, str) else dict(command.changes)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if changes.get("customer_id"):
            _ensure_same_account(Customer, changes["customer_id"], order.account_id, "customer_id")
        if changes.get("fulfillment_id"):
            _ensure_same_account(Fulfillment, changes["fulfillment_id"], order.account_id, "fulfillment_id")

        order.revise(**changes)
        repo.add(order)

    @handle(AssignFulfillment)
    def assign_fulfillment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        _ensure_same_account(Fulfillment, command.fulfillment_id, order.account_id, "fulfillment_id")
        order.assign_fulfillment(command.fulfillment_id)
        repo.add(order)

    @handle(ReleaseFulfillment)
    def release_fulfillment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.release_fulfillment()
        repo.add(order)
