"""Placing an order: command and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from backoffice.customer.customer import Customer
from backoffice.domain import backoffice
from backoffice.order.lookups import reference_taken
from backoffice.order.order import Order
from backoffice.shared.records import fetch_by_id
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@backoffice.command(part_of="Order")
class PlaceOrder:
    account_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reference = String(max_length=50)
    notes = Text()
    lines = Text()  # JSON: list of {name, quantity, unit_price, sku}


@backoffice.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        customer = fetch_by_id(Customer, command.customer_id)
        if customer is None or str(customer.account_id) != str(command.account_id):
            raise ValidationError({"customer_id": ["must belong to the account"]})

        lines = json.loads(command.lines) if isinstance(command.lines, str) else (command.lines or [])
        order = Order.place(
            account_id=command.account_id,
            customer_id=command.customer_id,
            reference=command.reference,
            notes=command.notes,
            lines=lines,
        )
        if reference_taken(order.account_id, order.reference):
            raise ValidationError({"reference": ["has already been taken"]})

        current_domain.repository_for(Order).add(order)
        logger.info("order.placed", order_id=str(order.id), reference=order.reference, account_id=str(order.account_id))
        return str(order.id)
