"""Editing order lines: commands and handler.

Every change recalculates the order total; price changes are tracked.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.order.order import Order


@backoffice.command(part_of="Order")
class AddOrderLine:
    order_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    sku = String(max_length=100)


@backoffice.command(part_of="Order")
class IncreaseLineQuantity:
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    amount = Integer(default=1, min_value=1)


@backoffice.command(part_of="Order")
class DecreaseLineQuantity:
    """Lowering a quantity to zero or below removes the line."""

    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    amount = Integer(default=1, min_value=1)


@backoffice.command(part_of="Order")
class ChangeLinePrice:
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    unit_price = Float(required=True, min_value=0.0)


@backoffice.command(part_of="Order")
class RemoveOrderLine:
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)


@backoffice.command_handler(part_of=Order)
class OrderLinesHandler:
    @handle(AddOrderLine)
    def add_order_line(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        line = order.add_line(
            name=command.name,
            quantity=command.quantity,
            unit_price=command.unit_price,
            sku=command.sku,
        )
        repo.add(order)
        return str(line.id)

    @handle(IncreaseLineQuantity)
    def increase_line_quantity(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.increase_line_quantity(command.line_id, command.amount or 1)
        repo.add(order)

    @handle(DecreaseLineQuantity)
    def decrease_line_quantity(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.decrease_line_quantity(command.line_id, command.amount or 1)
        repo.add(order)

    @handle(ChangeLinePrice)
    def change_line_price(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.change_line_price(command.line_id, command.unit_price)
        repo.add(order)

    @handle(RemoveOrderLine)
    def remove_order_line(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.remove_line(command.line_id)
        repo.add(order)
