"""Removing a customer: command and handler.

Customers who have placed orders are kept.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from backoffice.customer.customer import Customer
from backoffice.customer.lookups import orders_count
from backoffice.domain import backoffice
from backoffice.shared.records import delete


@backoffice.command(part_of="Customer")
class RemoveCustomer:
    customer_id = Identifier(required=True)


@backoffice.command_handler(part_of=Customer)
class RemoveCustomerHandler:
    @handle(RemoveCustomer)
    def remove_customer(self, command):
        customer = current_domain.repository_for(Customer).get(command.customer_id)
        if orders_count(customer.id):
            raise ValidationError({"base": ["Cannot delete record because dependent orders exist"]})
        delete(customer)
