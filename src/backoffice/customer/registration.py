"""Registering a customer: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from backoffice.account.account import Account
from backoffice.customer.customer import Customer
from backoffice.customer.lookups import email_taken
from backoffice.domain import backoffice
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@backoffice.command(part_of="Customer")
class RegisterCustomer:
    account_id = Identifier(required=True)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    email = String(max_length=254)
    phone = String(max_length=30)
    address = Text()


@backoffice.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        # Raises ObjectNotFoundError for an unknown account
        current_domain.repository_for(Account).get(command.account_id)

        customer = Customer.register(
            account_id=command.account_id,
            first_name=command.first_name,
            last_name=command.last_name,
            email=command.email,
            phone=command.phone,
            address=command.address,
        )
        if customer.email and email_taken(customer.account_id, customer.email):
            raise ValidationError({"email": ["has already been taken"]})

        current_domain.repository_for(Customer).add(customer)
        logger.info("customer.registered", customer_id=str(customer.id), account_id=str(customer.account_id))
        return str(customer.id)
