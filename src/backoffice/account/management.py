"""Opening, renaming and closing accounts: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from backoffice.account.account import Account
from backoffice.audit.account_event import AccountEvent
from backoffice.audit.resource import Resource
from backoffice.audit.trail import remove_resource
from backoffice.customer.customer import Customer
from backoffice.domain import backoffice
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.fulfillment.removal import destroy_fulfillment
from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.fulfillment_service.management import destroy_fulfillment_service
from backoffice.order.lookups import orders_for_account
from backoffice.order.removal import destroy_order
from backoffice.shared.records import delete, fetch_all, fetch_by_id
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@backoffice.command(part_of="Account")
class OpenAccount:
    name = String(required=True, max_length=255)


@backoffice.command(part_of="Account")
class RenameAccount:
    account_id = Identifier(required=True)
    name = String(required=True, max_length=255)


@backoffice.command(part_of="Account")
class CloseAccount:
    """Deletes the account and everything it owns."""

    account_id = Identifier(required=True)


def close_account(account: Account) -> None:
    account_id = str(account.id)
    for order in orders_for_account(account_id):
        destroy_order(order)
    for customer in fetch_all(Customer, account_id=account_id):
        delete(customer)
    for service in fetch_all(FulfillmentService, account_id=account_id):
        destroy_fulfillment_service(service)
    for fulfillment in fetch_all(Fulfillment, account_id=account_id):
        destroy_fulfillment(fulfillment)

    events = fetch_all(AccountEvent, account_id=account_id)
    for resource_id in {str(event.resource_id) for event in events}:
        resource = fetch_by_id(Resource, resource_id)
        if resource is not None:
            remove_resource(resource)

    delete(account)
    logger.info("account.closed", account_id=account_id, name=account.name, purged_events=len(events))


@backoffice.command_handler(part_of=Account)
class AccountHandler:
    @handle(OpenAccount)
    def open_account(self, command):
        account = Account.open(command.name)
        current_domain.repository_for(Account).add(account)
        logger.info("account.opened", account_id=str(account.id), name=account.name)
        return str(account.id)

    @handle(RenameAccount)
    def rename_account(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.rename(command.name)
        repo.add(account)

    @handle(CloseAccount)
    def close(self, command):
        account = current_domain.repository_for(Account).get(command.account_id)
        close_account(account)
