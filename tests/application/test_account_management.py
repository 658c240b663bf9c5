"""Opening, renaming and closing accounts through the domain."""

import pytest
from backoffice.account import lookups
from backoffice.account.account import Account
from backoffice.account.management import CloseAccount, RenameAccount
from backoffice.audit.account_event import AccountEvent
from backoffice.audit.resource import Resource
from backoffice.customer.customer import Customer
from backoffice.fulfillment.creation import CreateFulfillment
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.invoice.invoice import Invoice
from backoffice.order.order import Order, OrderLine
from backoffice.order.validation import ValidateOrder
from backoffice.shared.records import count
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


class TestOpenAccount:
    def test_account_is_persisted(self, account_id):
        account = current_domain.repository_for(Account).get(account_id)
        assert account.name == "Acme Retail"
        assert account.created_at is not None

    def test_rename(self, process, account_id):
        process(RenameAccount(account_id=account_id, name="Acme Wholesale"))
        assert current_domain.repository_for(Account).get(account_id).name == "Acme Wholesale"

    def test_rename_to_blank_rejected(self, process, account_id):
        with pytest.raises(ValidationError):
            process(RenameAccount(account_id=account_id, name="   "))

    def test_by_name_ignores_case(self, account_id):
        assert [str(a.id) for a in lookups.by_name("acme")] == [account_id]
        assert lookups.by_name("globex") == []


class TestAccountFigures:
    def test_active_orders_skip_cancelled(self, process, account_id, place_order):
        from backoffice.order.cancellation import CancelOrder

        kept = place_order()
        dropped = place_order()
        process(CancelOrder(order_id=dropped))
        assert [str(o.id) for o in lookups.active_orders(account_id)] == [kept]

    def test_total_revenue_counts_paid_invoices(self, account_id, paid_order, place_order):
        place_order()
        assert lookups.total_revenue(account_id) == 25.5


class TestCloseAccount:
    def test_closing_removes_everything_owned(self, process, account_id, service_id, paid_order):
        process(CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id, order_id=paid_order))

        process(CloseAccount(account_id=account_id))

        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Account).get(account_id)
        for element_cls in (Order, Invoice, Customer, FulfillmentService, Fulfillment, AccountEvent):
            assert count(element_cls, account_id=account_id) == 0
        assert count(Resource) == 0
        assert count(OrderLine) == 0

    def test_other_accounts_are_untouched(self, process, account_id, place_order):
        from backoffice.account.management import OpenAccount
        from backoffice.customer.registration import RegisterCustomer

        other_account = process(OpenAccount(name="Globex"))
        other_customer = process(RegisterCustomer(account_id=other_account, first_name="Hank", email="hank@globex.test"))
        place_order()

        process(CloseAccount(account_id=account_id))

        assert current_domain.repository_for(Customer).get(other_customer).first_name == "Hank"
        assert count(Account) == 1

    def test_closing_unknown_account(self, process):
        with pytest.raises(ObjectNotFoundError):
            process(CloseAccount(account_id="missing"))

    def test_audit_entries_are_purged(self, process, account_id, place_order):
        order_id = place_order()
        process(ValidateOrder(order_id=order_id))
        assert count(AccountEvent, account_id=account_id) > 0

        process(CloseAccount(account_id=account_id))
        assert count(AccountEvent, account_id=account_id) == 0
