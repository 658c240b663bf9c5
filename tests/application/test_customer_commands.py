"""Registering, editing and removing customers."""

import json

import pytest
from backoffice.customer import lookups
from backoffice.customer.customer import Customer
from backoffice.customer.profile import UpdateCustomerContact
from backoffice.customer.registration import RegisterCustomer
from backoffice.customer.removal import RemoveCustomer
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _update(process, customer_id, **changes):
    return process(UpdateCustomerContact(customer_id=customer_id, changes=json.dumps(changes)))


class TestRegisterCustomer:
    def test_registered_under_account(self, account_id, customer_id):
        customer = current_domain.repository_for(Customer).get(customer_id)
        assert str(customer.account_id) == account_id
        assert customer.email == "jane@example.com"

    def test_email_unique_within_account(self, process, account_id, customer_id):
        with pytest.raises(ValidationError) as exc:
            process(RegisterCustomer(account_id=account_id, first_name="Janet", email="jane@example.com"))
        assert "email" in exc.value.messages

    def test_same_email_allowed_in_another_account(self, process, customer_id):
        from backoffice.account.management import OpenAccount

        other = process(OpenAccount(name="Globex"))
        assert process(RegisterCustomer(account_id=other, email="jane@example.com"))

    def test_customers_without_email(self, process, account_id):
        process(RegisterCustomer(account_id=account_id, first_name="Ann"))
        process(RegisterCustomer(account_id=account_id, first_name="Bob"))
        assert lookups.with_email(account_id) == []

    def test_unknown_account(self, process):
        with pytest.raises(ObjectNotFoundError):
            process(RegisterCustomer(account_id="missing", first_name="Ann"))


class TestUpdateCustomerContact:
    def test_returns_changed_fields(self, process, customer_id):
        changed = _update(process, customer_id, first_name="Janet", phone="0102030405")
        assert changed == ["first_name", "phone"]
        customer = current_domain.repository_for(Customer).get(customer_id)
        assert customer.first_name == "Janet"

    def test_email_taken_by_another_customer(self, process, account_id, customer_id):
        other = process(RegisterCustomer(account_id=account_id, email="john@example.com"))
        with pytest.raises(ValidationError):
            _update(process, other, email="jane@example.com")

    def test_keeping_own_email_is_fine(self, process, customer_id):
        assert _update(process, customer_id, email="jane@example.com") == []


class TestRemoveCustomer:
    def test_removes_customer_without_orders(self, process, customer_id):
        process(RemoveCustomer(customer_id=customer_id))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Customer).get(customer_id)

    def test_refused_when_orders_exist(self, process, customer_id, place_order):
        place_order()
        with pytest.raises(ValidationError) as exc:
            process(RemoveCustomer(customer_id=customer_id))
        assert "base" in exc.value.messages
        assert current_domain.repository_for(Customer).get(customer_id)


class TestCustomerLookups:
    def test_by_name_matches_first_or_last_name(self, process, account_id, customer_id):
        process(RegisterCustomer(account_id=account_id, first_name="Bob", last_name="Smith"))
        assert [c.first_name for c in lookups.by_name(account_id, "DOE")] == ["Jane"]
        assert [c.last_name for c in lookups.by_name(account_id, "smi")] == ["Smith"]

    def test_with_orders(self, process, account_id, customer_id, place_order):
        process(RegisterCustomer(account_id=account_id, first_name="Bob"))
        place_order()
        assert [str(c.id) for c in lookups.with_orders(account_id)] == [customer_id]

    def test_orders_count_and_total_spent(self, customer_id, paid_order, place_order):
        place_order()
        assert lookups.orders_count(customer_id) == 2
        assert lookups.total_spent(customer_id) == 25.5
