"""Tests for the Customer and Account aggregates."""

import json

import pytest
from backoffice.account.account import Account
from backoffice.account.events import AccountRenamed
from backoffice.customer.customer import Customer
from backoffice.customer.events import CustomerContactUpdated
from protean.exceptions import ValidationError


def _customer(**overrides):
    values = {"account_id": "acc-001", "first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"}
    values.update(overrides)
    customer = Customer.register(**values)
    customer._events.clear()
    return customer


class TestCustomerRegistration:
    def test_blank_fields_become_none(self):
        customer = _customer(phone="  ", address="")
        assert customer.phone is None
        assert customer.address is None

    def test_email_must_be_well_formed(self):
        with pytest.raises(ValidationError) as exc:
            _customer(email="not-an-email")
        assert "email" in exc.value.messages

    def test_person_name(self):
        assert _customer().person_name().full_name() == "Jane Doe"


class TestCustomerContact:
    def test_returns_changed_fields(self):
        customer = _customer()
        changed = customer.update_contact(first_name="Janet", email="jane@example.com")
        assert changed == ["first_name"]
        event = customer._events[-1]
        assert isinstance(event, CustomerContactUpdated)
        assert json.loads(event.changed_fields) == ["first_name"]

    def test_empty_string_clears_field(self):
        customer = _customer(phone="+33 6 12 34 56 78")
        assert customer.update_contact(phone="") == ["phone"]
        assert customer.phone is None

    def test_no_change_raises_nothing(self):
        customer = _customer()
        assert customer.update_contact(last_name="Doe") == []
        assert customer._events == []

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _customer().update_contact(account_id="acc-002")
        assert "account_id" in exc.value.messages

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            _customer().update_contact(email="broken@")


class TestAccount:
    def test_name_is_stripped(self):
        assert Account.open("  Acme  ").name == "Acme"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Account.open("   ")
        assert "name" in exc.value.messages

    def test_rename(self):
        account = Account.open("Acme")
        account._events.clear()
        account.rename("Acme Retail")
        assert account.name == "Acme Retail"
        assert isinstance(account._events[-1], AccountRenamed)

    def test_rename_to_same_name_changes_nothing(self):
        account = Account.open("Acme")
        account._events.clear()
        account.rename("Acme")
        assert account._events == []
