"""Shared BDD fixtures and step definitions for the back office."""

import pytest
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.invoice.invoice import Invoice
from backoffice.order.order import Order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    """Return value of the last command sent."""
    return {"value": None}


@pytest.fixture()
def send(process, error, outcome):
    """Build and process a command, keeping its return value or the validation error raised."""

    def _send(command_cls, **fields):
        try:
            outcome["value"] = process(command_cls(**fields))
        except ValidationError as exc:
            error["exc"] = exc
        return outcome["value"]

    return _send


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an account with a customer")
def account_with_customer(account_id, customer_id):
    pass


@given("a pending order", target_fixture="order_id")
def pending_order(place_order):
    return place_order()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then(parsers.cfparse('the invoice status is "{status}"'))
def invoice_status_is(invoice_id, status):
    assert current_domain.repository_for(Invoice).get(invoice_id).status == status


@then(parsers.cfparse('the fulfillment status is "{status}"'))
def fulfillment_status_is(fulfillment_id, status):
    assert current_domain.repository_for(Fulfillment).get(fulfillment_id).status == status


@then("the command is refused")
def command_refused(outcome):
    assert outcome["value"] is False


@then("the command succeeds")
def command_succeeds(outcome, error):
    assert error["exc"] is None
    assert outcome["value"] is True


@then(parsers.cfparse('the error mentions "{field}"'))
def error_mentions(error, field):
    assert error["exc"] is not None
    assert field in error["exc"].messages
