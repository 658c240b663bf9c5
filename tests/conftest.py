import json
import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_configure(config):
    os.environ["PROTEAN_ENV"] = config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def backoffice_bed():
    from backoffice.domain import backoffice

    bed = DomainFixture(backoffice)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def run_around_tests(backoffice_bed):
    """Push domain context before each test, cleanup after."""
    with backoffice_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def process():
    from protean import current_domain

    def _process(command):
        return current_domain.process(command, asynchronous=False)

    return _process


@pytest.fixture()
def account_id(process):
    from backoffice.account.management import OpenAccount

    return process(OpenAccount(name="Acme Retail"))


@pytest.fixture()
def customer_id(process, account_id):
    from backoffice.customer.registration import RegisterCustomer

    return process(
        RegisterCustomer(
            account_id=account_id,
            first_name="Jane",
            last_name="Doe",
            email="jane@example.com",
        )
    )


@pytest.fixture()
def service_id(process, account_id):
    from backoffice.fulfillment_service.management import RegisterFulfillmentService

    return process(RegisterFulfillmentService(account_id=account_id, name="Colissimo", provider="La Poste"))


@pytest.fixture()
def place_order(process, account_id, customer_id):
    """Factory placing an order; lines default to 2 × 10.00 and 1 × 5.50."""
    from backoffice.order.placement import PlaceOrder

    def _place(lines=None, reference=None, customer=None, notes=None):
        if lines is None:
            lines = [
                {"name": "Widget", "sku": "WID-1", "quantity": 2, "unit_price": 10.0},
                {"name": "Gadget", "sku": "GAD-1", "quantity": 1, "unit_price": 5.5},
            ]
        return process(
            PlaceOrder(
                account_id=account_id,
                customer_id=customer or customer_id,
                reference=reference,
                notes=notes,
                lines=json.dumps(lines),
            )
        )

    return _place


@pytest.fixture()
def paid_order(process, place_order):
    """An order taken through validation, invoicing, sending and payment."""
    from backoffice.invoice.lookups import debit_invoice_for
    from backoffice.invoice.payment import MarkInvoicePaid
    from backoffice.invoice.sending import SendInvoice
    from backoffice.order.invoicing import InvoiceOrder
    from backoffice.order.validation import ValidateOrder

    order_id = place_order()
    process(ValidateOrder(order_id=order_id))
    process(InvoiceOrder(order_id=order_id))
    invoice = debit_invoice_for(order_id)
    process(SendInvoice(invoice_id=str(invoice.id)))
    process(MarkInvoicePaid(invoice_id=str(invoice.id)))
    return order_id
