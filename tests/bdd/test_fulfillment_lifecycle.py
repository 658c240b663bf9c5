"""BDD tests for the fulfillment lifecycle (ship, deliver, cancel)."""

from backoffice.fulfillment.cancellation import CancelFulfillment
from backoffice.fulfillment.creation import CreateFulfillment
from backoffice.fulfillment.delivery import DeliverFulfillment
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.fulfillment.shipping import ShipFulfillment
from backoffice.fulfillment_service.management import DeactivateFulfillmentService
from backoffice.presenters.fulfillment import FulfillmentPresenter
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/fulfillment_lifecycle.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an account with a fulfillment service")
def account_with_service(account_id, service_id):
    pass


@given("a pending fulfillment", target_fixture="fulfillment_id")
def pending_fulfillment(process, account_id, service_id):
    return process(CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id))


@given(parsers.cfparse('another fulfillment shipped with tracking number "{number}"'))
def other_shipped(process, account_id, service_id, number):
    other = process(CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id))
    process(ShipFulfillment(fulfillment_id=other, tracking_number=number))


@given("the fulfillment has been shipped")
def fulfillment_shipped(process, fulfillment_id):
    process(ShipFulfillment(fulfillment_id=fulfillment_id, tracking_number="1Z999", carrier="UPS"))


@given("the fulfillment has been delivered")
def fulfillment_delivered(process, fulfillment_id):
    process(DeliverFulfillment(fulfillment_id=fulfillment_id))


@given("the fulfillment service is deactivated")
def service_deactivated(process, service_id):
    process(DeactivateFulfillmentService(fulfillment_service_id=service_id))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the fulfillment is shipped with tracking number "{number}" by "{carrier}"'))
def ship(send, fulfillment_id, number, carrier):
    send(ShipFulfillment, fulfillment_id=fulfillment_id, tracking_number=number, carrier=carrier)


@when("the fulfillment is delivered")
def deliver(send, fulfillment_id):
    send(DeliverFulfillment, fulfillment_id=fulfillment_id)


@when("the fulfillment is cancelled")
def cancel(send, fulfillment_id):
    send(CancelFulfillment, fulfillment_id=fulfillment_id)


@when("a fulfillment is created")
def create(send, account_id, service_id):
    send(CreateFulfillment, account_id=account_id, fulfillment_service_id=service_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the tracking link points at the UPS website")
def tracking_link(fulfillment_id):
    fulfillment = current_domain.repository_for(Fulfillment).get(fulfillment_id)
    assert FulfillmentPresenter(fulfillment).tracking_link().startswith("https://www.ups.com/")
