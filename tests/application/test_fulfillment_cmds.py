"""Fulfillment services and the shipments they handle."""

import pytest
from backoffice.fulfillment import lookups
from backoffice.fulfillment.cancellation import CancelFulfillment
from backoffice.fulfillment.creation import CreateFulfillment
from backoffice.fulfillment.delivery import DeliverFulfillment
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.fulfillment.processing import StartProcessing
from backoffice.fulfillment.removal import DeleteFulfillment
from backoffice.fulfillment.shipping import ShipFulfillment
from backoffice.fulfillment_service import lookups as service_lookups
from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.fulfillment_service.management import (
    ActivateFulfillmentService,
    DeactivateFulfillmentService,
    RegisterFulfillmentService,
    RemoveFulfillmentService,
    RenameFulfillmentService,
)
from backoffice.order.order import Order
from backoffice.projections.order_listing import OrderListing
from backoffice.shared.records import fetch_by_id
from protean import current_domain
from protean.exceptions import ValidationError


@pytest.fixture()
def fulfillment_id(process, account_id, service_id):
    return process(CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id))


def _fulfillment(fulfillment_id):
    return current_domain.repository_for(Fulfillment).get(fulfillment_id)


class TestFulfillmentServices:
    def test_name_unique_within_account(self, process, account_id, service_id):
        with pytest.raises(ValidationError) as exc:
            process(RegisterFulfillmentService(account_id=account_id, name="Colissimo"))
        assert "name" in exc.value.messages

    def test_rename(self, process, service_id):
        process(RenameFulfillmentService(fulfillment_service_id=service_id, name="Chronopost"))
        assert current_domain.repository_for(FulfillmentService).get(service_id).name == "Chronopost"

    def test_rename_to_taken_name(self, process, account_id, service_id):
        other = process(RegisterFulfillmentService(account_id=account_id, name="DHL"))
        with pytest.raises(ValidationError):
            process(RenameFulfillmentService(fulfillment_service_id=other, name="Colissimo"))

    def test_deactivate_and_activate(self, process, account_id, service_id):
        process(DeactivateFulfillmentService(fulfillment_service_id=service_id))
        assert [str(s.id) for s in service_lookups.inactive(account_id)] == [service_id]

        process(ActivateFulfillmentService(fulfillment_service_id=service_id))
        assert [str(s.id) for s in service_lookups.active(account_id)] == [service_id]

    def test_inactive_service_takes_no_fulfillments(self, process, account_id, service_id):
        process(DeactivateFulfillmentService(fulfillment_service_id=service_id))
        with pytest.raises(ValidationError) as exc:
            process(CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id))
        assert "fulfillment_service_id" in exc.value.messages

    def test_removing_service_removes_fulfillments(self, process, service_id, fulfillment_id):
        assert service_lookups.fulfillments_count(service_id) == 1
        process(RemoveFulfillmentService(fulfillment_service_id=service_id))
        assert fetch_by_id(FulfillmentService, service_id) is None
        assert fetch_by_id(Fulfillment, fulfillment_id) is None


class TestCreateFulfillment:
    def test_attaches_order(self, process, account_id, service_id, place_order):
        order_id = place_order()
        fulfillment_id = process(
            CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id, order_id=order_id)
        )
        assert str(current_domain.repository_for(Order).get(order_id).fulfillment_id) == fulfillment_id
        row = current_domain.repository_for(OrderListing).get(order_id)
        assert row.fulfillment_status == "pending"

    def test_service_from_another_account(self, process, service_id):
        from backoffice.account.management import OpenAccount

        other_account = process(OpenAccount(name="Globex"))
        with pytest.raises(ValidationError):
            process(CreateFulfillment(account_id=other_account, fulfillment_service_id=service_id))


class TestFulfillmentLifecycle:
    def test_full_journey(self, process, fulfillment_id):
        assert process(StartProcessing(fulfillment_id=fulfillment_id)) is True
        assert process(ShipFulfillment(fulfillment_id=fulfillment_id, tracking_number="1Z999", carrier="UPS")) is True
        assert process(DeliverFulfillment(fulfillment_id=fulfillment_id)) is True

        fulfillment = _fulfillment(fulfillment_id)
        assert fulfillment.is_delivered()
        assert fulfillment.transit_duration() == 0

    def test_processing_only_from_pending(self, process, fulfillment_id):
        process(StartProcessing(fulfillment_id=fulfillment_id))
        assert process(StartProcessing(fulfillment_id=fulfillment_id)) is False

    def test_ship_guard(self, process, fulfillment_id):
        process(ShipFulfillment(fulfillment_id=fulfillment_id, tracking_number="1Z999"))
        assert process(ShipFulfillment(fulfillment_id=fulfillment_id, tracking_number="1Z000")) is False
        assert _fulfillment(fulfillment_id).tracking_number == "1Z999"

    def test_tracking_number_is_unique(self, process, account_id, service_id, fulfillment_id):
        process(ShipFulfillment(fulfillment_id=fulfillment_id, tracking_number="1Z999"))
        second = process(CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id))
        with pytest.raises(ValidationError) as exc:
            process(ShipFulfillment(fulfillment_id=second, tracking_number="1Z999"))
        assert "tracking_number" in exc.value.messages

    def test_deliver_requires_shipping(self, process, fulfillment_id):
        assert process(DeliverFulfillment(fulfillment_id=fulfillment_id)) is False

    def test_delivered_cannot_be_cancelled(self, process, fulfillment_id):
        process(ShipFulfillment(fulfillment_id=fulfillment_id, tracking_number="1Z999"))
        process(DeliverFulfillment(fulfillment_id=fulfillment_id))
        assert process(CancelFulfillment(fulfillment_id=fulfillment_id)) is False

    def test_cancel_updates_listing(self, process, account_id, service_id, place_order):
        order_id = place_order()
        fulfillment_id = process(
            CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id, order_id=order_id)
        )
        assert process(CancelFulfillment(fulfillment_id=fulfillment_id)) is True
        assert current_domain.repository_for(OrderListing).get(order_id).fulfillment_status == "cancelled"

    def test_lookups(self, process, account_id, service_id, fulfillment_id):
        shipped = process(CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id))
        process(ShipFulfillment(fulfillment_id=shipped, tracking_number="1Z999"))
        process(CancelFulfillment(fulfillment_id=fulfillment_id))

        assert [str(f.id) for f in lookups.in_transit(account_id)] == [shipped]
        assert [str(f.id) for f in lookups.completed(account_id)] == [fulfillment_id]
        assert [str(f.id) for f in lookups.active(account_id)] == [shipped]


class TestDeleteFulfillment:
    def test_orders_are_detached(self, process, account_id, service_id, place_order):
        order_id = place_order()
        fulfillment_id = process(
            CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id, order_id=order_id)
        )

        assert process(DeleteFulfillment(fulfillment_id=fulfillment_id)) == 1

        order = current_domain.repository_for(Order).get(order_id)
        assert order.fulfillment_id is None
        assert current_domain.repository_for(OrderListing).get(order_id).fulfillment_status is None
