"""The service object base class and the invoice creation and order cancellation services."""

import pytest
from backoffice.audit.account_event import AccountEvent
from backoffice.audit.trail import events_for_record
from backoffice.invoice import creation
from backoffice.invoice.creation import InvoiceCreation
from backoffice.invoice.invoice import Invoice
from backoffice.order import cancellation
from backoffice.order.cancellation import CancelOrder, OrderCancellation
from backoffice.order.order import Order
from backoffice.order.validation import ValidateOrder
from backoffice.shared.records import count
from backoffice.shared.service import Service, ServiceCallbackMissing
from protean import current_domain
from protean.exceptions import ValidationError


def _refuse_audit(*args, **kwargs):
    raise ValidationError({"resource_id": ["is required"]})


class Doubler(Service):
    def perform(self):
        if self.value is None:
            self.append_error("missing_value", "value is required")
            return None
        self.append_message("doubled")
        if self.has_callback("done"):
            self.call_back("done", self.value * 2)
        return self.value * 2


class TestService:
    def test_result(self):
        service = Doubler.call(value=21)
        assert service.successful
        assert service.result == 42
        assert [m.message for m in service.messages] == ["doubled"]

    def test_errors_record_caller(self):
        service = Doubler.call(value=None)
        assert not service.successful
        assert service.error.type == "missing_value"
        assert "in perform" in service.error.caller_info

    def test_callbacks(self):
        seen = []
        Doubler.call(value=2, callbacks=lambda on: on("done", seen.append))
        assert seen == [4]

    def test_missing_callback(self):
        service = Doubler(value=1)
        with pytest.raises(ServiceCallbackMissing):
            service.call_back("done", 1)

    def test_perform_is_required(self):
        with pytest.raises(NotImplementedError):
            Service.call()


class TestInvoiceCreation:
    def test_created_callback_receives_invoice(self, process, place_order):
        order_id = place_order()
        process(ValidateOrder(order_id=order_id))
        order = current_domain.repository_for(Order).get(order_id)

        received = []
        service = InvoiceCreation.call(order=order, kind="debit", callbacks=lambda on: on("created", received.append))

        assert service.successful
        assert received == [service.result]
        assert service.messages[0].message == f"Invoice {service.result.number} created"

    def test_unknown_kind(self, place_order):
        order = current_domain.repository_for(Order).get(place_order())
        service = InvoiceCreation.call(order=order, kind="refund")
        assert service.error.type == "invalid_kind"
        assert service.result is None

    def test_credit_needs_invoiced_order(self, place_order):
        order = current_domain.repository_for(Order).get(place_order())
        service = InvoiceCreation.call(order=order, kind="credit")
        assert service.error.type == "invalid_status"

    def test_failed_audit_write_rolls_back(self, monkeypatch, process, place_order):
        order_id = place_order()
        process(ValidateOrder(order_id=order_id))
        monkeypatch.setattr(creation, "log_event", _refuse_audit)
        order = current_domain.repository_for(Order).get(order_id)

        service = InvoiceCreation.call(order=order, kind="debit")

        assert service.result is None
        assert service.error.type == "invalid_record"
        assert count(Invoice, order_id=order_id) == 0
        assert current_domain.repository_for(Order).get(order_id).status == "validated"


class TestOrderCancellation:
    def test_cancels_and_logs(self, process, place_order):
        order_id = place_order()
        process(ValidateOrder(order_id=order_id))
        order = current_domain.repository_for(Order).get(order_id)

        assert OrderCancellation.call(order=order).result is True
        assert current_domain.repository_for(Order).get(order_id).status == "cancelled"
        assert "order.cancelled" in [e.event_type for e in events_for_record("Order", order_id)]

    def test_already_cancelled(self, process, place_order):
        order_id = place_order()
        process(CancelOrder(order_id=order_id))
        order = current_domain.repository_for(Order).get(order_id)
        assert OrderCancellation.call(order=order).result is False

    def test_failed_audit_write_rolls_back(self, monkeypatch, process, place_order):
        order_id = place_order()
        process(ValidateOrder(order_id=order_id))
        events_before = count(AccountEvent)
        monkeypatch.setattr(cancellation, "log_event", _refuse_audit)
        order = current_domain.repository_for(Order).get(order_id)

        service = OrderCancellation.call(order=order)

        assert service.result is False
        assert not service.successful
        assert current_domain.repository_for(Order).get(order_id).status == "validated"
        assert count(AccountEvent) == events_before
