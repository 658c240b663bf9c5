"""Fulfillment aggregate: one shipment handled by a fulfillment service.

State Machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    PENDING → SHIPPED
    {PENDING, PROCESSING, SHIPPED} → CANCELLED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String

from backoffice.domain import backoffice
from backoffice.fulfillment.events import (
    FulfillmentCancelled,
    FulfillmentCreated,
    FulfillmentDelivered,
    FulfillmentProcessingStarted,
    FulfillmentShipped,
)
from backoffice.shared.tracking_info import TrackingInfo


class FulfillmentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    FulfillmentStatus.PENDING: {
        FulfillmentStatus.PROCESSING,
        FulfillmentStatus.SHIPPED,
        FulfillmentStatus.CANCELLED,
    },
    FulfillmentStatus.PROCESSING: {FulfillmentStatus.SHIPPED, FulfillmentStatus.CANCELLED},
    FulfillmentStatus.SHIPPED: {FulfillmentStatus.DELIVERED, FulfillmentStatus.CANCELLED},
    FulfillmentStatus.DELIVERED: set(),  # terminal
    FulfillmentStatus.CANCELLED: set(),  # terminal
}

IN_TRANSIT_STATUSES = frozenset({FulfillmentStatus.PROCESSING.value, FulfillmentStatus.SHIPPED.value})
COMPLETED_STATUSES = frozenset({FulfillmentStatus.DELIVERED.value, FulfillmentStatus.CANCELLED.value})


@backoffice.aggregate
class Fulfillment:
    account_id = Identifier(required=True)
    fulfillment_service_id = Identifier(required=True)
    status = String(
        choices=FulfillmentStatus,
        default=FulfillmentStatus.PENDING.value,
    )
    tracking_number = String(max_length=100)
    carrier = String(max_length=50)
    shipped_at = DateTime()
    delivered_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, account_id, fulfillment_service_id):
        now = datetime.now(UTC)
        fulfillment = cls(
            account_id=str(account_id),
            fulfillment_service_id=str(fulfillment_service_id),
            created_at=now,
            updated_at=now,
        )
        fulfillment.raise_(
            FulfillmentCreated(
                fulfillment_id=str(fulfillment.id),
                account_id=str(fulfillment.account_id),
                fulfillment_service_id=str(fulfillment.fulfillment_service_id),
                created_at=now,
            )
        )
        return fulfillment

    def _assert_can_transition(self, target_status: FulfillmentStatus) -> None:
        current = FulfillmentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    # -------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------
    def can_ship(self) -> bool:
        return self.status in (FulfillmentStatus.PENDING.value, FulfillmentStatus.PROCESSING.value)

    def is_in_transit(self) -> bool:
        return self.status in IN_TRANSIT_STATUSES

    def is_completed(self) -> bool:
        return self.status in COMPLETED_STATUSES

    def is_delivered(self) -> bool:
        return self.status == FulfillmentStatus.DELIVERED.value

    def is_cancelled(self) -> bool:
        return self.status == FulfillmentStatus.CANCELLED.value

    def transit_duration(self) -> int | None:
        """Whole days from the shipping date to the delivery date."""
        if not self.shipped_at or not self.delivered_at:
            return None
        return (self.delivered_at.date() - self.shipped_at.date()).days

    def tracking_info(self) -> TrackingInfo:
        return TrackingInfo.of(self.tracking_number, self.carrier)

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def start_processing(self) -> None:
        self._assert_can_transition(FulfillmentStatus.PROCESSING)
        now = datetime.now(UTC)
        self.status = FulfillmentStatus.PROCESSING.value
        self.updated_at = now
        self.raise_(FulfillmentProcessingStarted(fulfillment_id=str(self.id), started_at=now))

    def ship(self, tracking_number: str, carrier: str | None = None) -> None:
        """Hand the parcel to a carrier. Only pending or processing fulfillments ship."""
        tracking_number = (tracking_number or "").strip()
        if not tracking_number:
            raise ValidationError({"tracking_number": ["can't be blank"]})
        self._assert_can_transition(FulfillmentStatus.SHIPPED)

        now = datetime.now(UTC)
        self.status = FulfillmentStatus.SHIPPED.value
        self.tracking_number = tracking_number
        if carrier:
            self.carrier = carrier.strip()
        self.shipped_at = now
        self.updated_at = now
        self.raise_(
            FulfillmentShipped(
                fulfillment_id=str(self.id),
                tracking_number=self.tracking_number,
                carrier=self.carrier,
                shipped_at=now,
            )
        )

    def deliver(self) -> None:
        self._assert_can_transition(FulfillmentStatus.DELIVERED)
        now = datetime.now(UTC)
        self.status = FulfillmentStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = now
        self.raise_(FulfillmentDelivered(fulfillment_id=str(self.id), delivered_at=now))

    def cancel(self) -> None:
        """Delivered shipments cannot be cancelled. Cancelling twice changes nothing."""
        if self.is_cancelled():
            return
        previous = self.status
        self._assert_can_transition(FulfillmentStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = FulfillmentStatus.CANCELLED.value
        self.updated_at = now
        self.raise_(
            FulfillmentCancelled(
                fulfillment_id=str(self.id),
                previous_status=previous,
                cancelled_at=now,
            )
        )
