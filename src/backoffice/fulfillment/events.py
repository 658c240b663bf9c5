"""Domain events for the Fulfillment aggregate."""

from protean.fields import DateTime, Identifier, String

from backoffice.domain import backoffice


@backoffice.event(part_of="Fulfillment")
class FulfillmentCreated:
    __version__ = 1

    fulfillment_id = Identifier(required=True)
    account_id = Identifier(required=True)
    fulfillment_service_id = Identifier(required=True)
    created_at = DateTime(required=True)


@backoffice.event(part_of="Fulfillment")
class FulfillmentProcessingStarted:
    __version__ = 1

    fulfillment_id = Identifier(required=True)
    started_at = DateTime(required=True)


@backoffice.event(part_of="Fulfillment")
class FulfillmentShipped:
    """The parcel left with a carrier under a tracking number."""

    __version__ = 1

    fulfillment_id = Identifier(required=True)
    tracking_number = String(required=True)
    carrier = String()
    shipped_at = DateTime(required=True)


@backoffice.event(part_of="Fulfillment")
class FulfillmentDelivered:
    __version__ = 1

    fulfillment_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@backoffice.event(part_of="Fulfillment")
class FulfillmentCancelled:
    __version__ = 1

    fulfillment_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)
