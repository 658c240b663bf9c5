"""Domain events for the FulfillmentService aggregate."""

from protean.fields import DateTime, Identifier, String

from backoffice.domain import backoffice


@backoffice.event(part_of="FulfillmentService")
class FulfillmentServiceRegistered:
    __version__ = 1

    fulfillment_service_id = Identifier(required=True)
    account_id = Identifier(required=True)
    name = String(required=True)
    provider = String()
    registered_at = DateTime(required=True)


@backoffice.event(part_of="FulfillmentService")
class FulfillmentServiceActivated:
    __version__ = 1

    fulfillment_service_id = Identifier(required=True)
    activated_at = DateTime(required=True)


@backoffice.event(part_of="FulfillmentService")
class FulfillmentServiceDeactivated:
    __version__ = 1

    fulfillment_service_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@backoffice.event(part_of="FulfillmentService")
class FulfillmentServiceRenamed:
    __version__ = 1

    fulfillment_service_id = Identifier(required=True)
    name = String(required=True)
    renamed_at = DateTime(required=True)
