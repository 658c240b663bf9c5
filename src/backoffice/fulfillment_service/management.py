"""Registering and maintaining fulfillment services: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from backoffice.domain import backoffice
from backoffice.fulfillment.lookups import fulfillments_for_service
from backoffice.fulfillment.removal import destroy_fulfillment
from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.fulfillment_service.lookups import name_taken
from backoffice.shared.records import delete


@backoffice.command(part_of="FulfillmentService")
class RegisterFulfillmentService:
    account_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    provider = String(max_length=100)
    active = Boolean(default=True)


@backoffice.command(part_of="FulfillmentService")
class RenameFulfillmentService:
    fulfillment_service_id = Identifier(required=True)
    name = String(required=True, max_length=255)


@backoffice.command(part_of="FulfillmentService")
class ActivateFulfillmentService:
    fulfillment_service_id = Identifier(required=True)


@backoffice.command(part_of="FulfillmentService")
class DeactivateFulfillmentService:
    fulfillment_service_id = Identifier(required=True)


@backoffice.command(part_of="FulfillmentService")
class RemoveFulfillmentService:
    """Deletes the service and its fulfillments; their orders are detached."""

    fulfillment_service_id = Identifier(required=True)


def destroy_fulfillment_service(service: FulfillmentService) -> None:
    for fulfillment in fulfillments_for_service(service.id):
        destroy_fulfillment(fulfillment)
    delete(service)


@backoffice.command_handler(part_of=FulfillmentService)
class FulfillmentServiceHandler:
    @handle(RegisterFulfillmentService)
    def register_fulfillment_service(self, command):
        service = FulfillmentService.register(
            account_id=command.account_id,
            name=command.name,
            provider=command.provider,
            active=command.active if command.active is not None else True,
        )
        if name_taken(service.account_id, service.name):
            raise ValidationError({"name": ["has already been taken"]})
        current_domain.repository_for(FulfillmentService).add(service)
        return str(service.id)

    @handle(RenameFulfillmentService)
    def rename_fulfillment_service(self, command):
        repo = current_domain.repository_for(FulfillmentService)
        service = repo.get(command.fulfillment_service_id)
        if name_taken(service.account_id, command.name.strip(), exclude_id=service.id):
            raise ValidationError({"name": ["has already been taken"]})
        service.rename(command.name)
        repo.add(service)

    @handle(ActivateFulfillmentService)
    def activate_fulfillment_service(self, command):
        repo = current_domain.repository_for(FulfillmentService)
        service = repo.get(command.fulfillment_service_id)
        service.activate()
        repo.add(service)

    @handle(DeactivateFulfillmentService)
    def deactivate_fulfillment_service(self, command):
        repo = current_domain.repository_for(FulfillmentService)
        service = repo.get(command.fulfillment_service_id)
        service.deactivate()
        repo.add(service)

    @handle(RemoveFulfillmentService)
    def remove_fulfillment_service(self, command):
        service = current_domain.repository_for(FulfillmentService).get(command.fulfillment_service_id)
        destroy_fulfillment_service(service)
