"""Domain events for the Customer aggregate."""

from protean.fields import DateTime, Identifier, String, Text

from backoffice.domain import backoffice


@backoffice.event(part_of="Customer")
class CustomerRegistered:
    """A customer was added to an account."""

    __version__ = 1

    customer_id = Identifier(required=True)
    account_id = Identifier(required=True)
    first_name = String()
    last_name = String()
    email = String()
    registered_at = DateTime(required=True)


@backoffice.event(part_of="Customer")
class CustomerContactUpdated:
    """Name or contact details of a customer changed."""

    __version__ = 1

    customer_id = Identifier(required=True)
    account_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON list of field names
    first_name = String()
    last_name = String()
    email = String()
    updated_at = DateTime(required=True)
