"""Domain events for the Account aggregate."""

from protean.fields import DateTime, Identifier, String

from backoffice.domain import backoffice


@backoffice.event(part_of="Account")
class AccountOpened:
    """A new tenant account was opened."""

    __version__ = 1

    account_id = Identifier(required=True)
    name = String(required=True)
    opened_at = DateTime(required=True)


@backoffice.event(part_of="Account")
class AccountRenamed:
    __version__ = 1

    account_id = Identifier(required=True)
    previous_name = String(required=True)
    name = String(required=True)
    renamed_at = DateTime(required=True)

