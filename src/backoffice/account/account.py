"""Account aggregate: the tenant root.

Customers, orders, invoices, fulfillment services, fulfillments and audit
events all carry the ``account_id`` of the account that owns them.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, String

from backoffice.account.events import AccountOpened, AccountRenamed
from backoffice.domain import backoffice


def _clean_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError({"name": ["Name can't be blank"]})
    return name


@backoffice.aggregate
class Account:
    name = String(required=True, max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, name: str):
        now = datetime.now(UTC)
        account = cls(name=_clean_name(name), created_at=now, updated_at=now)
        account.raise_(AccountOpened(account_id=str(account.id), name=account.name, opened_at=now))
        return account

    def rename(self, name: str) -> None:
        name = _clean_name(name)
        if name == self.name:
            return
        previous = self.name
        now = datetime.now(UTC)
        self.name = name
        self.updated_at = now
        self.raise_(
            AccountRenamed(
                account_id=str(self.id),
                previous_name=previous,
                name=name,
                renamed_at=now,
            )
        )

