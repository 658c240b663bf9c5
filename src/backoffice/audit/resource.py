"""Resource aggregate: a stable handle on any audited record.

Audit events point at a Resource rather than at the record itself, so one
table can describe changes to orders, invoices, customers and the rest. The
name is ``"<Type>#<id>"``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, String

from backoffice.domain import backoffice


class ResourceType(Enum):
    ORDER = "Order"
    INVOICE = "Invoice"
    CUSTOMER = "Customer"
    FULFILLMENT = "Fulfillment"
    ORDER_LINE = "OrderLine"


@backoffice.aggregate
class Resource:
    name = String(required=True, max_length=255)
    resource_type = String(required=True, choices=ResourceType)
    created_at = DateTime()

    @classmethod
    def describe(cls, resource_type: str, record_id):
        return cls(
            name=f"{resource_type}#{record_id}",
            resource_type=resource_type,
            created_at=datetime.now(UTC),
        )

    def record_id(self) -> str:
        return self.name.split("#", 1)[1]
