"""Order display values."""

from backoffice.customer.customer import Customer
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.presenters.base import Presenter, build_status_tables, format_currency, pluralize
from backoffice.presenters.customer import CustomerPresenter
from backoffice.presenters.fulfillment import FulfillmentPresenter
from backoffice.shared.records import fetch_by_id

_STATUS_NAMES, _STATUS_BADGES = build_status_tables(
    {
        "pending": {"name": "Pending", "badge": "badge-warning"},
        "invoiced": {"name": "Invoiced", "badge": "badge-info"},
        "validated": {"name": "Validated", "badge": "badge-success"},
        "cancelled": {"name": "Cancelled", "badge": "badge-danger"},
    }
)


class OrderPresenter(Presenter):
    STATUS_NAMES = _STATUS_NAMES
    STATUS_BADGES = _STATUS_BADGES

    def _fulfillment(self) -> FulfillmentPresenter | None:
        fulfillment = fetch_by_id(Fulfillment, self.record.fulfillment_id)
        return FulfillmentPresenter(fulfillment) if fulfillment is not None else None

    def customer_name(self) -> str | None:
        customer = fetch_by_id(Customer, self.record.customer_id)
        return CustomerPresenter(customer).display_name() if customer is not None else None

    def fulfillment_status(self) -> str | None:
        fulfillment = self._fulfillment()
        return fulfillment.status_name() if fulfillment is not None else None

    def fulfillment_service_name(self) -> str | None:
        fulfillment = self._fulfillment()
        return fulfillment.service_name() if fulfillment is not None else None

    def total_quantity(self) -> int:
        return self.record.total_quantity()

    def total_amount_formatted(self) -> str | None:
        return format_currency(self.record.total_amount)

    def total_price(self) -> str | None:
        return self.total_amount_formatted()

    def total_price_raw(self) -> float:
        return self.record.total_amount or 0

    def lines_summary(self) -> str:
        return pluralize(self.record.lines_count(), "item", "items")

    def lines(self) -> list[dict]:
        return [
            {
                "id": str(line.id),
                "name": line.name,
                "sku": line.sku,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "total_price": line.total_price,
                "total_price_formatted": format_currency(line.total_price),
            }
            for line in self.record.lines
        ]

    def summary(self) -> dict:
        return {
            "id": str(self.record.id),
            "reference": self.record.reference,
            "status": self.record.status,
            "status_name": self.status_name(),
            "status_badge": self.status_badge(),
            "customer_id": str(self.record.customer_id),
            "customer_name": self.customer_name(),
            "fulfillment_id": str(self.record.fulfillment_id) if self.record.fulfillment_id else None,
            "fulfillment_status": self.fulfillment_status(),
            "fulfillment_service_name": self.fulfillment_service_name(),
            "notes": self.record.notes,
            "total_amount": self.total_price_raw(),
            "total_price": self.total_price(),
            "total_quantity": self.total_quantity(),
            "lines_summary": self.lines_summary(),
            "lines": self.lines(),
            "created_at_formatted": self.created_at_formatted(),
        }


class OrderListingPresenter(Presenter):
    """Presents rows of the orders index without loading the aggregates."""

    STATUS_NAMES = _STATUS_NAMES
    STATUS_BADGES = _STATUS_BADGES

    def summary(self) -> dict:
        fulfillment_status = self.record.fulfillment_status
        return {
            "id": str(self.record.order_id),
            "reference": self.record.reference,
            "status": self.record.status,
            "status_name": self.status_name(),
            "status_badge": self.status_badge(),
            "customer_name": self.record.customer_name,
            "fulfillment_status": FulfillmentPresenter.STATUS_NAMES.get(fulfillment_status) if fulfillment_status else None,
            "total_price": format_currency(self.record.total_amount or 0),
            "lines_summary": pluralize(self.record.lines_count or 0, "item", "items"),
            "created_at_formatted": self.created_at_formatted(),
        }
