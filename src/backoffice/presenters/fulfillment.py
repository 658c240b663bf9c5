"""Fulfillment display values."""

from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.presenters.base import COMMON_STATUSES, Presenter, build_status_tables, format_date, pluralize
from backoffice.shared.records import fetch_by_id

_STATUS_NAMES, _STATUS_BADGES = build_status_tables(
    {
        **COMMON_STATUSES,
        "pending": "badge-secondary",
        "processing": "badge-warning",
        "shipped": "badge-info",
        "delivered": "badge-success",
    }
)


class FulfillmentPresenter(Presenter):
    STATUS_NAMES = _STATUS_NAMES
    STATUS_BADGES = _STATUS_BADGES

    def service_name(self) -> str | None:
        service = fetch_by_id(FulfillmentService, self.record.fulfillment_service_id)
        return service.name if service is not None else None

    def carrier_with_tracking(self) -> str | None:
        if not self.record.tracking_number:
            return self.record.carrier
        return f"{self.record.carrier} - {self.record.tracking_number}"

    def tracking_link(self) -> str | None:
        """Carrier tracking page when the carrier is known, else the bare number."""
        if not self.record.tracking_number:
            return None
        return self.record.tracking_info().tracking_url() or self.record.tracking_number

    def transit_duration_text(self) -> str | None:
        days = self.record.transit_duration()
        if days is None:
            return None
        return pluralize(days, "day", "days")

    def shipped_at_formatted(self) -> str | None:
        return format_date(self.record.shipped_at)

    def delivered_at_formatted(self) -> str | None:
        return format_date(self.record.delivered_at)

    def summary(self) -> dict:
        return {
            "id": str(self.record.id),
            "status": self.record.status,
            "status_name": self.status_name(),
            "status_badge": self.status_badge(),
            "service_name": self.service_name(),
            "carrier_with_tracking": self.carrier_with_tracking(),
            "tracking_link": self.tracking_link(),
            "shipped_at_formatted": self.shipped_at_formatted(),
            "delivered_at_formatted": self.delivered_at_formatted(),
            "transit_duration_text": self.transit_duration_text(),
        }
