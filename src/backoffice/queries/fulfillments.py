"""Fulfillment reports: delays, carrier performance and parcel tracking."""

from collections import Counter, defaultdict

from backoffice.customer.customer import Customer
from backoffice.fulfillment.fulfillment import IN_TRANSIT_STATUSES, Fulfillment, FulfillmentStatus
from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.order.order import Order
from backoffice.queries.base import (
    ApplicationQuery,
    GroupedQuery,
    filter_by_date_range,
    nulls_first,
    resolve_period,
    safe_average,
    within,
)

DEFAULT_PROCESSING_THRESHOLD = 2
DEFAULT_SHIPPING_THRESHOLD = 7
ON_TIME_TARGET_DAYS = 5
PRIORITY_ALERTS_LIMIT = 20

_PRIORITY = {
    FulfillmentStatus.PENDING.value: 1,
    FulfillmentStatus.PROCESSING.value: 2,
    FulfillmentStatus.SHIPPED.value: 3,
}

TRANSIT_BUCKETS = (
    ("1 day", 0, 1),
    ("2-3 days", 2, 3),
    ("4-5 days", 4, 5),
    ("6-7 days", 6, 7),
)
LONG_TRANSIT_BUCKET = "8+ days"


def _with_status(fulfillments, status: FulfillmentStatus) -> list:
    return [f for f in fulfillments if f.status == status.value]


def _has_tracking(fulfillment) -> bool:
    return bool(fulfillment.tracking_number)


class DelayedFulfillmentsQuery(GroupedQuery, ApplicationQuery):
    """Shipments stuck before or during transit.

    Pending or processing for more than ``processing_threshold`` days (2),
    or shipped more than ``shipping_threshold`` days ago (7).
    """

    model = Fulfillment
    GROUPS = {
        "stuck_pending": "stuck_in_pending",
        "stuck_processing": "stuck_in_processing",
        "shipping_delayed": "shipping_taking_too_long",
    }

    def __init__(self, account_id=None, relation=None, now=None, processing_threshold=None, shipping_threshold=None):
        super().__init__(account_id, relation, now)
        self.processing_threshold = processing_threshold or DEFAULT_PROCESSING_THRESHOLD
        self.shipping_threshold = shipping_threshold or DEFAULT_SHIPPING_THRESHOLD

    def results(self) -> list:
        return self.records_in_groups()

    def stuck_in_pending(self) -> list:
        cutoff = self.days_ago(self.processing_threshold)
        found = [f for f in _with_status(self.relation, FulfillmentStatus.PENDING) if f.created_at and f.created_at < cutoff]
        return sorted(found, key=lambda f: f.created_at)

    def stuck_in_processing(self) -> list:
        cutoff = self.days_ago(self.processing_threshold)
        found = [f for f in _with_status(self.relation, FulfillmentStatus.PROCESSING) if f.updated_at and f.updated_at < cutoff]
        return sorted(found, key=lambda f: f.updated_at)

    def shipping_taking_too_long(self) -> list:
        cutoff = self.days_ago(self.shipping_threshold)
        found = [f for f in _with_status(self.relation, FulfillmentStatus.SHIPPED) if f.shipped_at and f.shipped_at < cutoff]
        return sorted(found, key=lambda f: f.shipped_at)

    def _days_delayed(self, fulfillment) -> int:
        since = {
            FulfillmentStatus.PENDING.value: fulfillment.created_at,
            FulfillmentStatus.PROCESSING.value: fulfillment.updated_at,
            FulfillmentStatus.SHIPPED.value: fulfillment.shipped_at,
        }.get(fulfillment.status)
        return (self.now - since).days if since else 0

    def stats(self) -> dict:
        delayed = self.results()
        pending = _with_status(delayed, FulfillmentStatus.PENDING)
        oldest = min(pending, key=lambda f: f.created_at) if pending else None
        return {
            "total_delayed": len(delayed),
            "stuck_pending": len(pending),
            "stuck_processing": len(_with_status(delayed, FulfillmentStatus.PROCESSING)),
            "shipping_delayed": len(_with_status(delayed, FulfillmentStatus.SHIPPED)),
            "oldest_pending": oldest
            and {
                "id": str(oldest.id),
                "created_at": oldest.created_at,
                "days_pending": (self.now - oldest.created_at).days,
            },
            "average_delay": safe_average(delayed, self._days_delayed, precision=1),
        }

    def priority_alerts(self) -> list:
        """The 20 most urgent delays: pending first, then processing, then shipped, oldest first."""
        alerts = sorted(self.results(), key=lambda f: (_PRIORITY.get(f.status, 4), f.created_at))
        return alerts[:PRIORITY_ALERTS_LIMIT]

    def delays_by_carrier(self) -> dict:
        return dict(Counter(f.carrier for f in self.shipping_taking_too_long()))


class FulfillmentPerformanceQuery(ApplicationQuery):
    """Delivered shipments, optionally those delivered within a period."""

    model = Fulfillment

    def __init__(self, account_id=None, relation=None, now=None, period=None):
        super().__init__(account_id, relation, now)
        self.period = period

    def _delivered(self) -> list:
        return _with_status(self.relation, FulfillmentStatus.DELIVERED)

    def results(self) -> list:
        delivered = self._delivered()
        if self.period is None:
            return delivered
        period_range = resolve_period(self.period, self.now)
        return [f for f in delivered if within(f.delivered_at, period_range)]

    def metrics(self) -> dict:
        delivered = self.results()
        return {
            "total_delivered": len(delivered),
            "average_transit_time": self.average_transit_time(delivered),
            "on_time_delivery_rate": self.on_time_delivery_rate(delivered),
            "by_carrier": self.performance_by_carrier(),
            "by_service": self.performance_by_service(),
        }

    def average_transit_time(self, fulfillments=None) -> float:
        fulfillments = self.results() if fulfillments is None else fulfillments
        durations = [d for d in (f.transit_duration() for f in fulfillments) if d is not None]
        return safe_average(durations, precision=1)

    def on_time_delivery_rate(self, fulfillments=None, target_days: int = ON_TIME_TARGET_DAYS) -> float:
        """Percentage delivered within ``target_days`` of shipping."""
        fulfillments = self.results() if fulfillments is None else fulfillments
        if not fulfillments:
            return 0
        on_time = sum(1 for f in fulfillments if (f.transit_duration() or 0) <= target_days)
        return round(on_time / len(fulfillments) * 100, 1)

    def _performance_by(self, fulfillments, label_key: str, label) -> list[dict]:
        groups = defaultdict(list)
        for fulfillment in fulfillments:
            groups[label(fulfillment)].append(fulfillment)
        return [
            {
                label_key: name,
                "total_deliveries": len(members),
                "avg_transit_days": self.average_transit_time(members) if members else None,
            }
            for name, members in groups.items()
        ]

    def performance_by_carrier(self) -> list[dict]:
        with_carrier = [f for f in self._delivered() if f.carrier]
        return self._performance_by(with_carrier, "carrier", lambda f: f.carrier)

    def performance_by_service(self) -> list[dict]:
        names = {str(s.id): s.name for s in self.records(FulfillmentService)}
        with_service = [f for f in self._delivered() if str(f.fulfillment_service_id) in names]
        return self._performance_by(with_service, "service_name", lambda f: names[str(f.fulfillment_service_id)])

    def transit_time_distribution(self) -> dict:
        delivered = self.results()
        if not delivered:
            return {}
        distribution = {label: 0 for label, _, _ in TRANSIT_BUCKETS}
        distribution[LONG_TRANSIT_BUCKET] = 0
        for fulfillment in delivered:
            days = fulfillment.transit_duration() or 0
            bucket = next((label for label, low, high in TRANSIT_BUCKETS if low <= days <= high), LONG_TRANSIT_BUCKET)
            distribution[bucket] += 1
        return distribution


class FulfillmentTrackingQuery(ApplicationQuery):
    """Finding shipments by tracking number, carrier, order or customer."""

    model = Fulfillment

    def results(self) -> list:
        return [f for f in self.relation if _has_tracking(f)]

    def by_tracking_number(self, number: str):
        return next((f for f in self.relation if f.tracking_number == number), None)

    def by_carrier(self, carrier: str) -> list:
        needle = carrier.lower()
        return [f for f in self.results() if needle in (f.carrier or "").lower()]

    def active(self) -> list:
        """Tracked shipments still on their way, most recently shipped first."""
        moving = [f for f in self.results() if f.status in IN_TRANSIT_STATUSES]
        return sorted(moving, key=lambda f: nulls_first(f.shipped_at), reverse=True)

    def recently_delivered(self, days: int = 7) -> list:
        cutoff = self.days_ago(days)
        delivered = [
            f for f in _with_status(self.relation, FulfillmentStatus.DELIVERED) if f.delivered_at and f.delivered_at >= cutoff
        ]
        return sorted(delivered, key=lambda f: f.delivered_at, reverse=True)

    def for_order(self, order) -> list:
        return [f for f in self.relation if order.fulfillment_id and str(f.id) == str(order.fulfillment_id)]

    def for_customer(self, customer: Customer) -> list:
        fulfillment_ids = {
            str(o.fulfillment_id) for o in self.records(Order) if str(o.customer_id) == str(customer.id) and o.fulfillment_id
        }
        found = [f for f in self.relation if str(f.id) in fulfillment_ids]
        return sorted(found, key=lambda f: nulls_first(f.created_at), reverse=True)

    def search(self, params: dict | None = None) -> list:
        params = params or {}
        found = self.results()
        if params.get("tracking_number"):
            needle = params["tracking_number"].lower()
            found = [f for f in found if needle in f.tracking_number.lower()]
        if params.get("carrier"):
            needle = params["carrier"].lower()
            found = [f for f in found if needle in (f.carrier or "").lower()]
        if params.get("status"):
            found = [f for f in found if f.status == params["status"]]
        found = filter_by_date_range(found, params.get("from_date"), params.get("to_date"), attribute="shipped_at")
        return sorted(found, key=lambda f: nulls_first(f.shipped_at), reverse=True)

    def tracking_stats(self) -> dict:
        tracked = self.results()
        return {
            "total_with_tracking": len(tracked),
            "active_shipments": len(self.active()),
            "by_carrier": dict(Counter(f.carrier for f in tracked)),
            "by_status": dict(Counter(f.status for f in tracked)),
        }
