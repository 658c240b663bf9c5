"""Building blocks for query objects.

A query object loads the records it works on once (its ``relation``), then
narrows, groups and aggregates them in memory::

    OrdersNeedingAttentionQuery(account_id=account.id).grouped()
    OrderFilterQuery.call(account_id=account.id, filters={"status": "pending"})

Passing ``relation=`` starts from a pre-filtered list instead.
"""

import calendar
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal

from backoffice.shared.records import fetch_all

PERIODS = (
    "today",
    "yesterday",
    "this_week",
    "last_week",
    "this_month",
    "last_month",
    "this_quarter",
    "last_quarter",
    "this_year",
    "last_year",
)


class ApplicationQuery:
    """Base class. Subclasses set ``model`` and implement ``results``."""

    model = None

    def __init__(self, account_id=None, relation: list | None = None, now: datetime | None = None):
        self.account_id = account_id
        self.now = now or datetime.now(UTC)
        self._relation = relation

    @classmethod
    def call(cls, *args, **kwargs):
        return cls(*args, **kwargs).results()

    @property
    def relation(self) -> list:
        if self._relation is None:
            self._relation = self.default_relation()
        return self._relation

    @property
    def today(self) -> date:
        return self.now.date()

    def default_relation(self) -> list:
        if self.model is None:
            raise NotImplementedError(f"{self.__class__.__name__} must set model or override default_relation()")
        return self.records(self.model)

    def records(self, element_cls) -> list:
        """All records of ``element_cls`` within the account scope."""
        if self.account_id is None:
            return fetch_all(element_cls)
        return fetch_all(element_cls, account_id=str(self.account_id))

    def days_ago(self, days: int) -> datetime:
        return self.now - timedelta(days=days)

    def results(self):
        raise NotImplementedError(f"{self.__class__.__name__} must implement results()")


class GroupedQuery:
    """Mixin for queries that sort records into named groups.

    ``GROUPS`` maps each group name to the method that returns its records.
    """

    GROUPS: dict = {}

    def grouped(self) -> dict:
        return {name: getattr(self, method)() for name, method in self.GROUPS.items()}

    def all_ids(self) -> list[str]:
        seen = {}
        for method in self.GROUPS.values():
            for record in getattr(self, method)():
                seen.setdefault(str(record.id), None)
        return list(seen)

    def records_in_groups(self) -> list:
        ids = set(self.all_ids())
        return [record for record in self.relation if str(record.id) in ids]


def safe_average(collection, value=None, precision: int = 2) -> float:
    """Rounded mean of ``value(record)`` (or of the items themselves); 0 when empty."""
    items = list(collection)
    if not items:
        return 0
    values = [value(item) if value else item for item in items]
    total = sum((Decimal(str(v or 0)) for v in values), Decimal("0"))
    return round(float(total / len(items)), precision)


def total_of(records, attribute: str) -> float:
    return float(sum((Decimal(str(getattr(r, attribute) or 0)) for r in records), Decimal("0")))


def _as_datetime(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    return datetime.combine(value, time.min, tzinfo=UTC)


def end_of_day(value) -> datetime:
    return _as_datetime(value).replace(hour=23, minute=59, second=59, microsecond=999999)


def filter_by_date_range(records, from_date=None, to_date=None, attribute: str = "created_at") -> list:
    """Keep records whose ``attribute`` falls between the two dates, both inclusive."""
    start = _as_datetime(from_date) if from_date else None
    end = end_of_day(to_date) if to_date else None
    kept = []
    for record in records:
        moment = _as_datetime(getattr(record, attribute))
        if start is not None and (moment is None or moment < start):
            continue
        if end is not None and (moment is None or moment > end):
            continue
        kept.append(record)
    return kept


def _start_of_quarter(day: date) -> date:
    return date(day.year, 3 * ((day.month - 1) // 3) + 1, 1)


def _shift_months(day: date, months: int) -> date:
    month_index = day.year * 12 + day.month - 1 + months
    year, month = divmod(month_index, 12)
    return date(year, month + 1, min(day.day, calendar.monthrange(year, month + 1)[1]))


def _day_range(first: date, last: date) -> tuple[datetime, datetime]:
    return _as_datetime(first), end_of_day(last)


def resolve_period(period, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Turn a period name or an explicit ``(start, end)`` pair into an inclusive datetime range.

    Weeks start on Monday. Unknown names fall back to today.
    """
    if isinstance(period, tuple | list):
        start, end = period
        end = _as_datetime(end) if isinstance(end, datetime) else end_of_day(end)
        return _as_datetime(start), end

    today = (now or datetime.now(UTC)).date()
    if period == "yesterday":
        yesterday = today - timedelta(days=1)
        return _day_range(yesterday, yesterday)
    if period == "this_week":
        monday = today - timedelta(days=today.weekday())
        return _day_range(monday, monday + timedelta(days=6))
    if period == "last_week":
        monday = today - timedelta(days=today.weekday() + 7)
        return _day_range(monday, monday + timedelta(days=6))
    if period == "this_month":
        first = today.replace(day=1)
        return _day_range(first, _shift_months(first, 1) - timedelta(days=1))
    if period == "last_month":
        first = _shift_months(today.replace(day=1), -1)
        return _day_range(first, today.replace(day=1) - timedelta(days=1))
    if period == "this_quarter":
        first = _start_of_quarter(today)
        return _day_range(first, _shift_months(first, 3) - timedelta(days=1))
    if period == "last_quarter":
        first = _shift_months(_start_of_quarter(today), -3)
        return _day_range(first, _shift_months(first, 3) - timedelta(days=1))
    if period == "this_year":
        return _day_range(date(today.year, 1, 1), date(today.year, 12, 31))
    if period == "last_year":
        return _day_range(date(today.year - 1, 1, 1), date(today.year - 1, 12, 31))
    return _day_range(today, today)


def within(value, period_range: tuple[datetime, datetime]) -> bool:
    moment = _as_datetime(value)
    return moment is not None and period_range[0] <= moment <= period_range[1]


def nulls_first(value):
    """Sort key that orders ``None`` before any value."""
    return (value is not None, value)
