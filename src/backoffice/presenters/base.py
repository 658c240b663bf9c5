"""Shared presentation helpers.

A presenter wraps one record and adds display methods. Anything it does not
define is read from the wrapped record, so ``presenter.reference`` and
``presenter.status`` behave like the aggregate's own fields.
"""

from datetime import date, datetime
from html import escape

CURRENCY_UNIT = "€"
DEFAULT_BADGE = "badge-secondary"

# Shared by every presenter that has a cancelled status
COMMON_STATUSES = {"cancelled": "badge-danger"}

_DATE_FORMATS = {"short": "%b %d", "long": "%B %d, %Y"}
_DATETIME_FORMATS = {"short": "%d %b %H:%M", "long": "%B %d, %Y %H:%M"}


def format_date(value, style: str = "short") -> str | None:
    """``Jan 15`` / ``January 15, 2026`` for dates, with the time appended for datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime(_DATETIME_FORMATS[style])
    if isinstance(value, date):
        return value.strftime(_DATE_FORMATS[style])
    raise TypeError(f"Cannot format {type(value).__name__} as a date")


def format_currency(value, unit: str = CURRENCY_UNIT) -> str | None:
    """``1234.5`` → ``€1,234.50``; ``None`` stays ``None``."""
    if value is None:
        return None
    amount = float(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{unit}{abs(amount):,.2f}"


def pluralize(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def status_badge_tag(name: str | None, badge_class: str) -> str:
    return f'<span class="badge {escape(badge_class)}">{escape(name or "")}</span>'


def content_tag(tag: str, text: str, css_class: str | None = None) -> str:
    attributes = f' class="{escape(css_class)}"' if css_class else ""
    return f"<{tag}{attributes}>{escape(text)}</{tag}>"


def build_status_tables(config: dict) -> tuple[dict, dict]:
    """Split a status configuration into name and badge lookups.

    Each value is either a badge class (the name is the capitalised status)
    or a ``{"name": ..., "badge": ...}`` dict.
    """
    names, badges = {}, {}
    for status, entry in config.items():
        if isinstance(entry, dict):
            names[status] = entry["name"]
            badges[status] = entry["badge"]
        else:
            names[status] = status.capitalize()
            badges[status] = entry
    return names, badges


class Presenter:
    STATUS_NAMES: dict = {}
    STATUS_BADGES: dict = {}

    def __init__(self, record):
        self.record = record

    def __getattr__(self, name):
        # Only reached for names the presenter does not define
        return getattr(self.record, name)

    @classmethod
    def present_all(cls, records) -> list:
        return [cls(record) for record in records]

    def status_name(self) -> str | None:
        status = self.record.status
        return self.STATUS_NAMES.get(status) or (status.capitalize() if status else None)

    def status_badge(self) -> str:
        return self.STATUS_BADGES.get(self.record.status, DEFAULT_BADGE)

    def status_with_badge(self) -> str:
        return status_badge_tag(self.status_name(), self.status_badge())

    def created_at_formatted(self) -> str | None:
        return format_date(self.record.created_at, "long")

    def updated_at_formatted(self) -> str | None:
        return format_date(self.record.updated_at, "long")
