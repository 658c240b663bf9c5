"""Customer display values."""

from html import escape

from backoffice.customer import lookups
from backoffice.presenters.base import Presenter, format_currency, pluralize


class CustomerPresenter(Presenter):
    def full_name(self) -> str | None:
        return self.record.person_name().full_name()

    def display_name(self) -> str:
        """Best available label: full name, then email, then ``Customer #<id>``."""
        return self.full_name() or self.record.email or f"Customer #{self.record.id}"

    def initials(self) -> str:
        full_name = self.full_name()
        if not full_name:
            return "?"
        return "".join(part[0].upper() for part in full_name.split())

    def orders_count(self) -> int:
        return lookups.orders_count(self.record.id)

    def orders_count_text(self) -> str:
        return pluralize(self.orders_count(), "order", "orders")

    def total_spent(self) -> float:
        return lookups.total_spent(self.record.id)

    def total_spent_formatted(self) -> str:
        return format_currency(self.total_spent())

    def email_link(self) -> str | None:
        if not self.record.email:
            return None
        email = escape(self.record.email)
        return f'<a href="mailto:{email}">{email}</a>'

    def phone_link(self) -> str | None:
        if not self.record.phone:
            return None
        phone = escape(self.record.phone)
        return f'<a href="tel:{phone}">{phone}</a>'

    def address_formatted(self) -> str | None:
        """Paragraphs split on blank lines, single line breaks kept as ``<br />``."""
        if not self.record.address or not self.record.address.strip():
            return None
        paragraphs = [p for p in self.record.address.replace("\r\n", "\n").split("\n\n") if p.strip()]
        return "".join(
            "<p>" + "<br />".join(escape(line) for line in paragraph.split("\n")) + "</p>"
            for paragraph in paragraphs
        )

    def summary(self) -> dict:
        return {
            "id": str(self.record.id),
            "display_name": self.display_name(),
            "initials": self.initials(),
            "email": self.record.email,
            "phone": self.record.phone,
            "orders_count_text": self.orders_count_text(),
            "total_spent_formatted": self.total_spent_formatted(),
            "created_at_formatted": self.created_at_formatted(),
        }
