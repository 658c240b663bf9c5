"""Money value object: an amount with its currency.

Arithmetic goes through ``Decimal`` so that sums of prices do not pick up
binary float noise. Amounts are stored as floats, like every other monetary
field of the domain.
"""

from decimal import Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, String

from backoffice.domain import backoffice

DEFAULT_CURRENCY = "EUR"


class CurrencyMismatch(ValueError):
    """Two amounts in different currencies were combined."""


def _decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@backoffice.value_object
class Money:
    """A monetary amount. Immutable; operators return new instances."""

    amount: Float(default=0.0)
    currency: String(max_length=3, default=DEFAULT_CURRENCY)

    @invariant.post
    def currency_must_be_an_upper_case_code(self):
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            raise ValidationError({"currency": [f"Invalid currency code: {self.currency!r}"]})

    @classmethod
    def of(cls, amount, currency: str = DEFAULT_CURRENCY) -> "Money":
        """Build a Money from any number-like amount, normalising the currency."""
        return cls(amount=float(_decimal(amount)), currency=str(currency or DEFAULT_CURRENCY).strip().upper())

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls.of(0, currency)

    @classmethod
    def from_cents(cls, cents, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls.of(_decimal(cents) / 100, currency)

    def decimal_amount(self) -> Decimal:
        return _decimal(self.amount)

    def _ensure_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatch(f"Currency mismatch: {self.currency} vs {other.currency}")

    def __add__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        self._ensure_same_currency(other)
        return Money.of(self.decimal_amount() + other.decimal_amount(), self.currency)

    def __sub__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        self._ensure_same_currency(other)
        return Money.of(self.decimal_amount() - other.decimal_amount(), self.currency)

    def __mul__(self, multiplier):
        if isinstance(multiplier, Money):
            return NotImplemented
        return Money.of(self.decimal_amount() * _decimal(multiplier), self.currency)

    __rmul__ = __mul__

    def __truediv__(self, divisor):
        if isinstance(divisor, Money):
            return NotImplemented
        divisor = _decimal(divisor)
        if divisor == 0:
            raise ZeroDivisionError("Cannot divide by zero")
        return Money.of(self.decimal_amount() / divisor, self.currency)

    def __neg__(self):
        return Money.of(-self.decimal_amount(), self.currency)

    # Ordering is only defined within one currency.
    def _comparable(self, other) -> bool:
        return isinstance(other, Money) and other.currency == self.currency

    def __lt__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self.decimal_amount() < other.decimal_amount()

    def __le__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self.decimal_amount() <= other.decimal_amount()

    def __gt__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self.decimal_amount() > other.decimal_amount()

    def __ge__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self.decimal_amount() >= other.decimal_amount()

    def is_zero(self) -> bool:
        return self.decimal_amount() == 0

    def is_positive(self) -> bool:
        return self.decimal_amount() > 0

    def is_negative(self) -> bool:
        return self.decimal_amount() < 0

    def formatted_amount(self) -> str:
        return f"{self.decimal_amount():.2f}"

    def format(self) -> str:
        return f"{self.formatted_amount()} {self.currency}"

    def __str__(self) -> str:
        return self.format()
