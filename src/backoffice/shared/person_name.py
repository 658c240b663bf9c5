"""PersonName value object."""

from protean.fields import String

from backoffice.domain import backoffice


def _normalize(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@backoffice.value_object
class PersonName:
    """First and last name of a person, either of which may be missing.

    Build instances with ``of`` or ``parse`` so that surrounding whitespace is
    stripped and blank parts become ``None``.
    """

    first_name: String(max_length=100)
    last_name: String(max_length=100)

    @classmethod
    def of(cls, first_name=None, last_name=None) -> "PersonName":
        return cls(first_name=_normalize(first_name), last_name=_normalize(last_name))

    @classmethod
    def empty(cls) -> "PersonName":
        return cls.of(None, None)

    @classmethod
    def parse(cls, full_name) -> "PersonName":
        """Split on the first run of whitespace: ``"Mary Ann Smith"`` gives ``Mary`` / ``Ann Smith``."""
        if not full_name or not str(full_name).strip():
            return cls.empty()
        parts = str(full_name).strip().split(None, 1)
        return cls.of(parts[0], parts[1] if len(parts) > 1 else None)

    def _parts(self) -> list[str]:
        return [part for part in (self.first_name, self.last_name) if part]

    def is_blank(self) -> bool:
        return not self._parts()

    def full_name(self) -> str | None:
        return " ".join(self._parts()) or None

    def reversed_name(self) -> str | None:
        return ", ".join(reversed(self._parts())) or None

    def initials(self) -> str | None:
        if self.is_blank():
            return None
        return "".join(part[0].upper() for part in self._parts())

    def format(self) -> str:
        return self.full_name() or ""

    def __str__(self) -> str:
        return self.format()
