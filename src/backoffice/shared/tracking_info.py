"""TrackingInfo value object: a parcel tracking number and its carrier."""

from protean.fields import String

from backoffice.domain import backoffice

CARRIER_URLS = {
    "UPS": "https://www.ups.com/track?tracknum={number}",
    "FEDEX": "https://www.fedex.com/fedextrack/?trknbr={number}",
    "DHL": "https://www.dhl.com/en/express/tracking.html?AWB={number}",
    "COLISSIMO": "https://www.laposte.fr/outils/suivre-vos-envois?code={number}",
    "CHRONOPOST": "https://www.chronopost.fr/tracking-no-cms/suivi-page?listeNumerosLT={number}",
    "TNT": "https://www.tnt.com/express/en_gc/site/shipping-tools/tracking.html?searchType=CON&cons={number}",
    "GLS": "https://gls-group.eu/track/{number}",
}


def _normalize(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip().upper()
    return value or None


@backoffice.value_object
class TrackingInfo:
    number: String(max_length=100)
    carrier: String(max_length=50)

    @classmethod
    def of(cls, number=None, carrier=None) -> "TrackingInfo":
        """Upper-case and strip both parts; blanks become ``None``."""
        return cls(number=_normalize(number), carrier=_normalize(carrier))

    @classmethod
    def empty(cls) -> "TrackingInfo":
        return cls.of(None, None)

    def is_blank(self) -> bool:
        return not self.number

    def tracking_url(self) -> str | None:
        """Carrier tracking page for this parcel, when the carrier is known."""
        if self.is_blank() or not self.carrier:
            return None
        template = CARRIER_URLS.get(self.carrier)
        if template is None:
            return None
        return template.format(number=self.number)

    def format(self) -> str:
        if self.is_blank():
            return ""
        if not self.carrier:
            return self.number
        return f"{self.carrier} - {self.number}"

    def __str__(self) -> str:
        return self.format()
