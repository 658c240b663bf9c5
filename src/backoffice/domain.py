"""Back office bounded context: accounts, customers, orders, invoices and fulfillments.

A single Protean domain owns every aggregate. Each account is a tenant and
every other aggregate carries the ``account_id`` it belongs to.
"""

from protean.domain import Domain

from backoffice.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

backoffice = Domain(name="backoffice")
