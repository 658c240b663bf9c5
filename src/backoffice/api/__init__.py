"""Back office API package."""

from backoffice.api.errors import register_error_handlers
from backoffice.api.routes import (
    account_router,
    customer_router,
    fulfillment_router,
    fulfillment_service_router,
    invoice_router,
    order_router,
    report_router,
)

__all__ = [
    "register_error_handlers",
    "account_router",
    "customer_router",
    "order_router",
    "invoice_router",
    "fulfillment_service_router",
    "fulfillment_router",
    "report_router",
]
