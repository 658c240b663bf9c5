"""Pydantic request/response schemas for the back office API.

These are the external contracts; commands stay internal.
"""

from datetime import date

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


class OrderLineSchema(BaseModel):
    name: str
    sku: str | None = None
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
class OpenAccountRequest(BaseModel):
    name: str

    model_config = {"json_schema_extra": {"examples": [{"name": "Acme Retail"}]}}


class RenameAccountRequest(BaseModel):
    name: str


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "first_name": "Jane",
                    "last_name": "Doe",
                    "email": "jane@example.com",
                    "phone": "+33 6 12 34 56 78",
                }
            ]
        }
    }


class UpdateCustomerRequest(BaseModel):
    """Only the fields present in the body change; an empty string clears a field."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class CustomerSearchParams(BaseModel):
    q: str | None = None
    has_orders: bool | None = None
    has_email: bool | None = None
    min_spent: float | None = None
    max_spent: float | None = None
    from_date: date | None = None
    to_date: date | None = None
    sort_by: str | None = None
    sort_dir: str | None = Field(default=None, pattern="^(asc|desc)$")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    customer_id: str
    reference: str | None = None
    notes: str | None = None
    lines: list[OrderLineSchema] = Field(default_factory=list)


class ReviseOrderRequest(BaseModel):
    notes: str | None = None
    status: str | None = None
    total_amount: float | None = None
    customer_id: str | None = None


class AddLineRequest(OrderLineSchema):
    pass


class LineQuantityRequest(BaseModel):
    amount: int = Field(ge=1, default=1)


class LinePriceRequest(BaseModel):
    unit_price: float = Field(ge=0)


class AssignFulfillmentRequest(BaseModel):
    fulfillment_id: str


class OrderFilterParams(BaseModel):
    status: list[str] | None = None
    customer_id: str | None = None
    from_date: date | None = None
    to_date: date | None = None
    min_amount: float | None = None
    max_amount: float | None = None
    reference: str | None = None
    has_invoice: bool | None = None
    has_fulfillment: bool | None = None
    sort_by: str | None = None
    sort_dir: str | None = Field(default=None, pattern="^(asc|desc)$")


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------
class PayInvoiceRequest(BaseModel):
    paid_date: date | None = None


class ReviseInvoiceAmountsRequest(BaseModel):
    amount: float | None = Field(default=None, ge=0)
    tax_amount: float | None = None


# ---------------------------------------------------------------------------
# Fulfillment services and fulfillments
# ---------------------------------------------------------------------------
class RegisterFulfillmentServiceRequest(BaseModel):
    name: str
    provider: str | None = None
    active: bool = True


class RenameFulfillmentServiceRequest(BaseModel):
    name: str


class CreateFulfillmentRequest(BaseModel):
    fulfillment_service_id: str
    order_id: str | None = None


class ShipFulfillmentRequest(BaseModel):
    tracking_number: str
    carrier: str | None = None

    model_config = {"json_schema_extra": {"examples": [{"tracking_number": "1Z999AA10123456784", "carrier": "UPS"}]}}
