"""FastAPI routes for the back office: a JSON API over commands and reads.

Writes go through ``current_domain.process``. Guard-clause commands return
False when the record is not in a state that allows the change; those
answers become 409 responses.
"""

import json
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from backoffice.account import lookups as account_lookups
from backoffice.account.account import Account
from backoffice.account.management import CloseAccount, OpenAccount, RenameAccount
from backoffice.api.schemas import (
    AddLineRequest,
    AssignFulfillmentRequest,
    CreateFulfillmentRequest,
    CustomerSearchParams,
    IdResponse,
    LinePriceRequest,
    LineQuantityRequest,
    OpenAccountRequest,
    OrderFilterParams,
    PayInvoiceRequest,
    PlaceOrderRequest,
    RegisterCustomerRequest,
    RegisterFulfillmentServiceRequest,
    RenameAccountRequest,
    RenameFulfillmentServiceRequest,
    ReviseInvoiceAmountsRequest,
    ReviseOrderRequest,
    ShipFulfillmentRequest,
    StatusResponse,
    UpdateCustomerRequest,
)
from backoffice.audit.trail import account_events
from backoffice.audit.resource import Resource
from backoffice.customer.customer import Customer
from backoffice.customer.profile import UpdateCustomerContact
from backoffice.customer.registration import RegisterCustomer
from backoffice.customer.removal import RemoveCustomer
from backoffice.fulfillment.cancellation import CancelFulfillment
from backoffice.fulfillment.creation import CreateFulfillment
from backoffice.fulfillment.delivery import DeliverFulfillment
from backoffice.fulfillment.fulfillment import Fulfillment
from backoffice.fulfillment.lookups import fulfillments_for_account
from backoffice.fulfillment.processing import StartProcessing
from backoffice.fulfillment.removal import DeleteFulfillment
from backoffice.fulfillment.shipping import ShipFulfillment
from backoffice.fulfillment_service import lookups as service_lookups
from backoffice.fulfillment_service.fulfillment_service import FulfillmentService
from backoffice.fulfillment_service.management import (
    ActivateFulfillmentService,
    DeactivateFulfillmentService,
    RegisterFulfillmentService,
    RemoveFulfillmentService,
    RenameFulfillmentService,
)
from backoffice.invoice.amounts import ReviseInvoiceAmounts
from backoffice.invoice.cancellation import CancelInvoice
from backoffice.invoice.invoice import Invoice
from backoffice.invoice.lookups import invoices_for_order
from backoffice.invoice.payment import MarkInvoicePaid
from backoffice.invoice.sending import SendInvoice
from backoffice.order.cancellation import CancelOrder
from backoffice.order.invoicing import InvoiceOrder
from backoffice.order.lines import AddOrderLine, ChangeLinePrice, DecreaseLineQuantity, IncreaseLineQuantity, RemoveOrderLine
from backoffice.order.order import Order
from backoffice.order.placement import PlaceOrder
from backoffice.order.removal import DeleteOrder
from backoffice.order.revision import AssignFulfillment, ReleaseFulfillment, ReviseOrder
from backoffice.order.validation import ValidateOrder
from backoffice.presenters.customer import CustomerPresenter
from backoffice.presenters.fulfillment import FulfillmentPresenter
from backoffice.presenters.invoice import InvoicePresenter
from backoffice.presenters.order import OrderListingPresenter, OrderPresenter
from backoffice.presenters.pagination import order_listing_page
from backoffice.queries.base import PERIODS
from backoffice.queries.customers import CustomerSearchQuery, InactiveCustomersQuery, TopSpendersQuery
from backoffice.queries.fulfillments import DelayedFulfillmentsQuery
from backoffice.queries.invoices import AgingReportQuery, InvoicesNeedingFollowUpQuery, RevenueQuery
from backoffice.queries.orders import OrderDashboardQuery, OrderFilterQuery, OrdersNeedingAttentionQuery
from backoffice.shared.records import fetch_by_id


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _guarded(command, refusal: str) -> StatusResponse:
    """Run a guard-clause command; a False answer means the current state forbids it."""
    if _process(command) is False:
        raise HTTPException(status_code=409, detail=refusal)
    return StatusResponse()


def _owned(element_cls, record_id: str, account_id: str):
    """Load a record of the account, answering 404 for records of other accounts."""
    record = fetch_by_id(element_cls, record_id)
    if record is None or str(record.account_id) != str(account_id):
        raise ObjectNotFoundError(f"{element_cls.__name__} with id {record_id} does not exist")
    return record


def _account(account_id: str) -> Account:
    return current_domain.repository_for(Account).get(account_id)


def _period(period: str | None) -> str | None:
    if period is not None and period not in PERIODS:
        raise HTTPException(status_code=422, detail=f"Unknown period: {period}")
    return period


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
account_router = APIRouter(prefix="/accounts", tags=["accounts"])


@account_router.post("", status_code=201, response_model=IdResponse)
async def open_account(body: OpenAccountRequest) -> IdResponse:
    return IdResponse(id=_process(OpenAccount(name=body.name)))


@account_router.get("/{account_id}")
async def show_account(account_id: str):
    account = _account(account_id)
    return {
        "id": str(account.id),
        "name": account.name,
        "active_orders": len(account_lookups.active_orders(account.id)),
        "total_revenue": account_lookups.total_revenue(account.id),
    }


@account_router.put("/{account_id}", response_model=StatusResponse)
async def rename_account(account_id: str, body: RenameAccountRequest) -> StatusResponse:
    _process(RenameAccount(account_id=account_id, name=body.name))
    return StatusResponse()


@account_router.delete("/{account_id}", response_model=StatusResponse)
async def close_account(account_id: str) -> StatusResponse:
    _process(CloseAccount(account_id=account_id))
    return StatusResponse()


@account_router.get("/{account_id}/events")
async def list_events(
    account_id: str,
    event_type: str | None = None,
    period: Annotated[str | None, Query(pattern="^(today|this_week)$")] = None,
):
    _account(account_id)
    events = account_events(account_id, event_type=event_type, period=period)
    return {
        "events": [
            {
                "id": str(event.id),
                "event_type": event.event_type,
                "resource": getattr(fetch_by_id(Resource, event.resource_id), "name", None),
                "payload": event.parsed_payload(),
                "created_at": event.created_at.isoformat() if event.created_at else None,
            }
            for event in events
        ]
    }


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/accounts/{account_id}/customers", tags=["customers"])


@customer_router.post("", status_code=201, response_model=IdResponse)
async def register_customer(account_id: str, body: RegisterCustomerRequest) -> IdResponse:
    command = RegisterCustomer(account_id=account_id, **body.model_dump())
    return IdResponse(id=_process(command))


@customer_router.get("")
async def list_customers(account_id: str, params: Annotated[CustomerSearchParams, Query()]):
    _account(account_id)
    customers = CustomerSearchQuery.call(account_id=account_id, params=params.model_dump(exclude_none=True))
    return {"customers": [CustomerPresenter(c).summary() for c in customers]}


@customer_router.get("/{customer_id}")
async def show_customer(account_id: str, customer_id: str):
    customer = _owned(Customer, customer_id, account_id)
    presenter = CustomerPresenter(customer)
    return {**presenter.summary(), "address": customer.address, "email_link": presenter.email_link()}


@customer_router.put("/{customer_id}")
async def update_customer(account_id: str, customer_id: str, body: UpdateCustomerRequest):
    _owned(Customer, customer_id, account_id)
    changes = body.model_dump(exclude_unset=True)
    changed = _process(UpdateCustomerContact(customer_id=customer_id, changes=json.dumps(changes)))
    return {"status": "ok", "changed": changed}


@customer_router.delete("/{customer_id}", response_model=StatusResponse)
async def remove_customer(account_id: str, customer_id: str) -> StatusResponse:
    _owned(Customer, customer_id, account_id)
    _process(RemoveCustomer(customer_id=customer_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/accounts/{account_id}/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=IdResponse)
async def place_order(account_id: str, body: PlaceOrderRequest) -> IdResponse:
    command = PlaceOrder(
        account_id=account_id,
        customer_id=body.customer_id,
        reference=body.reference,
        notes=body.notes,
        lines=json.dumps([line.model_dump() for line in body.lines]),
    )
    return IdResponse(id=_process(command))


@order_router.get("")
async def list_orders(account_id: str, page: int = 1):
    """The orders index, 50 per page, newest first."""
    _account(account_id)
    result = order_listing_page(account_id, page)
    return {
        "orders": [OrderListingPresenter(row).summary() for row in result.items],
        "current_page": result.current_page,
        "total_pages": result.total_pages,
        "total_count": result.total_count,
        "per_page": result.limit_value,
    }


@order_router.get("/search")
async def search_orders(account_id: str, params: Annotated[OrderFilterParams, Query()]):
    _account(account_id)
    orders = OrderFilterQuery.call(account_id=account_id, filters=params.model_dump(exclude_none=True))
    return {"orders": [OrderPresenter(o).summary() for o in orders]}


@order_router.get("/{order_id}")
async def show_order(account_id: str, order_id: str):
    order = _owned(Order, order_id, account_id)
    return {
        **OrderPresenter(order).summary(),
        "invoices": [InvoicePresenter(i).summary() for i in invoices_for_order(order.id)],
    }


@order_router.put("/{order_id}", response_model=StatusResponse)
async def revise_order(account_id: str, order_id: str, body: ReviseOrderRequest) -> StatusResponse:
    _owned(Order, order_id, account_id)
    _process(ReviseOrder(order_id=order_id, changes=json.dumps(body.model_dump(exclude_unset=True))))
    return StatusResponse()


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(account_id: str, order_id: str) -> StatusResponse:
    _owned(Order, order_id, account_id)
    _process(DeleteOrder(order_id=order_id))
    return StatusResponse()


@order_router.post("/{order_id}/lines", status_code=201, response_model=IdResponse)
async def add_line(account_id: str, order_id: str, body: AddLineRequest) -> IdResponse:
    _owned(Order, order_id, account_id)
    return IdResponse(id=_process(AddOrderLine(order_id=order_id, **body.model_dump())))


@order_router.post("/{order_id}/lines/{line_id}/increase", response_model=StatusResponse)
async def increase_line(account_id: str, order_id: str, line_id: str, body: LineQuantityRequest) -> StatusResponse:
    _owned(Order, order_id, account_id)
    _process(IncreaseLineQuantity(order_id=order_id, line_id=line_id, amount=body.amount))
    return StatusResponse()


@order_router.post("/{order_id}/lines/{line_id}/decrease", response_model=StatusResponse)
async def decrease_line(account_id: str, order_id: str, line_id: str, body: LineQuantityRequest) -> StatusResponse:
    _owned(Order, order_id, account_id)
    _process(DecreaseLineQuantity(order_id=order_id, line_id=line_id, amount=body.amount))
    return StatusResponse()


@order_router.put("/{order_id}/lines/{line_id}/price", response_model=StatusResponse)
async def reprice_line(account_id: str, order_id: str, line_id: str, body: LinePriceRequest) -> StatusResponse:
    _owned(Order, order_id, account_id)
    _process(ChangeLinePrice(order_id=order_id, line_id=line_id, unit_price=body.unit_price))
    return StatusResponse()


@order_router.delete("/{order_id}/lines/{line_id}", response_model=StatusResponse)
async def remove_line(account_id: str, order_id: str, line_id: str) -> StatusResponse:
    _owned(Order, order_id, account_id)
    _process(RemoveOrderLine(order_id=order_id, line_id=line_id))
    return StatusResponse()


@order_router.post("/{order_id}/validate", response_model=StatusResponse)
async def validate_order(account_id: str, order_id: str) -> StatusResponse:
    _owned(Order, order_id, account_id)
    return _guarded(ValidateOrder(order_id=order_id), "Only pending orders can be validated")


@order_router.post("/{order_id}/invoice", status_code=201, response_model=IdResponse)
async def invoice_order(account_id: str, order_id: str) -> IdResponse:
    _owned(Order, order_id, account_id)
    invoice_id = _process(InvoiceOrder(order_id=order_id))
    if invoice_id is None:
        raise HTTPException(status_code=409, detail="Only validated orders without an invoice can be invoiced")
    return IdResponse(id=invoice_id)


@order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(account_id: str, order_id: str) -> StatusResponse:
    _owned(Order, order_id, account_id)
    return _guarded(CancelOrder(order_id=order_id), "Order cannot be cancelled")


@order_router.put("/{order_id}/fulfillment", response_model=StatusResponse)
async def assign_fulfillment(account_id: str, order_id: str, body: AssignFulfillmentRequest) -> StatusResponse:
    _owned(Order, order_id, account_id)
    _process(AssignFulfillment(order_id=order_id, fulfillment_id=body.fulfillment_id))
    return StatusResponse()


@order_router.delete("/{order_id}/fulfillment", response_model=StatusResponse)
async def release_fulfillment(account_id: str, order_id: str) -> StatusResponse:
    _owned(Order, order_id, account_id)
    _process(ReleaseFulfillment(order_id=order_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------
invoice_router = APIRouter(prefix="/invoices", tags=["invoices"])


@invoice_router.get("/{invoice_id}")
async def show_invoice(invoice_id: str):
    invoice = current_domain.repository_for(Invoice).get(invoice_id)
    presenter = InvoicePresenter(invoice)
    return {**presenter.summary(), "status_with_badge": presenter.status_with_badge()}


@invoice_router.post("/{invoice_id}/send", response_model=StatusResponse)
async def send_invoice(invoice_id: str) -> StatusResponse:
    return _guarded(SendInvoice(invoice_id=invoice_id), "Only draft invoices can be sent")


@invoice_router.post("/{invoice_id}/pay", response_model=StatusResponse)
async def pay_invoice(invoice_id: str, body: PayInvoiceRequest | None = None) -> StatusResponse:
    paid_date = body.paid_date if body is not None else None
    return _guarded(MarkInvoicePaid(invoice_id=invoice_id, paid_date=paid_date), "Only sent invoices can be paid")


@invoice_router.post("/{invoice_id}/cancel", response_model=StatusResponse)
async def cancel_invoice(invoice_id: str) -> StatusResponse:
    return _guarded(CancelInvoice(invoice_id=invoice_id), "Paid invoices cannot be cancelled")


@invoice_router.put("/{invoice_id}/amounts", response_model=StatusResponse)
async def revise_invoice_amounts(invoice_id: str, body: ReviseInvoiceAmountsRequest) -> StatusResponse:
    _process(ReviseInvoiceAmounts(invoice_id=invoice_id, amount=body.amount, tax_amount=body.tax_amount))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Fulfillment services and fulfillments
# ---------------------------------------------------------------------------
fulfillment_service_router = APIRouter(prefix="/accounts/{account_id}/fulfillment-services", tags=["fulfillment-services"])


@fulfillment_service_router.post("", status_code=201, response_model=IdResponse)
async def register_fulfillment_service(account_id: str, body: RegisterFulfillmentServiceRequest) -> IdResponse:
    _account(account_id)
    return IdResponse(id=_process(RegisterFulfillmentService(account_id=account_id, **body.model_dump())))


@fulfillment_service_router.get("")
async def list_fulfillment_services(account_id: str):
    _account(account_id)
    return {
        "fulfillment_services": [
            {
                "id": str(service.id),
                "name": service.name,
                "provider": service.provider,
                "active": service.active,
                "fulfillments_count": service_lookups.fulfillments_count(service.id),
            }
            for service in service_lookups.services_for_account(account_id)
        ]
    }


@fulfillment_service_router.put("/{service_id}", response_model=StatusResponse)
async def rename_fulfillment_service(account_id: str, service_id: str, body: RenameFulfillmentServiceRequest) -> StatusResponse:
    _owned(FulfillmentService, service_id, account_id)
    _process(RenameFulfillmentService(fulfillment_service_id=service_id, name=body.name))
    return StatusResponse()


@fulfillment_service_router.post("/{service_id}/activate", response_model=StatusResponse)
async def activate_fulfillment_service(account_id: str, service_id: str) -> StatusResponse:
    _owned(FulfillmentService, service_id, account_id)
    _process(ActivateFulfillmentService(fulfillment_service_id=service_id))
    return StatusResponse()


@fulfillment_service_router.post("/{service_id}/deactivate", response_model=StatusResponse)
async def deactivate_fulfillment_service(account_id: str, service_id: str) -> StatusResponse:
    _owned(FulfillmentService, service_id, account_id)
    _process(DeactivateFulfillmentService(fulfillment_service_id=service_id))
    return StatusResponse()


@fulfillment_service_router.delete("/{service_id}", response_model=StatusResponse)
async def remove_fulfillment_service(account_id: str, service_id: str) -> StatusResponse:
    _owned(FulfillmentService, service_id, account_id)
    _process(RemoveFulfillmentService(fulfillment_service_id=service_id))
    return StatusResponse()


fulfillment_router = APIRouter(prefix="/accounts/{account_id}/fulfillments", tags=["fulfillments"])


@fulfillment_router.post("", status_code=201, response_model=IdResponse)
async def create_fulfillment(account_id: str, body: CreateFulfillmentRequest) -> IdResponse:
    command = CreateFulfillment(
        account_id=account_id,
        fulfillment_service_id=body.fulfillment_service_id,
        order_id=body.order_id,
    )
    return IdResponse(id=_process(command))


@fulfillment_router.get("")
async def list_fulfillments(account_id: str):
    _account(account_id)
    return {"fulfillments": [FulfillmentPresenter(f).summary() for f in fulfillments_for_account(account_id)]}


@fulfillment_router.get("/{fulfillment_id}")
async def show_fulfillment(account_id: str, fulfillment_id: str):
    fulfillment = _owned(Fulfillment, fulfillment_id, account_id)
    return FulfillmentPresenter(fulfillment).summary()


@fulfillment_router.post("/{fulfillment_id}/process", response_model=StatusResponse)
async def start_processing(account_id: str, fulfillment_id: str) -> StatusResponse:
    _owned(Fulfillment, fulfillment_id, account_id)
    return _guarded(StartProcessing(fulfillment_id=fulfillment_id), "Only pending fulfillments can start processing")


@fulfillment_router.post("/{fulfillment_id}/ship", response_model=StatusResponse)
async def ship_fulfillment(account_id: str, fulfillment_id: str, body: ShipFulfillmentRequest) -> StatusResponse:
    _owned(Fulfillment, fulfillment_id, account_id)
    command = ShipFulfillment(fulfillment_id=fulfillment_id, tracking_number=body.tracking_number, carrier=body.carrier)
    return _guarded(command, "Only pending or processing fulfillments can ship")


@fulfillment_router.post("/{fulfillment_id}/deliver", response_model=StatusResponse)
async def deliver_fulfillment(account_id: str, fulfillment_id: str) -> StatusResponse:
    _owned(Fulfillment, fulfillment_id, account_id)
    return _guarded(DeliverFulfillment(fulfillment_id=fulfillment_id), "Only shipped fulfillments can be delivered")


@fulfillment_router.post("/{fulfillment_id}/cancel", response_model=StatusResponse)
async def cancel_fulfillment(account_id: str, fulfillment_id: str) -> StatusResponse:
    _owned(Fulfillment, fulfillment_id, account_id)
    return _guarded(CancelFulfillment(fulfillment_id=fulfillment_id), "Delivered fulfillments cannot be cancelled")


@fulfillment_router.delete("/{fulfillment_id}", response_model=StatusResponse)
async def delete_fulfillment(account_id: str, fulfillment_id: str) -> StatusResponse:
    _owned(Fulfillment, fulfillment_id, account_id)
    _process(DeleteFulfillment(fulfillment_id=fulfillment_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
report_router = APIRouter(prefix="/accounts/{account_id}/reports", tags=["reports"])


def _customer_brief(customer) -> dict:
    presenter = CustomerPresenter(customer)
    return {"id": str(customer.id), "display_name": presenter.display_name(), "email": customer.email}


@report_router.get("/dashboard")
async def dashboard(account_id: str, period: str = "today"):
    _account(account_id)
    query = OrderDashboardQuery(account_id=account_id, period=_period(period))
    return {**query.stats(), "recent": [OrderPresenter(o).summary() for o in query.recent()]}


@report_router.get("/attention")
async def orders_needing_attention(account_id: str):
    _account(account_id)
    groups = OrdersNeedingAttentionQuery(account_id=account_id).grouped()
    return {name: [OrderPresenter(o).summary() for o in orders] for name, orders in groups.items()}


@report_router.get("/revenue")
async def revenue(account_id: str, period: str | None = None, year: int | None = None):
    _account(account_id)
    query = RevenueQuery(account_id=account_id, period=_period(period))
    return {
        "total": query.total(),
        "total_excluding_tax": query.total_excluding_tax(),
        "total_tax": query.total_tax(),
        "average_invoice_value": query.average_invoice_value(),
        "by_month": query.by_month(year),
        "by_quarter": query.by_quarter(year),
        "by_customer": query.by_customer(),
    }


@report_router.get("/aging")
async def aging(account_id: str):
    _account(account_id)
    query = AgingReportQuery(account_id=account_id)
    return {"summary": query.summary(), "total_overdue_amount": query.total_overdue_amount()}


@report_router.get("/follow-up")
async def follow_up(account_id: str):
    _account(account_id)
    query = InvoicesNeedingFollowUpQuery(account_id=account_id)
    return {
        "stats": query.stats(),
        "groups": {
            name: [InvoicePresenter(i).summary() for i in invoices] for name, invoices in query.grouped_by_priority().items()
        },
    }


@report_router.get("/delayed-fulfillments")
async def delayed_fulfillments(account_id: str):
    _account(account_id)
    query = DelayedFulfillmentsQuery(account_id=account_id)
    return {
        "stats": query.stats(),
        "delays_by_carrier": query.delays_by_carrier(),
        "alerts": [FulfillmentPresenter(f).summary() for f in query.priority_alerts()],
    }


@report_router.get("/top-spenders")
async def top_spenders(account_id: str, limit: int = 10, period: str | None = None):
    _account(account_id)
    query = TopSpendersQuery(account_id=account_id, limit=limit, period=_period(period))
    return {
        "customers": [
            {**_customer_brief(row["customer"]), **{k: v for k, v in row.items() if k != "customer"}}
            for row in query.with_stats()
        ],
        "revenue_percentage": query.revenue_percentage(),
    }


@report_router.get("/inactive-customers")
async def inactive_customers(account_id: str, inactive_days: int = 90):
    _account(account_id)
    query = InactiveCustomersQuery(account_id=account_id, inactive_days=inactive_days)
    return {
        "stats": query.stats(),
        "customers": [_customer_brief(c) for c in query.results()],
    }
