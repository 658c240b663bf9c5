"""Back office FastAPI application.

Processes commands synchronously over HTTP. Every request runs inside the
back office domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - unset        → in-memory stores, projectors fire in the UoW
#   - "staging"    → SQLite
#   - "production" → PostgreSQL + Redis, projectors fire via Engine
from backoffice.domain import backoffice
from backoffice.utils.logging import add_context, clear_context
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

backoffice.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Back Office API",
    description="Multi-tenant order management: customers, orders, invoices and fulfillments",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the back office domain context for each request."""
    add_context(method=request.method, path=request.url.path)
    try:
        with backoffice.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from backoffice.api import (  # noqa: E402
    account_router,
    customer_router,
    fulfillment_router,
    fulfillment_service_router,
    invoice_router,
    order_router,
    register_error_handlers,
    report_router,
)

app.include_router(account_router)
app.include_router(customer_router)
app.include_router(order_router)
app.include_router(invoice_router)
app.include_router(fulfillment_service_router)
app.include_router(fulfillment_router)
app.include_router(report_router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": backoffice.name}})
