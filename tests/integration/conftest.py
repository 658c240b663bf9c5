"""Fixtures for API integration tests."""

import pytest
from backoffice.api import (
    account_router,
    customer_router,
    fulfillment_router,
    fulfillment_service_router,
    invoice_router,
    order_router,
    register_error_handlers,
    report_router,
)
from fastapi import FastAPI
from fastapi.testclient import TestClient


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (
        account_router,
        customer_router,
        order_router,
        invoice_router,
        fulfillment_service_router,
        fulfillment_router,
        report_router,
    ):
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def api_account(client):
    response = client.post("/accounts", json={"name": "Acme Retail"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture()
def api_customer(client, api_account):
    response = client.post(
        f"/accounts/{api_account}/customers",
        json={"first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"},
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture()
def api_order(client, api_account, api_customer):
    response = client.post(
        f"/accounts/{api_account}/orders",
        json={
            "customer_id": api_customer,
            "lines": [
                {"name": "Widget", "sku": "WID-1", "quantity": 2, "unit_price": 10.0},
                {"name": "Gadget", "sku": "GAD-1", "quantity": 1, "unit_price": 5.5},
            ],
        },
    )
    assert response.status_code == 201
    return response.json()["id"]
