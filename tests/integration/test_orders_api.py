"""Integration tests for order and invoice endpoints."""

from backoffice.order.order import Order
from protean import current_domain


def _invoice(client, account_id, order_id):
    assert client.post(f"/accounts/{account_id}/orders/{order_id}/validate").status_code == 200
    response = client.post(f"/accounts/{account_id}/orders/{order_id}/invoice")
    assert response.status_code == 201
    return response.json()["id"]


class TestOrderEndpoints:
    def test_show(self, client, api_account, api_order):
        response = client.get(f"/accounts/{api_account}/orders/{api_order}")
        assert response.status_code == 200
        body = response.json()
        assert body["status_name"] == "Pending"
        assert body["total_price"] == "€25.50"
        assert body["customer_name"] == "Jane Doe"
        assert len(body["lines"]) == 2
        assert body["invoices"] == []

    def test_invalid_line_is_unprocessable(self, client, api_account, api_customer):
        response = client.post(
            f"/accounts/{api_account}/orders",
            json={"customer_id": api_customer, "lines": [{"name": "Widget", "quantity": 0, "unit_price": 1.0}]},
        )
        assert response.status_code == 422

    def test_order_of_another_account_is_not_found(self, client, api_order):
        other = client.post("/accounts", json={"name": "Globex"}).json()["id"]
        response = client.get(f"/accounts/{other}/orders/{api_order}")
        assert response.status_code == 404
        assert response.json()["error"] == f"Order with id {api_order} does not exist"
        assert client.post(f"/accounts/{other}/orders/{api_order}/validate").status_code == 404

    def test_validate_twice_conflicts(self, client, api_account, api_order):
        assert client.post(f"/accounts/{api_account}/orders/{api_order}/validate").status_code == 200
        response = client.post(f"/accounts/{api_account}/orders/{api_order}/validate")
        assert response.status_code == 409

    def test_invoicing_a_pending_order_conflicts(self, client, api_account, api_order):
        assert client.post(f"/accounts/{api_account}/orders/{api_order}/invoice").status_code == 409

    def test_cancel(self, client, api_account, api_order):
        assert client.post(f"/accounts/{api_account}/orders/{api_order}/cancel").status_code == 200
        assert client.post(f"/accounts/{api_account}/orders/{api_order}/cancel").status_code == 409

    def test_lines(self, client, api_account, api_order):
        base = f"/accounts/{api_account}/orders/{api_order}"
        response = client.post(f"{base}/lines", json={"name": "Gizmo", "quantity": 1, "unit_price": 4.5})
        assert response.status_code == 201
        line_id = response.json()["id"]

        client.post(f"{base}/lines/{line_id}/increase", json={"amount": 2})
        client.put(f"{base}/lines/{line_id}/price", json={"unit_price": 5.0})
        assert current_domain.repository_for(Order).get(api_order).total_amount == 40.5

        client.post(f"{base}/lines/{line_id}/decrease", json={"amount": 3})
        assert current_domain.repository_for(Order).get(api_order).lines_count() == 2

    def test_revise(self, client, api_account, api_order):
        response = client.put(f"/accounts/{api_account}/orders/{api_order}", json={"notes": "Gift wrap"})
        assert response.status_code == 200
        assert current_domain.repository_for(Order).get(api_order).notes == "Gift wrap"

    def test_delete(self, client, api_account, api_order):
        assert client.delete(f"/accounts/{api_account}/orders/{api_order}").status_code == 200
        assert client.get(f"/accounts/{api_account}/orders/{api_order}").status_code == 404

    def test_search(self, client, api_account, api_order):
        response = client.get(f"/accounts/{api_account}/orders/search", params={"status": ["pending"], "min_amount": 20})
        assert [o["id"] for o in response.json()["orders"]] == [api_order]

        response = client.get(f"/accounts/{api_account}/orders/search", params={"has_invoice": "true"})
        assert response.json()["orders"] == []


class TestOrderIndex:
    def test_paginated_listing(self, client, api_account, api_order):
        response = client.get(f"/accounts/{api_account}/orders")
        assert response.status_code == 200
        body = response.json()
        assert body["current_page"] == 1
        assert body["total_pages"] == 1
        assert body["total_count"] == 1
        assert body["per_page"] == 50
        [row] = body["orders"]
        assert row["id"] == api_order
        assert row["customer_name"] == "Jane Doe"
        assert row["lines_summary"] == "2 items"


class TestInvoiceEndpoints:
    def test_invoice_journey(self, client, api_account, api_order):
        invoice_id = _invoice(client, api_account, api_order)

        response = client.get(f"/invoices/{invoice_id}")
        assert response.json()["status_with_badge"] == '<span class="badge badge-secondary">Draft</span>'

        assert client.post(f"/invoices/{invoice_id}/pay").status_code == 409
        assert client.post(f"/invoices/{invoice_id}/send").status_code == 200
        assert client.post(f"/invoices/{invoice_id}/pay", json={"paid_date": "2026-01-15"}).status_code == 200
        assert client.post(f"/invoices/{invoice_id}/cancel").status_code == 409

        body = client.get(f"/invoices/{invoice_id}").json()
        assert body["status"] == "paid"
        assert body["paid_at_formatted"] == "Jan 15"

        account = client.get(f"/accounts/{api_account}").json()
        assert account["total_revenue"] == 25.5

    def test_revise_amounts(self, client, api_account, api_order):
        invoice_id = _invoice(client, api_account, api_order)
        response = client.put(f"/invoices/{invoice_id}/amounts", json={"amount": 100.0, "tax_amount": 20.0})
        assert response.status_code == 200
        assert client.get(f"/invoices/{invoice_id}").json()["total_amount_formatted"] == "€120.00"

    def test_order_shows_its_invoices(self, client, api_account, api_order):
        invoice_id = _invoice(client, api_account, api_order)
        client.post(f"/accounts/{api_account}/orders/{api_order}/cancel")

        invoices = client.get(f"/accounts/{api_account}/orders/{api_order}").json()["invoices"]
        assert {i["kind"] for i in invoices} == {"debit", "credit"}
        assert invoice_id in {i["id"] for i in invoices}

    def test_unknown_invoice(self, client):
        response = client.get("/invoices/missing")
        assert response.status_code == 404
        assert "missing" in response.json()["error"]
