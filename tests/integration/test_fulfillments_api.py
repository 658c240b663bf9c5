"""Integration tests for fulfillment services, fulfillments and reports."""


def _service(client, account_id, name="Colissimo"):
    response = client.post(f"/accounts/{account_id}/fulfillment-services", json={"name": name, "provider": "La Poste"})
    assert response.status_code == 201
    return response.json()["id"]


def _fulfillment(client, account_id, service_id, order_id=None):
    response = client.post(
        f"/accounts/{account_id}/fulfillments",
        json={"fulfillment_service_id": service_id, "order_id": order_id},
    )
    assert response.status_code == 201
    return response.json()["id"]


class TestFulfillmentServiceEndpoints:
    def test_register_and_list(self, client, api_account):
        service_id = _service(client, api_account)
        _fulfillment(client, api_account, service_id)

        [service] = client.get(f"/accounts/{api_account}/fulfillment-services").json()["fulfillment_services"]
        assert service == {
            "id": service_id,
            "name": "Colissimo",
            "provider": "La Poste",
            "active": True,
            "fulfillments_count": 1,
        }

    def test_duplicate_name(self, client, api_account):
        _service(client, api_account)
        response = client.post(f"/accounts/{api_account}/fulfillment-services", json={"name": "Colissimo"})
        assert response.status_code == 422

    def test_deactivated_service_refuses_fulfillments(self, client, api_account):
        service_id = _service(client, api_account)
        client.post(f"/accounts/{api_account}/fulfillment-services/{service_id}/deactivate")
        response = client.post(f"/accounts/{api_account}/fulfillments", json={"fulfillment_service_id": service_id})
        assert response.status_code == 422

        client.post(f"/accounts/{api_account}/fulfillment-services/{service_id}/activate")
        _fulfillment(client, api_account, service_id)

    def test_rename_and_remove(self, client, api_account):
        service_id = _service(client, api_account)
        base = f"/accounts/{api_account}/fulfillment-services/{service_id}"
        assert client.put(base, json={"name": "Chronopost"}).status_code == 200
        assert client.delete(base).status_code == 200
        assert client.delete(base).status_code == 404


class TestFulfillmentEndpoints:
    def test_journey(self, client, api_account, api_order):
        service_id = _service(client, api_account)
        fulfillment_id = _fulfillment(client, api_account, service_id, api_order)
        base = f"/accounts/{api_account}/fulfillments/{fulfillment_id}"

        assert client.post(f"{base}/deliver").status_code == 409
        assert client.post(f"{base}/process").status_code == 200
        assert client.post(f"{base}/ship", json={"tracking_number": "1Z999", "carrier": "UPS"}).status_code == 200
        assert client.post(f"{base}/deliver").status_code == 200
        assert client.post(f"{base}/cancel").status_code == 409

        body = client.get(base).json()
        assert body["status_name"] == "Delivered"
        assert body["carrier_with_tracking"] == "UPS - 1Z999"

        order = client.get(f"/accounts/{api_account}/orders/{api_order}").json()
        assert order["fulfillment_status"] == "Delivered"
        assert order["fulfillment_service_name"] == "Colissimo"

    def test_blank_tracking_number(self, client, api_account):
        fulfillment_id = _fulfillment(client, api_account, _service(client, api_account))
        response = client.post(
            f"/accounts/{api_account}/fulfillments/{fulfillment_id}/ship", json={"tracking_number": "   "}
        )
        assert response.status_code == 422

    def test_assign_and_release_order(self, client, api_account, api_order):
        fulfillment_id = _fulfillment(client, api_account, _service(client, api_account))
        base = f"/accounts/{api_account}/orders/{api_order}/fulfillment"

        assert client.put(base, json={"fulfillment_id": fulfillment_id}).status_code == 200
        assert client.get(f"/accounts/{api_account}/orders/{api_order}").json()["fulfillment_id"] == fulfillment_id

        assert client.delete(base).status_code == 200
        assert client.get(f"/accounts/{api_account}/orders/{api_order}").json()["fulfillment_id"] is None

    def test_delete_detaches_orders(self, client, api_account, api_order):
        fulfillment_id = _fulfillment(client, api_account, _service(client, api_account), api_order)
        assert client.delete(f"/accounts/{api_account}/fulfillments/{fulfillment_id}").status_code == 200
        assert client.get(f"/accounts/{api_account}/orders/{api_order}").json()["fulfillment_id"] is None
        assert client.get(f"/accounts/{api_account}/fulfillments").json() == {"fulfillments": []}


class TestReportEndpoints:
    def test_dashboard(self, client, api_account, api_order):
        body = client.get(f"/accounts/{api_account}/reports/dashboard").json()
        assert body["total_orders"] == 1
        assert body["orders_by_status"] == {"pending": 1}
        assert [o["id"] for o in body["recent"]] == [api_order]

    def test_unknown_period(self, client, api_account):
        response = client.get(f"/accounts/{api_account}/reports/dashboard", params={"period": "someday"})
        assert response.status_code == 422

    def test_reports_answer(self, client, api_account, api_order):
        for report in (
            "attention",
            "revenue",
            "aging",
            "follow-up",
            "delayed-fulfillments",
            "top-spenders",
            "inactive-customers",
        ):
            response = client.get(f"/accounts/{api_account}/reports/{report}")
            assert response.status_code == 200, report

    def test_aging_and_revenue(self, client, api_account, api_order):
        client.post(f"/accounts/{api_account}/orders/{api_order}/validate")
        invoice_id = client.post(f"/accounts/{api_account}/orders/{api_order}/invoice").json()["id"]
        client.post(f"/invoices/{invoice_id}/send")

        aging = client.get(f"/accounts/{api_account}/reports/aging").json()
        assert aging["summary"]["current"] == {"count": 1, "total_amount": 25.5}
        assert aging["total_overdue_amount"] == 0

        client.post(f"/invoices/{invoice_id}/pay")
        revenue = client.get(f"/accounts/{api_account}/reports/revenue", params={"period": "this_month"}).json()
        assert revenue["total"] == 25.5
        [spender] = client.get(f"/accounts/{api_account}/reports/top-spenders").json()["customers"]
        assert spender["display_name"] == "Jane Doe"
        assert spender["total_spent"] == 25.5

    def test_reports_need_an_account(self, client):
        assert client.get("/accounts/missing/reports/aging").status_code == 404
