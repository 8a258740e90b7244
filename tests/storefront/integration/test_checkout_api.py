"""Integration tests for the checkout endpoints via TestClient."""

import pytest
from protean import current_domain
from storefront.order.order import Order


@pytest.fixture()
def filled_cart(client, catalog, customer_headers):
    client.put("/carts/current/lines/prod-longganisa", json={"qty": 3}, headers=customer_headers)
    client.put("/carts/current/lines/prod-tapa", json={"qty": 1}, headers=customer_headers)


class TestCheckoutSummary:
    def test_ready_summary(self, client, filled_cart, customer_headers, draft_body):
        response = client.post(
            "/checkout/summary",
            json={"draft": draft_body, "has_payment_proof": True},
            headers=customer_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert (data["subtotal"], data["delivery_fee"], data["total"]) == (550.0, 100.0, 650.0)
        assert data["free_delivery_target"] == 2000.0
        assert data["readiness"]["ready"] is True
        assert data["readiness"]["postal_state"] == "supported"

    def test_missing_fields_reported_not_raised(self, client, filled_cart, customer_headers):
        response = client.post("/checkout/summary", json={"draft": {}}, headers=customer_headers)
        assert response.status_code == 200
        readiness = response.json()["readiness"]
        assert readiness["ready"] is False
        assert readiness["missing"][:3] == ["full name", "valid email", "phone"]
        assert readiness["postal_state"] == "missing"

    def test_unreadable_delivery_time_reported_not_raised(self, client, filled_cart, customer_headers, draft_body):
        draft_body.update(delivery_date="11/03/2099", delivery_slot="2pm")
        response = client.post(
            "/checkout/summary",
            json={"draft": draft_body, "has_payment_proof": True},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["readiness"]["missing"] == ["delivery date", "delivery time"]

    def test_thermal_bag(self, client, filled_cart, customer_headers, draft_body):
        draft_body["add_thermal_bag"] = True
        data = client.post("/checkout/summary", json={"draft": draft_body}, headers=customer_headers).json()
        assert data["thermal_bag_fee"] == 200.0
        assert data["total"] == 850.0


class TestSubmitCheckout:
    def test_creates_order(self, client, filled_cart, storage, procedure, customer_headers, draft_body, proof_body):
        response = client.post(
            "/checkout",
            json={"draft": draft_body, "payment_proof": proof_body},
            headers=customer_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["total"] == 650.0
        assert data["warnings"] == []

        order = current_domain.repository_for(Order).get(data["order_id"])
        assert order.order_number == data["order_number"]
        assert order.status == "submitted"

        cart = client.get("/carts/current", headers=customer_headers).json()
        assert cart["lines"] == []

    def test_proof_required(self, client, filled_cart, storage, procedure, customer_headers, draft_body):
        response = client.post("/checkout", json={"draft": draft_body}, headers=customer_headers)
        assert response.status_code == 400

    def test_proof_must_be_base64(self, client, filled_cart, customer_headers, draft_body, proof_body):
        proof_body["content_base64"] = "not base64!"
        response = client.post(
            "/checkout",
            json={"draft": draft_body, "payment_proof": proof_body},
            headers=customer_headers,
        )
        assert response.status_code == 422

    def test_upload_failure(self, client, filled_cart, storage, procedure, customer_headers, draft_body, proof_body):
        storage.configure(fail_uploads=True)
        response = client.post(
            "/checkout",
            json={"draft": draft_body, "payment_proof": proof_body},
            headers=customer_headers,
        )
        assert response.status_code == 502
        assert "upload failed" in response.json()["error"]

    def test_no_procedure_version(self, client, filled_cart, storage, procedure, customer_headers, draft_body, proof_body):
        procedure.configure(versions=set())
        response = client.post(
            "/checkout",
            json={"draft": draft_body, "payment_proof": proof_body},
            headers=customer_headers,
        )
        assert response.status_code == 502
