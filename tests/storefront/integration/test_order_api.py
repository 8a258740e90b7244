"""Integration tests for the order endpoints via TestClient."""

import base64

from protean import current_domain
from storefront.order.order import Order


def _line_id(order_id, product_id):
    order = current_domain.repository_for(Order).get(order_id)
    return next(str(line.id) for line in order.lines if line.product_id == product_id)


class TestListOrders:
    def test_customer_lists_by_email(self, client, order_id, customer_headers):
        response = client.get("/orders", params={"email": "maria@example.com"}, headers=customer_headers)
        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [order_id]

    def test_all_requires_staff(self, client, order_id, customer_headers):
        response = client.get("/orders", params={"all": True}, headers=customer_headers)
        assert response.status_code == 403

    def test_staff_lists_all(self, client, order_id, staff_headers):
        response = client.get("/orders", params={"all": True}, headers=staff_headers)
        assert len(response.json()) == 1


class TestOrderDetail:
    def test_detail_with_indicators(self, client, order_id, storage):
        data = client.get(f"/orders/{order_id}").json()
        assert data["total_selling_price"] == 650.0
        assert data["payment_standing"] == "amount_due"
        assert data["payment_delta"] == -650.0
        assert {line["packed_tone"] for line in data["lines"]} == {"incomplete"}

    def test_unknown_order(self, client, storage):
        assert client.get("/orders/no-such-order").status_code == 404


class TestStaffUpdates:
    def test_status_patch(self, client, order_id, staff_headers, storage):
        response = client.patch(f"/orders/{order_id}/status", json={"delivery_status": "delivered"}, headers=staff_headers)
        assert response.status_code == 200
        data = client.get(f"/orders/{order_id}").json()
        assert data["status"] == "completed"

    def test_status_patch_rejected_for_customer(self, client, order_id, customer_headers):
        response = client.patch(f"/orders/{order_id}/status", json={"status": "confirmed"}, headers=customer_headers)
        assert response.status_code == 403

    def test_invalid_status(self, client, order_id, staff_headers):
        response = client.patch(f"/orders/{order_id}/status", json={"status": "shipped"}, headers=staff_headers)
        assert response.status_code == 400

    def test_packed_qty(self, client, order_id, staff_headers, storage):
        line_id = _line_id(order_id, "prod-longganisa")
        client.put(f"/orders/{order_id}/lines/{line_id}/packed-qty", json={"packed_qty": 4}, headers=staff_headers)
        lines = {line["product_id"]: line for line in client.get(f"/orders/{order_id}").json()["lines"]}
        assert lines["prod-longganisa"]["packed_qty"] == 4
        assert lines["prod-longganisa"]["packed_tone"] == "overshoot"

    def test_amount_paid(self, client, order_id, staff_headers, storage):
        client.put(f"/orders/{order_id}/amount-paid", json={"amount_paid": 700}, headers=staff_headers)
        data = client.get(f"/orders/{order_id}").json()
        assert data["payment_standing"] == "refund_due"
        assert data["payment_delta"] == 50.0

    def test_admin_patch(self, client, order_id, staff_headers):
        response = client.patch(f"/orders/{order_id}", json={"delivery_fee": 0, "notes": "Gate 2"}, headers=staff_headers)
        assert response.json() == {"changed": ["delivery_fee", "notes"]}

    def test_admin_patch_with_malformed_date_is_bad_request(self, client, order_id, staff_headers):
        response = client.patch(f"/orders/{order_id}", json={"delivery_date": "11/03/2026"}, headers=staff_headers)
        assert response.status_code == 400

    def test_add_lines(self, client, order_id, staff_headers, catalog, storage):
        response = client.post(
            f"/orders/{order_id}/lines",
            json={"lines": [{"product_id": "prod-ube", "qty": 2}]},
            headers=staff_headers,
        )
        assert response.status_code == 201
        assert len(response.json()["line_ids"]) == 1
        assert client.get(f"/orders/{order_id}").json()["total_selling_price"] == 1010.0

    def test_replace_and_remove_proof(self, client, order_id, staff_headers, storage):
        body = {"filename": "slip.jpg", "content_base64": base64.b64encode(b"jpeg").decode()}
        path = client.put(f"/orders/{order_id}/payment-proof", json=body, headers=staff_headers).json()[
            "payment_proof_path"
        ]
        assert path in storage.objects

        response = client.delete(f"/orders/{order_id}/payment-proof", headers=staff_headers)
        assert response.json() == {"payment_proof_path": None}
        assert storage.objects == {}

    def test_delete(self, client, order_id, staff_headers, storage):
        response = client.delete(f"/orders/{order_id}", headers=staff_headers)
        assert response.status_code == 200
        assert client.get(f"/orders/{order_id}").status_code == 404

    def test_delete_rejected_for_customer(self, client, order_id, customer_headers, storage):
        response = client.delete(f"/orders/{order_id}", headers=customer_headers)
        assert response.status_code == 403
        assert client.get(f"/orders/{order_id}").status_code == 200
