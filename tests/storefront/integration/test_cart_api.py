"""Integration tests for the cart endpoints via TestClient."""


def _put(client, headers, product_id, qty):
    return client.put(f"/carts/current/lines/{product_id}", json={"qty": qty}, headers=headers)


class TestCartEndpoints:
    def test_session_header_required(self, client):
        response = client.get("/carts/current")
        assert response.status_code == 422

    def test_empty_cart(self, client, catalog, customer_headers):
        response = client.get("/carts/current", headers=customer_headers)
        assert response.status_code == 200
        assert response.json() == {"session_id": "sess-001", "lines": [], "total_units": 0, "subtotal": 0.0}

    def test_set_line_returns_confirmed_cart(self, client, catalog, customer_headers):
        response = _put(client, customer_headers, "prod-longganisa", 3)
        assert response.status_code == 200
        data = response.json()
        assert data["refresh_required"] is False
        assert data["cart"]["subtotal"] == 300.0
        assert data["cart"]["lines"][0]["name"] == "Longganisa"

    def test_zero_removes_line(self, client, catalog, customer_headers):
        _put(client, customer_headers, "prod-longganisa", 3)
        data = _put(client, customer_headers, "prod-longganisa", 0).json()
        assert data["cart"]["lines"] == []

    def test_stock_flags(self, client, catalog, customer_headers):
        data = _put(client, customer_headers, "prod-tapa", 3).json()
        line = data["cart"]["lines"][0]
        assert line["exceeds_stock"] is True
        assert line["qty_available"] == 2

    def test_totals(self, client, catalog, customer_headers):
        _put(client, customer_headers, "prod-longganisa", 3)
        _put(client, customer_headers, "prod-tapa", 1)
        response = client.get("/carts/current/totals", headers=customer_headers)
        assert response.json() == {"total_units": 4, "subtotal": 550.0}
