"""Integration tests for the delivery endpoints via TestClient."""


class TestDeliveryRules:
    def test_staff_defines_rule(self, client, staff_headers):
        response = client.post(
            "/delivery/rules",
            json={"postal_code": "1700", "area_name": "Sucat", "min_order_free_delivery": 2500, "fee_below_min": 120},
            headers=staff_headers,
        )
        assert response.status_code == 201
        assert response.json()["rule_id"]

        resolved = client.get("/delivery/resolve", params={"postal_code": "1700", "barangay": "Sucat"}).json()
        assert resolved["status"] == "resolved"
        assert resolved["rule"]["fee_below_min"] == 120.0

    def test_customer_cannot_define_rule(self, client, customer_headers):
        response = client.post(
            "/delivery/rules",
            json={"postal_code": "1700", "area_name": "Sucat", "min_order_free_delivery": 2500, "fee_below_min": 120},
            headers=customer_headers,
        )
        assert response.status_code == 403
        assert "blocked" in response.json()["error"]


class TestResolve:
    def test_fallback_tiers_without_rules(self, client):
        data = client.get("/delivery/resolve", params={"postal_code": "1709"}).json()
        assert data["status"] == "resolved"
        assert data["rule"]["min_order_free_delivery"] == 2000.0

    def test_missing_postal_code(self, client):
        data = client.get("/delivery/resolve").json()
        assert data["status"] == "missing_postal"
        assert data["rule"] is None


class TestSlots:
    def test_slots_for_future_date(self, client):
        data = client.get("/delivery/slots", params={"delivery_date": "2099-01-01"}).json()
        assert data["slots"][0] == "10:00"
        assert data["slots"][-1] == "21:00"

    def test_bad_date(self, client):
        response = client.get("/delivery/slots", params={"delivery_date": "01/02/2099"})
        assert response.status_code == 400

    def test_chosen_slot_kept_when_bookable(self, client):
        data = client.get("/delivery/slots", params={"delivery_date": "2099-01-01", "delivery_slot": "14:30"}).json()
        assert data["delivery_slot"] == "14:30"

    def test_chosen_slot_cleared_when_not_bookable(self, client):
        data = client.get("/delivery/slots", params={"delivery_date": "2099-01-01", "delivery_slot": "14:15"}).json()
        assert data["delivery_slot"] == ""
