import base64

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api.errors import register_storefront_exception_handlers
from storefront.api.routes import cart_router, checkout_router, delivery_router, order_router

@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(delivery_router)
    app.include_router(checkout_router)
    app.include_router(order_router)
    register_storefront_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def customer_headers():
    return {"X-Session-Id": "sess-001"}


@pytest.fixture()
def staff_headers():
    return {"X-Session-Id": "sess-staff", "X-User-Id": "staff-001", "X-Staff": "true"}


@pytest.fixture()
def draft_body():
    return {
        "full_name": "Maria Santos",
        "email": "maria@example.com",
        "phone": "09171234567",
        "line1": "12 Sampaguita St",
        "barangay": "Tambo",
        "city": "Paranaque",
        "province": "Metro Manila",
        "postal_code": "1700",
        "delivery_date": "2099-03-11",
        "delivery_slot": "14:00",
    }


@pytest.fixture()
def proof_body():
    return {
        "filename": "gcash receipt.png",
        "content_base64": base64.b64encode(b"\x89PNG-proof").decode(),
        "content_type": "image/png",
    }
